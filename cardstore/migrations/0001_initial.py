from decimal import Decimal

import django.core.validators
import django.db.models.deletion
import django.utils.timezone
from django.db import migrations, models

import cardstore.models


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name="Category",
            fields=[
                ("id", models.CharField(default=cardstore.models.generate_id, editable=False, max_length=36, primary_key=True, serialize=False)),
                ("name", models.CharField(db_index=True, max_length=50)),
                ("slug", models.SlugField(unique=True)),
                ("description", models.CharField(blank=True, max_length=200, null=True)),
                ("icon", models.CharField(blank=True, max_length=50, null=True)),
                ("sort_order", models.IntegerField(default=0)),
                ("is_active", models.BooleanField(db_index=True, default=True)),
                ("created_at", models.DateTimeField(default=django.utils.timezone.now)),
                ("updated_at", models.DateTimeField(auto_now=True)),
            ],
            options={
                "db_table": "categories",
                "ordering": ["sort_order", "name"],
            },
        ),
        migrations.CreateModel(
            name="Setting",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("key", models.CharField(max_length=100, unique=True)),
                ("value", models.TextField(blank=True, null=True)),
                ("description", models.CharField(blank=True, default="", max_length=255)),
                ("updated_at", models.DateTimeField(default=django.utils.timezone.now)),
            ],
            options={
                "db_table": "settings",
            },
        ),
        migrations.CreateModel(
            name="Product",
            fields=[
                ("id", models.CharField(default=cardstore.models.generate_id, editable=False, max_length=36, primary_key=True, serialize=False)),
                ("name", models.CharField(db_index=True, max_length=100)),
                ("slug", models.SlugField(max_length=100, unique=True)),
                ("description", models.TextField(blank=True, null=True)),
                ("price", models.DecimalField(decimal_places=2, max_digits=10, validators=[django.core.validators.MinValueValidator(Decimal("0.01"))])),
                ("original_price", models.DecimalField(blank=True, decimal_places=2, max_digits=10, null=True)),
                ("is_active", models.BooleanField(db_index=True, default=True)),
                ("is_featured", models.BooleanField(default=False)),
                ("sort_order", models.IntegerField(default=0)),
                ("min_quantity", models.PositiveIntegerField(default=1)),
                ("max_quantity", models.PositiveIntegerField(default=10)),
                ("created_at", models.DateTimeField(default=django.utils.timezone.now)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("category", models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.PROTECT, related_name="products", to="cardstore.category")),
            ],
            options={
                "db_table": "products",
                "ordering": ["sort_order", "name"],
            },
        ),
        migrations.CreateModel(
            name="Order",
            fields=[
                ("id", models.CharField(default=cardstore.models.generate_id, editable=False, max_length=36, primary_key=True, serialize=False)),
                ("order_no", models.CharField(max_length=32, unique=True)),
                ("product_name", models.CharField(max_length=100)),
                ("product_price", models.DecimalField(decimal_places=2, max_digits=10)),
                ("quantity", models.PositiveIntegerField(default=1)),
                ("total_amount", models.DecimalField(decimal_places=2, max_digits=10)),
                ("payment_method", models.CharField(choices=[("ldc", "Linux DO Credit"), ("alipay", "Alipay"), ("wxpay", "WeChat Pay"), ("usdt", "USDT")], db_index=True, default="ldc", max_length=20)),
                ("status", models.CharField(choices=[("pending", "Pending"), ("paid", "Paid"), ("completed", "Completed"), ("expired", "Expired"), ("refunded", "Refunded"), ("refund_pending", "Refund pending")], db_index=True, default="pending", max_length=20)),
                ("trade_no", models.CharField(blank=True, db_index=True, max_length=100, null=True)),
                ("user_id", models.CharField(blank=True, db_index=True, max_length=100, null=True)),
                ("username", models.CharField(blank=True, max_length=150, null=True)),
                ("email", models.EmailField(blank=True, max_length=254, null=True)),
                ("query_password", models.CharField(blank=True, default="", max_length=128)),
                ("remark", models.TextField(blank=True, null=True)),
                ("admin_remark", models.TextField(blank=True, null=True)),
                ("refund_reason", models.TextField(blank=True, null=True)),
                ("paid_at", models.DateTimeField(blank=True, null=True)),
                ("expired_at", models.DateTimeField(blank=True, null=True)),
                ("refund_requested_at", models.DateTimeField(blank=True, null=True)),
                ("refunded_at", models.DateTimeField(blank=True, null=True)),
                ("created_at", models.DateTimeField(db_index=True, default=django.utils.timezone.now)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("product", models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name="orders", to="cardstore.product")),
            ],
            options={
                "db_table": "orders",
                "ordering": ["-created_at"],
            },
        ),
        migrations.CreateModel(
            name="Card",
            fields=[
                ("id", models.CharField(default=cardstore.models.generate_id, editable=False, max_length=36, primary_key=True, serialize=False)),
                ("content", models.TextField()),
                ("status", models.CharField(choices=[("available", "Available"), ("locked", "Locked"), ("sold", "Sold")], db_index=True, default="available", max_length=20)),
                ("locked_at", models.DateTimeField(blank=True, null=True)),
                ("sold_at", models.DateTimeField(blank=True, null=True)),
                ("created_at", models.DateTimeField(default=django.utils.timezone.now)),
                ("order", models.ForeignKey(blank=True, db_constraint=False, null=True, on_delete=django.db.models.deletion.DO_NOTHING, related_name="cards", to="cardstore.order")),
                ("product", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="cards", to="cardstore.product")),
            ],
            options={
                "db_table": "cards",
                "indexes": [models.Index(fields=["product", "status"], name="idx_cards_product_status")],
            },
        ),
    ]
