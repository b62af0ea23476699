import uuid
from decimal import Decimal

from django.db import models
from django.utils import timezone
from django.core.validators import MinValueValidator


def generate_id():
    return str(uuid.uuid4())


class Category(models.Model):
    id = models.CharField(primary_key=True, max_length=36, default=generate_id, editable=False)
    name = models.CharField(max_length=50, db_index=True)
    slug = models.SlugField(max_length=50, unique=True)
    description = models.CharField(max_length=200, blank=True, null=True)
    icon = models.CharField(max_length=50, blank=True, null=True)
    sort_order = models.IntegerField(default=0)
    is_active = models.BooleanField(default=True, db_index=True)
    created_at = models.DateTimeField(default=timezone.now)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = "categories"
        ordering = ["sort_order", "name"]

    def __str__(self):
        return self.name


class Product(models.Model):
    id = models.CharField(primary_key=True, max_length=36, default=generate_id, editable=False)
    name = models.CharField(max_length=100, db_index=True)
    slug = models.SlugField(max_length=100, unique=True)
    description = models.TextField(blank=True, null=True)
    category = models.ForeignKey(
        Category, null=True, blank=True, on_delete=models.PROTECT, related_name="products"
    )
    price = models.DecimalField(max_digits=10, decimal_places=2, validators=[MinValueValidator(Decimal("0.01"))])
    original_price = models.DecimalField(max_digits=10, decimal_places=2, null=True, blank=True)
    is_active = models.BooleanField(default=True, db_index=True)
    is_featured = models.BooleanField(default=False)
    sort_order = models.IntegerField(default=0)
    min_quantity = models.PositiveIntegerField(default=1)
    max_quantity = models.PositiveIntegerField(default=10)
    created_at = models.DateTimeField(default=timezone.now)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = "products"
        ordering = ["sort_order", "name"]

    def __str__(self):
        return self.name


class Order(models.Model):
    STATUS_CHOICES = [
        ("pending", "Pending"),
        ("paid", "Paid"),
        ("completed", "Completed"),
        ("expired", "Expired"),
        ("refunded", "Refunded"),
        ("refund_pending", "Refund pending"),
    ]
    PAYMENT_METHOD_CHOICES = [
        ("ldc", "Linux DO Credit"),
        ("alipay", "Alipay"),
        ("wxpay", "WeChat Pay"),
        ("usdt", "USDT"),
    ]

    id = models.CharField(primary_key=True, max_length=36, default=generate_id, editable=False)
    order_no = models.CharField(max_length=32, unique=True)
    # product_name / product_price are a snapshot taken when the order was placed
    product = models.ForeignKey(
        Product, null=True, blank=True, on_delete=models.SET_NULL, related_name="orders"
    )
    product_name = models.CharField(max_length=100)
    product_price = models.DecimalField(max_digits=10, decimal_places=2)
    quantity = models.PositiveIntegerField(default=1)
    total_amount = models.DecimalField(max_digits=10, decimal_places=2)
    payment_method = models.CharField(max_length=20, choices=PAYMENT_METHOD_CHOICES, default="ldc", db_index=True)
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default="pending", db_index=True)
    trade_no = models.CharField(max_length=100, blank=True, null=True, db_index=True)
    user_id = models.CharField(max_length=100, blank=True, null=True, db_index=True)
    username = models.CharField(max_length=150, blank=True, null=True)
    email = models.EmailField(blank=True, null=True)
    query_password = models.CharField(max_length=128, blank=True, default="")
    remark = models.TextField(blank=True, null=True)
    admin_remark = models.TextField(blank=True, null=True)
    refund_reason = models.TextField(blank=True, null=True)
    paid_at = models.DateTimeField(null=True, blank=True)
    expired_at = models.DateTimeField(null=True, blank=True)
    refund_requested_at = models.DateTimeField(null=True, blank=True)
    refunded_at = models.DateTimeField(null=True, blank=True)
    created_at = models.DateTimeField(default=timezone.now, db_index=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = "orders"
        ordering = ["-created_at"]

    def __str__(self):
        return self.order_no


class Card(models.Model):
    STATUS_CHOICES = [
        ("available", "Available"),
        ("locked", "Locked"),
        ("sold", "Sold"),
    ]

    id = models.CharField(primary_key=True, max_length=36, default=generate_id, editable=False)
    product = models.ForeignKey(Product, on_delete=models.CASCADE, related_name="cards")
    content = models.TextField()
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default="available", db_index=True)
    # Sold cards keep pointing at their order even after the order row is deleted
    order = models.ForeignKey(
        Order,
        null=True,
        blank=True,
        on_delete=models.DO_NOTHING,
        db_constraint=False,
        related_name="cards",
    )
    locked_at = models.DateTimeField(null=True, blank=True)
    sold_at = models.DateTimeField(null=True, blank=True)
    created_at = models.DateTimeField(default=timezone.now)

    class Meta:
        db_table = "cards"
        indexes = [
            models.Index(fields=["product", "status"], name="idx_cards_product_status"),
        ]

    def __str__(self):
        return f"{self.product_id}:{self.status}"


class Setting(models.Model):
    key = models.CharField(max_length=100, unique=True)
    value = models.TextField(blank=True, null=True)
    description = models.CharField(max_length=255, blank=True, default="")
    updated_at = models.DateTimeField(default=timezone.now)

    class Meta:
        db_table = "settings"

    def __str__(self):
        return self.key
