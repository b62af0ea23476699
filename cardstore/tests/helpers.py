from decimal import Decimal
from itertools import count

from django.contrib.auth import get_user_model
from django.contrib.auth.hashers import make_password
from django.utils import timezone

from cardstore.models import Card, Category, Order, Product

_sequence = count(1)


def make_admin(username="admin"):
    return get_user_model().objects.create_user(username=username, password="secret", is_staff=True)


def make_customer(username="customer"):
    return get_user_model().objects.create_user(username=username, password="secret")


def make_category(**fields):
    n = next(_sequence)
    fields.setdefault("name", f"Category {n}")
    fields.setdefault("slug", f"category-{n}")
    return Category.objects.create(**fields)


def make_product(**fields):
    n = next(_sequence)
    fields.setdefault("name", f"Product {n}")
    fields.setdefault("slug", f"product-{n}")
    fields.setdefault("price", Decimal("9.90"))
    return Product.objects.create(**fields)


def make_order(product=None, password="query-pass", **fields):
    n = next(_sequence)
    fields.setdefault("order_no", f"ORD{n:08d}")
    fields.setdefault("product_name", product.name if product else "Deleted product")
    fields.setdefault("product_price", product.price if product else Decimal("9.90"))
    fields.setdefault("total_amount", fields["product_price"] * fields.get("quantity", 1))
    return Order.objects.create(product=product, query_password=make_password(password), **fields)


def make_card(product, content=None, status="available", order=None, **fields):
    content = content or f"CARD-{next(_sequence):06d}"
    if status == "locked":
        fields.setdefault("locked_at", timezone.now())
    if status == "sold":
        fields.setdefault("sold_at", timezone.now())
    return Card.objects.create(product=product, content=content, status=status, order=order, **fields)
