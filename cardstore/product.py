# Standard Library
import logging

# Django
from django.db import DatabaseError, IntegrityError, transaction
from django.db.models import Count, Q

# Django REST Framework
from rest_framework.views import APIView

# Local Imports
from .cache import revalidate_paths
from .models import Card, Product
from .permissions import FrontendOnlyPermission, admin_action
from .serializers import ProductSerializer
from .utilities import _parse_payload, envelope_response, failure, first_error, money, success, to_iso

logger = logging.getLogger(__name__)

SLUG_TAKEN_MESSAGE = "Slug already exists"


def with_stock(queryset):
    """Annotate products with card counts per status; stock is never stored on the product row."""
    return queryset.annotate(
        stock_available=Count("cards", filter=Q(cards__status="available")),
        stock_locked=Count("cards", filter=Q(cards__status="locked")),
        stock_sold=Count("cards", filter=Q(cards__status="sold")),
    )


def store_products():
    # Active products whose category is active, or that have no category at all
    return with_stock(
        Product.objects.filter(is_active=True)
        .filter(Q(category__isnull=True) | Q(category__is_active=True))
        .select_related("category")
    )


def serialize_store_product(product, detail=False):
    category = product.category
    row = {
        "id": product.id,
        "name": product.name,
        "slug": product.slug,
        "price": money(product.price),
        "original_price": money(product.original_price),
        "is_featured": product.is_featured,
        "stock": product.stock_available,
        "sold": product.stock_sold,
        "category": {"id": category.id, "name": category.name, "slug": category.slug} if category else None,
    }
    if detail:
        row["description"] = product.description
        row["min_quantity"] = product.min_quantity
        row["max_quantity"] = product.max_quantity
    return row


def get_store_products(category_slug=None, featured_only=False):
    products = store_products()
    if category_slug:
        products = products.filter(category__slug=category_slug)
    if featured_only:
        products = products.filter(is_featured=True)
    products = products.order_by("-is_featured", "sort_order", "name")
    return [serialize_store_product(p) for p in products]


def get_product_by_slug(slug):
    product = store_products().filter(slug=slug).first()
    return serialize_store_product(product, detail=True) if product else None


def _serialize_admin_product(product):
    return {
        "id": product.id,
        "name": product.name,
        "slug": product.slug,
        "description": product.description,
        "category_id": product.category_id,
        "category_name": product.category.name if product.category else None,
        "price": money(product.price),
        "original_price": money(product.original_price),
        "is_active": product.is_active,
        "is_featured": product.is_featured,
        "sort_order": product.sort_order,
        "min_quantity": product.min_quantity,
        "max_quantity": product.max_quantity,
        "stock": {
            "available": product.stock_available,
            "locked": product.stock_locked,
            "sold": product.stock_sold,
        },
        "created_at": to_iso(product.created_at),
        "updated_at": to_iso(product.updated_at),
    }


@admin_action
def get_all_products(user):
    products = with_stock(Product.objects.select_related("category")).order_by("sort_order", "name")
    return success("ok", products=[_serialize_admin_product(p) for p in products])


def _revalidate_product(*slugs, category_slug=None):
    paths = ["/", "/admin/products", "/admin/cards"]
    paths.extend(f"/product/{slug}" for slug in slugs if slug)
    if category_slug:
        paths.append(f"/category/{category_slug}")
    revalidate_paths(*paths)


def _category_slug(product):
    return product.category.slug if product.category_id else None


@admin_action
def create_product(user, data):
    serializer = ProductSerializer(data=data)
    if not serializer.is_valid():
        return failure(first_error(serializer.errors))

    values = dict(serializer.validated_data)
    if Product.objects.filter(slug=values["slug"]).exists():
        return failure(SLUG_TAKEN_MESSAGE)

    try:
        product = Product.objects.create(**values)
    except IntegrityError:
        return failure(SLUG_TAKEN_MESSAGE)
    except DatabaseError:
        logger.exception("CreateProduct failed")
        return failure("Failed to create product")

    _revalidate_product(product.slug, category_slug=_category_slug(product))
    return success("Product created", product_id=product.id)


@admin_action
def update_product(user, product_id, data):
    product = Product.objects.select_related("category").filter(id=(product_id or "").strip()).first()
    if product is None:
        return failure("Product does not exist")

    serializer = ProductSerializer(product, data=data, partial=True)
    if not serializer.is_valid():
        return failure(first_error(serializer.errors))

    values = dict(serializer.validated_data)
    new_slug = values.get("slug")
    if new_slug and Product.objects.filter(slug=new_slug).exclude(id=product.id).exists():
        return failure(SLUG_TAKEN_MESSAGE)

    old_slug = product.slug
    old_category_slug = _category_slug(product)
    for field, value in values.items():
        setattr(product, field, value)

    try:
        product.save()
    except IntegrityError:
        return failure(SLUG_TAKEN_MESSAGE)
    except DatabaseError:
        logger.exception("UpdateProduct failed for %s", product.id)
        return failure("Failed to update product")

    _revalidate_product(old_slug, product.slug, category_slug=old_category_slug)
    if _category_slug(product) != old_category_slug:
        _revalidate_product(category_slug=_category_slug(product))
    return success("Product updated")


@admin_action
def toggle_product_active(user, product_id):
    product = Product.objects.select_related("category").filter(id=(product_id or "").strip()).first()
    if product is None:
        return failure("Product does not exist")

    product.is_active = not product.is_active
    try:
        product.save(update_fields=["is_active", "updated_at"])
    except DatabaseError:
        logger.exception("ToggleProduct failed for %s", product.id)
        return failure("Failed to update product status")

    _revalidate_product(product.slug, category_slug=_category_slug(product))
    message = "Product enabled" if product.is_active else "Product disabled"
    return success(message, is_active=product.is_active)


@admin_action
def delete_product(user, product_id):
    product = Product.objects.select_related("category").filter(id=(product_id or "").strip()).first()
    if product is None:
        return failure("Product does not exist")

    try:
        with transaction.atomic():
            held = Card.objects.filter(product=product, status__in=("locked", "sold")).count()
            if held:
                return failure(
                    f"Product still has {held} locked or sold cards and cannot be deleted",
                    held_count=held,
                )
            # Available cards cascade with the product; orders keep their snapshot
            product.delete()
    except DatabaseError:
        logger.exception("DeleteProduct failed for %s", product.id)
        return failure("Failed to delete product")

    logger.info("Deleted product %s", product.slug)
    _revalidate_product(product.slug, category_slug=_category_slug(product))
    return success("Product deleted")


# -----------------------
# API Views
# -----------------------

class AdminProductsAPIView(APIView):
    permission_classes = [FrontendOnlyPermission]

    def get(self, request):
        return envelope_response(get_all_products(request.user))


class CreateProductAPIView(APIView):
    permission_classes = [FrontendOnlyPermission]

    def post(self, request):
        return envelope_response(create_product(request.user, _parse_payload(request)))


class UpdateProductAPIView(APIView):
    permission_classes = [FrontendOnlyPermission]

    def post(self, request, product_id):
        return envelope_response(update_product(request.user, product_id, _parse_payload(request)))


class ToggleProductAPIView(APIView):
    permission_classes = [FrontendOnlyPermission]

    def post(self, request, product_id):
        return envelope_response(toggle_product_active(request.user, product_id))


class DeleteProductAPIView(APIView):
    permission_classes = [FrontendOnlyPermission]

    def post(self, request, product_id):
        return envelope_response(delete_product(request.user, product_id))
