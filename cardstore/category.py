# Standard Library
import logging

# Django
from django.db import DatabaseError, IntegrityError
from django.db.models import Count, ProtectedError, Q

# Django REST Framework
from rest_framework.views import APIView

# Local Imports
from .cache import revalidate_category_cache
from .models import Category, Product
from .permissions import FrontendOnlyPermission, admin_action
from .serializers import CategorySerializer
from .utilities import _parse_payload, envelope_response, failure, first_error, success, to_iso

logger = logging.getLogger(__name__)

SLUG_TAKEN_MESSAGE = "Slug already exists"


def serialize_category(category):
    return {
        "id": category.id,
        "name": category.name,
        "slug": category.slug,
        "description": category.description,
        "icon": category.icon,
        "sort_order": category.sort_order,
        "is_active": category.is_active,
    }


def get_active_categories():
    categories = Category.objects.filter(is_active=True).order_by("sort_order", "name")
    return [serialize_category(c) for c in categories]


def get_category_by_slug(slug):
    category = Category.objects.filter(slug=slug, is_active=True).first()
    return serialize_category(category) if category else None


@admin_action
def get_admin_categories(user):
    options = Category.objects.order_by("sort_order", "name").values("id", "name", "is_active", "sort_order")
    return success("ok", categories=list(options))


@admin_action
def get_all_categories_with_count(user):
    categories = Category.objects.annotate(
        product_count=Count("products", filter=Q(products__is_active=True))
    ).order_by("sort_order", "name")

    rows = []
    for category in categories:
        row = serialize_category(category)
        row["product_count"] = category.product_count
        row["created_at"] = to_iso(category.created_at)
        row["updated_at"] = to_iso(category.updated_at)
        rows.append(row)
    return success("ok", categories=rows)


def _clean(values):
    for key in ("description", "icon"):
        if key in values:
            values[key] = (values[key] or "").strip() or None
    if "name" in values:
        values["name"] = values["name"].strip()
    return values


@admin_action
def create_category(user, data):
    serializer = CategorySerializer(data=data)
    if not serializer.is_valid():
        return failure(first_error(serializer.errors))

    values = _clean(dict(serializer.validated_data))
    if Category.objects.filter(slug=values["slug"]).exists():
        return failure(SLUG_TAKEN_MESSAGE)

    try:
        category = Category.objects.create(**values)
    except IntegrityError:
        return failure(SLUG_TAKEN_MESSAGE)
    except DatabaseError:
        logger.exception("CreateCategory failed")
        return failure("Failed to create category")

    revalidate_category_cache(category.slug)
    return success("Category created", category_id=category.id)


@admin_action
def update_category(user, category_id, data):
    category = Category.objects.filter(id=(category_id or "").strip()).first()
    if category is None:
        return failure("Category does not exist")

    serializer = CategorySerializer(data=data, partial=True)
    if not serializer.is_valid():
        return failure(first_error(serializer.errors))

    values = _clean(dict(serializer.validated_data))
    new_slug = values.get("slug")
    if new_slug and Category.objects.filter(slug=new_slug).exclude(id=category.id).exists():
        return failure(SLUG_TAKEN_MESSAGE)

    old_slug = category.slug
    for field, value in values.items():
        setattr(category, field, value)

    try:
        category.save()
    except IntegrityError:
        return failure(SLUG_TAKEN_MESSAGE)
    except DatabaseError:
        logger.exception("UpdateCategory failed for %s", category.id)
        return failure("Failed to update category")

    revalidate_category_cache(old_slug)
    if category.slug != old_slug:
        revalidate_category_cache(category.slug)
    return success("Category updated")


@admin_action
def delete_category(user, category_id):
    category = Category.objects.filter(id=(category_id or "").strip()).first()
    if category is None:
        return failure("Category does not exist")

    product_count = Product.objects.filter(category=category).count()
    if product_count:
        return failure(
            f"This category still has {product_count} products; move or delete them first",
            product_count=product_count,
        )

    try:
        category.delete()
    except ProtectedError:
        # A product was attached between the count and the delete
        return failure("This category still has products; move or delete them first")
    except DatabaseError:
        logger.exception("DeleteCategory failed for %s", category.id)
        return failure("Failed to delete category")

    revalidate_category_cache(category.slug)
    return success("Category deleted")


@admin_action
def toggle_category_active(user, category_id):
    category = Category.objects.filter(id=(category_id or "").strip()).first()
    if category is None:
        return failure("Category does not exist")

    category.is_active = not category.is_active
    try:
        category.save(update_fields=["is_active", "updated_at"])
    except DatabaseError:
        logger.exception("ToggleCategory failed for %s", category.id)
        return failure("Failed to update category status")

    revalidate_category_cache(category.slug)
    message = "Category enabled" if category.is_active else "Category disabled"
    return success(message, is_active=category.is_active)


# -----------------------
# API Views
# -----------------------

class AdminCategoriesAPIView(APIView):
    permission_classes = [FrontendOnlyPermission]

    def get(self, request):
        return envelope_response(get_all_categories_with_count(request.user))


class CategoryOptionsAPIView(APIView):
    permission_classes = [FrontendOnlyPermission]

    def get(self, request):
        return envelope_response(get_admin_categories(request.user))


class CreateCategoryAPIView(APIView):
    permission_classes = [FrontendOnlyPermission]

    def post(self, request):
        return envelope_response(create_category(request.user, _parse_payload(request)))


class UpdateCategoryAPIView(APIView):
    permission_classes = [FrontendOnlyPermission]

    def post(self, request, category_id):
        return envelope_response(update_category(request.user, category_id, _parse_payload(request)))


class DeleteCategoryAPIView(APIView):
    permission_classes = [FrontendOnlyPermission]

    def post(self, request, category_id):
        return envelope_response(delete_category(request.user, category_id))


class ToggleCategoryAPIView(APIView):
    permission_classes = [FrontendOnlyPermission]

    def post(self, request, category_id):
        return envelope_response(toggle_category_active(request.user, category_id))
