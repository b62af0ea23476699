# Django
from django.contrib.auth.hashers import check_password

# Django REST Framework
from rest_framework.views import APIView

# Local Imports
from .cache import cached_page
from .category import get_active_categories, get_category_by_slug
from .models import Order
from .permissions import FrontendOnlyPermission
from .product import get_product_by_slug, get_store_products
from .serializers import QueryOrderSerializer
from .system_settings import get_system_settings
from .utilities import _parse_payload, envelope_response, failure, first_error, money, success, to_iso

# Only these orders have delivered cards to show
DELIVERED_STATUSES = ("paid", "completed")

ORDER_LOOKUP_FAILED = "Order not found or query password is incorrect"


def get_home_page():
    return cached_page("/", lambda: {
        "categories": get_active_categories(),
        "featured_products": get_store_products(featured_only=True),
    })


def get_categories_page():
    return cached_page("/categories", get_active_categories)


def get_category_page(slug):
    def build():
        category = get_category_by_slug(slug)
        if category is None:
            return None
        return {"category": category, "products": get_store_products(category_slug=slug)}

    return cached_page(f"/category/{slug}", build)


def get_product_page(slug):
    return cached_page(f"/product/{slug}", lambda: get_product_by_slug(slug))


def get_public_settings():
    return cached_page("/settings", get_system_settings)


def query_order(order_no, password):
    """Look up an order by number and query password; paid orders reveal their delivered cards."""
    serializer = QueryOrderSerializer(data={"order_no": order_no, "password": password})
    if not serializer.is_valid():
        return failure(first_error(serializer.errors))

    order = Order.objects.filter(order_no=serializer.validated_data["order_no"]).first()
    # Unknown order and wrong password share one message
    if order is None or not check_password(serializer.validated_data["password"], order.query_password):
        return failure(ORDER_LOOKUP_FAILED)

    cards = []
    if order.status in DELIVERED_STATUSES:
        cards = list(order.cards.filter(status="sold").order_by("created_at", "id").values_list("content", flat=True))

    return success(
        "ok",
        order={
            "order_no": order.order_no,
            "product_name": order.product_name,
            "quantity": order.quantity,
            "total_amount": money(order.total_amount),
            "payment_method": order.payment_method,
            "status": order.status,
            "created_at": to_iso(order.created_at),
            "paid_at": to_iso(order.paid_at),
        },
        cards=cards,
    )


# -----------------------
# API Views
# -----------------------

class StoreHomeAPIView(APIView):
    permission_classes = [FrontendOnlyPermission]

    def get(self, request):
        return envelope_response(success("ok", **get_home_page()))


class StoreCategoriesAPIView(APIView):
    permission_classes = [FrontendOnlyPermission]

    def get(self, request):
        return envelope_response(success("ok", categories=get_categories_page()))


class StoreCategoryAPIView(APIView):
    permission_classes = [FrontendOnlyPermission]

    def get(self, request, slug):
        page = get_category_page(slug)
        if page is None:
            return envelope_response(failure("Category does not exist"))
        return envelope_response(success("ok", **page))


class StoreProductAPIView(APIView):
    permission_classes = [FrontendOnlyPermission]

    def get(self, request, slug):
        product = get_product_page(slug)
        if product is None:
            return envelope_response(failure("Product does not exist"))
        return envelope_response(success("ok", product=product))


class StoreSettingsAPIView(APIView):
    permission_classes = [FrontendOnlyPermission]

    def get(self, request):
        return envelope_response(success("ok", settings=get_public_settings()))


class QueryOrderAPIView(APIView):
    permission_classes = [FrontendOnlyPermission]

    def post(self, request):
        data = _parse_payload(request)
        return envelope_response(query_order(data.get("order_no"), data.get("password")))
