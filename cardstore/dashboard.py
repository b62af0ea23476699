# Standard Library
from decimal import Decimal

# Django
from django.db.models import Count, Sum
from django.utils import timezone

# Django REST Framework
from rest_framework.views import APIView

# Local Imports
from .models import Card, Order, Product
from .permissions import FrontendOnlyPermission, admin_action
from .product import with_stock
from .utilities import envelope_response, money, success, to_iso

LOW_STOCK_THRESHOLD = 10
LOW_STOCK_LIMIT = 5
RECENT_ORDERS_LIMIT = 5


def _today_start():
    return timezone.localtime().replace(hour=0, minute=0, second=0, microsecond=0)


@admin_action
def get_dashboard_stats(user):
    today = Order.objects.filter(status="completed", paid_at__gte=_today_start()).aggregate(
        count=Count("id"), amount=Sum("total_amount")
    )

    low_stock = (
        with_stock(Product.objects.filter(is_active=True))
        .filter(stock_available__lt=LOW_STOCK_THRESHOLD)
        .order_by("stock_available", "name")[:LOW_STOCK_LIMIT]
    )

    recent_orders = Order.objects.order_by("-created_at").only(
        "id", "order_no", "product_name", "total_amount", "status", "created_at"
    )[:RECENT_ORDERS_LIMIT]

    return success(
        "ok",
        stats={
            "today_orders": today["count"] or 0,
            "today_revenue": money(today["amount"] or Decimal("0.00")),
            "pending_orders": Order.objects.filter(status="pending").count(),
            "active_products": Product.objects.filter(is_active=True).count(),
            "available_cards": Card.objects.filter(status="available").count(),
        },
        low_stock_products=[
            {"id": p.id, "name": p.name, "slug": p.slug, "stock": p.stock_available}
            for p in low_stock
        ],
        recent_orders=[
            {
                "id": o.id,
                "order_no": o.order_no,
                "product_name": o.product_name,
                "total_amount": money(o.total_amount),
                "status": o.status,
                "created_at": to_iso(o.created_at),
            }
            for o in recent_orders
        ],
    )


class DashboardAPIView(APIView):
    permission_classes = [FrontendOnlyPermission]

    def get(self, request):
        return envelope_response(get_dashboard_stats(request.user))
