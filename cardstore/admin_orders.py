# Standard Library
import logging

# Django
from django.db import DatabaseError, transaction
from django.db.models import Count, Prefetch, Q

# Django REST Framework
from rest_framework.views import APIView

# Local Imports
from .cache import revalidate_path
from .cards import revalidate_stock_pages
from .models import Card, Order
from .permissions import FrontendOnlyPermission, admin_action
from .serializers import AdminRemarkSerializer
from .utilities import (
    _as_list,
    _now,
    _parse_payload,
    clamp_pagination,
    envelope_response,
    failure,
    first_error,
    money,
    success,
    to_iso,
)

logger = logging.getLogger(__name__)

ORDER_STATUSES = {choice for choice, _ in Order.STATUS_CHOICES}
PAYMENT_METHODS = {choice for choice, _ in Order.PAYMENT_METHOD_CHOICES}

MAX_DELETE_BATCH = 200

# Fields the single search box matches against
SEARCH_FIELDS = ("order_no", "email", "username", "user_id", "trade_no", "product_name")

LIST_FIELDS = (
    "id", "order_no", "product_name", "quantity", "total_amount", "payment_method",
    "username", "user_id", "status", "trade_no", "refund_reason", "created_at",
)


def build_admin_orders_filter(filters):
    filters = filters or {}
    condition = Q()

    status = filters.get("status")
    if status in ORDER_STATUSES:
        condition &= Q(status=status)

    payment_method = filters.get("payment_method")
    if payment_method in PAYMENT_METHODS:
        condition &= Q(payment_method=payment_method)

    query = (filters.get("query") or "").strip()
    if query:
        search = Q()
        for field in SEARCH_FIELDS:
            search |= Q(**{f"{field}__icontains": query})
        condition &= search

    return condition


def _serialize_list_row(order):
    return {
        "id": order.id,
        "order_no": order.order_no,
        "product_name": order.product_name,
        "quantity": order.quantity,
        "total_amount": money(order.total_amount),
        "payment_method": order.payment_method,
        "username": order.username,
        "user_id": order.user_id,
        "status": order.status,
        "trade_no": order.trade_no,
        "refund_reason": order.refund_reason,
        "created_at": to_iso(order.created_at) or "",
    }


def _stats_from_grouped_counts(grouped):
    counts = {row["status"]: row["count"] for row in grouped}
    return {
        "pending": counts.get("pending", 0),
        "completed": counts.get("completed", 0),
        "refund_pending": counts.get("refund_pending", 0),
    }


@admin_action
def get_admin_orders_page(user, page=1, page_size=None, filters=None):
    page, page_size, offset = clamp_pagination(page, page_size)
    condition = build_admin_orders_filter(filters)

    orders = Order.objects.filter(condition)
    total = orders.count()
    grouped = orders.order_by().values("status").annotate(count=Count("id"))
    items = orders.only(*LIST_FIELDS).order_by("-created_at", "id")[offset:offset + page_size]

    return success(
        "ok",
        items=[_serialize_list_row(order) for order in items],
        total=total,
        page=page,
        page_size=page_size,
        stats=_stats_from_grouped_counts(grouped),
    )


def _serialize_detail_card(card):
    return {
        "id": card.id,
        "content": card.content,
        "status": card.status,
        "locked_at": to_iso(card.locked_at),
        "sold_at": to_iso(card.sold_at),
        "created_at": to_iso(card.created_at) or "",
    }


def _serialize_detail(order):
    product = order.product
    return {
        "id": order.id,
        "order_no": order.order_no,
        "product_id": order.product_id,
        "product_name": order.product_name,
        "product_price": money(order.product_price),
        "quantity": order.quantity,
        "total_amount": money(order.total_amount),
        "payment_method": order.payment_method,
        "status": order.status,
        "trade_no": order.trade_no,
        "user_id": order.user_id,
        "username": order.username,
        "email": order.email,
        "remark": order.remark,
        "admin_remark": order.admin_remark,
        "refund_reason": order.refund_reason,
        "paid_at": to_iso(order.paid_at),
        "expired_at": to_iso(order.expired_at),
        "created_at": to_iso(order.created_at) or "",
        "updated_at": to_iso(order.updated_at) or "",
        "refund_requested_at": to_iso(order.refund_requested_at),
        "refunded_at": to_iso(order.refunded_at),
        "cards": [_serialize_detail_card(card) for card in order.cards.all()],
        "product": {"id": product.id, "name": product.name, "slug": product.slug} if product else None,
    }


@admin_action
def get_admin_order_detail(user, order_id):
    order_id = (order_id or "").strip()
    if not order_id:
        return failure("Invalid order ID")

    try:
        order = (
            Order.objects
            .select_related("product")
            .prefetch_related(Prefetch("cards", queryset=Card.objects.order_by("created_at", "id")))
            .filter(id=order_id)
            .first()
        )
        if order is None:
            return failure("Order does not exist or has been deleted")
        data = _serialize_detail(order)
    except DatabaseError:
        logger.exception("AdminOrderDetail lookup failed for %s", order_id)
        return failure("Failed to load order detail, please try again later")

    return success("ok", data=data)


@admin_action
def delete_admin_orders(user, ids):
    unique_ids = list(dict.fromkeys(i.strip() for i in _as_list(ids) if i.strip()))
    if not unique_ids:
        return failure("No orders selected")
    if len(unique_ids) > MAX_DELETE_BATCH:
        return failure(f"At most {MAX_DELETE_BATCH} orders can be deleted at once")

    try:
        with transaction.atomic():
            found_ids = set(Order.objects.filter(id__in=unique_ids).values_list("id", flat=True))
            not_found_ids = [i for i in unique_ids if i not in found_ids]
            deleted_count = 0
            released_count = 0
            released_product_ids = set()

            if found_ids:
                # Cards reserved by these orders go back to stock; sold cards are left untouched
                released_product_ids = set(
                    Card.objects.filter(status="locked", order_id__in=found_ids).values_list("product_id", flat=True)
                )
                released_count = Card.objects.filter(status="locked", order_id__in=found_ids).update(
                    status="available", order=None, locked_at=None
                )
                _, per_model = Order.objects.filter(id__in=found_ids).delete()
                deleted_count = per_model.get(Order._meta.label, 0)
    except DatabaseError:
        logger.exception("DeleteAdminOrders failed")
        return failure("Failed to delete orders, please try again later")

    revalidate_path("/admin/orders")
    if released_count:
        revalidate_stock_pages(released_product_ids)

    not_found_count = len(not_found_ids)
    counts = {
        "deleted_count": deleted_count,
        "not_found_count": not_found_count,
        "not_found_ids": not_found_ids,
    }

    if deleted_count == 0:
        return failure("No orders were deleted (they may already be gone)", **counts)

    logger.info("Deleted %s orders, released %s locked cards", deleted_count, released_count)
    if not_found_count:
        message = f"Deleted {deleted_count} orders ({not_found_count} missing or already deleted)"
    else:
        message = f"Deleted {deleted_count} orders"
    return success(message, **counts)


@admin_action
def update_admin_remark(user, order_id, data):
    serializer = AdminRemarkSerializer(data=data)
    if not serializer.is_valid():
        return failure(first_error(serializer.errors))

    remark = serializer.validated_data.get("admin_remark") or None
    try:
        updated = Order.objects.filter(id=(order_id or "").strip()).update(admin_remark=remark, updated_at=_now())
    except DatabaseError:
        logger.exception("UpdateAdminRemark failed for %s", order_id)
        return failure("Failed to save remark")
    if not updated:
        return failure("Order does not exist or has been deleted")

    revalidate_path("/admin/orders")
    return success("Remark saved")


# -----------------------
# API Views
# -----------------------

class AdminOrdersAPIView(APIView):
    permission_classes = [FrontendOnlyPermission]

    def get(self, request):
        params = request.query_params
        filters = {
            "status": params.get("status"),
            "payment_method": params.get("payment_method"),
            "query": params.get("q", ""),
        }
        result = get_admin_orders_page(
            request.user,
            page=params.get("page"),
            page_size=params.get("page_size"),
            filters=filters,
        )
        return envelope_response(result)


class AdminOrderDetailAPIView(APIView):
    permission_classes = [FrontendOnlyPermission]

    def get(self, request, order_id):
        return envelope_response(get_admin_order_detail(request.user, order_id))


class AdminOrderRemarkAPIView(APIView):
    permission_classes = [FrontendOnlyPermission]

    def post(self, request, order_id):
        return envelope_response(update_admin_remark(request.user, order_id, _parse_payload(request)))


class DeleteAdminOrdersAPIView(APIView):
    permission_classes = [FrontendOnlyPermission]

    def post(self, request):
        data = _parse_payload(request)
        return envelope_response(delete_admin_orders(request.user, data.get("ids")))
