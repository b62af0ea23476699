# Standard Library
import re
import logging

# Django
from django.db import DatabaseError, transaction
from django.db.models import Count, F, Q, Window
from django.db.models.functions import RowNumber
from django.http import HttpResponse

# Django REST Framework
from rest_framework.views import APIView

# Local Imports
from .cache import revalidate_paths
from .models import Card, Product
from .permissions import FrontendOnlyPermission, admin_action
from .serializers import CardContentSerializer, ImportCardsSerializer
from .utilities import (
    _as_list,
    _parse_payload,
    clamp_pagination,
    envelope_response,
    failure,
    first_error,
    success,
    to_iso,
)

logger = logging.getLogger(__name__)

CARD_STATUSES = {choice for choice, _ in Card.STATUS_CHOICES}

# SQLite caps bound parameters per statement; keep IN lists and inserts below it
_BATCH_SIZE = 500

_CARD_PATHS = ("/admin/cards", "/admin/products", "/")


def revalidate_stock_pages(product_ids):
    """Drop the admin lists, the home page and every product/category page showing these products' stock."""
    paths = list(_CARD_PATHS)
    for product in Product.objects.filter(id__in=set(product_ids)).select_related("category"):
        paths.append(f"/product/{product.slug}")
        if product.category_id:
            paths.append(f"/category/{product.category.slug}")
    revalidate_paths(*paths)


def _card_product_ids(card_ids):
    product_ids = set()
    for start in range(0, len(card_ids), _BATCH_SIZE):
        product_ids.update(
            Card.objects.filter(id__in=card_ids[start:start + _BATCH_SIZE]).values_list("product_id", flat=True)
        )
    return product_ids


def parse_card_contents(content, delimiter="newline"):
    pieces = re.split(r"\r?\n", content) if delimiter == "newline" else content.split(",")
    return [piece.strip() for piece in pieces if piece.strip()]


def _existing_contents(product_id, contents):
    existing = set()
    for start in range(0, len(contents), _BATCH_SIZE):
        chunk = contents[start:start + _BATCH_SIZE]
        existing.update(
            Card.objects.filter(product_id=product_id, content__in=chunk).values_list("content", flat=True)
        )
    return existing


def _unique_ids(ids):
    return list(dict.fromkeys(i.strip() for i in _as_list(ids) if i.strip()))


def _mask(content):
    if len(content) <= 8:
        return "*" * len(content)
    return f"{content[:4]}{'*' * 4}{content[-4:]}"


def get_card_stats(product_id):
    stats = Card.objects.filter(product_id=product_id).aggregate(
        available=Count("id", filter=Q(status="available")),
        locked=Count("id", filter=Q(status="locked")),
        sold=Count("id", filter=Q(status="sold")),
        total=Count("id"),
    )
    return {key: value or 0 for key, value in stats.items()}


@admin_action
def card_stats(user, product_id):
    return success("ok", stats=get_card_stats(product_id))


@admin_action
def import_cards(user, data):
    serializer = ImportCardsSerializer(data=data)
    if not serializer.is_valid():
        return failure(first_error(serializer.errors))

    product_id = serializer.validated_data["product_id"]
    content = serializer.validated_data["content"]
    delimiter = serializer.validated_data["delimiter"]

    if not Product.objects.filter(id=product_id).exists():
        return failure("Product does not exist")

    contents = parse_card_contents(content, delimiter)
    if not contents:
        return failure("No valid card content found")

    unique_contents = list(dict.fromkeys(contents))
    duplicate_count = len(contents) - len(unique_contents)
    existing = _existing_contents(product_id, unique_contents)
    new_contents = [c for c in unique_contents if c not in existing]

    stats = {
        "total": len(contents),
        "duplicate_in_input": duplicate_count,
        "existing_in_db": len(existing),
        "imported": len(new_contents),
    }

    if not new_contents:
        return failure("All cards already exist", stats=stats)

    try:
        with transaction.atomic():
            Card.objects.bulk_create(
                [Card(product_id=product_id, content=c, status="available") for c in new_contents],
                batch_size=_BATCH_SIZE,
            )
    except DatabaseError:
        logger.exception("ImportCards failed for product %s", product_id)
        return failure("Failed to import cards")

    revalidate_stock_pages([product_id])
    logger.info("Imported %s cards for product %s (%s duplicates, %s existing)",
                len(new_contents), product_id, duplicate_count, len(existing))
    return success(f"Imported {len(new_contents)} cards", stats=stats)


@admin_action
def create_card(user, data):
    serializer = CardContentSerializer(data=data)
    if not serializer.is_valid():
        return failure(first_error(serializer.errors))

    product_id = serializer.validated_data["product_id"]
    content = serializer.validated_data["content"]

    if not Product.objects.filter(id=product_id).exists():
        return failure("Product does not exist")
    if Card.objects.filter(product_id=product_id, content=content).exists():
        return failure("This card already exists")

    try:
        card = Card.objects.create(product_id=product_id, content=content, status="available")
    except DatabaseError:
        logger.exception("CreateCard failed for product %s", product_id)
        return failure("Failed to add card")

    revalidate_stock_pages([product_id])
    return success("Card added", card_id=card.id)


@admin_action
def update_card(user, card_id, data):
    card = Card.objects.filter(id=(card_id or "").strip()).first()
    if card is None:
        return failure("Card does not exist")
    if card.status != "available":
        return failure("Only available cards can be edited")

    serializer = CardContentSerializer(data={"product_id": card.product_id, "content": data.get("content")})
    if not serializer.is_valid():
        return failure(first_error(serializer.errors))

    content = serializer.validated_data["content"]
    if content == card.content:
        return success("Card unchanged")
    if Card.objects.filter(product_id=card.product_id, content=content).exclude(id=card.id).exists():
        return failure("This card already exists")

    try:
        # Status is re-checked in the write itself
        updated = Card.objects.filter(id=card.id, status="available").update(content=content)
    except DatabaseError:
        logger.exception("UpdateCard failed for %s", card.id)
        return failure("Failed to update card")
    if not updated:
        return failure("Only available cards can be edited")

    revalidate_stock_pages([card.product_id])
    return success("Card updated")


@admin_action
def delete_cards(user, ids):
    card_ids = _unique_ids(ids)
    if not card_ids:
        return failure("Select cards to delete")

    try:
        product_ids = _card_product_ids(card_ids)
        # Locked and sold cards are never deleted, even when requested
        deleted_count, _ = Card.objects.filter(id__in=card_ids, status="available").delete()
    except DatabaseError:
        logger.exception("DeleteCards failed")
        return failure("Failed to delete cards")

    revalidate_stock_pages(product_ids)
    logger.info("Deleted %s of %s requested cards", deleted_count, len(card_ids))
    return success(f"Deleted {deleted_count} cards", deleted_count=deleted_count)


@admin_action
def reset_locked_cards(user, ids):
    card_ids = _unique_ids(ids)
    if not card_ids:
        return failure("Select cards to reset")

    try:
        product_ids = _card_product_ids(card_ids)
        reset_count = Card.objects.filter(id__in=card_ids, status="locked").update(
            status="available", order=None, locked_at=None
        )
    except DatabaseError:
        logger.exception("ResetLockedCards failed")
        return failure("Failed to reset cards")

    revalidate_stock_pages(product_ids)
    logger.info("Reset %s of %s requested cards", reset_count, len(card_ids))
    return success(f"Reset {reset_count} cards", reset_count=reset_count)


@admin_action
def clean_duplicate_cards(user, product_id):
    product_id = (product_id or "").strip()
    if not product_id:
        return failure("Select a product")

    try:
        with transaction.atomic():
            ranked = Card.objects.filter(product_id=product_id, status="available").annotate(
                row_number=Window(
                    expression=RowNumber(),
                    partition_by=[F("content")],
                    order_by=[F("created_at").asc(), F("id").asc()],
                )
            )
            duplicate_ids = list(ranked.filter(row_number__gt=1).values_list("id", flat=True))
            if not duplicate_ids:
                return success("No duplicate cards found", deleted_count=0)

            deleted_count = 0
            for start in range(0, len(duplicate_ids), _BATCH_SIZE):
                count, _ = Card.objects.filter(
                    id__in=duplicate_ids[start:start + _BATCH_SIZE], status="available"
                ).delete()
                deleted_count += count
    except DatabaseError:
        logger.exception("CleanDuplicateCards failed for product %s", product_id)
        return failure("Failed to clean duplicate cards")

    revalidate_stock_pages([product_id])
    return success(f"Removed {deleted_count} duplicate cards", deleted_count=deleted_count)


@admin_action
def export_cards(user, product_id, status=None):
    status = status or None
    if status is not None and status not in CARD_STATUSES:
        return failure("Unknown card status")

    cards = Card.objects.filter(product_id=product_id)
    if status:
        cards = cards.filter(status=status)

    rows = [
        {
            "content": row["content"],
            "status": row["status"],
            "created_at": to_iso(row["created_at"]),
            "sold_at": to_iso(row["sold_at"]),
        }
        for row in cards.order_by("-created_at").values("content", "status", "created_at", "sold_at")
    ]
    return success("ok", cards=rows)


def _serialize_card_row(card):
    masked = card.status == "sold"
    order = card.order if card.order_id else None
    return {
        "id": card.id,
        "content": _mask(card.content) if masked else card.content,
        "content_masked": masked,
        "status": card.status,
        "created_at": to_iso(card.created_at),
        "order_id": card.order_id,
        "order": {"id": order.id, "order_no": order.order_no} if order else None,
    }


@admin_action
def get_admin_cards_page(user, product_id, page=1, page_size=None, q="", status=None, order_no=""):
    product = Product.objects.filter(id=(product_id or "").strip()).first()
    if product is None:
        return failure("Product does not exist")

    page, page_size, offset = clamp_pagination(page, page_size)

    cards = Card.objects.filter(product=product).select_related("order")
    q = (q or "").strip()
    if q:
        cards = cards.filter(content__icontains=q)
    if status in CARD_STATUSES:
        cards = cards.filter(status=status)
    order_no = (order_no or "").strip()
    if order_no:
        cards = cards.filter(order__order_no__icontains=order_no)

    total = cards.count()
    items = [
        _serialize_card_row(card)
        for card in cards.order_by("-created_at", "id")[offset:offset + page_size]
    ]

    return success(
        "ok",
        product={"id": product.id, "name": product.name},
        items=items,
        total=total,
        page=page,
        page_size=page_size,
        total_pages=max(1, -(-total // page_size)),
        stats=get_card_stats(product.id),
    )


# -----------------------
# API Views
# -----------------------

class AdminCardsAPIView(APIView):
    permission_classes = [FrontendOnlyPermission]

    def get(self, request):
        params = request.query_params
        result = get_admin_cards_page(
            request.user,
            params.get("product_id"),
            page=params.get("page"),
            page_size=params.get("page_size"),
            q=params.get("q", ""),
            status=params.get("status"),
            order_no=params.get("order_no", ""),
        )
        return envelope_response(result)


class ImportCardsAPIView(APIView):
    permission_classes = [FrontendOnlyPermission]

    def post(self, request):
        return envelope_response(import_cards(request.user, _parse_payload(request)))


class CreateCardAPIView(APIView):
    permission_classes = [FrontendOnlyPermission]

    def post(self, request):
        return envelope_response(create_card(request.user, _parse_payload(request)))


class UpdateCardAPIView(APIView):
    permission_classes = [FrontendOnlyPermission]

    def post(self, request, card_id):
        return envelope_response(update_card(request.user, card_id, _parse_payload(request)))


class DeleteCardsAPIView(APIView):
    permission_classes = [FrontendOnlyPermission]

    def post(self, request):
        data = _parse_payload(request)
        return envelope_response(delete_cards(request.user, data.get("ids")))


class ResetLockedCardsAPIView(APIView):
    permission_classes = [FrontendOnlyPermission]

    def post(self, request):
        data = _parse_payload(request)
        return envelope_response(reset_locked_cards(request.user, data.get("ids")))


class CleanDuplicateCardsAPIView(APIView):
    permission_classes = [FrontendOnlyPermission]

    def post(self, request):
        data = _parse_payload(request)
        return envelope_response(clean_duplicate_cards(request.user, data.get("product_id")))


class ExportCardsAPIView(APIView):
    """
    GET ?product_id=<id>&status=<available|locked|sold>

    JSON by default; ``output=txt`` downloads one card content per line.
    """
    permission_classes = [FrontendOnlyPermission]

    def get(self, request):
        params = request.query_params
        product_id = params.get("product_id", "")
        result = export_cards(request.user, product_id, params.get("status"))
        if not result["success"] or params.get("output") != "txt":
            return envelope_response(result)

        body = "\n".join(row["content"] for row in result["cards"])
        response = HttpResponse(body, content_type="text/plain; charset=utf-8")
        response["Content-Disposition"] = f'attachment; filename="cards-{product_id}.txt"'
        return response


class CardStatsAPIView(APIView):
    permission_classes = [FrontendOnlyPermission]

    def get(self, request):
        return envelope_response(card_stats(request.user, request.query_params.get("product_id", "")))
