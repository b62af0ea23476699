from datetime import timedelta
from unittest import mock

from django.db import DatabaseError
from django.db.models.query import QuerySet
from django.test import TestCase
from django.utils import timezone
from rest_framework.test import APIClient

from cardstore.cards import (
    clean_duplicate_cards,
    create_card,
    delete_cards,
    get_admin_cards_page,
    get_card_stats,
    import_cards,
    parse_card_contents,
    reset_locked_cards,
    update_card,
)
from cardstore.models import Card

from .helpers import make_admin, make_card, make_customer, make_order, make_product


class ParseCardContentsTests(TestCase):
    def test_newline_split_trims_and_drops_blank_lines(self):
        self.assertEqual(parse_card_contents(" a \r\n\nb\n  \nc"), ["a", "b", "c"])

    def test_comma_split(self):
        self.assertEqual(parse_card_contents("a, b,,c ", "comma"), ["a", "b", "c"])


class ImportCardsTests(TestCase):
    def setUp(self):
        self.admin = make_admin()
        self.product = make_product()

    def test_duplicates_within_input_are_counted_once(self):
        result = import_cards(self.admin, {"product_id": self.product.id, "content": "a\na\nb"})

        self.assertTrue(result["success"])
        self.assertEqual(
            result["stats"],
            {"total": 3, "duplicate_in_input": 1, "existing_in_db": 0, "imported": 2},
        )
        self.assertEqual(
            sorted(Card.objects.filter(product=self.product).values_list("content", flat=True)),
            ["a", "b"],
        )

    def test_existing_cards_are_skipped(self):
        make_card(self.product, "a")

        result = import_cards(
            self.admin, {"product_id": self.product.id, "content": "a,b,b,c", "delimiter": "comma"}
        )

        stats = result["stats"]
        self.assertTrue(result["success"])
        self.assertEqual(stats["existing_in_db"], 1)
        self.assertEqual(stats["imported"], 2)
        self.assertEqual(stats["imported"], stats["total"] - stats["duplicate_in_input"] - stats["existing_in_db"])
        self.assertEqual(Card.objects.filter(product=self.product).count(), 3)
        self.assertEqual(Card.objects.filter(product=self.product, status="available").count(), 3)

    def test_existing_cards_of_another_product_do_not_count(self):
        other = make_product()
        make_card(other, "a")

        result = import_cards(self.admin, {"product_id": self.product.id, "content": "a"})

        self.assertTrue(result["success"])
        self.assertEqual(result["stats"]["imported"], 1)

    def test_all_existing_fails_with_stats(self):
        make_card(self.product, "a")
        make_card(self.product, "b")

        result = import_cards(self.admin, {"product_id": self.product.id, "content": "a\nb"})

        self.assertFalse(result["success"])
        self.assertEqual(result["message"], "All cards already exist")
        self.assertEqual(result["stats"]["imported"], 0)
        self.assertEqual(Card.objects.count(), 2)

    def test_blank_content_fails(self):
        result = import_cards(self.admin, {"product_id": self.product.id, "content": " \n \n"})

        self.assertFalse(result["success"])
        self.assertEqual(Card.objects.count(), 0)

    def test_unknown_product_fails(self):
        result = import_cards(self.admin, {"product_id": "missing", "content": "a"})

        self.assertFalse(result["success"])
        self.assertEqual(result["message"], "Product does not exist")

    def test_requires_admin(self):
        result = import_cards(make_customer(), {"product_id": self.product.id, "content": "a"})

        self.assertEqual(result, {"success": False, "message": "Admin privileges required"})
        self.assertEqual(Card.objects.count(), 0)


class CreateAndUpdateCardTests(TestCase):
    def setUp(self):
        self.admin = make_admin()
        self.product = make_product()

    def test_create_rejects_duplicate(self):
        make_card(self.product, "dup")

        result = create_card(self.admin, {"product_id": self.product.id, "content": "dup"})

        self.assertFalse(result["success"])
        self.assertEqual(Card.objects.count(), 1)

    def test_create_rejects_multiple_lines(self):
        result = create_card(self.admin, {"product_id": self.product.id, "content": "a\nb"})

        self.assertFalse(result["success"])

    def test_update_available_card(self):
        card = make_card(self.product, "old")

        result = update_card(self.admin, card.id, {"content": "new"})
        card.refresh_from_db()

        self.assertTrue(result["success"])
        self.assertEqual(card.content, "new")

    def test_update_refuses_locked_card(self):
        order = make_order(self.product)
        card = make_card(self.product, "held", status="locked", order=order)

        result = update_card(self.admin, card.id, {"content": "changed"})
        card.refresh_from_db()

        self.assertFalse(result["success"])
        self.assertEqual(card.content, "held")

    def test_update_write_failure_is_reported(self):
        card = make_card(self.product, "old")

        with mock.patch.object(QuerySet, "update", side_effect=DatabaseError("disk full")):
            with self.assertLogs("cardstore.cards", level="ERROR"):
                result = update_card(self.admin, card.id, {"content": "new"})

        self.assertFalse(result["success"])
        self.assertEqual(result["message"], "Failed to update card")


class DeleteCardsTests(TestCase):
    def setUp(self):
        self.admin = make_admin()
        self.product = make_product()
        self.order = make_order(self.product)

    def test_only_available_cards_are_deleted(self):
        available = make_card(self.product)
        locked = make_card(self.product, status="locked", order=self.order)
        sold = make_card(self.product, status="sold", order=self.order)

        result = delete_cards(self.admin, [available.id, locked.id, sold.id])

        self.assertTrue(result["success"])
        self.assertEqual(result["deleted_count"], 1)
        self.assertFalse(Card.objects.filter(id=available.id).exists())
        self.assertTrue(Card.objects.filter(id=locked.id, status="locked").exists())
        self.assertTrue(Card.objects.filter(id=sold.id, status="sold").exists())

    def test_empty_ids_fail(self):
        self.assertFalse(delete_cards(self.admin, [])["success"])
        self.assertFalse(delete_cards(self.admin, ["  "])["success"])


class ResetLockedCardsTests(TestCase):
    def setUp(self):
        self.admin = make_admin()
        self.product = make_product()
        self.order = make_order(self.product)

    def test_locked_card_returns_to_stock(self):
        card = make_card(self.product, status="locked", order=self.order)

        result = reset_locked_cards(self.admin, [card.id])
        card.refresh_from_db()

        self.assertEqual(result["reset_count"], 1)
        self.assertEqual(card.status, "available")
        self.assertIsNone(card.order_id)
        self.assertIsNone(card.locked_at)

    def test_non_locked_cards_are_untouched(self):
        available = make_card(self.product)
        sold = make_card(self.product, status="sold", order=self.order)

        result = reset_locked_cards(self.admin, [available.id, sold.id])
        sold.refresh_from_db()

        self.assertTrue(result["success"])
        self.assertEqual(result["reset_count"], 0)
        self.assertEqual(sold.status, "sold")
        self.assertEqual(sold.order_id, self.order.id)


class CleanDuplicateCardsTests(TestCase):
    def setUp(self):
        self.admin = make_admin()
        self.product = make_product()

    def test_keeps_oldest_available_copy(self):
        now = timezone.now()
        oldest = make_card(self.product, "x", created_at=now - timedelta(minutes=3))
        make_card(self.product, "x", created_at=now - timedelta(minutes=2))
        make_card(self.product, "x", created_at=now - timedelta(minutes=1))
        single = make_card(self.product, "y")
        sold = make_card(self.product, "x", status="sold", order=make_order(self.product))

        result = clean_duplicate_cards(self.admin, self.product.id)

        self.assertTrue(result["success"])
        self.assertEqual(result["deleted_count"], 2)
        remaining = set(Card.objects.filter(product=self.product).values_list("id", flat=True))
        self.assertEqual(remaining, {oldest.id, single.id, sold.id})

    def test_no_duplicates(self):
        make_card(self.product, "x")

        result = clean_duplicate_cards(self.admin, self.product.id)

        self.assertTrue(result["success"])
        self.assertEqual(result["deleted_count"], 0)


class AdminCardsPageTests(TestCase):
    def setUp(self):
        self.admin = make_admin()
        self.product = make_product()

    def test_sold_content_is_masked(self):
        order = make_order(self.product)
        make_card(self.product, "ABCDEFGHIJ", status="sold", order=order)

        result = get_admin_cards_page(self.admin, self.product.id)
        item = result["items"][0]

        self.assertTrue(item["content_masked"])
        self.assertEqual(item["content"], "ABCD****GHIJ")
        self.assertEqual(item["order"], {"id": order.id, "order_no": order.order_no})

    def test_page_size_is_clamped(self):
        result = get_admin_cards_page(self.admin, self.product.id, page=0, page_size=500)

        self.assertEqual(result["page"], 1)
        self.assertEqual(result["page_size"], 200)

    def test_filters_and_stats(self):
        make_card(self.product, "alpha-1")
        make_card(self.product, "beta-1")
        make_card(self.product, "alpha-2", status="locked", order=make_order(self.product))

        result = get_admin_cards_page(self.admin, self.product.id, q="alpha", status="available")

        self.assertEqual(result["total"], 1)
        self.assertEqual(result["items"][0]["content"], "alpha-1")
        self.assertEqual(result["stats"], {"available": 2, "locked": 1, "sold": 0, "total": 3})

    def test_card_stats(self):
        make_card(self.product)
        self.assertEqual(get_card_stats(self.product.id), {"available": 1, "locked": 0, "sold": 0, "total": 1})


class CardsAPITests(TestCase):
    def setUp(self):
        self.client = APIClient()
        self.admin = make_admin()
        self.product = make_product()

    def test_import_endpoint(self):
        self.client.force_authenticate(self.admin)

        response = self.client.post(
            "/api/admin/cards/import/",
            {"product_id": self.product.id, "content": "a\nb"},
            format="json",
        )

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()["stats"]["imported"], 2)

    def test_anonymous_request_is_rejected_with_envelope(self):
        response = self.client.post(
            "/api/admin/cards/import/",
            {"product_id": self.product.id, "content": "a"},
            format="json",
        )

        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json(), {"success": False, "message": "Admin privileges required"})

    def test_export_as_text(self):
        now = timezone.now()
        make_card(self.product, "first", created_at=now - timedelta(minutes=1))
        make_card(self.product, "second", created_at=now)
        self.client.force_authenticate(self.admin)

        response = self.client.get(
            "/api/admin/cards/export/", {"product_id": self.product.id, "output": "txt"}
        )

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response["Content-Type"], "text/plain; charset=utf-8")
        self.assertEqual(response.content.decode(), "second\nfirst")

    def test_export_unknown_status(self):
        self.client.force_authenticate(self.admin)

        response = self.client.get("/api/admin/cards/export/", {"product_id": self.product.id, "status": "gone"})

        self.assertEqual(response.status_code, 400)
