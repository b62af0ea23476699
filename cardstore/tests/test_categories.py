from unittest import mock

from django.db import DatabaseError
from django.test import TestCase
from rest_framework.test import APIClient

from cardstore.category import (
    create_category,
    delete_category,
    get_active_categories,
    get_admin_categories,
    get_all_categories_with_count,
    get_category_by_slug,
    toggle_category_active,
    update_category,
)
from cardstore.models import Category, Product

from .helpers import make_admin, make_category, make_customer, make_product


class CreateCategoryTests(TestCase):
    def setUp(self):
        self.admin = make_admin()

    def test_create_with_defaults(self):
        result = create_category(self.admin, {"name": "Game Keys", "slug": "game-keys"})

        self.assertTrue(result["success"])
        category = Category.objects.get(id=result["category_id"])
        self.assertTrue(category.is_active)
        self.assertEqual(category.sort_order, 0)

    def test_slug_format_is_enforced(self):
        result = create_category(self.admin, {"name": "Bad", "slug": "Bad Slug"})

        self.assertFalse(result["success"])
        self.assertFalse(Category.objects.exists())

    def test_name_length_is_enforced(self):
        result = create_category(self.admin, {"name": "x" * 51, "slug": "long"})

        self.assertFalse(result["success"])

    def test_duplicate_slug(self):
        make_category(slug="taken")

        result = create_category(self.admin, {"name": "Other", "slug": "taken"})

        self.assertFalse(result["success"])
        self.assertEqual(result["message"], "Slug already exists")

    def test_requires_admin(self):
        result = create_category(make_customer(), {"name": "Game Keys", "slug": "game-keys"})

        self.assertFalse(result["success"])
        self.assertFalse(Category.objects.exists())


class UpdateCategoryTests(TestCase):
    def setUp(self):
        self.admin = make_admin()
        self.category = make_category(name="Old", slug="old", sort_order=3)

    def test_partial_update_keeps_other_fields(self):
        result = update_category(self.admin, self.category.id, {"name": "New"})
        self.category.refresh_from_db()

        self.assertTrue(result["success"])
        self.assertEqual(self.category.name, "New")
        self.assertEqual(self.category.slug, "old")
        self.assertEqual(self.category.sort_order, 3)

    def test_slug_taken_by_another_category(self):
        make_category(slug="other")

        result = update_category(self.admin, self.category.id, {"slug": "other"})

        self.assertEqual(result["message"], "Slug already exists")

    def test_missing_category(self):
        self.assertFalse(update_category(self.admin, "missing", {"name": "x"})["success"])


class DeleteCategoryTests(TestCase):
    def setUp(self):
        self.admin = make_admin()
        self.category = make_category()

    def test_category_with_products_is_kept(self):
        make_product(category=self.category)
        make_product(category=self.category, is_active=False)

        result = delete_category(self.admin, self.category.id)

        self.assertFalse(result["success"])
        self.assertIn("2", result["message"])
        self.assertTrue(Category.objects.filter(id=self.category.id).exists())
        self.assertEqual(Product.objects.filter(category=self.category).count(), 2)

    def test_empty_category_is_deleted(self):
        result = delete_category(self.admin, self.category.id)

        self.assertTrue(result["success"])
        self.assertFalse(Category.objects.filter(id=self.category.id).exists())


class CategoryQueriesTests(TestCase):
    def setUp(self):
        self.admin = make_admin()

    def test_toggle_flips_active_flag(self):
        category = make_category()

        result = toggle_category_active(self.admin, category.id)
        category.refresh_from_db()

        self.assertFalse(result["is_active"])
        self.assertFalse(category.is_active)

    def test_toggle_write_failure_is_reported(self):
        category = make_category()

        with mock.patch.object(Category, "save", side_effect=DatabaseError("disk full")):
            with self.assertLogs("cardstore.category", level="ERROR"):
                result = toggle_category_active(self.admin, category.id)
        category.refresh_from_db()

        self.assertFalse(result["success"])
        self.assertEqual(result["message"], "Failed to update category status")
        self.assertTrue(category.is_active)

    def test_product_count_only_counts_active_products(self):
        category = make_category()
        make_product(category=category)
        make_product(category=category, is_active=False)

        result = get_all_categories_with_count(self.admin)

        self.assertEqual(result["categories"][0]["product_count"], 1)

    def test_options_include_inactive_categories(self):
        make_category(is_active=False)

        result = get_admin_categories(self.admin)

        self.assertEqual(len(result["categories"]), 1)
        self.assertEqual(set(result["categories"][0]), {"id", "name", "is_active", "sort_order"})

    def test_store_lookups_skip_inactive(self):
        make_category(slug="on", sort_order=2)
        make_category(slug="first", sort_order=1)
        make_category(slug="off", is_active=False)

        self.assertEqual([c["slug"] for c in get_active_categories()], ["first", "on"])
        self.assertIsNone(get_category_by_slug("off"))
        self.assertEqual(get_category_by_slug("on")["slug"], "on")


class CategoriesAPITests(TestCase):
    def setUp(self):
        self.client = APIClient()
        self.client.force_authenticate(make_admin())

    def test_create_and_toggle(self):
        response = self.client.post(
            "/api/admin/categories/create/", {"name": "Gift Cards", "slug": "gift-cards"}, format="json"
        )
        category_id = response.json()["category_id"]

        toggle = self.client.post(f"/api/admin/categories/{category_id}/toggle/")

        self.assertEqual(response.status_code, 200)
        self.assertEqual(toggle.status_code, 200)
        self.assertFalse(toggle.json()["is_active"])

    def test_delete_with_products_returns_400(self):
        category = make_category()
        make_product(category=category)

        response = self.client.post(f"/api/admin/categories/{category.id}/delete/")

        self.assertEqual(response.status_code, 400)
        self.assertFalse(response.json()["success"])
