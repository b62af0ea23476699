from django.urls import path

from .admin_orders import (
    AdminOrderDetailAPIView,
    AdminOrderRemarkAPIView,
    AdminOrdersAPIView,
    DeleteAdminOrdersAPIView,
)
from .cards import (
    AdminCardsAPIView,
    CardStatsAPIView,
    CleanDuplicateCardsAPIView,
    CreateCardAPIView,
    DeleteCardsAPIView,
    ExportCardsAPIView,
    ImportCardsAPIView,
    ResetLockedCardsAPIView,
    UpdateCardAPIView,
)
from .category import (
    AdminCategoriesAPIView,
    CategoryOptionsAPIView,
    CreateCategoryAPIView,
    DeleteCategoryAPIView,
    ToggleCategoryAPIView,
    UpdateCategoryAPIView,
)
from .dashboard import DashboardAPIView
from .product import (
    AdminProductsAPIView,
    CreateProductAPIView,
    DeleteProductAPIView,
    ToggleProductAPIView,
    UpdateProductAPIView,
)
from .storefront import (
    QueryOrderAPIView,
    StoreCategoriesAPIView,
    StoreCategoryAPIView,
    StoreHomeAPIView,
    StoreProductAPIView,
    StoreSettingsAPIView,
)
from .system_settings import AdminSystemSettingsAPIView, UpdateSystemSettingsAPIView

admin_urlpatterns = [
    # Cards
    path("cards/", AdminCardsAPIView.as_view(), name="admin-cards"),
    path("cards/import/", ImportCardsAPIView.as_view(), name="admin-cards-import"),
    path("cards/create/", CreateCardAPIView.as_view(), name="admin-cards-create"),
    path("cards/<str:card_id>/update/", UpdateCardAPIView.as_view(), name="admin-cards-update"),
    path("cards/delete/", DeleteCardsAPIView.as_view(), name="admin-cards-delete"),
    path("cards/reset/", ResetLockedCardsAPIView.as_view(), name="admin-cards-reset"),
    path("cards/clean-duplicates/", CleanDuplicateCardsAPIView.as_view(), name="admin-cards-clean-duplicates"),
    path("cards/export/", ExportCardsAPIView.as_view(), name="admin-cards-export"),
    path("cards/stats/", CardStatsAPIView.as_view(), name="admin-cards-stats"),

    # Orders
    path("orders/", AdminOrdersAPIView.as_view(), name="admin-orders"),
    path("orders/delete/", DeleteAdminOrdersAPIView.as_view(), name="admin-orders-delete"),
    path("orders/<str:order_id>/", AdminOrderDetailAPIView.as_view(), name="admin-order-detail"),
    path("orders/<str:order_id>/remark/", AdminOrderRemarkAPIView.as_view(), name="admin-order-remark"),

    # Categories
    path("categories/", AdminCategoriesAPIView.as_view(), name="admin-categories"),
    path("categories/options/", CategoryOptionsAPIView.as_view(), name="admin-category-options"),
    path("categories/create/", CreateCategoryAPIView.as_view(), name="admin-categories-create"),
    path("categories/<str:category_id>/update/", UpdateCategoryAPIView.as_view(), name="admin-categories-update"),
    path("categories/<str:category_id>/delete/", DeleteCategoryAPIView.as_view(), name="admin-categories-delete"),
    path("categories/<str:category_id>/toggle/", ToggleCategoryAPIView.as_view(), name="admin-categories-toggle"),

    # Products
    path("products/", AdminProductsAPIView.as_view(), name="admin-products"),
    path("products/create/", CreateProductAPIView.as_view(), name="admin-products-create"),
    path("products/<str:product_id>/update/", UpdateProductAPIView.as_view(), name="admin-products-update"),
    path("products/<str:product_id>/toggle/", ToggleProductAPIView.as_view(), name="admin-products-toggle"),
    path("products/<str:product_id>/delete/", DeleteProductAPIView.as_view(), name="admin-products-delete"),

    # Settings & dashboard
    path("settings/", AdminSystemSettingsAPIView.as_view(), name="admin-settings"),
    path("settings/update/", UpdateSystemSettingsAPIView.as_view(), name="admin-settings-update"),
    path("dashboard/", DashboardAPIView.as_view(), name="admin-dashboard"),
]

store_urlpatterns = [
    path("home/", StoreHomeAPIView.as_view(), name="store-home"),
    path("categories/", StoreCategoriesAPIView.as_view(), name="store-categories"),
    path("categories/<slug:slug>/", StoreCategoryAPIView.as_view(), name="store-category"),
    path("products/<slug:slug>/", StoreProductAPIView.as_view(), name="store-product"),
    path("settings/", StoreSettingsAPIView.as_view(), name="store-settings"),
    path("orders/query/", QueryOrderAPIView.as_view(), name="store-order-query"),
]
