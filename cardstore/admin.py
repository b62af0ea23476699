from django.contrib import admin
from .models import Card, Category, Order, Product, Setting


@admin.register(Category)
class CategoryAdmin(admin.ModelAdmin):
    list_display = ("name", "slug", "sort_order", "is_active")
    search_fields = ("name", "slug")


@admin.register(Product)
class ProductAdmin(admin.ModelAdmin):
    list_display = ("name", "slug", "category", "price", "is_active", "is_featured")
    list_filter = ("is_active", "is_featured")
    search_fields = ("name", "slug")


@admin.register(Order)
class OrderAdmin(admin.ModelAdmin):
    list_display = ("order_no", "product_name", "total_amount", "payment_method", "status", "created_at")
    list_filter = ("status", "payment_method")
    search_fields = ("order_no", "email", "username", "trade_no")


admin.site.register(Card)
admin.site.register(Setting)
