from decimal import Decimal

from rest_framework import serializers

from .models import Category

SLUG_PATTERN = r"^[a-z0-9-]+$"
SLUG_MESSAGE = "Slug may only contain lowercase letters, digits and hyphens"

SITE_ICON_OPTIONS = (
    "Store",
    "Sparkles",
    "ShoppingCart",
    "Package",
    "CreditCard",
    "Gem",
    "Rocket",
    "Shield",
    "Zap",
)


class CategorySerializer(serializers.Serializer):
    name = serializers.CharField(
        max_length=50,
        error_messages={
            "required": "Category name is required",
            "blank": "Category name is required",
            "max_length": "Category name must be at most 50 characters",
        },
    )
    slug = serializers.RegexField(
        SLUG_PATTERN,
        max_length=50,
        error_messages={
            "required": "Slug is required",
            "blank": "Slug is required",
            "max_length": "Slug must be at most 50 characters",
            "invalid": SLUG_MESSAGE,
        },
    )
    description = serializers.CharField(
        max_length=200, required=False, allow_blank=True, allow_null=True,
        error_messages={"max_length": "Description must be at most 200 characters"},
    )
    icon = serializers.CharField(
        max_length=50, required=False, allow_blank=True, allow_null=True,
        error_messages={"max_length": "Icon name must be at most 50 characters"},
    )
    sort_order = serializers.IntegerField(default=0)
    is_active = serializers.BooleanField(default=True)


class ProductSerializer(serializers.Serializer):
    name = serializers.CharField(
        max_length=100,
        error_messages={
            "required": "Product name is required",
            "blank": "Product name is required",
            "max_length": "Product name must be at most 100 characters",
        },
    )
    slug = serializers.RegexField(
        SLUG_PATTERN,
        max_length=100,
        error_messages={
            "required": "Slug is required",
            "blank": "Slug is required",
            "max_length": "Slug must be at most 100 characters",
            "invalid": SLUG_MESSAGE,
        },
    )
    description = serializers.CharField(required=False, allow_blank=True, allow_null=True)
    category_id = serializers.CharField(required=False, allow_blank=True, allow_null=True)
    price = serializers.DecimalField(
        max_digits=10, decimal_places=2, min_value=Decimal("0.01"),
        error_messages={"required": "Price is required", "min_value": "Price must be greater than 0"},
    )
    original_price = serializers.DecimalField(max_digits=10, decimal_places=2, required=False, allow_null=True)
    is_active = serializers.BooleanField(default=True)
    is_featured = serializers.BooleanField(default=False)
    sort_order = serializers.IntegerField(default=0)
    min_quantity = serializers.IntegerField(min_value=1, default=1)
    max_quantity = serializers.IntegerField(min_value=1, default=10)

    def validate_category_id(self, value):
        if not value:
            return None
        if not Category.objects.filter(id=value).exists():
            raise serializers.ValidationError("Category does not exist")
        return value

    def validate(self, attrs):
        def current(field):
            if field in attrs:
                return attrs[field]
            return getattr(self.instance, field, None)

        price = current("price")
        original_price = current("original_price")
        if price is not None and original_price is not None and original_price < price:
            raise serializers.ValidationError("Original price cannot be lower than the price")

        min_quantity = current("min_quantity")
        max_quantity = current("max_quantity")
        if min_quantity is not None and max_quantity is not None and max_quantity < min_quantity:
            raise serializers.ValidationError("Maximum quantity cannot be lower than minimum quantity")
        return attrs


class ImportCardsSerializer(serializers.Serializer):
    product_id = serializers.CharField(error_messages={"required": "Select a product", "blank": "Select a product"})
    content = serializers.CharField(
        error_messages={"required": "Card content is required", "blank": "Card content is required"},
    )
    delimiter = serializers.ChoiceField(choices=("newline", "comma"), default="newline")


class CardContentSerializer(serializers.Serializer):
    product_id = serializers.CharField(error_messages={"required": "Select a product", "blank": "Select a product"})
    content = serializers.CharField(
        max_length=1000,
        error_messages={
            "required": "Card content is required",
            "blank": "Card content is required",
            "max_length": "Card content must be at most 1000 characters",
        },
    )

    def validate_content(self, value):
        if "\n" in value or "\r" in value:
            raise serializers.ValidationError("Only a single card can be added here; use import for batches")
        return value


class AdminRemarkSerializer(serializers.Serializer):
    admin_remark = serializers.CharField(
        max_length=500, allow_blank=True, allow_null=True,
        error_messages={"max_length": "Remark must be at most 500 characters"},
    )


class SystemSettingsSerializer(serializers.Serializer):
    site_name = serializers.CharField(
        max_length=50,
        error_messages={
            "required": "Site name is required",
            "blank": "Site name is required",
            "max_length": "Site name must be at most 50 characters",
        },
    )
    site_description = serializers.CharField(
        max_length=200, allow_blank=True, default="",
        error_messages={"max_length": "Site description must be at most 200 characters"},
    )
    site_icon = serializers.ChoiceField(
        choices=SITE_ICON_OPTIONS, default="Store",
        error_messages={"invalid_choice": "Unknown site icon"},
    )
    order_expire_minutes = serializers.IntegerField(
        min_value=1,
        max_value=1440,
        error_messages={
            "required": "Order expiry is required",
            "invalid": "Order expiry must be a whole number",
            "min_value": "Order expiry must be at least 1 minute",
            "max_value": "Order expiry must be at most 1440 minutes",
        },
    )


class QueryOrderSerializer(serializers.Serializer):
    order_no = serializers.CharField(error_messages={
        "required": "Order number is required",
        "blank": "Order number is required",
        "null": "Order number is required",
    })
    password = serializers.CharField(
        trim_whitespace=False,
        error_messages={
            "required": "Query password is required",
            "blank": "Query password is required",
            "null": "Query password is required",
        },
    )
