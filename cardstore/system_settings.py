"""
Site-wide settings stored as key/value rows in the ``settings`` table.

Values missing from the table (or stored empty, for the site name and
description) fall back to the environment defaults in ``backend.settings``, and
so does an expiry that is not a number. Any other stored value that no longer
validates makes the whole set fall back, so the storefront never renders
half-configured.
"""
# Standard Library
import logging

# Django
from django.conf import settings
from django.db import DatabaseError, transaction

# Django REST Framework
from rest_framework.views import APIView

# Local Imports
from .cache import revalidate_all_store_cache
from .models import Setting
from .permissions import FrontendOnlyPermission, admin_action
from .serializers import SITE_ICON_OPTIONS, SystemSettingsSerializer
from .utilities import _now, _parse_payload, envelope_response, failure, first_error, success

logger = logging.getLogger(__name__)

SETTING_KEYS = {
    "site_name": "site.name",
    "site_description": "site.description",
    "site_icon": "site.icon",
    "order_expire_minutes": "order.expire_minutes",
}

# Empty stored values read as unset
OPTIONAL_TEXT_FIELDS = ("site_name", "site_description")

SETTING_DESCRIPTIONS = {
    "site.name": "Store name shown in the header and page titles",
    "site.description": "Short store description",
    "site.icon": "Header icon name",
    "order.expire_minutes": "Minutes an unpaid order keeps its cards locked",
}


def default_system_settings():
    return {
        "site_name": settings.SITE_NAME,
        "site_description": settings.SITE_DESCRIPTION,
        "site_icon": "Store",
        "order_expire_minutes": settings.ORDER_EXPIRE_MINUTES,
    }


def get_system_settings():
    defaults = default_system_settings()
    try:
        stored = dict(Setting.objects.filter(key__in=SETTING_KEYS.values()).values_list("key", "value"))
    except DatabaseError:
        logger.exception("Reading system settings failed; using defaults")
        return defaults

    candidate = {}
    for field, key in SETTING_KEYS.items():
        value = stored.get(key)
        if field in OPTIONAL_TEXT_FIELDS:
            candidate[field] = value or defaults[field]
        else:
            candidate[field] = defaults[field] if value is None else value

    # An unreadable expiry falls back on its own; out-of-range values still fail validation below
    try:
        candidate["order_expire_minutes"] = int(str(candidate["order_expire_minutes"]).strip())
    except ValueError:
        logger.warning("Stored order expiry %r is not a number; using default", candidate["order_expire_minutes"])
        candidate["order_expire_minutes"] = defaults["order_expire_minutes"]

    serializer = SystemSettingsSerializer(data=candidate)
    if not serializer.is_valid():
        logger.warning("Stored system settings are invalid (%s); using defaults", first_error(serializer.errors))
        return defaults
    return dict(serializer.validated_data)


@admin_action
def get_admin_system_settings(user):
    return success("ok", settings=get_system_settings(), icon_options=list(SITE_ICON_OPTIONS))


@admin_action
def update_system_settings(user, data):
    serializer = SystemSettingsSerializer(data=data)
    if not serializer.is_valid():
        return failure(first_error(serializer.errors))

    values = dict(serializer.validated_data)
    now = _now()
    try:
        with transaction.atomic():
            for field, key in SETTING_KEYS.items():
                Setting.objects.update_or_create(
                    key=key,
                    defaults={
                        "value": str(values[field]),
                        "description": SETTING_DESCRIPTIONS[key],
                        "updated_at": now,
                    },
                )
    except DatabaseError:
        logger.exception("UpdateSystemSettings failed")
        return failure("Failed to save settings")

    revalidate_all_store_cache()
    logger.info("System settings updated by %s", user.get_username())
    return success("Settings saved", settings=values)


# -----------------------
# API Views
# -----------------------

class AdminSystemSettingsAPIView(APIView):
    permission_classes = [FrontendOnlyPermission]

    def get(self, request):
        return envelope_response(get_admin_system_settings(request.user))


class UpdateSystemSettingsAPIView(APIView):
    permission_classes = [FrontendOnlyPermission]

    def post(self, request):
        return envelope_response(update_system_settings(request.user, _parse_payload(request)))
