# Standard Library
import json

# Django
from django.utils import timezone

# Django REST Framework
from rest_framework import status
from rest_framework.response import Response

MAX_PAGE_SIZE = 200
DEFAULT_PAGE_SIZE = 20


def success(message="ok", **extra):
    return {"success": True, "message": message, **extra}


def failure(message, **extra):
    return {"success": False, "message": message, **extra}


def envelope_response(result, http_status=None):
    """Wrap an action result; failures of any kind go out as 400 with the message in the body."""
    if http_status is None:
        http_status = status.HTTP_200_OK if result.get("success") else status.HTTP_400_BAD_REQUEST
    return Response(result, status=http_status)


def first_error(errors, default="Invalid parameters"):
    """Pick the first human-readable message out of a DRF ``serializer.errors`` structure."""
    if isinstance(errors, dict):
        for value in errors.values():
            message = first_error(value, default=None)
            if message:
                return message
    elif isinstance(errors, (list, tuple)):
        for value in errors:
            message = first_error(value, default=None)
            if message:
                return message
    elif errors:
        return str(errors)
    return default


def _parse_payload(request):
    """Consistent, tolerant request payload parsing."""
    if isinstance(request.data, dict):
        return request.data
    try:
        body = request.body.decode("utf-8") if request.body else "{}"
        return json.loads(body or "{}")
    except Exception:
        return {}


def _now():
    return timezone.now()


def _to_int(val, default):
    try:
        return int(float(val))
    except (TypeError, ValueError):
        return default


def _as_list(val):
    """Coerce incoming field to list[str] safely."""
    if val is None:
        return []
    if isinstance(val, (list, tuple)):
        return [str(x) for x in val if str(x).strip()]
    if isinstance(val, str):
        return [v.strip() for v in val.split(",") if v.strip()]
    return []


def clamp_pagination(page, page_size, default_size=DEFAULT_PAGE_SIZE):
    page = max(1, _to_int(page, 1) or 1)
    page_size = _to_int(page_size, default_size) or default_size
    page_size = min(MAX_PAGE_SIZE, max(1, page_size))
    return page, page_size, (page - 1) * page_size


def to_iso(value):
    if not value:
        return None
    return value.isoformat()


def money(value):
    if value is None:
        return None
    return str(value)
