"""
Store page cache.

Store-facing payloads are cached under their page path. Admin mutations call
``revalidate_path`` / ``revalidate_category_cache`` / ``revalidate_all_store_cache``
so the next store request rebuilds the payload from the database.
"""
import logging

from django.conf import settings
from django.core.cache import cache

logger = logging.getLogger(__name__)

GENERATION_KEY = "store-page:generation"


def _generation():
    generation = cache.get(GENERATION_KEY)
    if generation is None:
        generation = 1
        cache.set(GENERATION_KEY, generation, None)
    return generation


def page_cache_key(path):
    return f"store-page:{_generation()}:{path}"


def cached_page(path, builder):
    """Return the cached payload for ``path``, building and storing it on a miss."""
    key = page_cache_key(path)
    payload = cache.get(key)
    if payload is None:
        payload = builder()
        cache.set(key, payload, getattr(settings, "STORE_CACHE_TIMEOUT", 3600))
    return payload


def revalidate_path(path):
    cache.delete(page_cache_key(path))
    logger.debug("Revalidated %s", path)


def revalidate_paths(*paths):
    for path in paths:
        revalidate_path(path)


def revalidate_category_cache(slug=None):
    paths = ["/", "/categories", "/admin/categories", "/admin/products"]
    if slug:
        paths.append(f"/category/{slug}")
    revalidate_paths(*paths)


def revalidate_all_store_cache():
    """Drop every cached store page at once by moving to a new key generation."""
    generation = _generation()
    cache.set(GENERATION_KEY, generation + 1, None)
    logger.info("Store cache generation bumped to %s", generation + 1)
