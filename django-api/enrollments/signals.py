"""Django signals for post-commit collaborators and cache invalidation.

The custom signals below are sent only after the transaction that caused
them commits. Receivers are called with ``send_robust``; a failing receiver
is logged and never affects the operation that triggered it.
"""

import logging

from django.core.cache import cache
from django.db.models.signals import post_delete, post_save
from django.dispatch import Signal, receiver

from enrollments.conf import app_settings
from enrollments.models import CourseSection, Promotion

logger = logging.getLogger(__name__)

# request: EnrollmentRequest, section_ids: tuple[int, ...]
request_created = Signal()
# request: EnrollmentRequest, previous_state: RequestState
request_decided = Signal()
# entity, operation, record_id, actor, before, after
audit_recorded = Signal()
# section_ids: tuple[int, ...], reason: str
seats_changed = Signal()


def invalidate_available_sections() -> None:
    cache.delete(app_settings.AVAILABLE_SECTIONS_CACHE_KEY)


@receiver(seats_changed)
def invalidate_on_seats_changed(sender, section_ids=(), reason="", **kwargs):
    """Invalidate the available sections cache after committed seat changes."""
    invalidate_available_sections()
    logger.debug("Available sections cache invalidated (%s: %s)", reason, section_ids)


@receiver([post_save, post_delete], sender=CourseSection)
def invalidate_section_cache(sender, instance, **kwargs):
    """Invalidate caches when a section is saved or deleted."""
    invalidate_available_sections()


@receiver([post_save, post_delete], sender=Promotion)
def invalidate_promotion_cache(sender, instance, **kwargs):
    """Invalidate caches when a promotion is saved or deleted."""
    invalidate_available_sections()
