"""Seat inventory ledger.

``seats_available`` is a cache of ``capacity - occupancy``. Every seat
mutation is followed, inside the same transaction, by a recompute from the
underlying rows so the cached value never drifts after commit.
"""

import logging

from enrollments.domain.errors import SectionNotFoundError
from enrollments.stores.interfaces import EnrollmentStore

logger = logging.getLogger(__name__)


class SeatLedger:
    """Recomputes and persists authoritative seat counts."""

    def __init__(self, store: EnrollmentStore) -> None:
        self._store = store

    def recompute(self, section_id: int) -> int:
        """Derive seats_available for a section, write it back and return it.

        Raises:
            SectionNotFoundError: If the section does not exist.
        """
        section = self._store.get_section(section_id)
        if section is None:
            raise SectionNotFoundError(section_id)

        occupancy = self._store.count_occupancy(section_id)
        seats = section.capacity - occupancy.total
        if seats < 0:
            logger.warning(
                "Section %s overbooked: capacity=%s occupied=%s",
                section_id,
                section.capacity,
                occupancy.total,
            )
            seats = 0

        if seats != section.seats_available:
            self._store.write_seats_available(section_id, seats)
        logger.debug(
            "Section %s recomputed: %s/%s (principal=%s promotional=%s enrolled=%s awaiting=%s)",
            section_id,
            seats,
            section.capacity,
            occupancy.pending_principal,
            occupancy.pending_promotional,
            occupancy.active_enrollments,
            occupancy.awaiting_enrollment,
        )
        return seats

    def recompute_many(self, section_ids) -> dict[int, int]:
        """Recompute each distinct section once, in id order."""
        return {section_id: self.recompute(section_id) for section_id in sorted(set(section_ids))}

    def reconcile_all(self) -> dict[int, int]:
        """Repair every section's cached count, each in its own transaction."""
        results = {}
        for section_id in self._store.list_section_ids():
            with self._store.atomic():
                results[section_id] = self.recompute(section_id)
        return results
