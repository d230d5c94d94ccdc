"""Overlap checking for an owner's calendar."""

import logging
from collections.abc import Iterable

from events.domain import Event, EventId, TimeInterval, UserId
from events.domain.errors import OverlapConflictError
from events.stores.interfaces import EventStore

logger = logging.getLogger(__name__)


class OverlapChecker:
    """Finds events of one owner whose interval intersects a candidate interval.

    COMPLETED events never conflict; the overlap-free invariant only covers
    events that are still live.
    """

    def __init__(self, store: EventStore) -> None:
        self._store = store

    def find_conflict(
        self,
        owner_id: UserId,
        interval: TimeInterval,
        exclude: Iterable[EventId] = (),
    ) -> Event | None:
        return self._store.find_overlapping_event(owner_id, interval, tuple(exclude))

    def ensure_free(
        self,
        owner_id: UserId,
        interval: TimeInterval,
        exclude: Iterable[EventId] = (),
        prefix: str = "",
    ) -> None:
        """Raise OverlapConflictError naming the first conflicting event, if any."""
        conflict = self.find_conflict(owner_id, interval, exclude)
        if conflict is None:
            return
        logger.info(f"Interval {interval} for owner {owner_id} overlaps event {conflict.id}")
        raise OverlapConflictError(conflict.title, str(conflict.interval), prefix)
