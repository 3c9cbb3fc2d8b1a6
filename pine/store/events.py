"""
Store Events — completion notices delivered back to the UI.

The interface layer dispatches ``persist`` / ``load`` as background tasks and
receives a single ``StoreEvent`` when each finishes. A store failure becomes
an ``invalid`` event carrying the error message instead of an exception,
because the event is how the outcome reaches the user.
"""
import logging
from enum import Enum
from typing import Optional
from dataclasses import dataclass
from collections.abc import Iterable

from .exceptions import StoreError
from .records import CredentialRecord
from .storage import Storage

logger = logging.getLogger("pine.store")


class StoreAction(str, Enum):
    """User action that triggered a save (``None`` means a new credential)."""
    UPDATE = "update"
    DELETE = "delete"


class StoreOutcome(str, Enum):
    FETCHED = "fetched"
    ADDED = "added"
    UPDATED = "updated"
    DELETED = "deleted"
    INVALID = "invalid"


_NOTICES = {
    StoreOutcome.ADDED: "New credential added",
    StoreOutcome.UPDATED: "Credential updated",
    StoreOutcome.DELETED: "Credential deleted",
    StoreOutcome.INVALID: "Some error occurred",
}

_ACTION_OUTCOMES = {
    None: StoreOutcome.ADDED,
    StoreAction.UPDATE: StoreOutcome.UPDATED,
    StoreAction.DELETE: StoreOutcome.DELETED,
}


@dataclass(frozen=True)
class StoreEvent:
    outcome: StoreOutcome
    records: tuple[CredentialRecord, ...] = ()
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.outcome is not StoreOutcome.INVALID

    @property
    def notice(self) -> Optional[str]:
        """Text to show the user, if any. Fetches are silent."""
        if self.error:
            return self.error
        return _NOTICES.get(self.outcome)


async def persist(
    storage: Storage,
    records: Iterable[CredentialRecord],
    action: Optional[StoreAction] = None,
) -> StoreEvent:
    """Save the full record list and report the outcome as an event.

    Args:
        storage: Shared store handle.
        records: Complete current record list.
        action: What the user did; ``None`` for a newly added credential.

    Returns:
        StoreEvent with the outcome matching ``action``, or ``invalid``.
    """
    try:
        await storage.save(records)
    except StoreError as err:
        logger.error("Store save failed: %s", err.message)
        return StoreEvent(StoreOutcome.INVALID, error=err.message)
    return StoreEvent(_ACTION_OUTCOMES[action])


async def load(storage: Storage) -> StoreEvent:
    """Fetch every record and report them as a ``fetched`` event."""
    try:
        records = await storage.fetch()
    except StoreError as err:
        logger.error("Store fetch failed: %s", err.message)
        return StoreEvent(StoreOutcome.INVALID, error=err.message)
    return StoreEvent(StoreOutcome.FETCHED, records=tuple(records))
