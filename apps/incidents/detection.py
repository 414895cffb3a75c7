"""
Change detection for incoming status events.

Decides whether a CanonicalEvent carries new information compared to the
persisted incident for the same (service_id, provider) key. The decision is
made on explicit field comparison plus a time window; the content fingerprint
is stored for diagnostics only.

Nothing here touches the database.
"""

from __future__ import annotations

import hashlib
from dataclasses import dataclass
from datetime import datetime, timedelta
from enum import Enum
from typing import Protocol

from apps.incidents.events import CanonicalEvent

DEFAULT_MESSAGE_WINDOW = timedelta(minutes=1)


class Classification(str, Enum):
    NEW = "new"
    CHANGED = "changed"
    DUPLICATE = "duplicate"


class IncidentState(Protocol):
    """What the detector needs from a persisted incident."""

    status: str
    status_message: str
    updated_at: datetime


@dataclass(frozen=True)
class Decision:
    classification: Classification
    reason: str

    @property
    def is_new_information(self) -> bool:
        return self.classification is not Classification.DUPLICATE


def compute_fingerprint(event: CanonicalEvent) -> str:
    """SHA-256 hex digest over ``service_id|status|message``."""
    raw = f"{event.service_id}|{event.status}|{event.message}"
    return hashlib.sha256(raw.encode("utf-8")).hexdigest()


def _same(left: str | None, right: str | None) -> bool:
    return (left or "").casefold() == (right or "").casefold()


class ChangeDetector:
    """
    Classifies an event as NEW, CHANGED or DUPLICATE.

    Rules, in order:
    - no existing record: NEW
    - status differs (case-insensitive): CHANGED
    - same status, message differs, record last updated more than
      ``message_window`` ago: CHANGED
    - same status, message differs inside the window: DUPLICATE
    - status and message unchanged: DUPLICATE
    """

    def __init__(self, message_window: timedelta = DEFAULT_MESSAGE_WINDOW):
        if message_window < timedelta(0):
            raise ValueError("message_window must not be negative")
        self.message_window = message_window

    def decide(
        self,
        event: CanonicalEvent,
        existing: IncidentState | None,
        now: datetime,
    ) -> Decision:
        if existing is None:
            return Decision(Classification.NEW, "first sighting")

        if not _same(existing.status, event.status):
            return Decision(
                Classification.CHANGED,
                f"status {existing.status} -> {event.status}",
            )

        if _same(existing.status_message, event.message):
            return Decision(Classification.DUPLICATE, "status and message unchanged")

        if existing.updated_at + self.message_window < now:
            return Decision(Classification.CHANGED, "message refreshed")

        return Decision(Classification.DUPLICATE, "message change inside window")

    def classify(
        self,
        event: CanonicalEvent,
        existing: IncidentState | None,
        now: datetime,
    ) -> Classification:
        return self.decide(event, existing, now).classification
