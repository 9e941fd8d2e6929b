"""
In-memory session state.

One SessionState lives for the lifetime of the process (created in the app
lifespan) and holds the roster, the current event and its attendance ledger,
and the current poll with its votes. Nothing is persisted.
"""

import threading
from datetime import datetime
from typing import Dict, List, Optional, Set

from pydantic import BaseModel, ConfigDict, Field


class GeoPoint(BaseModel):
    lat: Optional[float] = None
    lng: Optional[float] = None

    def is_complete(self) -> bool:
        return self.lat is not None and self.lng is not None


class Member(BaseModel):
    """Approved roster entry, keyed by normalized phone digits or name"""
    model_config = ConfigDict(frozen=True)

    identity_key: str
    name: str
    email: Optional[str] = None
    member_id: Optional[str] = None


class EventConfig(BaseModel):
    name: str = ""
    location: GeoPoint = Field(default_factory=GeoPoint)
    radius: float = 50.0
    access_code: str = ""
    require_location: bool = True
    active: bool = False


class Attendee(BaseModel):
    """Ledger entry for one successful check-in"""
    model_config = ConfigDict(frozen=True)

    identity_key: str
    name: str
    checked_in_at: datetime
    distance: Optional[int] = None
    fingerprint: str


class PollConfig(BaseModel):
    question: str = ""
    options: List[str] = Field(default_factory=list)
    active: bool = False


class SessionState:
    """
    Holder for everything a single running event needs.

    All mutations go through `lock`; callers that read several fields at
    once (status, tallies, exports) take it too so they see a consistent
    snapshot.
    """

    def __init__(self):
        self.lock = threading.RLock()
        self.roster: Dict[str, Member] = {}
        self.event = EventConfig()
        self.attendees: List[Attendee] = []
        self.used_fingerprints: Set[str] = set()
        self.used_identities: Set[str] = set()
        self.poll = PollConfig()
        self.votes: Dict[str, str] = {}

    def replace_roster(self, members: List[Member]):
        with self.lock:
            self.roster = {m.identity_key: m for m in members}

    def reset_event(self, config: EventConfig):
        with self.lock:
            self.event = config.model_copy(update={"active": True})
            self.attendees = []
            self.used_fingerprints = set()
            self.used_identities = set()

    def reset_poll(self, config: PollConfig):
        with self.lock:
            self.poll = config.model_copy(update={"active": True})
            self.votes = {}

    def record_attendee(self, attendee: Attendee):
        with self.lock:
            self.attendees.append(attendee)
            self.used_fingerprints.add(attendee.fingerprint)
            self.used_identities.add(attendee.identity_key)

    def is_checked_in(self, fingerprint: str) -> bool:
        return fingerprint in self.used_fingerprints
