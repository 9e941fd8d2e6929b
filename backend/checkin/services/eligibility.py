"""
Check-in and vote eligibility.

Both evaluations run a fixed sequence of checks and stop at the first one
that fails. Nothing in the session is mutated unless every check passes,
and the whole evaluation runs under the session lock so the checks and the
mutation see the same state.
"""

import logging
import math
from datetime import datetime, timezone
from enum import StrEnum
from typing import Optional

from pydantic import BaseModel

from checkin.core.config import settings
from checkin.models.session import Attendee, GeoPoint, SessionState
from checkin.services.geo import resolve_distance
from checkin.utils.identity import normalize_identity

logger = logging.getLogger(__name__)


class Category(StrEnum):
    INPUT_VALIDATION = "input_validation"
    STATE_CONFLICT = "state_conflict"
    POLICY_VIOLATION = "policy_violation"
    LIFECYCLE_VIOLATION = "lifecycle_violation"


class Reason(StrEnum):
    """Why a check-in or vote was rejected."""

    NO_ACTIVE_EVENT = "NO_ACTIVE_EVENT"
    NO_ACTIVE_POLL = "NO_ACTIVE_POLL"
    MISSING_FIELDS = "MISSING_FIELDS"
    INVALID_IDENTITY_FORMAT = "INVALID_IDENTITY_FORMAT"
    INVALID_DISTANCE = "INVALID_DISTANCE"
    LOCATION_REQUIRED = "LOCATION_REQUIRED"
    INVALID_OPTION = "INVALID_OPTION"
    NO_ROSTER_LOADED = "NO_ROSTER_LOADED"
    NOT_ON_ROSTER = "NOT_ON_ROSTER"
    OUT_OF_RANGE = "OUT_OF_RANGE"
    DEVICE_ALREADY_CHECKED_IN = "DEVICE_ALREADY_CHECKED_IN"
    ALREADY_CHECKED_IN = "ALREADY_CHECKED_IN"
    NOT_CHECKED_IN = "NOT_CHECKED_IN"
    ALREADY_VOTED = "ALREADY_VOTED"


REASON_CATEGORIES = {
    Reason.NO_ACTIVE_EVENT: Category.LIFECYCLE_VIOLATION,
    Reason.NO_ACTIVE_POLL: Category.LIFECYCLE_VIOLATION,
    Reason.MISSING_FIELDS: Category.INPUT_VALIDATION,
    Reason.INVALID_IDENTITY_FORMAT: Category.INPUT_VALIDATION,
    Reason.INVALID_DISTANCE: Category.INPUT_VALIDATION,
    Reason.LOCATION_REQUIRED: Category.INPUT_VALIDATION,
    Reason.INVALID_OPTION: Category.INPUT_VALIDATION,
    Reason.NO_ROSTER_LOADED: Category.POLICY_VIOLATION,
    Reason.NOT_ON_ROSTER: Category.POLICY_VIOLATION,
    Reason.OUT_OF_RANGE: Category.POLICY_VIOLATION,
    Reason.DEVICE_ALREADY_CHECKED_IN: Category.STATE_CONFLICT,
    Reason.ALREADY_CHECKED_IN: Category.STATE_CONFLICT,
    Reason.NOT_CHECKED_IN: Category.STATE_CONFLICT,
    Reason.ALREADY_VOTED: Category.STATE_CONFLICT,
}

# Everything else maps to 400
FORBIDDEN_REASONS = {Reason.NO_ROSTER_LOADED, Reason.NOT_ON_ROSTER, Reason.NOT_CHECKED_IN}

MESSAGES = {
    Reason.NO_ACTIVE_EVENT: "No active event",
    Reason.NO_ACTIVE_POLL: "No active poll",
    Reason.MISSING_FIELDS: "Missing required fields",
    Reason.INVALID_DISTANCE: "Distance must be a non-negative number of meters",
    Reason.LOCATION_REQUIRED: "Location is required for this event",
    Reason.INVALID_OPTION: "That is not one of the poll options",
    Reason.NO_ROSTER_LOADED: "No roster has been loaded for this event",
    Reason.NOT_ON_ROSTER: "You are not on the approved member roster",
    Reason.DEVICE_ALREADY_CHECKED_IN: "This device has already checked in",
    Reason.ALREADY_CHECKED_IN: "You have already checked in",
    Reason.NOT_CHECKED_IN: "You must check in before voting",
    Reason.ALREADY_VOTED: "You have already voted",
}


class Decision(BaseModel):
    """Outcome of an evaluation: either allowed, or rejected with a reason."""

    allowed: bool
    message: str
    reason: Optional[Reason] = None
    attendee: Optional[Attendee] = None

    @property
    def category(self) -> Optional[Category]:
        return REASON_CATEGORIES[self.reason] if self.reason else None

    @property
    def status_code(self) -> int:
        if self.allowed:
            return 200
        return 403 if self.reason in FORBIDDEN_REASONS else 400


def reject(reason: Reason, message: Optional[str] = None) -> Decision:
    return Decision(allowed=False, reason=reason, message=message or MESSAGES[reason])


def round_meters(distance: float) -> int:
    """Round half up, so 12.5m reports as 13m"""
    return int(math.floor(distance + 0.5))


def _format_meters(value: float) -> str:
    return f"{value:g}"


def _invalid_distance(distance: Optional[float]) -> bool:
    if distance is None:
        return False
    return isinstance(distance, bool) or not math.isfinite(distance) or distance < 0


class EligibilityEngine:
    """
    Decides whether a check-in or a vote is accepted.

    `identity_mode` selects how raw identities are keyed ("phone" or "name")
    and defaults to the IDENTITY_MODE setting.
    """

    def __init__(
        self,
        state: SessionState,
        identity_mode: Optional[str] = None,
        validate_vote_options: Optional[bool] = None,
    ):
        self.state = state
        self.identity_mode = identity_mode or settings.IDENTITY_MODE
        self.validate_vote_options = (
            settings.VALIDATE_VOTE_OPTIONS if validate_vote_options is None else validate_vote_options
        )

    def evaluate_check_in(
        self,
        identity_raw: Optional[str],
        fingerprint: Optional[str],
        distance_meters: Optional[float] = None,
        location: Optional[GeoPoint] = None,
    ) -> Decision:
        with self.state.lock:
            distance = resolve_distance(distance_meters, location, self.state.event.location)
            decision = self._check_in(identity_raw, fingerprint, distance)

        if decision.allowed:
            logger.info(f"✅ Check-in accepted: {decision.attendee.name} "
                        f"(distance={decision.attendee.distance}m)")
        else:
            logger.info(f"❌ Check-in rejected: {decision.reason}")
        return decision

    def evaluate_vote(
        self,
        fingerprint: Optional[str],
        option: Optional[str],
        distance_meters: Optional[float] = None,
        location: Optional[GeoPoint] = None,
    ) -> Decision:
        with self.state.lock:
            distance = resolve_distance(distance_meters, location, self.state.event.location)
            decision = self._vote(fingerprint, option, distance)

        if decision.allowed:
            logger.info("✅ Vote recorded")
        else:
            logger.info(f"❌ Vote rejected: {decision.reason}")
        return decision

    def _check_in(self, identity_raw, fingerprint, distance) -> Decision:
        state = self.state
        event = state.event

        # 1. Lifecycle
        if not event.active:
            return reject(Reason.NO_ACTIVE_EVENT)

        # 2. Input shape
        if not fingerprint or not fingerprint.strip():
            return reject(Reason.MISSING_FIELDS)
        identity_key = normalize_identity(identity_raw, self.identity_mode)
        if identity_key is None:
            return reject(Reason.INVALID_IDENTITY_FORMAT, self._identity_format_message())
        if _invalid_distance(distance):
            return reject(Reason.INVALID_DISTANCE)

        # 3. Roster (fails closed when nothing is loaded)
        if not state.roster:
            return reject(Reason.NO_ROSTER_LOADED)
        member = state.roster.get(identity_key)
        if member is None:
            return reject(Reason.NOT_ON_ROSTER)

        # 4-5. One check-in per device and per person
        if fingerprint in state.used_fingerprints:
            return reject(Reason.DEVICE_ALREADY_CHECKED_IN)
        if identity_key in state.used_identities:
            return reject(Reason.ALREADY_CHECKED_IN)

        # 6. Geofence
        if event.require_location:
            if distance is None:
                return reject(Reason.LOCATION_REQUIRED)
            if distance > event.radius:
                return reject(
                    Reason.OUT_OF_RANGE,
                    f"You are {round_meters(distance)}m away. "
                    f"Must be within {_format_meters(event.radius)}m",
                )

        attendee = Attendee(
            identity_key=identity_key,
            name=member.name,
            checked_in_at=datetime.now(timezone.utc),
            distance=round_meters(distance) if distance is not None else None,
            fingerprint=fingerprint,
        )
        state.record_attendee(attendee)
        return Decision(allowed=True, message="Check-in successful", attendee=attendee)

    def _vote(self, fingerprint, option, distance) -> Decision:
        state = self.state
        poll = state.poll
        event = state.event

        if not poll.active:
            return reject(Reason.NO_ACTIVE_POLL)

        if not fingerprint or not fingerprint.strip() or option is None:
            return reject(Reason.MISSING_FIELDS)
        if _invalid_distance(distance):
            return reject(Reason.INVALID_DISTANCE)

        if not state.is_checked_in(fingerprint):
            return reject(Reason.NOT_CHECKED_IN)
        if fingerprint in state.votes:
            return reject(Reason.ALREADY_VOTED)

        if self.validate_vote_options and option not in poll.options:
            return reject(Reason.INVALID_OPTION)

        if event.require_location:
            if distance is None:
                return reject(Reason.LOCATION_REQUIRED)
            if distance > event.radius:
                return reject(
                    Reason.OUT_OF_RANGE,
                    f"You must be within {_format_meters(event.radius)}m to vote",
                )

        state.votes[fingerprint] = option
        return Decision(allowed=True, message="Vote recorded")

    def _identity_format_message(self) -> str:
        if self.identity_mode == "phone":
            return "Please enter a valid 10-digit phone number"
        return "Please enter your name"
