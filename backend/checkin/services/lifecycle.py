import logging
from typing import Dict, List

from checkin.models.session import Attendee, EventConfig, Member, PollConfig, SessionState

logger = logging.getLogger(__name__)


class SessionService:
    """Organizer-side operations: event and poll lifecycle, roster, reads."""

    def __init__(self, state: SessionState):
        self.state = state

    def start_event(self, config: EventConfig) -> EventConfig:
        """Replace the event and wipe the attendance ledger"""
        self.state.reset_event(config)
        event = self.state.event
        logger.info(f"🚀 Event started: {event.name!r} radius={event.radius}m "
                    f"require_location={event.require_location}")
        return event

    def end_event(self):
        """Close check-in; the ledger stays available for reporting"""
        with self.state.lock:
            self.state.event.active = False
        logger.info(f"🏁 Event ended: {self.state.event.name!r} "
                    f"with {len(self.state.attendees)} attendees")

    def start_poll(self, config: PollConfig) -> PollConfig:
        self.state.reset_poll(config)
        poll = self.state.poll
        logger.info(f"🗳️ Poll started: {poll.question!r} ({len(poll.options)} options)")
        return poll

    def end_poll(self):
        with self.state.lock:
            self.state.poll.active = False
        logger.info(f"🏁 Poll ended with {len(self.state.votes)} votes")

    def load_roster(self, members: List[Member]) -> int:
        self.state.replace_roster(members)
        count = len(self.state.roster)
        logger.info(f"📋 Roster loaded: {count} members")
        return count

    def list_members(self) -> List[Member]:
        with self.state.lock:
            return list(self.state.roster.values())

    def list_attendees(self) -> List[Attendee]:
        with self.state.lock:
            return list(self.state.attendees)

    def tally_votes(self) -> Dict:
        """
        Count votes per configured option.

        Votes for options that are not configured are left out of the
        buckets but still count towards total_votes.
        """
        with self.state.lock:
            results = {option: 0 for option in self.state.poll.options}
            for choice in self.state.votes.values():
                if choice in results:
                    results[choice] += 1
            return {"results": results, "total_votes": len(self.state.votes)}

    def get_status(self) -> Dict:
        with self.state.lock:
            event = self.state.event
            poll = self.state.poll
            return {
                "event_name": event.name,
                "event_location": event.location.model_dump(),
                "radius": event.radius,
                "require_location": event.require_location,
                "is_event_active": event.active,
                "access_code": event.access_code,
                "attendee_count": len(self.state.attendees),
                "poll_question": poll.question,
                "poll_options": list(poll.options),
                "is_poll_active": poll.active,
                "roster_size": len(self.state.roster),
            }
