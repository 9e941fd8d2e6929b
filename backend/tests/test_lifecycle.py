from checkin.models.session import EventConfig, GeoPoint, Member, PollConfig, SessionState
from checkin.services.eligibility import EligibilityEngine
from checkin.services.lifecycle import SessionService


def test_start_event_clears_previous_attendance(
    engine: EligibilityEngine, service: SessionService, state: SessionState, active_event: EventConfig
) -> None:
    assert engine.evaluate_check_in("5551234567", "device-a", 10).allowed
    assert engine.evaluate_check_in("5559876543", "device-b", 10).allowed

    service.start_event(EventConfig(name="Second run", radius=100))

    assert state.attendees == []
    assert state.used_fingerprints == set()
    assert state.used_identities == set()
    assert state.event.active
    assert state.event.radius == 100
    # The same device and person may check in again
    assert engine.evaluate_check_in("5551234567", "device-a", 10).allowed


def test_start_event_on_fresh_state(service: SessionService, state: SessionState) -> None:
    event = service.start_event(EventConfig(name="First"))

    assert event.active
    assert state.attendees == []
    assert state.used_fingerprints == set()


def test_end_event_keeps_ledger(
    engine: EligibilityEngine, service: SessionService, state: SessionState, active_event: EventConfig
) -> None:
    assert engine.evaluate_check_in("5551234567", "device-a", 10).allowed

    service.end_event()

    assert not state.event.active
    assert [a.fingerprint for a in service.list_attendees()] == ["device-a"]


def test_start_event_replaces_config_wholesale(service: SessionService, state: SessionState) -> None:
    service.start_event(
        EventConfig(name="A", location=GeoPoint(lat=1, lng=2), access_code="x", require_location=False)
    )
    service.start_event(EventConfig(name="B"))

    assert state.event.name == "B"
    assert state.event.location == GeoPoint()
    assert state.event.access_code == ""
    assert state.event.require_location


def test_start_poll_clears_votes(
    engine: EligibilityEngine, service: SessionService, state: SessionState, active_poll: PollConfig
) -> None:
    assert engine.evaluate_check_in("5551234567", "device-a", 10).allowed
    assert engine.evaluate_vote("device-a", "Pizza", 10).allowed

    service.start_poll(PollConfig(question="Again?", options=["Yes", "No"]))

    assert state.votes == {}
    assert state.poll.active
    assert engine.evaluate_vote("device-a", "Yes", 10).allowed


def test_end_poll_keeps_votes(
    engine: EligibilityEngine, service: SessionService, state: SessionState, active_poll: PollConfig
) -> None:
    assert engine.evaluate_check_in("5551234567", "device-a", 10).allowed
    assert engine.evaluate_vote("device-a", "Pizza", 10).allowed

    service.end_poll()

    assert not state.poll.active
    assert service.tally_votes()["total_votes"] == 1


def test_two_devices_vote_for_different_options(
    engine: EligibilityEngine, service: SessionService, state: SessionState, active_poll: PollConfig
) -> None:
    assert state.votes == {}
    assert engine.evaluate_check_in("5551234567", "device-a", 10).allowed
    assert engine.evaluate_check_in("5559876543", "device-b", 10).allowed

    assert engine.evaluate_vote("device-a", "Pizza", 10).allowed
    assert engine.evaluate_vote("device-b", "Tacos", 10).allowed

    assert service.tally_votes() == {"results": {"Pizza": 1, "Tacos": 1}, "total_votes": 2}


def test_tally_ignores_unknown_options_but_counts_them(
    engine: EligibilityEngine, service: SessionService, active_poll: PollConfig
) -> None:
    for i, phone in enumerate(["5551234567", "5559876543", "5550001111"]):
        assert engine.evaluate_check_in(phone, f"device-{i}", 10).allowed
    engine.evaluate_vote("device-0", "Pizza", 10)
    engine.evaluate_vote("device-1", "Pizza", 10)
    engine.evaluate_vote("device-2", "Sushi", 10)

    tally = service.tally_votes()

    assert tally["results"] == {"Pizza": 2, "Tacos": 0}
    assert tally["total_votes"] == 3
    assert all(count <= tally["total_votes"] for count in tally["results"].values())
    assert sum(tally["results"].values()) <= tally["total_votes"]


def test_tally_without_poll(service: SessionService) -> None:
    assert service.tally_votes() == {"results": {}, "total_votes": 0}


def test_load_roster_replaces_previous(service: SessionService, roster: list) -> None:
    service.load_roster([Member(identity_key="5552223333", name="Katherine Johnson")])

    assert [m.name for m in service.list_members()] == ["Katherine Johnson"]


def test_status_snapshot(
    engine: EligibilityEngine, service: SessionService, active_poll: PollConfig
) -> None:
    assert engine.evaluate_check_in("5551234567", "device-a", 10).allowed

    status = service.get_status()

    assert status["event_name"] == "Monthly Meetup"
    assert status["is_event_active"]
    assert status["access_code"] == "1234"
    assert status["attendee_count"] == 1
    assert status["poll_options"] == ["Pizza", "Tacos"]
    assert status["is_poll_active"]
    assert status["roster_size"] == 3
