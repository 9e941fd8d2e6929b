"""
Shared fixtures: a fresh in-memory session per test, an engine and service
bound to it, and an HTTP client around a freshly built app.
"""

import os

os.environ.setdefault("LOG_FILE", "")

import typing as t

import pytest
from fastapi.testclient import TestClient

from checkin.main import create_app
from checkin.models.session import EventConfig, GeoPoint, Member, PollConfig, SessionState
from checkin.services.eligibility import EligibilityEngine
from checkin.services.lifecycle import SessionService

VENUE = GeoPoint(lat=40.7128, lng=-74.0060)


@pytest.fixture
def state() -> SessionState:
    return SessionState()


@pytest.fixture
def engine(state: SessionState) -> EligibilityEngine:
    return EligibilityEngine(state, identity_mode="phone", validate_vote_options=False)


@pytest.fixture
def service(state: SessionState) -> SessionService:
    return SessionService(state)


@pytest.fixture
def roster(service: SessionService) -> list[Member]:
    members = [
        Member(identity_key="5551234567", name="Ada Lovelace", email="ada@example.com"),
        Member(identity_key="5559876543", name="Alan Turing"),
        Member(identity_key="5550001111", name="Grace Hopper"),
    ]
    service.load_roster(members)
    return members


@pytest.fixture
def active_event(service: SessionService, roster: list[Member]) -> EventConfig:
    return service.start_event(
        EventConfig(name="Monthly Meetup", location=VENUE, radius=50, access_code="1234")
    )


@pytest.fixture
def active_poll(service: SessionService, active_event: EventConfig) -> PollConfig:
    return service.start_poll(PollConfig(question="Pizza or tacos?", options=["Pizza", "Tacos"]))


@pytest.fixture
def client() -> t.Iterator[TestClient]:
    with TestClient(create_app()) as test_client:
        yield test_client
