from fastapi import Request

from checkin.models.session import SessionState
from checkin.services.eligibility import EligibilityEngine
from checkin.services.lifecycle import SessionService

def get_state(request: Request) -> SessionState:
    """Dependency for the process-wide session state"""
    return request.app.state.session

def get_engine(request: Request) -> EligibilityEngine:
    return request.app.state.engine

def get_service(request: Request) -> SessionService:
    return request.app.state.service
