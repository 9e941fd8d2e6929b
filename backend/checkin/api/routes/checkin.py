from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.responses import JSONResponse
import logging

from checkin.api.deps import get_engine, get_service
from checkin.schemas import (
    ActionResponse,
    CheckInRequest,
    CheckInResponse,
    EventStatusResponse,
    VoteRequest,
)
from checkin.services.eligibility import Decision, EligibilityEngine
from checkin.services.lifecycle import SessionService

router = APIRouter()
logger = logging.getLogger(__name__)

def decision_response(decision: Decision, model=ActionResponse) -> JSONResponse:
    """Map an engine decision onto the HTTP response the browser client expects"""
    fields = {
        "success": decision.allowed,
        "message": decision.message,
        "reason": decision.reason.value if decision.reason else None,
    }
    if decision.attendee is not None:
        fields["attendee"] = decision.attendee
    payload = model(**fields)
    return JSONResponse(status_code=decision.status_code, content=payload.model_dump(mode="json"))

@router.get("/event-status", response_model=EventStatusResponse)
def event_status(
    service: SessionService = Depends(get_service),
    engine: EligibilityEngine = Depends(get_engine)
):
    return {**service.get_status(), "identity_mode": engine.identity_mode}

@router.post("/checkin", response_model=CheckInResponse)
def check_in(
    body: CheckInRequest,
    engine: EligibilityEngine = Depends(get_engine)
):
    """
    Check an attendee in.
    Distance is taken from the request, or computed from `location`
    against the venue when only coordinates are sent.
    """
    try:
        decision = engine.evaluate_check_in(body.identity, body.fingerprint, body.distance, body.location)
        return decision_response(decision, CheckInResponse)

    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Check-in error: {str(e)}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="System error. Please try again."
        )

@router.post("/vote", response_model=ActionResponse)
def vote(
    body: VoteRequest,
    engine: EligibilityEngine = Depends(get_engine)
):
    """Record one vote per checked-in device"""
    try:
        decision = engine.evaluate_vote(body.fingerprint, body.option, body.distance, body.location)
        return decision_response(decision)

    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Vote error: {str(e)}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="System error. Please try again."
        )
