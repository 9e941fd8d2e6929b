from fastapi import APIRouter, Depends

from checkin.api.deps import get_state
from checkin.models.session import SessionState

router = APIRouter()

@router.get("/health")
async def health_check(state: SessionState = Depends(get_state)):
    """Health check endpoint"""
    return {
        "status": "healthy",
        "service": "geo-checkin",
        "event_active": state.event.active,
        "poll_active": state.poll.active,
    }
