from fastapi import APIRouter, Depends
from fastapi.responses import Response

from checkin.api.deps import get_service
from checkin.schemas import (
    ActionResponse,
    AttendeesResponse,
    StartEventRequest,
    StartPollRequest,
    VoteResultsResponse,
)
from checkin.services.lifecycle import SessionService
from checkin.services.reports import attendance_csv, attendance_xlsx

router = APIRouter()

XLSX_MEDIA_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"

# ==============================================================================
# 1. EVENT LIFECYCLE
# ==============================================================================
@router.post("/admin/start-event", response_model=ActionResponse)
def start_event(body: StartEventRequest, service: SessionService = Depends(get_service)):
    """
    Start (or restart) the event.
    Restarting wipes every check-in from the previous run.
    """
    service.start_event(body.to_config())
    return ActionResponse(success=True, message="Event started")


@router.post("/admin/end-event", response_model=ActionResponse)
def end_event(service: SessionService = Depends(get_service)):
    """Stop accepting check-ins; attendance stays downloadable"""
    service.end_event()
    return ActionResponse(success=True, message="Event ended")


# ==============================================================================
# 2. POLL LIFECYCLE
# ==============================================================================
@router.post("/admin/start-poll", response_model=ActionResponse)
def start_poll(body: StartPollRequest, service: SessionService = Depends(get_service)):
    service.start_poll(body.to_config())
    return ActionResponse(success=True, message="Poll started")


@router.post("/admin/end-poll", response_model=ActionResponse)
def end_poll(service: SessionService = Depends(get_service)):
    service.end_poll()
    return ActionResponse(success=True, message="Poll ended")


# ==============================================================================
# 3. RESULTS & REPORTS
# ==============================================================================
@router.get("/attendees", response_model=AttendeesResponse)
def get_attendees(service: SessionService = Depends(get_service)):
    """Checked-in attendees in check-in order"""
    return AttendeesResponse(attendees=service.list_attendees())


@router.get("/votes", response_model=VoteResultsResponse)
def get_votes(service: SessionService = Depends(get_service)):
    return service.tally_votes()


@router.get("/download-attendance")
def download_attendance(service: SessionService = Depends(get_service)):
    content = attendance_csv(service.list_attendees())
    return Response(
        content=content,
        media_type="text/csv",
        headers={"Content-Disposition": "attachment; filename=attendance.csv"},
    )


@router.get("/download-attendance.xlsx")
def download_attendance_xlsx(service: SessionService = Depends(get_service)):
    event_name = service.state.event.name
    content = attendance_xlsx(service.list_attendees(), title=event_name)
    return Response(
        content=content,
        media_type=XLSX_MEDIA_TYPE,
        headers={"Content-Disposition": "attachment; filename=attendance.xlsx"},
    )
