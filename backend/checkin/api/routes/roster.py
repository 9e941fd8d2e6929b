from fastapi import APIRouter, UploadFile, File, Depends, HTTPException, status
import logging

from checkin.api.deps import get_engine, get_service
from checkin.core.config import settings
from checkin.schemas import MembersResponse, RosterUploadResponse
from checkin.services.eligibility import EligibilityEngine
from checkin.services.lifecycle import SessionService
from checkin.services.roster_ingest import RosterError, parse_roster

router = APIRouter()
logger = logging.getLogger(__name__)

@router.post("/upload-roster", response_model=RosterUploadResponse)
async def upload_roster(
    roster: UploadFile = File(...),
    service: SessionService = Depends(get_service),
    engine: EligibilityEngine = Depends(get_engine)
):
    """
    Replace the approved member roster.
    Accepts .csv or .xlsx. A failed upload leaves the previous roster in place.
    """
    # 1. Validate file type
    filename = roster.filename or ""
    if not any(filename.lower().endswith(ext) for ext in settings.ALLOWED_ROSTER_EXTENSIONS):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Invalid file format. Please upload a .csv or .xlsx file."
        )

    # 2. Read file
    content = await roster.read()
    max_bytes = settings.MAX_UPLOAD_SIZE_MB * 1024 * 1024
    if len(content) > max_bytes:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"File too large (max {settings.MAX_UPLOAD_SIZE_MB}MB)"
        )

    # 3. Parse rows into members
    try:
        # Keyed the same way check-ins are
        members = parse_roster(filename, content, engine.identity_mode)
    except RosterError as e:
        logger.warning(f"⚠️ Roster upload rejected ({filename}): {e}")
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))

    if not members:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="No usable records found in the uploaded file."
        )

    # 4. Replace roster
    count = service.load_roster(members)
    return RosterUploadResponse(
        success=True,
        message=f"Loaded {count} members",
        count=count,
        members=members,
    )

@router.get("/members", response_model=MembersResponse)
def get_members(service: SessionService = Depends(get_service)):
    """Current approved roster"""
    return MembersResponse(members=service.list_members())
