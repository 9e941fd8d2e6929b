from pydantic import AliasChoices, BaseModel, Field, field_validator
from typing import Optional, List

from checkin.core.config import settings
from checkin.models.session import Attendee, EventConfig, GeoPoint, Member, PollConfig


class StartEventRequest(BaseModel):
    event_name: str = Field(..., min_length=1, validation_alias=AliasChoices("event_name", "eventName"))
    event_location: Optional[GeoPoint] = Field(
        None, validation_alias=AliasChoices("event_location", "eventLocation")
    )
    radius: Optional[float] = Field(None, gt=0)
    access_code: str = Field("", validation_alias=AliasChoices("access_code", "accessCode"))
    require_location: Optional[bool] = Field(
        None, validation_alias=AliasChoices("require_location", "requireLocation")
    )

    def to_config(self) -> EventConfig:
        return EventConfig(
            name=self.event_name.strip(),
            location=self.event_location or GeoPoint(),
            radius=self.radius if self.radius is not None else settings.DEFAULT_RADIUS_METERS,
            access_code=self.access_code.strip(),
            require_location=(
                settings.REQUIRE_LOCATION_DEFAULT if self.require_location is None else self.require_location
            ),
        )


class StartPollRequest(BaseModel):
    poll_question: str = Field(..., min_length=1, validation_alias=AliasChoices("poll_question", "pollQuestion"))
    poll_options: List[str] = Field(..., validation_alias=AliasChoices("poll_options", "pollOptions"))

    @field_validator("poll_options")
    @classmethod
    def clean_options(cls, options: List[str]) -> List[str]:
        cleaned = []
        for option in options:
            option = option.strip()
            if option and option not in cleaned:
                cleaned.append(option)
        if len(cleaned) < 2:
            raise ValueError("A poll needs at least two distinct options")
        return cleaned

    def to_config(self) -> PollConfig:
        return PollConfig(question=self.poll_question.strip(), options=self.poll_options)


class CheckInRequest(BaseModel):
    # "phone" or "name" depending on IDENTITY_MODE; both are accepted
    identity: Optional[str] = Field(None, validation_alias=AliasChoices("identity", "phone", "name"))
    fingerprint: Optional[str] = None
    distance: Optional[float] = None
    location: Optional[GeoPoint] = None


class VoteRequest(BaseModel):
    fingerprint: Optional[str] = None
    option: Optional[str] = None
    distance: Optional[float] = None
    location: Optional[GeoPoint] = None


class ActionResponse(BaseModel):
    success: bool
    message: str
    reason: Optional[str] = None


class CheckInResponse(ActionResponse):
    attendee: Optional[Attendee] = None


class RosterUploadResponse(ActionResponse):
    count: int = 0
    members: List[Member] = []


class MembersResponse(BaseModel):
    members: List[Member]


class AttendeesResponse(BaseModel):
    attendees: List[Attendee]


class VoteResultsResponse(BaseModel):
    results: dict
    total_votes: int


class EventStatusResponse(BaseModel):
    event_name: str
    event_location: GeoPoint
    radius: float
    require_location: bool
    is_event_active: bool
    access_code: str
    attendee_count: int
    poll_question: str
    poll_options: List[str]
    is_poll_active: bool
    roster_size: int
    identity_mode: str
