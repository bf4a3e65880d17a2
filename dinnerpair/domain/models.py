from enum import Enum
from typing import Dict, List, Optional
from datetime import date

from pydantic import BaseModel, Field


class TimeSlot(str, Enum):
    breakfast = "breakfast"
    lunch = "lunch"
    dinner = "dinner"
    late_night = "late_night"


class MatchState(str, Enum):
    waiting_for_partner = "waiting_for_partner"
    no_match = "no_match"
    matched = "matched"
    partner_skipped = "partner_skipped"
    error = "error"


class VenueDTO(BaseModel):
    id: str
    name: str
    city: str


class SlotDTO(BaseModel):
    date: str  # YYYY-MM-DD, compared as text
    slot: str

    @property
    def key(self):
        return (self.date, self.slot)


class MatchStatusDTO(BaseModel):
    status: MatchState
    match_id: Optional[str] = None
    partner_ids: List[str] = Field(default_factory=list)
    confirmed_date: Optional[str] = None
    confirmed_slot: Optional[str] = None
    overlapping_slots: List[SlotDTO] = Field(default_factory=list)
    error: Optional[str] = None


class VenueAssignmentResult(BaseModel):
    assignments: Dict[str, str] = Field(default_factory=dict)  # match_id -> venue_id
    reused_any_venue: bool = False
    assigned_count: int = 0
    total_matches: int = 0
    errors: List[str] = Field(default_factory=list)

    @property
    def success(self) -> bool:
        return not self.errors and self.assigned_count == self.total_matches


class CreatedMatch(BaseModel):
    match_id: str
    member_ids: List[str]
    venue_id: Optional[str] = None
    invites_created: bool = True  # False: match and guests stored, invite write failed


class PairingRunResult(BaseModel):
    group_id: str
    event_id: Optional[str] = None
    scheduled_date: Optional[date] = None
    matches: List[CreatedMatch] = Field(default_factory=list)
    dropped_member_ids: List[str] = Field(default_factory=list)
    failures: List[str] = Field(default_factory=list)
    venues: Optional[VenueAssignmentResult] = None

    @property
    def venue_errors(self) -> List[str]:
        return self.venues.errors if self.venues else []


class MemberAvailabilitySummary(BaseModel):
    member_id: str
    display_name: Optional[str] = None
    has_submitted: bool = False
    slot_count: int = 0


class ScheduleOutcome(BaseModel):
    group_id: str
    group_name: Optional[str] = None
    status: str  # success | skipped | error
    pairs_generated: int = 0
    reason: Optional[str] = None
