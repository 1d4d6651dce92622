from datetime import datetime
from decimal import Decimal
from pydantic import BaseModel, ConfigDict, Field, field_validator
from app.core.pagination import MAX_PAGE_SIZE
from app.core.utils.text_utils import strip_text
from app.domain.resolution.records import RuleSource
from app.domain.resolution.scope import ScopeLevel
from app.domain.resolution.schemas import ScopeFieldsDTO, DisplayNamesDTO, ScopePathDTO


class HospitalityCreateDTO(BaseModel):
    model_config = ConfigDict(extra='forbid')

    name: str = Field(min_length=2, max_length=255)
    description: str | None = Field(default=None, max_length=2000)
    price_usd: Decimal | None = Field(default=None, ge=0, max_digits=10, decimal_places=2)
    is_active: bool = True
    sort_order: int = Field(default=0, ge=0)

    _strip_name = field_validator("name", mode="before")(strip_text)
    _strip_desc = field_validator("description", mode="before")(strip_text)


class HospitalityUpdateDTO(BaseModel):
    model_config = ConfigDict(extra='forbid')

    name: str | None = Field(default=None, min_length=2, max_length=255)
    description: str | None = Field(default=None, max_length=2000)
    price_usd: Decimal | None = Field(default=None, ge=0, max_digits=10, decimal_places=2)
    is_active: bool | None = None
    sort_order: int | None = Field(default=None, ge=0)

    _strip_name = field_validator("name", mode="before")(strip_text)
    _strip_desc = field_validator("description", mode="before")(strip_text)


class HospitalityReadDTO(BaseModel):
    model_config = ConfigDict(from_attributes=True, extra='forbid')

    id: int
    name: str
    description: str | None
    price_usd: Decimal | None
    is_active: bool
    sort_order: int
    created_at: datetime
    updated_at: datetime


class HospitalitiesQueryDTO(BaseModel):
    model_config = ConfigDict(extra='forbid')

    page: int = Field(default=1, ge=1)
    page_size: int = Field(default=50, ge=1, le=MAX_PAGE_SIZE)
    is_active: bool | None = None
    name: str | None = None


class HospitalityStatsDTO(BaseModel):
    total: int
    active: int
    inactive: int
    assignments: int
    assignments_by_level: dict[ScopeLevel, int]
    legacy_assignments: int


class HospitalityOptionDTO(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    hospitality_id: int
    name: str
    description: str | None
    price: Decimal | None


class ResolvedHospitalityDTO(HospitalityOptionDTO):
    level: ScopeLevel
    source: RuleSource


class AssignmentCreateDTO(ScopeFieldsDTO, DisplayNamesDTO):
    model_config = ConfigDict(extra='forbid')

    hospitality_id: int = Field(gt=0)
    level: ScopeLevel | None = None
    is_active: bool = True


class AssignmentBatchCreateDTO(ScopeFieldsDTO, DisplayNamesDTO):
    model_config = ConfigDict(extra='forbid')

    hospitality_ids: list[int] = Field(min_length=1, max_length=200)
    level: ScopeLevel | None = None


class AssignmentReplaceDTO(ScopeFieldsDTO, DisplayNamesDTO):
    """Desired end state at one scope: exactly these services, anything else removed."""
    model_config = ConfigDict(extra='forbid')

    hospitality_ids: list[int] = Field(default_factory=list, max_length=200)
    suppressed_ids: list[int] = Field(default_factory=list, max_length=200)
    level: ScopeLevel | None = None


class AssignmentReadDTO(BaseModel):
    model_config = ConfigDict(from_attributes=True, extra='forbid')

    id: int
    hospitality_id: int
    sport_type: str | None
    tournament_id: str | None
    team_id: str | None
    event_id: str | None
    ticket_id: str | None
    level: ScopeLevel
    is_active: bool
    sport_name: str | None
    tournament_name: str | None
    team_name: str | None
    event_name: str | None
    ticket_name: str | None
    created_by: int | None
    updated_by: int | None
    created_at: datetime
    updated_at: datetime


class AssignmentsQueryDTO(BaseModel):
    model_config = ConfigDict(extra='forbid')

    page: int = Field(default=1, ge=1)
    page_size: int = Field(default=50, ge=1, le=MAX_PAGE_SIZE)
    hospitality_id: int | None = None
    level: ScopeLevel | None = None
    sport_type: str | None = None
    tournament_id: str | None = None
    team_id: str | None = None
    event_id: str | None = None
    is_active: bool | None = None


class AssignmentResolveRequestDTO(ScopePathDTO):
    pass


class AssignmentResolveReadDTO(BaseModel):
    ticket_id: str
    options: list[ResolvedHospitalityDTO]
    ambiguous: bool = False


class LegacyTicketHospitalityReplaceDTO(BaseModel):
    model_config = ConfigDict(extra='forbid')

    hospitality_ids: list[int] = Field(default_factory=list, max_length=200)


class LegacyTicketHospitalityReadDTO(BaseModel):
    model_config = ConfigDict(from_attributes=True, extra='forbid')

    id: int
    event_id: str
    ticket_id: str
    hospitality_id: int
    custom_price_usd: Decimal | None
    created_at: datetime


class AssignmentBatchResultDTO(BaseModel):
    created: list[AssignmentReadDTO]
    skipped_hospitality_ids: list[int] = Field(default_factory=list)
