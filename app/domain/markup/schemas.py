from datetime import datetime
from decimal import Decimal
from pydantic import BaseModel, ConfigDict, Field, model_validator
from app.core.pagination import MAX_PAGE_SIZE
from app.domain.resolution.records import MarkupType, RuleSource
from app.domain.resolution.scope import ScopeLevel
from app.domain.resolution.schemas import ScopeFieldsDTO, DisplayNamesDTO, ScopePathDTO


def _check_amount(markup_type: MarkupType, amount: Decimal) -> None:
    if amount < 0:
        raise ValueError("markup_amount must not be negative")
    if markup_type == MarkupType.PERCENTAGE and amount > 100:
        raise ValueError("Percentage markup must be between 0 and 100")


class MarkupRuleCreateDTO(ScopeFieldsDTO, DisplayNamesDTO):
    model_config = ConfigDict(extra='forbid')

    level: ScopeLevel | None = None
    markup_type: MarkupType = MarkupType.FIXED
    markup_amount: Decimal = Field(max_digits=10, decimal_places=2)
    is_active: bool = True

    @model_validator(mode="after")
    def _check_markup(self):
        _check_amount(self.markup_type, self.markup_amount)
        return self


class MarkupRuleUpdateDTO(DisplayNamesDTO):
    model_config = ConfigDict(extra='forbid')

    markup_type: MarkupType | None = None
    markup_amount: Decimal | None = Field(default=None, max_digits=10, decimal_places=2)
    is_active: bool | None = None

    @model_validator(mode="after")
    def _check_markup(self):
        if self.markup_amount is not None and self.markup_amount < 0:
            raise ValueError("markup_amount must not be negative")
        return self


class MarkupRuleReadDTO(BaseModel):
    model_config = ConfigDict(from_attributes=True, extra='forbid')

    id: int
    sport_type: str | None
    tournament_id: str | None
    team_id: str | None
    event_id: str | None
    ticket_id: str | None
    level: ScopeLevel
    markup_type: MarkupType
    markup_amount: Decimal
    sport_name: str | None
    tournament_name: str | None
    team_name: str | None
    event_name: str | None
    ticket_name: str | None
    is_active: bool
    created_by: int | None
    updated_by: int | None
    first_applied_at: datetime | None
    created_at: datetime
    updated_at: datetime


class MarkupRulesQueryDTO(BaseModel):
    model_config = ConfigDict(extra='forbid')

    page: int = Field(default=1, ge=1)
    page_size: int = Field(default=50, ge=1, le=MAX_PAGE_SIZE)
    level: ScopeLevel | None = None
    sport_type: str | None = None
    tournament_id: str | None = None
    team_id: str | None = None
    event_id: str | None = None
    is_active: bool | None = None


class AppliedMarkupDTO(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    type: MarkupType
    amount: Decimal
    level: ScopeLevel
    source: RuleSource
    rule_id: int | None


class MarkupResolveRequestDTO(ScopePathDTO):
    base_price: Decimal | None = Field(default=None, ge=0, max_digits=12, decimal_places=2)
    currency: str = Field(default="USD", min_length=3, max_length=3, pattern="^[A-Za-z]{3}$")


class MarkupResolveReadDTO(BaseModel):
    ticket_id: str
    markup_applied: AppliedMarkupDTO | None
    base_price: Decimal | None = None
    final_price: Decimal | None = None
    currency: str
    ambiguous: bool = False


class LegacyTicketMarkupItemDTO(BaseModel):
    model_config = ConfigDict(extra='forbid')

    ticket_id: str = Field(min_length=1, max_length=100)
    markup_type: MarkupType = MarkupType.FIXED
    markup_price_usd: Decimal = Field(default=Decimal("0"), ge=0, max_digits=10, decimal_places=2)
    markup_percentage: Decimal | None = Field(default=None, ge=0, le=100, max_digits=10, decimal_places=2)
    base_price_usd: Decimal | None = Field(default=None, ge=0, max_digits=10, decimal_places=2)
    final_price_usd: Decimal | None = Field(default=None, ge=0, max_digits=10, decimal_places=2)

    @model_validator(mode="after")
    def _check_percentage(self):
        if self.markup_type == MarkupType.PERCENTAGE and self.markup_percentage is None:
            raise ValueError("markup_percentage is required for percentage markups")
        return self


class LegacyTicketMarkupBatchDTO(BaseModel):
    model_config = ConfigDict(extra='forbid')

    markups: list[LegacyTicketMarkupItemDTO] = Field(min_length=1, max_length=500)


class LegacyTicketMarkupReadDTO(BaseModel):
    model_config = ConfigDict(from_attributes=True, extra='forbid')

    id: int
    event_id: str
    ticket_id: str
    markup_type: MarkupType | None
    markup_price_usd: Decimal
    markup_percentage: Decimal | None
    base_price_usd: Decimal | None
    final_price_usd: Decimal | None
    updated_at: datetime
