from decimal import Decimal
from pydantic import BaseModel, ConfigDict, Field, field_validator
from app.core.utils.text_utils import strip_identifier
from app.domain.hospitality.schemas import HospitalityOptionDTO
from app.domain.markup.schemas import AppliedMarkupDTO
from app.domain.resolution.schemas import ScopePathDTO

CURRENCY_PATTERN = "^[A-Za-z]{3}$"


def _upper(value: str | None) -> str | None:
    return value.strip().upper() if isinstance(value, str) else value


class TicketPriceInputDTO(BaseModel):
    model_config = ConfigDict(extra='forbid')

    ticket_id: str = Field(min_length=1, max_length=100)
    base_price: Decimal = Field(ge=0, max_digits=12, decimal_places=2)
    currency: str = Field(default="USD", pattern=CURRENCY_PATTERN)

    _strip_ticket = field_validator("ticket_id", mode="before")(strip_identifier)
    _upper_currency = field_validator("currency", mode="before")(_upper)


class EventPricingRequestDTO(BaseModel):
    model_config = ConfigDict(extra='forbid')

    sport_type: str = Field(min_length=1, max_length=100)
    tournament_id: str | None = Field(default=None, max_length=100)
    team_id: str | None = Field(default=None, max_length=100)
    tickets: list[TicketPriceInputDTO] = Field(min_length=1, max_length=1000)

    _strip_ids = field_validator("sport_type", "tournament_id", "team_id", mode="before")(strip_identifier)


class PricedTicketDTO(BaseModel):
    ticket_id: str
    event_id: str
    base_price: Decimal
    final_price: Decimal
    currency: str
    markup_applied: AppliedMarkupDTO | None = None
    hospitality_options: list[HospitalityOptionDTO] = Field(default_factory=list)


class EventPricingReadDTO(BaseModel):
    event_id: str
    tickets: list[PricedTicketDTO]


class QuoteRequestDTO(ScopePathDTO):
    base_price: Decimal = Field(ge=0, max_digits=12, decimal_places=2)
    currency: str = Field(default="USD", pattern=CURRENCY_PATTERN)
    quantity: int = Field(default=1, ge=1, le=100)
    hospitality_ids: list[int] = Field(default_factory=list, max_length=50)
    finalize: bool = False

    _upper_currency = field_validator("currency", mode="before")(_upper)


class QuoteReadDTO(BaseModel):
    ticket_id: str
    currency: str
    quantity: int
    base_price: Decimal
    unit_price: Decimal
    markup_applied: AppliedMarkupDTO | None = None
    tickets_subtotal: Decimal
    hospitality: list[HospitalityOptionDTO] = Field(default_factory=list)
    hospitality_subtotal_usd: Decimal
    total: Decimal | None = None
