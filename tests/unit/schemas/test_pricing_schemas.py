import pytest
from pydantic import ValidationError
from app.domain.hospitality.schemas import HospitalityCreateDTO
from app.domain.pricing.schemas import QuoteRequestDTO, TicketPriceInputDTO
from app.domain.resolution.scope import ScopePath


def test_ticket_currency_uppercased():
    dto = TicketPriceInputDTO(ticket_id=" x1 ", base_price="10", currency=" eur ")

    assert dto.currency == "EUR"
    assert dto.ticket_id == "x1"


def test_ticket_currency_must_be_alpha_code():
    with pytest.raises(ValidationError):
        TicketPriceInputDTO(ticket_id="x1", base_price="10", currency="US1")


def test_negative_base_price_rejected():
    with pytest.raises(ValidationError):
        TicketPriceInputDTO(ticket_id="x1", base_price="-5")


def test_quote_quantity_bounds():
    with pytest.raises(ValidationError):
        QuoteRequestDTO(sport_type="soccer", ticket_id="x1", base_price="1", quantity=0)
    with pytest.raises(ValidationError):
        QuoteRequestDTO(sport_type="soccer", ticket_id="x1", base_price="1", quantity=101)


def test_quote_builds_path():
    dto = QuoteRequestDTO(sport_type="soccer", ticket_id="x1", event_id=" e1 ", base_price="1")

    assert dto.to_path() == ScopePath(sport_type="soccer", ticket_id="x1", event_id="e1")


def test_hospitality_name_stripped_and_price_non_negative():
    assert HospitalityCreateDTO(name="  Lounge  ").name == "Lounge"
    with pytest.raises(ValidationError):
        HospitalityCreateDTO(name="Lounge", price_usd="-1")
