from pydantic import BaseModel, ConfigDict, Field, field_validator
from app.core.utils.text_utils import strip_identifier, strip_text
from app.domain.resolution.scope import Scope, ScopeLevel, ScopePath


class ScopeFieldsDTO(BaseModel):
    model_config = ConfigDict(extra='forbid')

    sport_type: str | None = Field(default=None, max_length=100)
    tournament_id: str | None = Field(default=None, max_length=100)
    team_id: str | None = Field(default=None, max_length=100)
    event_id: str | None = Field(default=None, max_length=100)
    ticket_id: str | None = Field(default=None, max_length=100)

    _strip_ids = field_validator(
        "sport_type", "tournament_id", "team_id", "event_id", "ticket_id",
        mode="before"
    )(strip_identifier)

    def to_scope(self) -> Scope:
        return Scope(
            sport_type=self.sport_type,
            tournament_id=self.tournament_id,
            team_id=self.team_id,
            event_id=self.event_id,
            ticket_id=self.ticket_id,
        )


class DisplayNamesDTO(BaseModel):
    model_config = ConfigDict(extra='forbid')

    sport_name: str | None = Field(default=None, max_length=255)
    tournament_name: str | None = Field(default=None, max_length=255)
    team_name: str | None = Field(default=None, max_length=255)
    event_name: str | None = Field(default=None, max_length=255)
    ticket_name: str | None = Field(default=None, max_length=255)

    _strip_names = field_validator(
        "sport_name", "tournament_name", "team_name", "event_name", "ticket_name",
        mode="before"
    )(strip_text)


class ScopePathDTO(BaseModel):
    model_config = ConfigDict(extra='forbid')

    sport_type: str = Field(min_length=1, max_length=100)
    tournament_id: str | None = Field(default=None, max_length=100)
    team_id: str | None = Field(default=None, max_length=100)
    event_id: str | None = Field(default=None, max_length=100)
    ticket_id: str = Field(min_length=1, max_length=100)

    _strip_ids = field_validator(
        "sport_type", "tournament_id", "team_id", "event_id", "ticket_id",
        mode="before"
    )(strip_identifier)

    def to_path(self) -> ScopePath:
        return ScopePath(
            sport_type=self.sport_type,
            ticket_id=self.ticket_id,
            tournament_id=self.tournament_id,
            team_id=self.team_id,
            event_id=self.event_id,
        )


class ScopeQueryDTO(ScopeFieldsDTO):
    level: ScopeLevel | None = None
