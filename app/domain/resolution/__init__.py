from .scope import Scope, ScopeLevel, ScopePath, LEVELS, SCOPE_FIELDS, derive_level, check_level, validate_write_scope
from .records import MarkupRecord, AssignmentRecord, ServiceRecord, MarkupType, RuleSource
from .matcher import match_rules, scope_matches
from .resolver import (AmbiguousWinnerAnomaly, MarkupResolution, HospitalityResolution, ResolvedHospitality,
                       resolve_markup, resolve_hospitality)
from .composer import AppliedMarkup, ComposedPrice, compose_price, hospitality_subtotal, quantize_money
from .store import RuleFilter, RuleStore, InMemoryRuleStore

__all__ = (
    "Scope", "ScopeLevel", "ScopePath", "LEVELS", "SCOPE_FIELDS", "derive_level", "check_level", "validate_write_scope",
    "MarkupRecord", "AssignmentRecord", "ServiceRecord", "MarkupType", "RuleSource",
    "match_rules", "scope_matches",
    "AmbiguousWinnerAnomaly", "MarkupResolution", "HospitalityResolution", "ResolvedHospitality",
    "resolve_markup", "resolve_hospitality",
    "AppliedMarkup", "ComposedPrice", "compose_price", "hospitality_subtotal", "quantize_money",
    "RuleFilter", "RuleStore", "InMemoryRuleStore",
)
