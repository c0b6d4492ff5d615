"""
Normalization of stored documents onto the canonical shapes the API uses.

Company documents were loaded from several sources over time and carry
different field names for the same thing (``turnover`` vs ``revenue``,
``officer_name`` vs ``person_name`` ...). Every fallback chain lives here so
the risk engine and the routers only ever see one shape.
"""
from __future__ import annotations

import json
import re
from typing import Any, Mapping, Sequence

from .risk_engine import FinancialSnapshot, SectorBenchmark, to_number

TURNOVER_FIELDS = ("turnover", "revenue", "sales")
PROFIT_FIELDS = ("profit", "net_profit", "profit_after_tax", "operating_profit")
FAILURE_RATE_FIELDS = ("failure_rate", "failureRate", "fail_rate")

# Order matters: the first non-empty field is the event date
DIRECTOR_DATE_FIELDS = (
    "effective_date", "event_date", "change_date", "date",
    "appointed_on", "appointment_date",
    "resigned_on", "resignation_date",
    "notified_on", "updated_at", "created_at",
)
DIRECTOR_TYPE_FIELDS = ("change_type", "type", "action", "event")
DIRECTOR_NAME_FIELDS = ("officer_name", "name", "person_name")
DIRECTOR_ROLE_FIELDS = ("role", "officer_role", "position")
DIRECTOR_DETAIL_FIELDS = ("details", "description", "text", "note")


def first_present(doc: Mapping[str, Any] | None, fields: Sequence[str]) -> Any:
    """Return the first value in ``fields`` that is present and non-empty."""
    if not doc:
        return None
    for name in fields:
        value = doc.get(name)
        if value is not None and value != "":
            return value
    return None


def to_financial_snapshot(doc: Mapping[str, Any] | None) -> FinancialSnapshot:
    """Map an accounts document onto a FinancialSnapshot. Missing => zeros."""
    if not doc:
        return FinancialSnapshot(turnover=0.0, profit=0.0)
    return FinancialSnapshot(
        turnover=to_number(first_present(doc, TURNOVER_FIELDS)),
        profit=to_number(first_present(doc, PROFIT_FIELDS)),
    )


def to_sector_benchmark(doc: Mapping[str, Any] | None) -> SectorBenchmark | None:
    if not doc:
        return None
    return SectorBenchmark(failure_rate=first_present(doc, FAILURE_RATE_FIELDS))


def primary_sic_code(profile: Mapping[str, Any] | None) -> str | None:
    """First industry classification code of a profile, as text."""
    if not profile:
        return None
    codes = profile.get("sic_codes")
    if isinstance(codes, (list, tuple)) and codes:
        return str(codes[0])
    single = first_present(profile, ("sic_code", "sic"))
    return str(single) if single is not None else None


def format_status(raw: Any) -> str | None:
    """'ACTIVE ' -> 'Active'. Empty values give None."""
    if raw is None:
        return None
    text = str(raw).strip()
    if not text:
        return None
    return text[0].upper() + text[1:].lower()


def _title_words(value: str) -> str:
    return re.sub(r"\b\w", lambda m: m.group(0).upper(), value)


def _officer_field(doc: Mapping[str, Any], fields: Sequence[str]) -> Any:
    officer = doc.get("officer")
    if isinstance(officer, Mapping):
        return first_present(officer, fields)
    return None


def _as_text(value: Any) -> str | None:
    """Stored documents may hold numbers (epoch dates) or nested objects where text is expected."""
    if value is None or isinstance(value, str):
        return value
    if isinstance(value, (Mapping, list)):
        return json.dumps(value, default=str)
    return str(value)


def infer_change_type(doc: Mapping[str, Any]) -> str | None:
    """Explicit type if the document has one, otherwise guess from its content."""
    explicit = first_present(doc, DIRECTOR_TYPE_FIELDS)
    if explicit is not None:
        return _title_words(str(explicit))

    text = json.dumps(doc, default=str).lower()
    if doc.get("resigned_on") or "resign" in text:
        return "Resigned"
    if doc.get("appointed_on") or "appoint" in text:
        return "Appointed"
    return None


def normalize_director_change(doc: Mapping[str, Any]) -> dict:
    """Map any stored officer-change document onto {date, type, name, role, details}."""
    name = first_present(doc, DIRECTOR_NAME_FIELDS)
    if name is None:
        name = _officer_field(doc, ("name", "person_name"))

    details = first_present(doc, DIRECTOR_DETAIL_FIELDS)
    if details is None:
        details = _officer_field(doc, ("details", "description"))

    return {
        "date": _as_text(first_present(doc, DIRECTOR_DATE_FIELDS)),
        "type": _as_text(infer_change_type(doc)),
        "name": _as_text(name),
        "role": _as_text(first_present(doc, DIRECTOR_ROLE_FIELDS)),
        "details": _as_text(details),
    }
