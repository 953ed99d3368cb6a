"""Pre-flight validation for entries and compensation, plus backend error messages.

Every validator returns a list of human-readable problems; an empty list
means the record can be sent to the backend.
"""

from __future__ import annotations

import math
import re
from typing import Any, Mapping

MAX_SAFE_AMOUNT = 10_000_000
MAX_SAFE_COUNT = 1_000_000
MIN_YEAR = 2000
MAX_YEAR = 2100

DUPLICATE_ERROR_CODE = "23505"
AUTH_ERROR_CODE = "PGRST301"

_FLOAT_PREFIX = re.compile(r"[+-]?(\d+\.?\d*|\.\d+)([eE][+-]?\d+)?")
_INT_PREFIX = re.compile(r"[+-]?\d+")
_MONTH_KEY = re.compile(r"[0-9]{4}-[0-9]{2}")

_AMOUNT_CEILING_TEXT = "R$ 10.000.000,00"
_COUNT_CEILING_TEXT = "1.000.000"


def parse_number(value: Any) -> float | None:
    """Read a leading decimal number, the way form inputs are typed in."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        number = float(value)
        return None if math.isnan(number) else number
    match = _FLOAT_PREFIX.match(str(value).strip())
    if not match:
        return None
    return float(match.group(0))


def parse_integer(value: Any) -> int | None:
    """Read a leading integer; decimals are truncated."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        if isinstance(value, float) and (math.isnan(value) or math.isinf(value)):
            return None
        return int(value)
    match = _INT_PREFIX.match(str(value).strip())
    if not match:
        return None
    return int(match.group(0))


def _check_amount(label: str, value: Any, errors: list[str]) -> float | None:
    amount = parse_number(value)
    if amount is None:
        errors.append(f"{label} must be a valid number")
    elif amount < 0:
        errors.append(f"{label} cannot be negative")
    elif amount > MAX_SAFE_AMOUNT:
        errors.append(f"{label} is too high (maximum: {_AMOUNT_CEILING_TEXT}). Check the value.")
    return amount


def _check_count(label: str, value: Any, errors: list[str]) -> int | None:
    count = parse_integer(value)
    if count is None:
        errors.append(f"{label} must be a valid whole number")
    elif count < 0:
        errors.append(f"{label} cannot be negative")
    elif count > MAX_SAFE_COUNT:
        errors.append(f"{label} is too high (maximum: {_COUNT_CEILING_TEXT}). Check the value.")
    return count


def validate_daily_record(fields: Mapping[str, Any]) -> list[str]:
    """Check a candidate daily entry; all rules are evaluated."""
    errors: list[str] = []

    if not fields.get("data"):
        errors.append("Date is required")

    _check_amount("Ad spend", fields.get("gasto_ads"), errors)
    _check_amount("Sales value", fields.get("valor_vendas"), errors)
    leads = _check_count("Lead count", fields.get("qtd_leads"), errors)
    sales = _check_count("Sale count", fields.get("qtd_vendas"), errors)

    if leads is not None and sales is not None and sales > leads:
        errors.append("Sale count cannot be greater than lead count")

    return errors


def validate_compensation(fields: Mapping[str, Any]) -> list[str]:
    """Check a candidate monthly compensation record."""
    errors: list[str] = []

    month_key = fields.get("mes_ano")
    if not month_key:
        errors.append("Month is required")
    elif not _MONTH_KEY.fullmatch(str(month_key)):
        errors.append("Invalid month format (expected: YYYY-MM)")
    else:
        year, month = (int(part) for part in str(month_key).split("-"))
        if month < 1 or month > 12:
            errors.append("Month must be between 01 and 12")
        if year < MIN_YEAR or year > MAX_YEAR:
            errors.append(f"Year must be between {MIN_YEAR} and {MAX_YEAR}")

    amount = parse_number(fields.get("valor"))
    if amount is None:
        errors.append("Amount must be a valid number")
    elif amount < 0:
        errors.append("Amount cannot be negative")
    elif amount > MAX_SAFE_AMOUNT:
        errors.append(f"Amount is too high (maximum: {_AMOUNT_CEILING_TEXT}). Check the value.")
    elif amount == 0:
        errors.append("Amount must be greater than zero")

    return errors


def coerce_daily_payload(fields: Mapping[str, Any]) -> dict[str, Any]:
    """Typed insert/update payload for a validated daily entry."""
    return {
        "data": str(fields.get("data")),
        "gasto_ads": parse_number(fields.get("gasto_ads")) or 0.0,
        "valor_vendas": parse_number(fields.get("valor_vendas")) or 0.0,
        "qtd_leads": parse_integer(fields.get("qtd_leads")) or 0,
        "qtd_vendas": parse_integer(fields.get("qtd_vendas")) or 0,
    }


def coerce_compensation_payload(fields: Mapping[str, Any]) -> dict[str, Any]:
    return {
        "mes_ano": str(fields.get("mes_ano")),
        "valor": parse_number(fields.get("valor")) or 0.0,
        "descricao": str(fields.get("descricao") or "").strip(),
    }


def _error_field(error: Any, name: str) -> Any:
    if isinstance(error, Mapping):
        return error.get(name)
    return getattr(error, name, None)


def interpret_backend_error(error: Any) -> str:
    """Map a backend error object to one user-facing sentence."""
    if not error:
        return "Unknown error"

    raw_message = _error_field(error, "message")
    if raw_message is None and isinstance(error, Exception):
        raw_message = str(error)
    message = str(raw_message or "")
    lowered = message.lower()
    code = str(_error_field(error, "code") or "")

    if code == DUPLICATE_ERROR_CODE or "duplicate" in lowered or "unique" in lowered:
        if "lancamentos_data_key" in lowered:
            return "An entry already exists for this date. Edit the existing entry instead."
        if "prolabore_mes_ano_key" in lowered:
            return "A compensation record already exists for this month. Edit the existing record instead."
        return "A record already exists for this period. Edit the existing record instead."

    if "network" in lowered or "fetch" in lowered:
        return "No connection to the server. Check your connection and try again."

    if code == AUTH_ERROR_CODE or "jwt" in lowered or "auth" in lowered:
        return "Authentication failed. Check your backend credentials."

    if "permission" in lowered or "policy" in lowered:
        return "You are not authorized to perform this operation."

    if message:
        return f"Error: {message}"

    return "Could not process the request. Try again."
