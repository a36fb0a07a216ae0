"""
Display formatting for dates and money.

Produces the Spanish (Colombia) strings used in notifications and CSV
reports. Every function accepts ``None`` and malformed input and degrades to a
placeholder instead of raising.
"""

from __future__ import annotations

from datetime import date, datetime, timezone
from typing import Any, Optional, Union

NOT_AVAILABLE = "N/A"
INVALID_DATE = "Fecha inválida"
ZERO_CURRENCY = "$0"

DAY_NAMES = ["Lunes", "Martes", "Miércoles", "Jueves", "Viernes", "Sábado", "Domingo"]
MONTH_NAMES = [
    "Enero",
    "Febrero",
    "Marzo",
    "Abril",
    "Mayo",
    "Junio",
    "Julio",
    "Agosto",
    "Septiembre",
    "Octubre",
    "Noviembre",
    "Diciembre",
]

DateLike = Union[date, datetime, str, None]


class _InvalidDate(ValueError):
    pass


def _parse(value: DateLike) -> Optional[datetime]:
    """Normalize input to a naive datetime, ``None`` for missing values."""
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        if value.tzinfo is not None:
            value = value.astimezone(timezone.utc).replace(tzinfo=None)
        return value
    if isinstance(value, date):
        return datetime(value.year, value.month, value.day)
    if isinstance(value, str):
        text = value.strip()
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        try:
            parsed = datetime.fromisoformat(text)
        except ValueError as exc:
            raise _InvalidDate(value) from exc
        return _parse(parsed)
    raise _InvalidDate(value)


def format_date(value: DateLike) -> str:
    """``15/01/2024``."""
    try:
        parsed = _parse(value)
    except _InvalidDate:
        return INVALID_DATE
    if parsed is None:
        return NOT_AVAILABLE
    return parsed.strftime("%d/%m/%Y")


def format_datetime(value: DateLike) -> str:
    """``15/01/2024 14:30``."""
    try:
        parsed = _parse(value)
    except _InvalidDate:
        return INVALID_DATE
    if parsed is None:
        return NOT_AVAILABLE
    return parsed.strftime("%d/%m/%Y %H:%M")


def format_date_long(value: DateLike) -> str:
    """``Lunes, 15 de Enero de 2024``."""
    try:
        parsed = _parse(value)
    except _InvalidDate:
        return INVALID_DATE
    if parsed is None:
        return NOT_AVAILABLE
    return f"{DAY_NAMES[parsed.weekday()]}, {parsed.day} de {MONTH_NAMES[parsed.month - 1]} de {parsed.year}"


def format_month_year(value: DateLike) -> str:
    """``Enero 2024``."""
    try:
        parsed = _parse(value)
    except _InvalidDate:
        return INVALID_DATE
    if parsed is None:
        return NOT_AVAILABLE
    return f"{MONTH_NAMES[parsed.month - 1]} {parsed.year}"


def _plural(count: int, singular: str, plural: str) -> str:
    return f"Hace {count} {singular if count == 1 else plural}"


def format_relative_time(value: DateLike, now: Optional[datetime] = None) -> str:
    """Describe how long ago ``value`` happened.

    Under a minute reads ``Hace un momento``; minutes, hours and days are
    spelled out up to a week, after which the plain date is returned.

    Args:
        value: Moment to describe. Naive datetimes are taken as UTC.
        now: Reference moment, defaults to the current UTC time.
    """
    try:
        parsed = _parse(value)
    except _InvalidDate:
        return INVALID_DATE
    if parsed is None:
        return NOT_AVAILABLE

    reference = _parse(now) if now is not None else datetime.now(timezone.utc).replace(tzinfo=None)
    seconds = int((reference - parsed).total_seconds())

    if seconds < 60:
        return "Hace un momento"
    minutes = seconds // 60
    if minutes < 60:
        return _plural(minutes, "minuto", "minutos")
    hours = minutes // 60
    if hours < 24:
        return _plural(hours, "hora", "horas")
    days = hours // 24
    if days < 7:
        return _plural(days, "día", "días")
    return format_date(parsed)


def format_currency(value: Any) -> str:
    """Colombian pesos without decimals: ``$ 1.500.000``.

    ``None``, empty strings and non-numeric values render as ``$0``.
    """
    if value is None or value == "" or isinstance(value, bool):
        return ZERO_CURRENCY
    try:
        amount = float(value)
    except (TypeError, ValueError):
        return ZERO_CURRENCY
    if amount != amount or amount in (float("inf"), float("-inf")):
        return ZERO_CURRENCY

    rounded = int(round(abs(amount)))
    digits = f"{rounded:,}".replace(",", ".")
    sign = "-" if amount < 0 and rounded else ""
    return f"{sign}$ {digits}"
