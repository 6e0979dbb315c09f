"""
Formatting helpers for emails and JSON payloads.
Numbers and dates follow French conventions (1 234,50 €, 31/12/2026).
"""
from decimal import Decimal, InvalidOperation
from datetime import date, datetime
from typing import Union


def money_eur(value: Union[int, float, Decimal, str, None]) -> str:
    """
    Format an amount in euros with exactly 2 decimals.

    Examples:
        money_eur(13.5) -> "13,50 €"
        money_eur(1500) -> "1 500,00 €"
        money_eur(None) -> "-"
    """
    if value is None or value == "":
        return "-"

    try:
        normalized = str(value).replace(",", ".")
        num = Decimal(normalized).quantize(Decimal('0.01'))
    except (InvalidOperation, ValueError, TypeError):
        return "-"

    sign = "-" if num < 0 else ""
    num = abs(num)

    integer_part, decimal_part = f"{num:.2f}".split(".")
    # Group thousands with a space: reverse, chunk by 3, reverse back
    reversed_int = integer_part[::-1]
    groups = [reversed_int[i:i+3] for i in range(0, len(reversed_int), 3)]
    integer_formatted = ' '.join(groups)[::-1]

    return f"{sign}{integer_formatted},{decimal_part} €"


def amount(value: Union[int, float, Decimal, None]) -> str:
    """Serialize an amount for JSON as a 2-decimal string ("13.50")."""
    if value is None:
        return "0.00"
    return f"{Decimal(str(value)).quantize(Decimal('0.01'))}"


def date_fr(value: Union[date, datetime, None]) -> str:
    """
    Format a date as DD/MM/YYYY.

    Examples:
        date_fr(date(2026, 1, 12)) -> "12/01/2026"
    """
    if value is None:
        return "-"

    if isinstance(value, datetime):
        value = value.date()

    if not isinstance(value, date):
        return "-"

    return value.strftime("%d/%m/%Y")


def datetime_fr(value: Union[datetime, None], with_time: bool = True) -> str:
    """
    Format a datetime as DD/MM/YYYY HH:MM.

    Examples:
        datetime_fr(datetime(2026, 1, 12, 15, 30)) -> "12/01/2026 15:30"
    """
    if not isinstance(value, datetime):
        return "-"

    if with_time:
        return value.strftime("%d/%m/%Y %H:%M")
    return value.strftime("%d/%m/%Y")
