"""Locale formatting for amounts and period labels on reports.

Uses babel for currency and month names.

Configuration:
    LOCALE env var (default: es_ES) - determines currency and number formatting

Example:
    >>> format_amount(Decimal("1234.56"), "es_ES")
    '1234,56\xa0€'
    >>> period_label(Period(2024, 3), "es_ES")
    'mayo-junio 2024'
"""

import logging
from decimal import Decimal

from babel import Locale, UnknownLocaleError
from babel.dates import get_month_names
from babel.numbers import (
    format_currency as babel_format_currency,
)
from babel.numbers import (
    format_decimal as babel_format_decimal,
)
from babel.numbers import (
    get_territory_currencies,
)

from waterbill.services.period_service import Period
from waterbill.services.tariff_service import round_money

logger = logging.getLogger(__name__)

# Default locale if the configured one is invalid or missing
DEFAULT_LOCALE = "es_ES"
DEFAULT_CURRENCY = "EUR"


def resolve_locale(locale_str: str | None) -> str:
    """Validate a locale string, falling back to DEFAULT_LOCALE.

    Returns:
        Valid locale string (e.g., 'es_ES')
    """
    if not locale_str:
        return DEFAULT_LOCALE
    try:
        Locale.parse(locale_str)
        return locale_str
    except (UnknownLocaleError, ValueError) as e:
        logger.warning(f"Invalid LOCALE '{locale_str}': {e}. Falling back to '{DEFAULT_LOCALE}'")
        return DEFAULT_LOCALE


def currency_for_locale(locale_str: str) -> str:
    """Derive currency code from locale territory.

    Args:
        locale_str: Locale string (e.g., 'es_ES')

    Returns:
        Currency code (e.g., 'EUR')
    """
    try:
        territory = Locale.parse(locale_str).territory
        if territory:
            currencies = get_territory_currencies(territory)
            if currencies:
                return currencies[0]
    except (UnknownLocaleError, ValueError) as e:
        logger.warning(f"Could not derive currency from locale '{locale_str}': {e}")

    return DEFAULT_CURRENCY


def format_amount(
    amount: Decimal, locale_str: str = DEFAULT_LOCALE, include_symbol: bool = True
) -> str:
    """Format monetary amount according to locale.

    Args:
        amount: Amount to format; rounded half-up to the cent first, the same
            way remittance totals are rounded
        locale_str: Locale to format for
        include_symbol: Whether to include currency symbol (default True)

    Returns:
        Formatted currency string (e.g., '1234,56 €' with a non-breaking space)
    """
    locale_str = resolve_locale(locale_str)
    amount = round_money(amount)
    # Already at the cent; babel must not round it again
    if include_symbol:
        return babel_format_currency(
            amount,
            currency_for_locale(locale_str),
            locale=locale_str,
            decimal_quantization=False,
        )
    return babel_format_decimal(
        amount, format="#,##0.00", locale=locale_str, decimal_quantization=False
    )


def period_label(period: Period, locale_str: str = DEFAULT_LOCALE) -> str:
    """Human-readable name of a bimonthly period, e.g. 'mayo-junio 2024'."""
    months = get_month_names("wide", context="stand-alone", locale=resolve_locale(locale_str))
    first, second = months[period.first_month], months[period.first_month + 1]
    return f"{first}-{second} {period.year}"


__all__ = [
    "DEFAULT_CURRENCY",
    "DEFAULT_LOCALE",
    "currency_for_locale",
    "format_amount",
    "period_label",
    "resolve_locale",
]
