"""
Locale resolution for month and meridiem names.

Uses Babel for localization with automatic fallback to English.
"""
from typing import Optional

import structlog
from babel import Locale
from babel.dates import get_month_names, get_period_names

from chronokit.core.config import get_settings

logger = structlog.get_logger(__name__)


def get_babel_locale(language: Optional[str] = None) -> Locale:
    """
    Get Babel Locale object for given language code.
    Falls back to English if language not supported.

    Args:
        language: Locale identifier (e.g., 'en', 'en_GB', 'fr').
                  Defaults to CHRONOKIT_LOCALE.

    Returns:
        Babel Locale object

    Examples:
        >>> locale = get_babel_locale('fr')
        >>> locale.language
        'fr'
        >>> locale = get_babel_locale('invalid_lang')  # Falls back to 'en'
        >>> locale.language
        'en'
    """
    if language is None:
        language = get_settings().LOCALE
    try:
        return Locale.parse(language)
    except Exception as e:
        logger.warning(
            "Locale not supported, falling back to English",
            language=language,
            error=str(e)
            )
        return Locale.parse('en')


def month_names(width: str, locale: Locale) -> dict[int, str]:
    """
    Month names keyed by one-based month number.

    Args:
        width: 'abbreviated' (MMM) or 'wide' (MMMM)
        locale: Babel locale
    """
    return dict(get_month_names(width=width, context='format', locale=locale))


def meridiem_names(locale: Locale) -> dict[str, str]:
    """AM/PM markers as rendered by the 'a' pattern letter, keyed 'am' / 'pm'."""
    names = get_period_names(width='abbreviated', context='format', locale=locale)
    return {period: names[period] for period in ('am', 'pm')}
