# quotation_generator/services/formatting.py

from datetime import date, datetime

import pytz
from babel.numbers import format_currency
from flask import current_app, has_app_context

from .aggregation import to_decimal


def _setting(name, default):
    if has_app_context():
        return current_app.config.get(name, default)
    return default


def format_money(amount, currency='USD', locale=None):
    """Format an amount in the quotation's currency, e.g. '$1,234.50' or 'LKR 1,234.50'."""
    return format_currency(to_decimal(amount), currency, locale=locale or _setting('LOCALE', 'en_US'))


def format_date(value):
    """
    Format a date for documents, e.g. 'March 5, 2025'.

    Naive datetimes are treated as UTC and shown in the configured timezone.
    """
    if value is None:
        return ''
    if isinstance(value, datetime):
        tz = pytz.timezone(_setting('TIMEZONE', 'UTC'))
        if value.tzinfo is None:
            value = pytz.utc.localize(value)
        value = value.astimezone(tz).date()
    if isinstance(value, date):
        return f"{value.strftime('%B')} {value.day}, {value.year}"
    return str(value)
