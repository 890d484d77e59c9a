# quotation_generator/services/validation.py
"""Pre-write checks. Each validator raises ValidationError with per-field messages."""

import re
from datetime import date, datetime
from decimal import InvalidOperation

from ..errors import ValidationError
from ..models import PROJECT_STATUSES, QUOTATION_STATUSES, CURRENCIES
from .aggregation import to_decimal

EMAIL_PATTERN = re.compile(r'\S+@\S+\.\S+')


def _blank(value):
    return value is None or (isinstance(value, str) and not value.strip())


def _clean(value):
    return value.strip() if isinstance(value, str) else value


def parse_date(value, field, errors):
    """Accept date objects or ISO strings (a trailing 'Z' time part is tolerated)."""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if _blank(value):
        return None
    text = str(value).strip()
    if text.endswith('Z'):
        text = text[:-1] + '+00:00'
    try:
        if 'T' in text:
            return datetime.fromisoformat(text).date()
        return date.fromisoformat(text)
    except ValueError:
        errors[field] = 'Invalid date, expected YYYY-MM-DD'
        return None


def parse_number(value, field, errors):
    label = field.replace("_", " ").capitalize()
    try:
        number = to_decimal(value)
    except (InvalidOperation, TypeError, ValueError):
        errors[field] = f'{label} must be a number'
        return None
    if not number.is_finite():
        errors[field] = f'{label} must be a finite number'
        return None
    return number


def validate_customer(data, partial=False):
    errors = {}
    cleaned = {}
    labels = {'name': 'Name', 'email': 'Email', 'phone': 'Phone', 'address': 'Address'}

    for field, label in labels.items():
        if partial and field not in data:
            continue
        value = _clean(data.get(field))
        if _blank(value):
            errors[field] = f'{label} is required'
        else:
            cleaned[field] = value

    if 'email' in cleaned and not EMAIL_PATTERN.search(cleaned['email']):
        errors['email'] = 'Email is invalid'

    if 'company' in data:
        cleaned['company'] = _clean(data.get('company')) or None

    if errors:
        raise ValidationError(errors)
    return cleaned


def validate_project(data, partial=False):
    errors = {}
    cleaned = {}

    required = {
        'customer_id': 'Customer is required',
        'name': 'Project name is required',
        'description': 'Description is required',
        'start_date': 'Start date is required',
        'currency': 'Currency is required',
    }
    for field, message in required.items():
        if partial and field not in data:
            continue
        value = _clean(data.get(field))
        if _blank(value):
            errors[field] = message
        else:
            cleaned[field] = value

    if 'start_date' in cleaned:
        cleaned['start_date'] = parse_date(cleaned['start_date'], 'start_date', errors)

    if 'currency' in cleaned and cleaned['currency'] not in CURRENCIES:
        errors['currency'] = f"Currency must be one of: {', '.join(CURRENCIES)}"

    if 'status' in data:
        status = _clean(data.get('status')) or 'pending'
        if status not in PROJECT_STATUSES:
            errors['status'] = f"Status must be one of: {', '.join(PROJECT_STATUSES)}"
        cleaned['status'] = status

    if errors:
        raise ValidationError(errors)
    return cleaned


def validate_service_item(data, partial=False):
    errors = {}
    cleaned = {}

    if not partial or 'project_id' in data:
        if _blank(data.get('project_id')):
            errors['project_id'] = 'Project is required'
        else:
            cleaned['project_id'] = data['project_id']

    if not partial or 'name' in data:
        name = _clean(data.get('name'))
        if _blank(name):
            errors['name'] = 'Name is required'
        else:
            cleaned['name'] = name

    if 'description' in data:
        cleaned['description'] = _clean(data.get('description')) or ''

    if not partial or 'quantity' in data:
        quantity = parse_number(data.get('quantity', 1), 'quantity', errors)
        if quantity is not None:
            if quantity <= 0:
                errors['quantity'] = 'Quantity must be greater than zero'
            cleaned['quantity'] = quantity

    if not partial or 'price' in data:
        price = parse_number(data.get('price', 0), 'price', errors)
        if price is not None:
            if price < 0:
                errors['price'] = 'Price cannot be negative'
            cleaned['price'] = price

    if errors:
        raise ValidationError(errors)
    return cleaned


def validate_quotation(data, partial=False):
    errors = {}
    cleaned = {}

    if not partial or 'project_id' in data:
        if _blank(data.get('project_id')):
            errors['project_id'] = 'Project is required'
        else:
            cleaned['project_id'] = data['project_id']

    if not _blank(data.get('customer_id')):
        cleaned['customer_id'] = data['customer_id']

    for field in ('date', 'valid_until'):
        if field in data:
            parsed = parse_date(data.get(field), field, errors)
            if parsed is not None:
                cleaned[field] = parsed

    if cleaned.get('date') and cleaned.get('valid_until') and cleaned['valid_until'] < cleaned['date']:
        errors['valid_until'] = 'Valid until date cannot be before the quotation date'

    if 'status' in data:
        status = _clean(data.get('status'))
        if status not in QUOTATION_STATUSES:
            errors['status'] = f"Status must be one of: {', '.join(QUOTATION_STATUSES)}"
        cleaned['status'] = status

    if 'currency' in data:
        currency = _clean(data.get('currency'))
        if currency not in CURRENCIES:
            errors['currency'] = f"Currency must be one of: {', '.join(CURRENCIES)}"
        cleaned['currency'] = currency

    for field in ('notes', 'terms'):
        if field in data:
            cleaned[field] = data.get(field)

    if 'items' in data and data['items'] is not None:
        items = data['items']
        if not isinstance(items, list) or not items:
            errors['items'] = 'At least one service item is required'
        else:
            cleaned['items'] = _validate_line_items(items, errors)

    if errors:
        raise ValidationError(errors)
    return cleaned


def _validate_line_items(items, errors):
    cleaned = []
    for index, item in enumerate(items):
        if not isinstance(item, dict):
            errors['items'] = f'Item {index + 1} is malformed'
            continue
        quantity = parse_number(item.get('quantity', 1), 'quantity', errors)
        price = parse_number(item.get('price', 0), 'price', errors)
        item_id = item.get('id')
        if item_id is not None:
            try:
                item_id = int(item_id)
            except (TypeError, ValueError):
                errors['items'] = f'Item {index + 1} has an invalid service item id'
                item_id = None
        if quantity is not None and quantity <= 0:
            errors['items'] = f'Item {index + 1} quantity must be greater than zero'
        if price is not None and price < 0:
            errors['items'] = f'Item {index + 1} price cannot be negative'
        cleaned.append({
            'id': item_id,
            'name': item.get('name') or '',
            'description': item.get('description') or '',
            'quantity': quantity,
            'price': price,
        })
    return cleaned


def validate_company_settings(data):
    errors = {}
    cleaned = {}

    name = _clean(data.get('name'))
    if _blank(name):
        errors['name'] = 'Company name is required'
    else:
        cleaned['name'] = name

    for field in ('address', 'phone', 'email'):
        cleaned[field] = _clean(data.get(field)) or ''

    if cleaned['email'] and not EMAIL_PATTERN.search(cleaned['email']):
        errors['email'] = 'Email is invalid'

    if errors:
        raise ValidationError(errors)
    return cleaned
