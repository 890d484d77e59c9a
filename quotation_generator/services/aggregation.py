# quotation_generator/services/aggregation.py
"""
Quotation totals and their synchronisation with a project's service items.

Service items are the source of truth. A quotation's line items and its
subtotal, tax and total are a derived copy that is refreshed whenever the
project's item set changes.
"""

import logging
from collections import namedtuple
from decimal import Decimal, ROUND_HALF_UP

from sqlalchemy.exc import SQLAlchemyError

from ..models import db, Quotation, QuotationItem, ServiceItem

logger = logging.getLogger(__name__)

TAX_RATE = Decimal('0.10')
CENTS = Decimal('0.01')

Totals = namedtuple('Totals', ['subtotal', 'tax', 'total'])


def to_decimal(value):
    """Convert floats, ints, strings or None into a Decimal without float noise."""
    if value is None or value == '':
        return Decimal('0')
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


def _field(item, name):
    if isinstance(item, dict):
        return item.get(name)
    return getattr(item, name)


def recompute_totals(items):
    """
    Compute subtotal, tax and total for a sequence of line items.

    Each item is a mapping or object with ``price`` and ``quantity``.
    Subtotal and tax are rounded to cents (half up) and total is their
    exact sum, so ``total == subtotal + tax`` always holds.
    """
    subtotal = sum(
        (to_decimal(_field(item, 'price')) * to_decimal(_field(item, 'quantity')) for item in items),
        Decimal('0'),
    ).quantize(CENTS, rounding=ROUND_HALF_UP)
    tax = (subtotal * TAX_RATE).quantize(CENTS, rounding=ROUND_HALF_UP)
    return Totals(subtotal=subtotal, tax=tax, total=subtotal + tax)


def snapshot_items(service_items):
    """Copy the quotable fields of each service item (model rows or dicts)."""
    return [
        {
            'id': _field(item, 'id'),
            'name': _field(item, 'name') or '',
            'description': _field(item, 'description') or '',
            'quantity': to_decimal(_field(item, 'quantity')),
            'price': to_decimal(_field(item, 'price')),
        }
        for item in service_items
    ]


def build_line_items(items):
    """Turn item snapshots (dicts) into QuotationItem rows, preserving order."""
    line_items = []
    for position, item in enumerate(items):
        line_items.append(QuotationItem(
            service_item_id=item.get('id'),
            name=item.get('name') or '',
            description=item.get('description') or '',
            quantity=to_decimal(item.get('quantity', 1)),
            price=to_decimal(item.get('price', 0)),
            position=position,
        ))
    return line_items


def apply_items(quotation, items):
    """Replace a quotation's line items and refresh its totals in the session."""
    totals = recompute_totals(items)
    quotation.line_items = build_line_items(items)
    quotation.subtotal = totals.subtotal
    quotation.tax = totals.tax
    quotation.total = totals.total
    return totals


def propagate_item_change(project_id, updated_items=None):
    """
    Push a project's current service items onto its linked quotation.

    Called after a service item was created, edited or deleted and that
    change has already been committed. Returns the updated quotation, or
    None when the project has no quotation or the sync failed. A failed
    sync is logged and rolled back; the triggering item change stands.
    """
    quotation_id = None
    try:
        quotation = Quotation.query.filter_by(project_id=project_id).first()
        if quotation is None:
            logger.debug(f"No quotation linked to project {project_id}; nothing to sync")
            return None

        quotation_id = quotation.id
        if updated_items is None:
            updated_items = (
                ServiceItem.query
                .filter_by(project_id=project_id)
                .order_by(ServiceItem.created_at.desc(), ServiceItem.id.desc())
                .all()
            )
        snapshots = snapshot_items(updated_items)
        totals = apply_items(quotation, snapshots)
        db.session.commit()
        logger.info(
            f"Linked quotation {quotation_id} updated with {len(snapshots)} items "
            f"(subtotal={totals.subtotal}, tax={totals.tax}, total={totals.total})"
        )
        return quotation
    except SQLAlchemyError as e:
        db.session.rollback()
        logger.error(f"Error updating linked quotation {quotation_id} for project {project_id}: {str(e)}")
        return None
