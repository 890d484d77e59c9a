# tests/test_aggregation.py
from decimal import Decimal

from quotation_generator.services.aggregation import (
    TAX_RATE,
    recompute_totals,
    snapshot_items,
)


def test_totals_for_two_items():
    totals = recompute_totals([
        {'price': 100, 'quantity': 2},
        {'price': 50, 'quantity': 1},
    ])
    assert totals.subtotal == Decimal('250.00')
    assert totals.tax == Decimal('25.00')
    assert totals.total == Decimal('275.00')


def test_empty_items_give_zero_totals():
    assert recompute_totals([]) == (Decimal('0'), Decimal('0'), Decimal('0'))


def test_total_is_subtotal_plus_tax():
    totals = recompute_totals([{'price': '19.99', 'quantity': '3'}, {'price': '0.05', 'quantity': 1}])
    assert totals.subtotal == Decimal('60.02')
    assert totals.tax == Decimal('6.00')
    assert totals.total == totals.subtotal + totals.tax


def test_tax_is_rounded_half_up_to_cents():
    totals = recompute_totals([{'price': '0.25', 'quantity': 1}])
    assert totals.tax == Decimal('0.03')


def test_fractional_quantities():
    totals = recompute_totals([{'price': 80, 'quantity': '1.5'}])
    assert totals.subtotal == Decimal('120.00')
    assert totals.total == Decimal('132.00')


def test_recompute_is_idempotent():
    items = [{'price': 12.5, 'quantity': 4}, {'price': 3, 'quantity': 0.5}]
    first = recompute_totals(items)
    assert recompute_totals(items) == first
    assert recompute_totals(snapshot_items([dict(item, id=None, name='x') for item in items])) == first


def test_tax_rate_is_ten_percent():
    assert TAX_RATE == Decimal('0.10')


def test_snapshot_copies_quotable_fields(make_project, make_item):
    project = make_project()
    item = make_item(project, price=42, quantity=2, name='Hosting')

    snapshot = snapshot_items([item])

    assert snapshot == [{
        'id': item.id,
        'name': 'Hosting',
        'description': 'Hosting work',
        'quantity': Decimal('2'),
        'price': Decimal('42'),
    }]
