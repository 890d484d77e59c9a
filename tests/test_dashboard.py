# tests/test_dashboard.py
from datetime import datetime

from quotation_generator.models import db
from quotation_generator.services.dashboard_service import get_stats, monthly_change

NOW = datetime(2025, 3, 15, 12, 0)


def _backdate(quotation, when):
    quotation.created_at = when
    db.session.commit()


def test_empty_database(ctx):
    stats = get_stats(now=NOW)
    assert stats['total_customers'] == 0
    assert stats['total_amount'] == 0
    assert stats['monthly_amount_change'] == 0.0
    assert stats['recent_projects'] == []
    assert stats['recent_quotations'] == []


def test_totals_and_month_over_month_change(make_project, make_item, make_quotation):
    february = make_project(name='February job')
    march = make_project(name='March job')
    make_item(february, price=100)
    make_item(march, price=150)
    _backdate(make_quotation(february), datetime(2025, 2, 10))
    _backdate(make_quotation(march), datetime(2025, 3, 2))

    stats = get_stats(now=NOW)

    assert stats['total_customers'] == 2
    assert stats['total_projects'] == 2
    assert stats['total_quotations'] == 2
    assert stats['total_amount'] == 275.0
    assert stats['current_month_amount'] == 165.0
    assert stats['previous_month_amount'] == 110.0
    assert stats['monthly_amount_change'] == 50.0
    assert stats['recent_quotations'][0]['project_name'] == 'March job'


def test_january_compares_with_december(make_project, make_item, make_quotation):
    project = make_project()
    make_item(project, price=10)
    _backdate(make_quotation(project), datetime(2024, 12, 31, 23, 0))

    stats = get_stats(now=datetime(2025, 1, 5))
    assert stats['previous_month_amount'] == 11.0
    assert stats['monthly_amount_change'] == -100.0


def test_recent_lists_are_capped_at_five(make_customer, make_project):
    customer = make_customer()
    for n in range(7):
        make_project(customer, name=f'P{n}')
    recent = get_stats(now=NOW)['recent_projects']
    assert [p['name'] for p in recent] == ['P6', 'P5', 'P4', 'P3', 'P2']


def test_monthly_change_without_previous_month():
    assert monthly_change(100, 0) is None
    assert monthly_change(0, 0) == 0.0
    assert monthly_change(50, 200) == -75.0
