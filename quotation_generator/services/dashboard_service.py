# quotation_generator/services/dashboard_service.py

import logging
from datetime import datetime
from decimal import Decimal

from sqlalchemy import func

from ..models import db, Customer, Project, Quotation

logger = logging.getLogger(__name__)

RECENT_LIMIT = 5


def _month_bounds(now):
    current_start = datetime(now.year, now.month, 1)
    if now.month == 12:
        next_start = datetime(now.year + 1, 1, 1)
    else:
        next_start = datetime(now.year, now.month + 1, 1)
    if now.month == 1:
        previous_start = datetime(now.year - 1, 12, 1)
    else:
        previous_start = datetime(now.year, now.month - 1, 1)
    return previous_start, current_start, next_start


def _quoted_between(start, end):
    amount = (
        db.session.query(func.coalesce(func.sum(Quotation.total), 0))
        .filter(Quotation.created_at >= start, Quotation.created_at < end)
        .scalar()
    )
    return Decimal(str(amount))


def monthly_change(current_total, previous_total):
    """
    Percentage change of the quoted amount between two months.

    None means there is nothing to compare against (new activity this month).
    """
    if previous_total > 0:
        return float((current_total - previous_total) / previous_total * 100)
    if current_total > 0:
        return None
    return 0.0


def get_stats(now=None):
    now = now or datetime.utcnow()
    previous_start, current_start, next_start = _month_bounds(now)

    total_amount = db.session.query(func.coalesce(func.sum(Quotation.total), 0)).scalar()
    current_total = _quoted_between(current_start, next_start)
    previous_total = _quoted_between(previous_start, current_start)

    recent_projects = (
        Project.query.order_by(Project.created_at.desc(), Project.id.desc()).limit(RECENT_LIMIT).all()
    )
    recent_quotations = (
        Quotation.query.order_by(Quotation.created_at.desc(), Quotation.id.desc()).limit(RECENT_LIMIT).all()
    )

    return {
        'total_customers': Customer.query.count(),
        'total_projects': Project.query.count(),
        'total_quotations': Quotation.query.count(),
        'total_amount': float(total_amount or 0),
        'current_month_amount': float(current_total),
        'previous_month_amount': float(previous_total),
        'monthly_amount_change': monthly_change(current_total, previous_total),
        'recent_projects': [project.to_dict() for project in recent_projects],
        'recent_quotations': [quotation.to_dict() for quotation in recent_quotations],
    }
