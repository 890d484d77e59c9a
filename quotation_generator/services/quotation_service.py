# quotation_generator/services/quotation_service.py

import logging
from datetime import date, timedelta

from flask import current_app
from sqlalchemy import String, cast
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from ..errors import ConflictError, InvalidTransitionError, NotFoundError, ValidationError
from ..models import db, Customer, Project, Quotation, QuotationItem, ServiceItem, QUOTATION_STATUSES
from .aggregation import apply_items, snapshot_items
from .listing import search_filter, paginate
from .validation import validate_quotation

logger = logging.getLogger(__name__)

DEFAULT_NOTES = 'Please review the quotation details above. Let us know if you have any questions.'
DEFAULT_TERMS = (
    '1. 50% deposit required before work begins.\n'
    '2. Remaining balance due upon project completion.\n'
    '3. Revisions limited to two rounds per deliverable.\n'
    '4. Additional revisions billed at hourly rate.'
)

# draft -> sent is one-way; accepted and rejected can return to sent
ALLOWED_TRANSITIONS = {
    'draft': {'sent'},
    'sent': {'accepted', 'rejected'},
    'accepted': {'sent'},
    'rejected': {'sent'},
}


def _ordered(query):
    return query.order_by(Quotation.created_at.desc(), Quotation.id.desc())


def get_all():
    return _ordered(Quotation.query).all()


def get_by_project_id(project_id):
    return _ordered(Quotation.query.filter_by(project_id=project_id)).all()


def get_by_customer_id(customer_id):
    return _ordered(Quotation.query.filter_by(customer_id=customer_id)).all()


def get_by_id(quotation_id):
    quotation = db.session.get(Quotation, quotation_id)
    if quotation is None:
        raise NotFoundError('Quotation', quotation_id)
    return quotation


def search_page(search=None, status=None, project_id=None, page=1, per_page=None):
    query = (
        Quotation.query
        .join(Project, Quotation.project_id == Project.id)
        .join(Customer, Quotation.customer_id == Customer.id)
    )
    if search:
        query = query.filter(search_filter(search, cast(Quotation.id, String), Project.name, Customer.name))
    if status and status != 'all':
        query = query.filter(Quotation.status == status)
    if project_id and project_id != 'all':
        query = query.filter(Quotation.project_id == project_id)
    return paginate(_ordered(query), page, per_page)


def _load_project(project_id):
    project = db.session.get(Project, project_id)
    if project is None:
        raise ValidationError({'project_id': f'Project {project_id} does not exist'})
    return project


def _ensure_no_quotation(project_id, exclude_id=None):
    query = Quotation.query.filter_by(project_id=project_id)
    if exclude_id is not None:
        query = query.filter(Quotation.id != exclude_id)
    existing = query.first()
    if existing is not None:
        raise ConflictError(
            f'Project {project_id} already has a quotation',
            quotation_id=existing.id,
        )


def _project_items(project_id):
    items = (
        ServiceItem.query
        .filter_by(project_id=project_id)
        .order_by(ServiceItem.created_at.desc(), ServiceItem.id.desc())
        .all()
    )
    return snapshot_items(items)


def _check_item_ids(items):
    """Line items may only reference service items that still exist."""
    ids = {item['id'] for item in items if item.get('id') is not None}
    if not ids:
        return
    found = {
        row.id for row in
        ServiceItem.query.with_entities(ServiceItem.id).filter(ServiceItem.id.in_(ids))
    }
    missing = sorted(ids - found)
    if missing:
        raise ValidationError({'items': f"Service item {missing[0]} does not exist"})


def _check_customer(fields, project):
    customer_id = fields.get('customer_id')
    if customer_id is not None and int(customer_id) != project.customer_id:
        raise ValidationError({'customer_id': 'Customer does not own the selected project'})


def create(data):
    """
    Create the quotation for a project.

    Line items default to the project's current service items, customer and
    currency to the project's, and the quotation always starts as a draft.
    Totals are computed here from the items; client-sent totals are ignored.
    """
    fields = validate_quotation(data)
    project = _load_project(fields['project_id'])
    _check_customer(fields, project)
    _ensure_no_quotation(project.id)

    items = fields.get('items')
    if items is None:
        items = _project_items(project.id)
    if not items:
        raise ValidationError({'items': 'At least one service item is required'})
    _check_item_ids(items)

    quote_date = fields.get('date') or date.today()
    valid_until = fields.get('valid_until') or quote_date + timedelta(
        days=current_app.config.get('QUOTATION_VALIDITY_DAYS', 30)
    )
    if valid_until < quote_date:
        raise ValidationError({'valid_until': 'Valid until date cannot be before the quotation date'})

    quotation = Quotation(
        project_id=project.id,
        customer_id=project.customer_id,
        date=quote_date,
        valid_until=valid_until,
        status='draft',
        currency=fields.get('currency') or project.currency,
        notes=fields['notes'] if 'notes' in fields else DEFAULT_NOTES,
        terms=fields['terms'] if 'terms' in fields else DEFAULT_TERMS,
    )
    totals = apply_items(quotation, items)

    try:
        db.session.add(quotation)
        db.session.commit()
    except IntegrityError as e:
        db.session.rollback()
        logger.warning(f"Quotation insert for project {project.id} rejected: {str(e)}")
        existing = Quotation.query.filter_by(project_id=project.id).first()
        if existing is not None:
            raise ConflictError(f'Project {project.id} already has a quotation', quotation_id=existing.id)
        raise
    except Exception:
        db.session.rollback()
        raise

    logger.info(
        f"Created quotation {quotation.id} for project {quotation.project_id} "
        f"with {len(items)} items, total {totals.total} {quotation.currency}"
    )
    return quotation


def create_from_project(project_id, data=None):
    payload = dict(data or {})
    payload['project_id'] = project_id
    return create(payload)


def _check_transition(current, requested):
    if requested not in QUOTATION_STATUSES:
        raise ValidationError({'status': f"Status must be one of: {', '.join(QUOTATION_STATUSES)}"})
    if requested != current and requested not in ALLOWED_TRANSITIONS.get(current, set()):
        raise InvalidTransitionError(current, requested)


def update(quotation_id, data):
    quotation = get_by_id(quotation_id)
    fields = validate_quotation(data, partial=True)
    previous_status = quotation.status

    if 'status' in fields:
        _check_transition(previous_status, fields['status'])

    if 'project_id' in fields and int(fields['project_id']) != quotation.project_id:
        project = _load_project(fields['project_id'])
        _ensure_no_quotation(project.id, exclude_id=quotation.id)
        quotation.project_id = project.id
        quotation.customer_id = project.customer_id
    elif 'customer_id' in fields:
        _check_customer(fields, quotation.project)

    quote_date = fields.get('date', quotation.date)
    valid_until = fields.get('valid_until', quotation.valid_until)
    if valid_until < quote_date:
        raise ValidationError({'valid_until': 'Valid until date cannot be before the quotation date'})
    quotation.date = quote_date
    quotation.valid_until = valid_until

    for name in ('status', 'currency', 'notes', 'terms'):
        if name in fields:
            setattr(quotation, name, fields[name])

    if 'items' in fields:
        _check_item_ids(fields['items'])
        apply_items(quotation, fields['items'])

    try:
        db.session.commit()
    except Exception:
        db.session.rollback()
        raise

    if quotation.status == 'accepted' and previous_status != 'accepted':
        _mark_project_in_progress(quotation.project_id)
    return quotation


def change_status(quotation_id, status):
    """
    Move a quotation along draft -> sent -> accepted/rejected.

    Accepting also moves the project to 'in-progress'. That follow-up is
    best effort and is not reverted if the quotation later leaves 'accepted'.
    """
    quotation = get_by_id(quotation_id)
    previous_status = quotation.status
    _check_transition(previous_status, status)
    if status == previous_status:
        return quotation

    quotation.status = status
    try:
        db.session.commit()
    except Exception:
        db.session.rollback()
        raise
    logger.info(f"Quotation {quotation_id} status changed from {previous_status} to {status}")

    if status == 'accepted':
        _mark_project_in_progress(quotation.project_id)
    return quotation


def _mark_project_in_progress(project_id):
    try:
        project = db.session.get(Project, project_id)
        if project is None:
            logger.warning(f"Accepted quotation references missing project {project_id}")
            return
        project.status = 'in-progress'
        db.session.commit()
        logger.info(f"Project {project_id} status updated to in-progress.")
    except SQLAlchemyError as e:
        db.session.rollback()
        logger.error(f"Error updating project status for project {project_id}: {str(e)}")


def delete_for_projects(project_ids):
    """Delete the quotations (and their line items) of the given projects without committing."""
    quotation_ids = [
        row.id for row in
        Quotation.query.with_entities(Quotation.id).filter(Quotation.project_id.in_(project_ids))
    ]
    if not quotation_ids:
        return 0
    QuotationItem.query.filter(
        QuotationItem.quotation_id.in_(quotation_ids)
    ).delete(synchronize_session=False)
    return (
        Quotation.query
        .filter(Quotation.id.in_(quotation_ids))
        .delete(synchronize_session=False)
    )


def delete_for_customer(customer_id):
    """Delete the quotations (and their line items) billed to a customer without committing."""
    quotation_ids = [
        row.id for row in
        Quotation.query.with_entities(Quotation.id).filter(Quotation.customer_id == customer_id)
    ]
    if not quotation_ids:
        return 0
    QuotationItem.query.filter(
        QuotationItem.quotation_id.in_(quotation_ids)
    ).delete(synchronize_session=False)
    return (
        Quotation.query
        .filter(Quotation.id.in_(quotation_ids))
        .delete(synchronize_session=False)
    )


def reassign_customer(project_id, customer_id):
    """Bill the project's quotation to its new customer; the caller commits."""
    quotation = Quotation.query.filter_by(project_id=project_id).first()
    if quotation is not None:
        quotation.customer_id = customer_id
        logger.info(f"Quotation {quotation.id} moved to customer {customer_id} with project {project_id}")
    return quotation


def delete(quotation_id):
    try:
        QuotationItem.query.filter_by(quotation_id=quotation_id).delete(synchronize_session=False)
        deleted = Quotation.query.filter_by(id=quotation_id).delete(synchronize_session=False)
        if not deleted:
            raise NotFoundError('Quotation', quotation_id)
        db.session.commit()
    except Exception:
        db.session.rollback()
        raise
    logger.info(f"Quotation {quotation_id} deleted")
    return True
