# quotation_generator/services/customer_service.py

import logging

from ..errors import NotFoundError
from ..models import db, Customer, Project
from . import project_service, quotation_service
from .listing import search_filter, paginate
from .validation import validate_customer

logger = logging.getLogger(__name__)


def _ordered(query):
    return query.order_by(Customer.created_at.desc(), Customer.id.desc())


def get_all(search=None):
    query = Customer.query
    if search:
        query = query.filter(search_filter(search, Customer.name, Customer.email, Customer.company))
    return _ordered(query).all()


def search_page(search=None, page=1, per_page=None):
    query = Customer.query
    if search:
        query = query.filter(search_filter(search, Customer.name, Customer.email, Customer.company))
    return paginate(_ordered(query), page, per_page)


def get_by_id(customer_id):
    customer = db.session.get(Customer, customer_id)
    if customer is None:
        raise NotFoundError('Customer', customer_id)
    return customer


def create(data):
    fields = validate_customer(data)
    customer = Customer(**fields)
    try:
        db.session.add(customer)
        db.session.commit()
    except Exception:
        db.session.rollback()
        raise
    logger.info(f"Created customer {customer.id} ({customer.name})")
    return customer


def update(customer_id, data):
    customer = get_by_id(customer_id)
    fields = validate_customer(data, partial=True)
    for name, value in fields.items():
        setattr(customer, name, value)
    try:
        db.session.commit()
    except Exception:
        db.session.rollback()
        raise
    return customer


def delete(customer_id):
    """
    Delete a customer together with its projects, their service items and
    their quotations.

    Runs as one transaction: any failing step rolls back every earlier step
    and the error is re-raised to the caller.
    """
    logger.info(f"Starting customer delete process for ID: {customer_id}")
    try:
        project_ids = [
            row.id for row in Project.query.with_entities(Project.id).filter_by(customer_id=customer_id)
        ]
        logger.info(f"Found {len(project_ids)} projects for customer {customer_id}")

        if project_ids:
            project_service.delete_dependents(project_ids)
            deleted_projects = (
                Project.query
                .filter(Project.id.in_(project_ids))
                .delete(synchronize_session=False)
            )
            logger.info(f"Deleted {deleted_projects} projects")

        deleted_quotations = quotation_service.delete_for_customer(customer_id)
        if deleted_quotations:
            logger.info(f"Deleted {deleted_quotations} remaining quotations of customer {customer_id}")

        deleted = Customer.query.filter_by(id=customer_id).delete(synchronize_session=False)
        if not deleted:
            raise NotFoundError('Customer', customer_id)

        db.session.commit()
    except Exception as e:
        db.session.rollback()
        logger.error(f"Error deleting customer {customer_id}: {str(e)}")
        raise

    logger.info(f"Customer {customer_id} deleted successfully")
    return True
