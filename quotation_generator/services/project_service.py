# quotation_generator/services/project_service.py

import logging

from ..errors import NotFoundError, ValidationError
from ..models import db, Customer, Project, ServiceItem
from . import quotation_service
from .listing import search_filter, paginate
from .validation import validate_project

logger = logging.getLogger(__name__)


def _ordered(query):
    return query.order_by(Project.created_at.desc(), Project.id.desc())


def get_all():
    return _ordered(Project.query).all()


def get_by_customer_id(customer_id):
    return _ordered(Project.query.filter_by(customer_id=customer_id)).all()


def search_page(search=None, status=None, customer_id=None, page=1, per_page=None):
    query = Project.query.join(Customer, Project.customer_id == Customer.id)
    if search:
        query = query.filter(search_filter(search, Project.name, Project.description, Customer.name))
    if status and status != 'all':
        query = query.filter(Project.status == status)
    if customer_id:
        query = query.filter(Project.customer_id == customer_id)
    return paginate(_ordered(query), page, per_page)


def get_by_id(project_id):
    project = db.session.get(Project, project_id)
    if project is None:
        raise NotFoundError('Project', project_id)
    return project


def _check_customer(customer_id):
    if db.session.get(Customer, customer_id) is None:
        raise ValidationError({'customer_id': f'Customer {customer_id} does not exist'})


def create(data):
    fields = validate_project(data)
    _check_customer(fields['customer_id'])
    project = Project(**fields)
    try:
        db.session.add(project)
        db.session.commit()
    except Exception:
        db.session.rollback()
        raise
    logger.info(f"Created project {project.id} for customer {project.customer_id}")
    return project


def update(project_id, data):
    project = get_by_id(project_id)
    fields = validate_project(data, partial=True)
    if 'customer_id' in fields and fields['customer_id'] != project.customer_id:
        _check_customer(fields['customer_id'])
        quotation_service.reassign_customer(project.id, fields['customer_id'])
    for name, value in fields.items():
        setattr(project, name, value)
    try:
        db.session.commit()
    except Exception:
        db.session.rollback()
        raise
    return project


def delete_dependents(project_ids):
    """
    Delete the service items and quotations of the given projects.

    Does not commit; callers own the transaction.
    """
    deleted_items = (
        ServiceItem.query
        .filter(ServiceItem.project_id.in_(project_ids))
        .delete(synchronize_session=False)
    )
    logger.info(f"Deleted {deleted_items} service items")

    deleted_quotations = quotation_service.delete_for_projects(project_ids)
    logger.info(f"Deleted {deleted_quotations} quotations")
    return deleted_items, deleted_quotations


def delete(project_id):
    """Delete a project, its service items and its quotation in one transaction."""
    logger.info(f"Starting project delete process for ID: {project_id}")
    try:
        delete_dependents([project_id])
        deleted = Project.query.filter_by(id=project_id).delete(synchronize_session=False)
        if not deleted:
            raise NotFoundError('Project', project_id)
        db.session.commit()
    except Exception as e:
        db.session.rollback()
        logger.error(f"Error deleting project {project_id}: {str(e)}")
        raise

    logger.info(f"Project {project_id} deleted successfully")
    return True
