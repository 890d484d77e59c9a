# quotation_generator/services/service_item_service.py
"""
Service items under a project.

Every successful create, update or delete is followed by a sync of the
project's quotation (see ``aggregation.propagate_item_change``). The sync
runs after the item change is committed and never undoes it.
"""

import logging

from ..errors import NotFoundError, ValidationError
from ..models import db, Project, ServiceItem
from .aggregation import propagate_item_change
from .validation import validate_service_item

logger = logging.getLogger(__name__)


def _ordered(query):
    return query.order_by(ServiceItem.created_at.desc(), ServiceItem.id.desc())


def get_all():
    return _ordered(ServiceItem.query).all()


def get_by_project_id(project_id):
    return _ordered(ServiceItem.query.filter_by(project_id=project_id)).all()


def get_by_id(item_id):
    item = db.session.get(ServiceItem, item_id)
    if item is None:
        raise NotFoundError('Service item', item_id)
    return item


def _check_project(project_id):
    if db.session.get(Project, project_id) is None:
        raise ValidationError({'project_id': f'Project {project_id} does not exist'})


def create(data):
    fields = validate_service_item(data)
    _check_project(fields['project_id'])
    item = ServiceItem(**fields)
    try:
        db.session.add(item)
        db.session.commit()
    except Exception:
        db.session.rollback()
        raise

    logger.info(f"Created service item {item.id} under project {item.project_id}")
    propagate_item_change(item.project_id)
    return item


def update(item_id, data):
    item = get_by_id(item_id)
    fields = validate_service_item(data, partial=True)
    previous_project_id = item.project_id
    if 'project_id' in fields and fields['project_id'] != previous_project_id:
        _check_project(fields['project_id'])
    for name, value in fields.items():
        setattr(item, name, value)
    try:
        db.session.commit()
    except Exception:
        db.session.rollback()
        raise

    propagate_item_change(item.project_id)
    if item.project_id != previous_project_id:
        propagate_item_change(previous_project_id)
    return item


def delete(item_id):
    item = get_by_id(item_id)
    project_id = item.project_id
    try:
        db.session.delete(item)
        db.session.commit()
    except Exception:
        db.session.rollback()
        raise

    logger.info(f"Deleted service item {item_id} from project {project_id}")
    propagate_item_change(project_id)
    return True
