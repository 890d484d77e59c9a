# quotation_generator/routes/service_items.py
from flask import Blueprint, request, jsonify
from flask_login import login_required
from sqlalchemy.exc import SQLAlchemyError

from ..services import service_item_service
from .common import json_body, store_failure

service_items_bp = Blueprint('service_items', __name__)


@service_items_bp.route('', methods=['GET'])
@login_required
def get_service_items():
    """All service items, or those of one project with ?project_id="""
    project_id = request.args.get('project_id', type=int)
    try:
        if project_id:
            items = service_item_service.get_by_project_id(project_id)
        else:
            items = service_item_service.get_all()
    except SQLAlchemyError as e:
        return store_failure('retrieving service items', e)
    return jsonify([item.to_dict() for item in items])


@service_items_bp.route('', methods=['POST'])
@login_required
def create_service_item():
    data = json_body()
    try:
        item = service_item_service.create(data)
    except SQLAlchemyError as e:
        return store_failure('creating service item', e)
    return jsonify(item.to_dict()), 201


@service_items_bp.route('/<int:item_id>', methods=['GET'])
@login_required
def get_service_item(item_id):
    try:
        item = service_item_service.get_by_id(item_id)
    except SQLAlchemyError as e:
        return store_failure(f'retrieving service item {item_id}', e)
    return jsonify(item.to_dict())


@service_items_bp.route('/<int:item_id>', methods=['PUT'])
@login_required
def update_service_item(item_id):
    data = json_body()
    try:
        item = service_item_service.update(item_id, data)
    except SQLAlchemyError as e:
        return store_failure(f'updating service item {item_id}', e)
    return jsonify(item.to_dict())


@service_items_bp.route('/<int:item_id>', methods=['DELETE'])
@login_required
def delete_service_item(item_id):
    try:
        service_item_service.delete(item_id)
    except SQLAlchemyError as e:
        return store_failure(f'deleting service item {item_id}', e)
    return jsonify({'message': 'Service item deleted successfully'})
