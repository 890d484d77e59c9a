# quotation_generator/routes/projects.py
from flask import Blueprint, request, jsonify
from flask_login import login_required
from sqlalchemy.exc import SQLAlchemyError

from ..services import project_service, quotation_service, service_item_service
from .common import json_body, page_args, store_failure

projects_bp = Blueprint('projects', __name__)


@projects_bp.route('', methods=['GET'])
@login_required
def get_projects():
    """List projects; supports ?search=, ?status= and ?customer_id="""
    page, per_page = page_args()
    try:
        result = project_service.search_page(
            search=request.args.get('search'),
            status=request.args.get('status'),
            customer_id=request.args.get('customer_id', type=int),
            page=page,
            per_page=per_page,
        )
    except SQLAlchemyError as e:
        return store_failure('retrieving projects', e)
    return jsonify(result)


@projects_bp.route('', methods=['POST'])
@login_required
def create_project():
    data = json_body()
    try:
        project = project_service.create(data)
    except SQLAlchemyError as e:
        return store_failure('creating project', e)
    return jsonify(project.to_dict()), 201


@projects_bp.route('/<int:project_id>', methods=['GET'])
@login_required
def get_project(project_id):
    try:
        project = project_service.get_by_id(project_id)
    except SQLAlchemyError as e:
        return store_failure(f'retrieving project {project_id}', e)
    return jsonify(project.to_dict())


@projects_bp.route('/<int:project_id>', methods=['PUT'])
@login_required
def update_project(project_id):
    data = json_body()
    try:
        project = project_service.update(project_id, data)
    except SQLAlchemyError as e:
        return store_failure(f'updating project {project_id}', e)
    return jsonify(project.to_dict())


@projects_bp.route('/<int:project_id>', methods=['DELETE'])
@login_required
def delete_project(project_id):
    """Delete a project with its service items and quotation"""
    try:
        project_service.delete(project_id)
    except SQLAlchemyError as e:
        return store_failure(f'deleting project {project_id}', e)
    return jsonify({'message': 'Project deleted successfully'})


@projects_bp.route('/<int:project_id>/service-items', methods=['GET'])
@login_required
def get_project_service_items(project_id):
    try:
        project_service.get_by_id(project_id)
        items = service_item_service.get_by_project_id(project_id)
    except SQLAlchemyError as e:
        return store_failure(f'retrieving service items for project {project_id}', e)
    return jsonify([item.to_dict() for item in items])


@projects_bp.route('/<int:project_id>/quotations', methods=['GET'])
@login_required
def get_project_quotations(project_id):
    try:
        project_service.get_by_id(project_id)
        quotations = quotation_service.get_by_project_id(project_id)
    except SQLAlchemyError as e:
        return store_failure(f'retrieving quotations for project {project_id}', e)
    return jsonify([quotation.to_dict() for quotation in quotations])


@projects_bp.route('/<int:project_id>/quotation', methods=['POST'])
@login_required
def create_project_quotation(project_id):
    """Quote a project from its current service items"""
    data = json_body()
    try:
        quotation = quotation_service.create_from_project(project_id, data)
    except SQLAlchemyError as e:
        return store_failure(f'creating quotation for project {project_id}', e)
    return jsonify(quotation.to_dict()), 201
