# quotation_generator/routes/customers.py
from flask import Blueprint, request, jsonify
from flask_login import login_required
from sqlalchemy.exc import SQLAlchemyError

from ..services import customer_service, project_service, quotation_service
from .common import json_body, page_args, store_failure

customers_bp = Blueprint('customers', __name__)


@customers_bp.route('', methods=['GET'])
@login_required
def get_customers():
    """List customers, newest first, filtered by ?search= and paginated"""
    page, per_page = page_args()
    try:
        return jsonify(customer_service.search_page(request.args.get('search'), page, per_page))
    except SQLAlchemyError as e:
        return store_failure('retrieving customers', e)


@customers_bp.route('', methods=['POST'])
@login_required
def create_customer():
    data = json_body()
    try:
        customer = customer_service.create(data)
    except SQLAlchemyError as e:
        return store_failure('creating customer', e)
    return jsonify(customer.to_dict()), 201


@customers_bp.route('/<int:customer_id>', methods=['GET'])
@login_required
def get_customer(customer_id):
    try:
        customer = customer_service.get_by_id(customer_id)
    except SQLAlchemyError as e:
        return store_failure(f'retrieving customer {customer_id}', e)
    return jsonify(customer.to_dict())


@customers_bp.route('/<int:customer_id>', methods=['PUT'])
@login_required
def update_customer(customer_id):
    data = json_body()
    try:
        customer = customer_service.update(customer_id, data)
    except SQLAlchemyError as e:
        return store_failure(f'updating customer {customer_id}', e)
    return jsonify(customer.to_dict())


@customers_bp.route('/<int:customer_id>', methods=['DELETE'])
@login_required
def delete_customer(customer_id):
    """Delete a customer with all of its projects, service items and quotations"""
    try:
        customer_service.delete(customer_id)
    except SQLAlchemyError as e:
        return store_failure(f'deleting customer {customer_id}', e)
    return jsonify({'message': 'Customer deleted successfully'})


@customers_bp.route('/<int:customer_id>/projects', methods=['GET'])
@login_required
def get_customer_projects(customer_id):
    try:
        customer_service.get_by_id(customer_id)
        projects = project_service.get_by_customer_id(customer_id)
    except SQLAlchemyError as e:
        return store_failure(f'retrieving projects for customer {customer_id}', e)
    return jsonify([project.to_dict() for project in projects])


@customers_bp.route('/<int:customer_id>/quotations', methods=['GET'])
@login_required
def get_customer_quotations(customer_id):
    try:
        customer_service.get_by_id(customer_id)
        quotations = quotation_service.get_by_customer_id(customer_id)
    except SQLAlchemyError as e:
        return store_failure(f'retrieving quotations for customer {customer_id}', e)
    return jsonify([quotation.to_dict() for quotation in quotations])
