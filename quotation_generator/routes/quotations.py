# quotation_generator/routes/quotations.py
from flask import Blueprint, request, jsonify, send_file
from flask_login import login_required
from sqlalchemy.exc import SQLAlchemyError
from io import BytesIO

from ..errors import ValidationError
from ..services import company_settings_service, quotation_service
from ..services.quotation_document import render_quotation_pdf
from .common import json_body, page_args, store_failure

quotations_bp = Blueprint('quotations', __name__)


@quotations_bp.route('', methods=['GET'])
@login_required
def get_quotations():
    """List quotations; supports ?search=, ?status= and ?project_id="""
    page, per_page = page_args()
    try:
        result = quotation_service.search_page(
            search=request.args.get('search'),
            status=request.args.get('status'),
            project_id=request.args.get('project_id', type=int),
            page=page,
            per_page=per_page,
        )
    except SQLAlchemyError as e:
        return store_failure('retrieving quotations', e)
    return jsonify(result)


@quotations_bp.route('', methods=['POST'])
@login_required
def create_quotation():
    data = json_body()
    try:
        quotation = quotation_service.create(data)
    except SQLAlchemyError as e:
        return store_failure('creating quotation', e)
    return jsonify(quotation.to_dict()), 201


@quotations_bp.route('/<int:quotation_id>', methods=['GET'])
@login_required
def get_quotation(quotation_id):
    try:
        quotation = quotation_service.get_by_id(quotation_id)
    except SQLAlchemyError as e:
        return store_failure(f'retrieving quotation {quotation_id}', e)
    return jsonify(quotation.to_dict())


@quotations_bp.route('/<int:quotation_id>', methods=['PUT'])
@login_required
def update_quotation(quotation_id):
    data = json_body()
    try:
        quotation = quotation_service.update(quotation_id, data)
    except SQLAlchemyError as e:
        return store_failure(f'updating quotation {quotation_id}', e)
    return jsonify(quotation.to_dict())


@quotations_bp.route('/<int:quotation_id>', methods=['DELETE'])
@login_required
def delete_quotation(quotation_id):
    try:
        quotation_service.delete(quotation_id)
    except SQLAlchemyError as e:
        return store_failure(f'deleting quotation {quotation_id}', e)
    return jsonify({'message': 'Quotation deleted successfully'})


@quotations_bp.route('/<int:quotation_id>/status', methods=['POST'])
@login_required
def change_quotation_status(quotation_id):
    """Move the quotation to a new status; accepting also starts the project"""
    status = json_body().get('status')
    if not status:
        raise ValidationError({'status': 'Status is required'})
    try:
        quotation = quotation_service.change_status(quotation_id, status)
    except SQLAlchemyError as e:
        return store_failure(f'updating status of quotation {quotation_id}', e)
    return jsonify(quotation.to_dict())


@quotations_bp.route('/<int:quotation_id>/document', methods=['GET'])
@login_required
def download_quotation(quotation_id):
    """Render the printable quotation as a PDF download"""
    try:
        quotation = quotation_service.get_by_id(quotation_id)
        settings = company_settings_service.get()
    except SQLAlchemyError as e:
        return store_failure(f'loading quotation {quotation_id} for printing', e)

    pdf = render_quotation_pdf(quotation, settings)
    return send_file(
        BytesIO(pdf),
        mimetype='application/pdf',
        as_attachment=True,
        download_name=f'quotation_{quotation_id}.pdf',
    )
