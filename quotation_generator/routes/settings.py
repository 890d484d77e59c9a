# quotation_generator/routes/settings.py
from flask import Blueprint, request, jsonify
from flask_login import login_required
from sqlalchemy.exc import SQLAlchemyError
import logging

from ..errors import ValidationError
from ..services import company_settings_service
from .common import json_body, store_failure

settings_bp = Blueprint('settings', __name__)
logger = logging.getLogger(__name__)


@settings_bp.route('', methods=['GET'])
@login_required
def get_settings():
    """Company details; null until they are saved for the first time"""
    try:
        settings = company_settings_service.get()
    except SQLAlchemyError as e:
        return store_failure('retrieving company settings', e)
    return jsonify(settings.to_dict() if settings else None)


@settings_bp.route('', methods=['PUT'])
@login_required
def save_settings():
    data = json_body()
    try:
        settings = company_settings_service.save(data)
    except SQLAlchemyError as e:
        return store_failure('saving company settings', e)
    return jsonify(settings.to_dict())


@settings_bp.route('/logo', methods=['POST'])
@login_required
def upload_logo():
    """Upload the company logo (multipart field 'logo')"""
    file = request.files.get('logo')
    if file is None or not file.filename:
        raise ValidationError({'logo': 'No logo file provided'})

    try:
        settings = company_settings_service.replace_logo(file.read(), file.filename)
    except SQLAlchemyError as e:
        return store_failure('saving company logo', e)
    logger.info(f"Company logo updated: {settings.logo_url}")
    return jsonify(settings.to_dict()), 201
