# quotation_generator/routes/common.py
# Request helpers shared by the API blueprints

import logging

from flask import jsonify, request

from ..errors import ValidationError
from ..models import db

logger = logging.getLogger(__name__)


def json_body():
    """Return the JSON object sent with the request, or raise a 400."""
    data = request.get_json(silent=True)
    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise ValidationError({'body': 'Request body must be a JSON object'})
    return data


def page_args():
    """Read ``page`` and ``per_page`` from the query string."""
    page = request.args.get('page', 1, type=int)
    per_page = request.args.get('per_page', None, type=int)
    return page, per_page


def store_failure(action, error):
    """Roll back after a database error and answer with a 500."""
    db.session.rollback()
    logger.error(f"Database error while {action}: {str(error)}")
    return jsonify({'error': f'Database error while {action}'}), 500
