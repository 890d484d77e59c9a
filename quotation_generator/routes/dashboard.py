# quotation_generator/routes/dashboard.py
from flask import Blueprint, jsonify
from flask_login import login_required
from sqlalchemy.exc import SQLAlchemyError

from ..services import dashboard_service
from .common import store_failure

dashboard_bp = Blueprint('dashboard', __name__)


@dashboard_bp.route('', methods=['GET'])
@login_required
def get_dashboard():
    try:
        return jsonify(dashboard_service.get_stats())
    except SQLAlchemyError as e:
        return store_failure('computing dashboard statistics', e)
