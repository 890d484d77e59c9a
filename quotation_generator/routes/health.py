# quotation_generator/routes/health.py
from datetime import datetime

from flask import Blueprint, jsonify, current_app
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from ..config import REQUIRED_SETTINGS
from ..models import db

health_bp = Blueprint('health', __name__)

APP_NAME = 'Quotation Generator API'
APP_VERSION = '1.0.0'


def _database_check():
    try:
        db.session.execute(text('SELECT 1'))
        db.session.commit()
    except SQLAlchemyError as db_error:
        db.session.rollback()
        current_app.logger.error(f"Database health check failed: {db_error}")
        return {'status': 'unhealthy', 'connected': False, 'error': str(db_error)}

    db_url = current_app.config.get('SQLALCHEMY_DATABASE_URI') or ''
    if 'sqlite' in db_url.lower():
        db_type = 'SQLite'
    elif 'postgres' in db_url.lower():
        db_type = 'PostgreSQL'
    else:
        db_type = db_url.split('://')[0] if '://' in db_url else 'Unknown'
    return {'status': 'healthy', 'type': db_type, 'connected': True}


def _configuration_check():
    config_keys = {'DATABASE_URL': 'SQLALCHEMY_DATABASE_URI', 'API_ACCESS_KEY': 'API_ACCESS_KEY'}
    missing = [name for name in REQUIRED_SETTINGS if not current_app.config.get(config_keys[name])]
    if missing:
        current_app.logger.warning(f"Configuration issues detected: {missing}")
    return {
        'status': 'healthy' if not missing else 'warning',
        'issues': [f'Missing {name}' for name in missing],
        'cors_configured': bool(current_app.config.get('CORS_ORIGINS')),
    }


def _storage_check():
    storage = current_app.extensions.get('blob_storage')
    if storage is not None and storage.use_azure:
        return {'status': 'healthy', 'configured': True, 'backend': 'azure', 'container': storage.container_name}
    if current_app.config.get('AZURE_STORAGE_CONNECTION_STRING'):
        # Configured but the client could not be created
        return {'status': 'warning', 'configured': True, 'backend': 'local'}
    return {
        'status': 'info',
        'configured': False,
        'backend': 'local',
        'message': 'Azure Storage not configured, logos are stored locally',
    }


@health_bp.route('/health', methods=['GET'])
def health_check():
    """
    Service health: database connectivity, configuration and logo storage.

    Answers 503 when the database is unreachable and reports 'degraded'
    when any other check carries a warning.
    """
    checks = {
        'database': _database_check(),
        'configuration': _configuration_check(),
        'storage': _storage_check(),
    }

    status = 'healthy'
    status_code = 200
    if checks['database']['status'] == 'unhealthy':
        status = 'unhealthy'
        status_code = 503
    elif any(check['status'] == 'warning' for check in checks.values()):
        status = 'degraded'

    current_app.logger.info(f"Health check completed: {status}")
    return jsonify({
        'status': status,
        'app': APP_NAME,
        'version': APP_VERSION,
        'timestamp': datetime.utcnow().isoformat() + 'Z',
        'checks': checks,
    }), status_code
