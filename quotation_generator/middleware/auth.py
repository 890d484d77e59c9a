# quotation_generator/middleware/auth.py

import hmac
import logging

from flask import jsonify, request
from flask_login import LoginManager, UserMixin

logger = logging.getLogger(__name__)


class ApiClient(UserMixin):
    """The caller holding the shared access key. There is one per request."""

    def __init__(self, key_hint):
        self.id = key_hint

    def __repr__(self):
        return f'<ApiClient {self.id}>'


def _presented_key(header_name):
    key = request.headers.get(header_name)
    if key:
        return key.strip()
    authorization = request.headers.get('Authorization', '')
    if authorization.lower().startswith('bearer '):
        return authorization[7:].strip()
    return None


def init_auth(app):
    """Wire Flask-Login so @login_required checks the access key header."""
    login_manager = LoginManager()
    login_manager.init_app(app)

    @login_manager.request_loader
    def load_client(req):
        expected = app.config.get('API_ACCESS_KEY')
        presented = _presented_key(app.config.get('API_KEY_HEADER', 'X-API-Key'))
        if not expected or not presented:
            return None
        if not hmac.compare_digest(presented.encode('utf-8'), expected.encode('utf-8')):
            logger.warning(f"Invalid access key presented for {req.path} from {req.remote_addr}")
            return None
        return ApiClient(presented[-4:])

    @login_manager.user_loader
    def load_user(client_id):
        # Sessions are never used for API clients
        return None

    @login_manager.unauthorized_handler
    def handle_unauthorized():
        """Return JSON instead of redirecting to a login page"""
        logger.warning(f"Unauthorized API access attempt to {request.path} from {request.remote_addr}")
        return jsonify({
            'error': 'Authentication required',
            'message': 'A valid access key is required to access this endpoint',
            'code': 'UNAUTHORIZED',
        }), 401

    return login_manager
