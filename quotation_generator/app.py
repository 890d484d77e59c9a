import os
import logging

from flask import Flask, request, jsonify, send_from_directory
from flask_cors import CORS
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from .config import config, get_config_name
from .errors import QuotationGeneratorError
from .middleware import init_auth
from .models import db
from .routes import BLUEPRINTS
from .services.azure_storage import AzureStorageService


def configure_logging(app, config_name):
    level = getattr(logging, str(app.config.get('LOG_LEVEL', 'INFO')).upper(), logging.INFO)
    if config_name == 'production' and not app.debug:
        logging.basicConfig(level=level)
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(
            '%(asctime)s %(levelname)s: %(message)s [in %(pathname)s:%(lineno)d]'
        ))
        app.logger.addHandler(handler)
        app.logger.setLevel(level)
        app.logger.info("Production logging configured")
    elif app.debug:
        logging.basicConfig(level=logging.DEBUG)
        app.logger.setLevel(logging.DEBUG)
    else:
        logging.getLogger('quotation_generator').setLevel(level)
        app.logger.setLevel(level)


def register_error_handlers(app):
    """JSON bodies for domain errors and the common HTTP failures"""

    @app.errorhandler(QuotationGeneratorError)
    def handle_domain_error(error):
        if error.status_code >= 500:
            app.logger.error(f"{error.code} on {request.path}: {error.message}")
        else:
            app.logger.info(f"{error.code} on {request.method} {request.path}: {error.message}")
        return jsonify(error.to_dict()), error.status_code

    @app.errorhandler(404)
    def not_found(error):
        return jsonify({
            'error': 'Not Found',
            'message': f'The requested endpoint {request.path} does not exist',
            'code': 'NOT_FOUND',
        }), 404

    @app.errorhandler(405)
    def method_not_allowed(error):
        return jsonify({
            'error': 'Method Not Allowed',
            'message': f'The method {request.method} is not allowed for endpoint {request.path}',
            'code': 'METHOD_NOT_ALLOWED',
            'allowed_methods': list(error.valid_methods) if getattr(error, 'valid_methods', None) else None,
        }), 405

    @app.errorhandler(413)
    def payload_too_large(error):
        return jsonify({
            'error': 'Payload Too Large',
            'message': 'Uploaded file exceeds the maximum allowed size',
            'code': 'PAYLOAD_TOO_LARGE',
        }), 413

    @app.errorhandler(500)
    def internal_error(error):
        """500 handler with database rollback"""
        db.session.rollback()
        app.logger.error(f"Internal server error: {error}")
        return jsonify({
            'error': 'Internal Server Error',
            'message': 'An unexpected error occurred. Please try again later.',
            'code': 'INTERNAL_ERROR',
        }), 500


def create_app(config_name=None):
    """
    Application factory.

    Raises ConfigurationError when DATABASE_URL or API_ACCESS_KEY is missing;
    the app refuses to start without them.
    """
    if config_name is None:
        config_name = get_config_name()

    app = Flask(__name__, instance_relative_config=True)

    config_class = config[config_name]
    app.config.from_object(config_class())
    configure_logging(app, config_name)
    app.logger.info(f"Configuration loaded for {config_name} environment")

    upload_folder = app.config.get('UPLOAD_FOLDER', 'uploads')
    if not os.path.isabs(upload_folder):
        upload_folder = os.path.join(app.instance_path, upload_folder)
    app.config['UPLOAD_FOLDER'] = upload_folder
    try:
        os.makedirs(upload_folder, exist_ok=True)
    except OSError as e:
        app.logger.warning(f"Could not create upload folder {upload_folder}: {e}")

    db.init_app(app)

    CORS(
        app,
        origins=app.config.get('CORS_ORIGINS', []),
        supports_credentials=app.config.get('CORS_SUPPORTS_CREDENTIALS', True),
        methods=['GET', 'POST', 'PUT', 'DELETE', 'OPTIONS'],
        allow_headers=['Content-Type', 'Authorization', app.config.get('API_KEY_HEADER', 'X-API-Key')],
        expose_headers=['Content-Type', 'Content-Disposition'],
        max_age=86400,
    )

    init_auth(app)
    app.extensions['blob_storage'] = AzureStorageService.from_config(app.config)

    for blueprint, url_prefix in BLUEPRINTS:
        app.register_blueprint(blueprint, url_prefix=url_prefix)
        app.logger.debug(f"Registered {blueprint.name} blueprint at {url_prefix}")

    register_error_handlers(app)

    @app.route('/')
    def index():
        return jsonify({
            'message': 'Quotation Generator API',
            'status': 'running',
            'version': '1.0.0',
            'environment': config_name,
            'endpoints': {
                'health': '/api/health',
                'customers': '/api/customers',
                'projects': '/api/projects',
                'service_items': '/api/service-items',
                'quotations': '/api/quotations',
                'settings': '/api/settings',
                'dashboard': '/api/dashboard',
            },
        })

    @app.route('/uploads/<path:filename>')
    def uploaded_file(filename):
        """Logos stored by the local storage fallback"""
        return send_from_directory(app.config['UPLOAD_FOLDER'], filename)

    with app.app_context():
        try:
            db.session.execute(text('SELECT 1'))
            db.create_all()
            app.logger.info("Database tables created/verified successfully")
        except SQLAlchemyError as db_error:
            app.logger.error(f"Database initialization error: {db_error}")
            if config_name != 'production':
                raise

    app.logger.info(f"Quotation Generator API created ({len(list(app.url_map.iter_rules()))} routes)")
    return app


if __name__ == '__main__':
    local_app = create_app()
    port = int(os.environ.get('PORT', 5000))
    local_app.run(debug=local_app.config.get('DEBUG', False), host='0.0.0.0', port=port)
