"""
Flask blueprints for the quotation generator API.

Each entry is (blueprint, url_prefix); the app factory registers them in order.
"""

from .customers import customers_bp
from .projects import projects_bp
from .service_items import service_items_bp
from .quotations import quotations_bp
from .settings import settings_bp
from .dashboard import dashboard_bp
from .health import health_bp

BLUEPRINTS = [
    (customers_bp, '/api/customers'),
    (projects_bp, '/api/projects'),
    (service_items_bp, '/api/service-items'),
    (quotations_bp, '/api/quotations'),
    (settings_bp, '/api/settings'),
    (dashboard_bp, '/api/dashboard'),
    (health_bp, '/api'),
]

__all__ = ['BLUEPRINTS']
