# quotation_generator/models/__init__.py

from .base import db

# Parents before children so foreign keys resolve in declaration order
from .customer import Customer
from .project import Project, PROJECT_STATUSES, CURRENCIES
from .service_item import ServiceItem
from .quotation import Quotation, QuotationItem, QUOTATION_STATUSES
from .company_settings import CompanySettings, SETTINGS_ID

__all__ = [
    'db',
    'Customer',
    'Project',
    'ServiceItem',
    'Quotation',
    'QuotationItem',
    'CompanySettings',
    'PROJECT_STATUSES',
    'QUOTATION_STATUSES',
    'CURRENCIES',
    'SETTINGS_ID',
]
