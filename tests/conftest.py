# tests/conftest.py
from datetime import date

import pytest

from quotation_generator import create_app
from quotation_generator.models import db
from quotation_generator.services import (
    customer_service,
    project_service,
    quotation_service,
    service_item_service,
)
from quotation_generator.services.azure_storage import AzureStorageService

API_KEY = 'test-access-key'


@pytest.fixture
def app(tmp_path):
    app = create_app('testing')
    upload_folder = str(tmp_path / 'uploads')
    app.config['UPLOAD_FOLDER'] = upload_folder
    app.extensions['blob_storage'] = AzureStorageService(upload_folder=upload_folder)
    yield app
    with app.app_context():
        db.session.remove()
        db.drop_all()


@pytest.fixture
def ctx(app):
    """Application context for tests that call services directly."""
    with app.app_context():
        yield app


@pytest.fixture
def client(app):
    client = app.test_client()
    client.environ_base['HTTP_X_API_KEY'] = API_KEY
    return client


@pytest.fixture
def anon_client(app):
    return app.test_client()


@pytest.fixture
def make_customer(ctx):
    counter = {'n': 0}

    def _make(**overrides):
        counter['n'] += 1
        data = {
            'name': f"Customer {counter['n']}",
            'email': f"customer{counter['n']}@example.com",
            'phone': '555-0100',
            'address': '1 Main Street',
        }
        data.update(overrides)
        return customer_service.create(data)

    return _make


@pytest.fixture
def make_project(ctx, make_customer):
    def _make(customer=None, **overrides):
        customer = customer or make_customer()
        data = {
            'customer_id': customer.id,
            'name': 'Website redesign',
            'description': 'New marketing site',
            'start_date': date(2025, 3, 5).isoformat(),
            'currency': 'USD',
        }
        data.update(overrides)
        return project_service.create(data)

    return _make


@pytest.fixture
def make_item(ctx):
    def _make(project, price=100, quantity=1, name='Design'):
        return service_item_service.create({
            'project_id': project.id,
            'name': name,
            'description': f'{name} work',
            'price': price,
            'quantity': quantity,
        })

    return _make


@pytest.fixture
def make_quotation(ctx):
    def _make(project, **overrides):
        data = {'project_id': project.id}
        data.update(overrides)
        return quotation_service.create(data)

    return _make
