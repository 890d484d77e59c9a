# tests/test_document.py
from datetime import date, datetime

from quotation_generator.services import company_settings_service
from quotation_generator.services.formatting import format_date, format_money
from quotation_generator.services.quotation_document import _local_logo_path, render_quotation_pdf


def test_format_money_uses_currency():
    assert format_money(1234.5, 'USD', locale='en_US') == '$1,234.50'
    assert format_money('0.1', 'USD', locale='en_US') == '$0.10'
    assert 'LKR' in format_money(100, 'LKR', locale='en_US')


def test_format_date():
    assert format_date(date(2025, 3, 5)) == 'March 5, 2025'
    assert format_date(datetime(2025, 3, 5, 23, 30)) == 'March 5, 2025'
    assert format_date(None) == ''


def test_format_date_in_configured_timezone(app, ctx):
    app.config['TIMEZONE'] = 'Asia/Colombo'
    assert format_date(datetime(2025, 3, 5, 23, 30)) == 'March 6, 2025'


def test_render_pdf(make_project, make_item, make_quotation):
    project = make_project(currency='AUD')
    make_item(project, price=100, quantity=2)
    make_item(project, price='49.99', quantity='0.5', name='Support & <hosting>')
    quotation = make_quotation(project)
    settings = company_settings_service.save({'name': 'Acme Studio', 'email': 'hi@acme.test'})

    pdf = render_quotation_pdf(quotation, settings)

    assert pdf.startswith(b'%PDF')
    assert len(pdf) > 1000


def test_render_pdf_without_company_settings(make_project, make_item, make_quotation):
    project = make_project()
    make_item(project)
    pdf = render_quotation_pdf(make_quotation(project, notes=None, terms=''))
    assert pdf.startswith(b'%PDF')


def test_logo_outside_the_upload_folder_is_not_embedded(app, ctx, tmp_path):
    (tmp_path / 'secret.png').write_bytes(b'not for the pdf')
    assert _local_logo_path('/uploads/../secret.png') is None
    assert _local_logo_path(str(tmp_path / 'secret.png')) is None
