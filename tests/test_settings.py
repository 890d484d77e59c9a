# tests/test_settings.py
import io
import os

import pytest
from PIL import Image

from quotation_generator.errors import StorageError, ValidationError
from quotation_generator.models import db, CompanySettings, SETTINGS_ID
from quotation_generator.services import company_settings_service

COMPANY = {'name': 'Acme Studio', 'address': '1 Main St', 'phone': '555-0100', 'email': 'hello@acme.test'}


def png_bytes(color='red'):
    buffer = io.BytesIO()
    Image.new('RGB', (40, 20), color).save(buffer, format='PNG')
    return buffer.getvalue()


def test_get_before_first_save(ctx):
    assert company_settings_service.get() is None


def test_save_is_an_upsert_of_a_single_row(ctx):
    company_settings_service.save(COMPANY)
    company_settings_service.save(dict(COMPANY, phone='555-0199'))

    rows = CompanySettings.query.all()
    assert len(rows) == 1
    assert rows[0].id == SETTINGS_ID
    assert rows[0].phone == '555-0199'


def test_logo_upload_uses_local_fallback(app, ctx):
    company_settings_service.save(COMPANY)

    settings = company_settings_service.replace_logo(png_bytes(), 'logo.png')

    assert settings.logo_url.startswith('/uploads/company-logos/')
    assert settings.logo_url.endswith('.png')
    stored = os.path.join(app.config['UPLOAD_FOLDER'], settings.logo_url[len('/uploads/'):])
    assert os.path.exists(stored)


def test_replacing_the_logo_removes_the_old_file(app, ctx):
    company_settings_service.save(COMPANY)
    first = company_settings_service.replace_logo(png_bytes(), 'logo.png').logo_url
    second = company_settings_service.replace_logo(png_bytes('blue'), 'logo.png').logo_url

    assert first != second
    folder = app.config['UPLOAD_FOLDER']
    assert not os.path.exists(os.path.join(folder, first[len('/uploads/'):]))
    assert os.path.exists(os.path.join(folder, second[len('/uploads/'):]))


@pytest.mark.parametrize('content,filename', [
    (b'not an image', 'logo.png'),
    (png_bytes(), 'logo.exe'),
    (b'', 'logo.png'),
])
def test_bad_logos_are_rejected(ctx, content, filename):
    with pytest.raises(ValidationError):
        company_settings_service.upload_logo(content, filename)


def test_storage_failure_raises(app, ctx, monkeypatch):
    storage = app.extensions['blob_storage']
    monkeypatch.setattr(storage, 'upload_file', lambda *args: (False, 'Azure upload failed: quota', None))
    with pytest.raises(StorageError):
        company_settings_service.upload_logo(png_bytes(), 'logo.png')


def test_logo_needs_saved_company(ctx):
    with pytest.raises(ValidationError):
        company_settings_service.replace_logo(png_bytes(), 'logo.png')


def test_save_ignores_a_client_logo_url(ctx):
    company_settings_service.save(dict(COMPANY, logo_url='/etc/passwd'))
    assert company_settings_service.get().logo_url is None


@pytest.mark.parametrize('url', ['/uploads/../victim.txt', 'victim.txt', '/uploads/company-logos/../../victim.txt'])
def test_local_delete_stays_inside_the_upload_folder(app, ctx, tmp_path, url):
    victim = tmp_path / 'victim.txt'
    victim.write_text('keep me')
    storage = app.extensions['blob_storage']

    deleted, _ = storage.delete_file(url)
    assert deleted is False
    deleted, _ = storage.delete_file(str(victim))
    assert deleted is False
    assert victim.exists()


def test_replacing_a_tampered_logo_keeps_outside_files(app, ctx, tmp_path):
    victim = tmp_path / 'victim.txt'
    victim.write_text('keep me')
    settings = company_settings_service.save(COMPANY)
    settings.logo_url = str(victim)
    db.session.commit()

    settings = company_settings_service.replace_logo(png_bytes(), 'logo.png')

    assert victim.exists()
    assert settings.logo_url.startswith('/uploads/company-logos/')
