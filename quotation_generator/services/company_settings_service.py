# quotation_generator/services/company_settings_service.py

import logging

from flask import current_app

from ..errors import StorageError, ValidationError
from ..models import db, CompanySettings, SETTINGS_ID
from .azure_storage import IMAGE_CONTENT_TYPES, is_image
from .validation import validate_company_settings

logger = logging.getLogger(__name__)

LOGO_FOLDER = 'company-logos'


def get():
    """Return the settings row, or None before the first save."""
    return db.session.get(CompanySettings, SETTINGS_ID)


def save(data):
    """Create the singleton on first save, update it afterwards."""
    fields = validate_company_settings(data)
    settings = get()
    created = settings is None
    if created:
        settings = CompanySettings(id=SETTINGS_ID)
        db.session.add(settings)
    for name, value in fields.items():
        setattr(settings, name, value)
    try:
        db.session.commit()
    except Exception:
        db.session.rollback()
        raise
    logger.info("Company settings %s", 'created' if created else 'updated')
    return settings


def upload_logo(content, filename):
    """Store a logo image in blob storage and return its public URL."""
    ext = filename.rsplit('.', 1)[-1].lower() if filename and '.' in filename else ''
    if ext not in IMAGE_CONTENT_TYPES:
        raise ValidationError({'logo': f"Logo must be one of: {', '.join(sorted(IMAGE_CONTENT_TYPES))}"})
    if not content or not is_image(content):
        raise ValidationError({'logo': 'Uploaded file is not a valid image'})

    storage = current_app.extensions['blob_storage']
    success, message, url = storage.upload_file(content, filename, LOGO_FOLDER)
    if not success:
        logger.error(f"Error uploading logo: {message}")
        raise StorageError(message)
    return url


def replace_logo(content, filename):
    """Upload a new logo and point the settings row at it."""
    settings = get()
    if settings is None:
        raise ValidationError({'name': 'Save company details before uploading a logo'})
    url = upload_logo(content, filename)
    previous_url = settings.logo_url
    settings.logo_url = url
    try:
        db.session.commit()
    except Exception:
        db.session.rollback()
        raise

    if previous_url:
        success, message = current_app.extensions['blob_storage'].delete_file(previous_url)
        if not success:
            logger.warning(f"Previous logo {previous_url} was not removed: {message}")
    return settings
