# quotation_generator/models/company_settings.py

from datetime import datetime
from .base import db

SETTINGS_ID = 'company-settings'


class CompanySettings(db.Model):
    """Singleton row describing the issuing company."""
    __tablename__ = 'company_settings'

    id = db.Column(db.String(32), primary_key=True, default=SETTINGS_ID)
    name = db.Column(db.String(200), nullable=False)
    address = db.Column(db.String(255), nullable=False, default='')
    phone = db.Column(db.String(30), nullable=False, default='')
    email = db.Column(db.String(120), nullable=False, default='')
    logo_url = db.Column(db.String(500))
    created_at = db.Column(db.DateTime, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    __table_args__ = (db.CheckConstraint(f"id = '{SETTINGS_ID}'", name='ck_company_settings_singleton'),)

    def to_dict(self):
        return {
            'id': self.id,
            'name': self.name,
            'address': self.address,
            'phone': self.phone,
            'email': self.email,
            'logo_url': self.logo_url,
            'created_at': self.created_at.isoformat() if self.created_at else None,
            'updated_at': self.updated_at.isoformat() if self.updated_at else None,
        }
