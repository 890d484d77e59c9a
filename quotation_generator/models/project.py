# quotation_generator/models/project.py

from datetime import datetime
from .base import db

PROJECT_STATUSES = ('pending', 'in-progress', 'completed')
CURRENCIES = ('LKR', 'USD', 'AUD')


class Project(db.Model):
    __tablename__ = 'projects'

    id = db.Column(db.Integer, primary_key=True)
    customer_id = db.Column(db.Integer, db.ForeignKey('customers.id'), nullable=False, index=True)
    name = db.Column(db.String(200), nullable=False)
    description = db.Column(db.Text, nullable=False, default='')
    start_date = db.Column(db.Date, nullable=False)
    status = db.Column(db.String(20), nullable=False, default='pending')
    currency = db.Column(db.String(3), nullable=False, default='USD')
    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)

    # Read-only navigation; deletes are cascaded explicitly by project_service
    customer = db.relationship('Customer', lazy='joined')

    def to_dict(self):
        return {
            'id': self.id,
            'customer_id': self.customer_id,
            'customer_name': self.customer.name if self.customer else None,
            'name': self.name,
            'description': self.description,
            'start_date': self.start_date.isoformat() if self.start_date else None,
            'status': self.status,
            'currency': self.currency,
            'created_at': self.created_at.isoformat() if self.created_at else None,
        }

    def __repr__(self):
        return f'<Project id={self.id} name={self.name} status={self.status}>'
