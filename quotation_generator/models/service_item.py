# quotation_generator/models/service_item.py

from datetime import datetime
from .base import db


class ServiceItem(db.Model):
    __tablename__ = 'service_items'

    id = db.Column(db.Integer, primary_key=True)
    project_id = db.Column(db.Integer, db.ForeignKey('projects.id'), nullable=False, index=True)
    name = db.Column(db.String(200), nullable=False)
    description = db.Column(db.Text, nullable=False, default='')
    quantity = db.Column(db.Numeric(12, 3), nullable=False, default=1)
    price = db.Column(db.Numeric(12, 2), nullable=False, default=0)
    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)

    def to_dict(self):
        return {
            'id': self.id,
            'project_id': self.project_id,
            'name': self.name,
            'description': self.description,
            'quantity': float(self.quantity),
            'price': float(self.price),
            'total': float(self.price * self.quantity),
            'created_at': self.created_at.isoformat() if self.created_at else None,
        }
