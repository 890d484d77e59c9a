# quotation_generator/models/quotation.py

from datetime import datetime
from .base import db

QUOTATION_STATUSES = ('draft', 'sent', 'accepted', 'rejected')


class Quotation(db.Model):
    __tablename__ = 'quotations'

    id = db.Column(db.Integer, primary_key=True)
    # One quotation per project
    project_id = db.Column(db.Integer, db.ForeignKey('projects.id'), nullable=False, unique=True)
    customer_id = db.Column(db.Integer, db.ForeignKey('customers.id'), nullable=False, index=True)
    date = db.Column(db.Date, nullable=False)
    valid_until = db.Column(db.Date, nullable=False)
    status = db.Column(db.String(20), nullable=False, default='draft')
    currency = db.Column(db.String(3), nullable=False, default='USD')
    notes = db.Column(db.Text)
    terms = db.Column(db.Text)
    subtotal = db.Column(db.Numeric(12, 2), nullable=False, default=0)
    tax = db.Column(db.Numeric(12, 2), nullable=False, default=0)
    total = db.Column(db.Numeric(12, 2), nullable=False, default=0)
    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    project = db.relationship('Project', lazy='joined')
    customer = db.relationship('Customer', lazy='joined')
    line_items = db.relationship(
        'QuotationItem',
        order_by='QuotationItem.position',
        lazy='selectin',
        cascade='all, delete-orphan',
    )

    @property
    def items(self):
        return [item.to_dict() for item in self.line_items]

    def to_dict(self):
        """Serializes the quotation together with its line-item snapshots."""
        return {
            'id': self.id,
            'project_id': self.project_id,
            'project_name': self.project.name if self.project else None,
            'customer_id': self.customer_id,
            'customer_name': self.customer.name if self.customer else None,
            'date': self.date.isoformat() if self.date else None,
            'valid_until': self.valid_until.isoformat() if self.valid_until else None,
            'status': self.status,
            'currency': self.currency,
            'notes': self.notes,
            'terms': self.terms,
            'items': self.items,
            'subtotal': float(self.subtotal or 0),
            'tax': float(self.tax or 0),
            'total': float(self.total or 0),
            'created_at': self.created_at.isoformat() if self.created_at else None,
            'updated_at': self.updated_at.isoformat() if self.updated_at else None,
        }

    def __repr__(self):
        return f'<Quotation id={self.id} project_id={self.project_id} status={self.status}>'


class QuotationItem(db.Model):
    """A copy of a service item as it stood when the quotation was built."""
    __tablename__ = 'quotation_items'

    id = db.Column(db.Integer, primary_key=True)
    quotation_id = db.Column(db.Integer, db.ForeignKey('quotations.id'), nullable=False, index=True)
    service_item_id = db.Column(
        db.Integer,
        db.ForeignKey('service_items.id', ondelete='SET NULL'),
        nullable=True,
    )
    name = db.Column(db.String(200), nullable=False, default='')
    description = db.Column(db.Text, nullable=False, default='')
    quantity = db.Column(db.Numeric(12, 3), nullable=False, default=1)
    price = db.Column(db.Numeric(12, 2), nullable=False, default=0)
    position = db.Column(db.Integer, nullable=False, default=0)

    def to_dict(self):
        return {
            'id': self.service_item_id,
            'name': self.name,
            'description': self.description,
            'quantity': float(self.quantity),
            'price': float(self.price),
        }
