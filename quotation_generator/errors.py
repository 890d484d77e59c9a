"""
Exception hierarchy for the quotation generator.

Services raise these and never swallow store errors; the Flask app maps
each class to a JSON response (see ``register_error_handlers`` in app.py).
"""


class QuotationGeneratorError(Exception):
    """Base class for every domain error"""
    status_code = 500
    code = 'INTERNAL_ERROR'

    def __init__(self, message, **details):
        super().__init__(message)
        self.message = message
        self.details = details

    def to_dict(self):
        payload = {'error': self.message, 'code': self.code}
        payload.update(self.details)
        return payload


class ConfigurationError(QuotationGeneratorError):
    """Required settings are missing at launch"""
    code = 'CONFIGURATION_ERROR'


class NotFoundError(QuotationGeneratorError):
    status_code = 404
    code = 'NOT_FOUND'

    def __init__(self, entity, entity_id):
        super().__init__(f'{entity} {entity_id} not found', entity=entity, id=entity_id)


class ValidationError(QuotationGeneratorError):
    """Per-field validation failures, raised before anything is written"""
    status_code = 400
    code = 'VALIDATION_ERROR'

    def __init__(self, errors, message='Validation failed'):
        super().__init__(message, errors=errors)
        self.errors = errors


class ConflictError(QuotationGeneratorError):
    status_code = 409
    code = 'CONFLICT'


class InvalidTransitionError(ConflictError):
    code = 'INVALID_TRANSITION'

    def __init__(self, current, requested):
        super().__init__(
            f"Cannot move quotation from '{current}' to '{requested}'",
            current_status=current,
            requested_status=requested,
        )


class StorageError(QuotationGeneratorError):
    """Blob upload failed"""
    status_code = 502
    code = 'STORAGE_ERROR'
