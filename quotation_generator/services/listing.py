# quotation_generator/services/listing.py

from flask import current_app
from sqlalchemy import or_


def search_filter(term, *columns):
    """Case-insensitive substring match across any of the given columns."""
    pattern = f'%{term.strip()}%'
    return or_(*[column.ilike(pattern) for column in columns])


def paginate(query, page=1, per_page=None):
    """
    Paginate a query and return the wire shape used by every list endpoint.

    Out-of-range pages produce an empty ``items`` list instead of a 404.
    """
    if per_page is None:
        per_page = current_app.config.get('ITEMS_PER_PAGE', 10)
    page = max(int(page or 1), 1)
    per_page = max(min(int(per_page), 100), 1)

    result = query.paginate(page=page, per_page=per_page, error_out=False)
    return {
        'items': [row.to_dict() for row in result.items],
        'total': result.total,
        'page': result.page,
        'per_page': result.per_page,
        'pages': result.pages,
    }
