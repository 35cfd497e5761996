import math

from shipdesk.core.exceptions import ValidationError


def page_bounds(page: int, limit: int, max_limit: int) -> tuple:
    if page < 1:
        raise ValidationError("page must be >= 1")
    if limit < 1 or limit > max_limit:
        raise ValidationError(f"limit must be between 1 and {max_limit}")
    return (page - 1) * limit, limit


def page_info(page: int, limit: int, total: int) -> dict:
    return {
        "page": page,
        "limit": limit,
        "total": total,
        "totalPages": math.ceil(total / limit) if limit else 0,
    }


def parse_number(term: str):
    """Numeric value of a search term, or None when it isn't a number."""
    try:
        value = float(term)
    except (TypeError, ValueError):
        return None
    if math.isnan(value) or math.isinf(value):
        return None
    return value
