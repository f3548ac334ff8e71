"""Input validation helpers."""
import re

from flask import request

from app.exceptions import BusinessLogicError

EMAIL_PATTERN = r'^[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}$'


def is_valid_email(email: str) -> bool:
    """Validate email format."""
    return bool(email) and re.match(EMAIL_PATTERN, email) is not None


def clean_text(value, field: str = 'value') -> str:
    """
    Strip a free-text input.

    None becomes '', numbers are kept as their text form (a zip code sent as
    12345), anything else (lists, objects, booleans) is rejected.
    """
    if value is None:
        return ''
    if isinstance(value, bool) or not isinstance(value, (str, int, float)):
        raise BusinessLogicError(f'{field} must be text')
    return str(value).strip()


def read_body(allow_form: bool = False):
    """
    Body of the current request as a mapping.

    JSON must be an object; with allow_form a form post is accepted too.
    """
    data = request.get_json(silent=True)
    if data is None:
        return request.form if allow_form else {}
    if not isinstance(data, dict):
        raise BusinessLogicError('Request body must be a JSON object')
    return data
