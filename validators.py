"""Helpers for reading and checking JSON request bodies."""
import re
from datetime import date, datetime

from flask import request
from werkzeug.exceptions import BadRequest

EMAIL_PATTERN = re.compile(r'^[A-Za-z0-9+_.-]+@[A-Za-z0-9.-]+$')


def get_json_body():
    """Return the request body as a dict, or raise 400."""
    data = request.get_json(silent=True)
    if data is None:
        raise BadRequest('Request body must be JSON')
    if not isinstance(data, dict):
        raise BadRequest('Request body must be a JSON object')
    return data


def require_fields(data, fields, prefix=''):
    for field in fields:
        value = data.get(field)
        if value is None or (isinstance(value, str) and not value.strip()):
            raise BadRequest(f'{prefix}{field} is required')
        if not isinstance(value, str):
            raise BadRequest(f'{prefix}{field} must be a string')


def optional_str(data, field):
    value = data.get(field)
    if value is not None and not isinstance(value, str):
        raise BadRequest(f'{field} must be a string')
    return value


def is_valid_email(value):
    return bool(value) and EMAIL_PATTERN.match(value) is not None


def parse_date(value, field):
    """Accept ``YYYY-MM-DD``, or a full ISO datetime whose date part is kept."""
    if value in (None, ''):
        return None
    if not isinstance(value, str):
        raise BadRequest(f'{field} must be a date (YYYY-MM-DD)')
    try:
        if 'T' in value:
            return datetime.fromisoformat(value).date()
        return date.fromisoformat(value)
    except ValueError:
        raise BadRequest(f'{field} must be a date (YYYY-MM-DD)')


def parse_datetime(value, field):
    if value in (None, ''):
        return None
    if not isinstance(value, str):
        raise BadRequest(f'{field} must be a datetime (YYYY-MM-DDTHH:MM[:SS])')
    try:
        parsed = datetime.fromisoformat(value)
    except ValueError:
        raise BadRequest(f'{field} must be a datetime (YYYY-MM-DDTHH:MM[:SS])')
    # columns are naive local times
    if parsed.tzinfo is not None:
        raise BadRequest(f'{field} must not carry a timezone offset')
    return parsed


def parse_int(value, field, default=None):
    if value in (None, ''):
        return default
    if isinstance(value, (bool, float)):
        raise BadRequest(f'{field} must be an integer')
    try:
        return int(value)
    except (TypeError, ValueError):
        raise BadRequest(f'{field} must be an integer')


def parse_bool(value, field, default=None):
    if value is None:
        return default
    if isinstance(value, bool):
        return value
    if isinstance(value, str) and value.lower() in ('true', 'false'):
        return value.lower() == 'true'
    raise BadRequest(f'{field} must be true or false')


def nested_id(data, key, id_field):
    """Pull ``data[key][id_field]`` out of a nested reference like ``{"user": {"userId": 1}}``."""
    ref = data.get(key)
    if not isinstance(ref, dict):
        return None
    return parse_int(ref.get(id_field), f'{key}.{id_field}')
