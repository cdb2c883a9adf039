from datetime import datetime

from bson import ObjectId
from flask import jsonify


def respond_error(message_or_dict, status=400):
    """Return a standardized error response."""
    if isinstance(message_or_dict, dict):
        body = {'success': False, 'errors': message_or_dict}
    else:
        body = {'success': False, 'error': message_or_dict}
    return jsonify(body), status


def respond_success(payload=None, status=200):
    if payload is None:
        payload = {}
    body = {'success': True}
    if isinstance(payload, dict):
        body.update(payload)
    else:
        body['data'] = payload
    return jsonify(body), status


def normalize_doc(obj):
    """Recursively convert BSON types (ObjectId) and datetimes to JSON-serializable values.

    - ObjectId -> str(ObjectId)
    - datetime -> ISO string
    - recursively handles dicts and lists
    Returns a new object (does not mutate input).
    """
    if obj is None:
        return None
    if isinstance(obj, dict):
        return {k: normalize_doc(v) for k, v in obj.items()}
    if isinstance(obj, (list, tuple)):
        return [normalize_doc(v) for v in obj]
    if isinstance(obj, ObjectId):
        return str(obj)
    if isinstance(obj, datetime):
        return obj.isoformat()
    return obj


def parse_optional_float(value, field_name):
    """Parse a query/body value into float, None when absent; ValueError when malformed."""
    if value is None or value == '':
        return None
    try:
        return float(value)
    except (TypeError, ValueError):
        raise ValueError(f'{field_name} must be a number')


def parse_location(lat, lng):
    """Build a {lat, lng} dict from two optional inputs.

    Both must be present for a location; one without the other is an error.
    """
    lat_val = parse_optional_float(lat, 'lat')
    lng_val = parse_optional_float(lng, 'lng')
    if lat_val is None and lng_val is None:
        return None
    if lat_val is None or lng_val is None:
        raise ValueError('lat and lng must be provided together')
    return validate_location({'lat': lat_val, 'lng': lng_val})


def validate_location(location):
    if location is None:
        return None
    if not isinstance(location, dict):
        raise ValueError('location must be an object with lat and lng')
    try:
        lat = float(location.get('lat'))
        lng = float(location.get('lng'))
    except (TypeError, ValueError):
        raise ValueError('location must contain numeric lat and lng')
    if not -90.0 <= lat <= 90.0:
        raise ValueError('lat must be between -90 and 90')
    if not -180.0 <= lng <= 180.0:
        raise ValueError('lng must be between -180 and 180')
    return {'lat': lat, 'lng': lng}


def parse_page(args, default=1):
    try:
        page = int(args.get('page', default))
    except (TypeError, ValueError):
        raise ValueError('page must be an integer')
    if page < 1:
        raise ValueError('page must be >= 1')
    return page
