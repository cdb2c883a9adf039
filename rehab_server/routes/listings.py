"""Vendor listing endpoints.

- POST   /api/listings                        - create (caller becomes vendor)
- GET    /api/listings/<listing_id>           - fetch one
- PUT    /api/listings/<listing_id>           - update (owner only)
- DELETE /api/listings/<listing_id>           - delete (owner only)
- GET    /api/vendors/<vendor_key>/listings   - a vendor's listings, newest first
"""
import logging

from flask import Blueprint, request

from rehab_server.services.listing_service import get_listing_service
from rehab_server.utils.decorators import handle_errors, require_auth
from rehab_server.utils.helpers import respond_success

logger = logging.getLogger(__name__)

listings_bp = Blueprint('listings', __name__, url_prefix='/api')

LISTING_FIELDS = {
    'title': 'title',
    'description': 'description',
    'price': 'price',
    'category': 'category',
    'imageUrl': 'image_url',
    'location': 'location'
}


def _listing_fields(data):
    return {LISTING_FIELDS[k]: v for k, v in data.items() if k in LISTING_FIELDS}


@listings_bp.route('/listings', methods=['POST'])
@handle_errors
@require_auth
def create_listing(session):
    data = request.get_json(silent=True) or {}
    fields = _listing_fields(data)
    listing = get_listing_service().create_listing(
        session,
        title=fields.get('title'),
        description=fields.get('description'),
        price=fields.get('price'),
        category=fields.get('category'),
        image_url=fields.get('image_url'),
        location=fields.get('location')
    )
    return respond_success({'listing': listing.to_dict()}, status=201)


@listings_bp.route('/listings/<listing_id>', methods=['GET'])
@handle_errors
def get_listing(listing_id):
    listing = get_listing_service().get_listing(listing_id)
    return respond_success({'listing': listing.to_dict()})


@listings_bp.route('/listings/<listing_id>', methods=['PUT'])
@handle_errors
@require_auth
def update_listing(listing_id, session):
    data = request.get_json(silent=True) or {}
    listing = get_listing_service().update_listing(session, listing_id, **_listing_fields(data))
    return respond_success({'listing': listing.to_dict()})


@listings_bp.route('/listings/<listing_id>', methods=['DELETE'])
@handle_errors
@require_auth
def delete_listing(listing_id, session):
    get_listing_service().delete_listing(session, listing_id)
    return respond_success({'deleted': True, 'id': listing_id})


@listings_bp.route('/vendors/<vendor_key>/listings', methods=['GET'])
@handle_errors
def vendor_listings(vendor_key):
    listings = [l.to_dict() for l in get_listing_service().list_vendor_listings(vendor_key)]
    return respond_success({'listings': listings, 'count': len(listings)})
