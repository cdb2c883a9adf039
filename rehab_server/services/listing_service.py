"""Vendor listings.

Two derived fields are kept consistent on every write:
- `keywords`: lowercased alphanumeric tokens of title, description and
  category; the only thing search ever matches against.
- `geohash`: encoding of `location` at the configured precision, or
  absent when the listing has no location.
"""
import logging
import re
from typing import Any, Dict, List, Optional

from config import config
from rehab_server.dto.listing_dto import ListingDTO
from rehab_server.exception import ForbiddenError, NotFoundError
from rehab_server.geo.geohash import encode
from rehab_server.repository.mongo_helper import MongoRepositorySingleton
from rehab_server.security.session import Session, require_session
from rehab_server.utils.generator import generate_listing_id, get_current_timestamp_ms
from rehab_server.utils.helpers import validate_location

logger = logging.getLogger(__name__)

TOKEN_RE = re.compile(r'[a-z0-9]+')
TEXT_FIELDS = ('title', 'description', 'category')
EDITABLE_FIELDS = ('title', 'description', 'price', 'category', 'image_url', 'location')


def build_keywords(*texts: Optional[str]) -> List[str]:
    tokens = set()
    for text in texts:
        tokens.update(TOKEN_RE.findall((text or '').lower()))
    return sorted(tokens)


def geohash_for(location: Optional[Dict[str, float]]) -> Optional[str]:
    if not location:
        return None
    return encode(location['lat'], location['lng'], config.GEOHASH_PRECISION)


def _required_text(value, field_name: str) -> str:
    value = str(value).strip() if value is not None else ''
    if not value:
        raise ValueError(f'{field_name} is required')
    return value


def _positive_price(value) -> float:
    try:
        price = float(value)
    except (TypeError, ValueError):
        raise ValueError('price must be a number')
    if price <= 0:
        raise ValueError('price must be positive')
    return price


class ListingService:
    def __init__(self, listing_repo=None, clock=None):
        self.listings = listing_repo or MongoRepositorySingleton.get_instance().listing
        self.clock = clock or get_current_timestamp_ms

    def create_listing(
        self,
        session: Optional[Session],
        title: str,
        description: str,
        price: Any,
        category: str,
        image_url: Optional[str] = None,
        location: Optional[Dict[str, float]] = None
    ) -> ListingDTO:
        session = require_session(session)
        title = _required_text(title, 'title')
        description = _required_text(description, 'description')
        category = _required_text(category, 'category')
        location = validate_location(location)
        doc = {
            'listing_id': generate_listing_id(),
            'title': title,
            'description': description,
            'price': _positive_price(price),
            'category': category,
            'image_url': image_url,
            'vendor_key': session.user_key,
            'location': location,
            'geohash': geohash_for(location),
            'keywords': build_keywords(title, description, category),
            'created_at': self.clock()
        }
        self.listings.insert(doc)
        logger.info(f"Listing {doc['listing_id']} created by {session.user_key}")
        return ListingDTO.from_doc(doc)

    def _owned(self, session: Session, listing_id: str) -> Dict[str, Any]:
        doc = self.listings.get(listing_id)
        if not doc:
            raise NotFoundError(f'Listing {listing_id} not found')
        if doc.get('vendor_key') != session.user_key:
            logger.warning(f"{session.user_key} attempted to modify listing {listing_id} owned by {doc.get('vendor_key')}")
            raise ForbiddenError('Only the owning vendor can modify this listing')
        return doc

    def update_listing(self, session: Optional[Session], listing_id: str, **fields) -> ListingDTO:
        session = require_session(session)
        current = self._owned(session, listing_id)
        unknown = set(fields) - set(EDITABLE_FIELDS)
        if unknown:
            raise ValueError(f'Unknown listing fields: {", ".join(sorted(unknown))}')

        updates: Dict[str, Any] = {}
        for name in TEXT_FIELDS:
            if name in fields:
                updates[name] = _required_text(fields[name], name)
        if 'price' in fields:
            updates['price'] = _positive_price(fields['price'])
        if 'image_url' in fields:
            updates['image_url'] = fields['image_url']
        if 'location' in fields:
            updates['location'] = validate_location(fields['location'])
            updates['geohash'] = geohash_for(updates['location'])
        if any(name in updates for name in TEXT_FIELDS):
            merged = {name: updates.get(name, current.get(name)) for name in TEXT_FIELDS}
            updates['keywords'] = build_keywords(merged['title'], merged['description'], merged['category'])
        if not updates:
            return ListingDTO.from_doc(current)

        updates['updated_at'] = self.clock()
        if not self.listings.update_fields(listing_id, session.user_key, updates):
            raise NotFoundError(f'Listing {listing_id} not found')
        logger.info(f"Listing {listing_id} updated: {sorted(updates)}")
        current.update(updates)
        return ListingDTO.from_doc(current)

    def delete_listing(self, session: Optional[Session], listing_id: str) -> bool:
        session = require_session(session)
        self._owned(session, listing_id)
        deleted = self.listings.delete_owned(listing_id, session.user_key) > 0
        logger.info(f"Listing {listing_id} deleted by {session.user_key}")
        return deleted

    def get_listing(self, listing_id: str) -> ListingDTO:
        doc = self.listings.get(listing_id)
        if not doc:
            raise NotFoundError(f'Listing {listing_id} not found')
        return ListingDTO.from_doc(doc)

    def list_vendor_listings(self, vendor_key: str) -> List[ListingDTO]:
        return [ListingDTO.from_doc(doc) for doc in self.listings.list_by_vendor(vendor_key)]


_listing_service = None


def get_listing_service() -> ListingService:
    global _listing_service
    if _listing_service is None:
        _listing_service = ListingService()
    return _listing_service


def reset_listing_service():
    global _listing_service
    _listing_service = None
