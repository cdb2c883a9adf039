"""Listing search.

A term matches a listing only when it equals one of the listing's stored
keywords after lowercasing; there is no substring or fuzzy fallback.

With a caller location the geohash cover of the search radius is queried
range by range, merged by listing id, then post-filtered by true
great-circle distance (strictly inside the radius) and ranked by distance
with price as the tiebreak. Without a location the keyword matches are
returned cheapest first.
"""
import logging
from typing import Any, Dict, List, Optional

from config import config
from rehab_server.geo.geohash import distance_km, query_bounds
from rehab_server.repository.mongo_helper import MongoRepositorySingleton
from rehab_server.utils.helpers import validate_location

logger = logging.getLogger(__name__)


def normalize_term(term: Optional[str]) -> str:
    return (term or '').strip().lower()


class SearchService:
    """Keyword and proximity search over listings."""

    def __init__(self, listing_repo=None, radius_km: float = None, result_limit: int = None,
                 autocomplete_limit: int = None):
        self.listings = listing_repo or MongoRepositorySingleton.get_instance().listing
        self.radius_km = radius_km if radius_km is not None else config.SEARCH_RADIUS_KM
        self.result_limit = result_limit if result_limit is not None else config.SEARCH_RESULT_LIMIT
        self.autocomplete_limit = autocomplete_limit if autocomplete_limit is not None else config.AUTOCOMPLETE_LIMIT

    def search(self, term: Optional[str], location: Optional[Dict[str, float]] = None) -> List[Dict[str, Any]]:
        """Listings carrying `term` as a keyword.

        Geo results carry a `distance_km` field. An empty term returns no
        results without touching the store.
        """
        keyword = normalize_term(term)
        if not keyword:
            return []
        location = validate_location(location)
        if location is None:
            results = self.listings.find_by_keyword(keyword, self.result_limit)
            logger.debug(f"Keyword search '{keyword}' returned {len(results)} listings")
            return results
        return self._search_nearby(keyword, location)

    def _search_nearby(self, keyword: str, location: Dict[str, float]) -> List[Dict[str, Any]]:
        center = (location['lat'], location['lng'])
        candidates: Dict[str, Dict[str, Any]] = {}
        bounds = query_bounds(center, self.radius_km)
        for start, end in bounds:
            # no per-range limit; truncating here could drop nearer listings from a later range
            for doc in self.listings.find_in_geohash_range(keyword, start, end, 0):
                listing_id = doc.get('listing_id') or str(doc.get('_id'))
                candidates.setdefault(listing_id, doc)

        results = []
        for doc in candidates.values():
            point = doc.get('location') or {}
            if point.get('lat') is None or point.get('lng') is None:
                continue
            distance = distance_km(center, (point['lat'], point['lng']))
            if distance < self.radius_km:
                hit = dict(doc)
                hit['distance_km'] = round(distance, 3)
                hit['_distance'] = distance
                results.append(hit)

        results.sort(key=lambda d: (d['_distance'], d.get('price') or 0))
        for hit in results:
            hit.pop('_distance', None)
        logger.debug(f"Geo search '{keyword}' over {len(bounds)} ranges: "
                     f"{len(candidates)} candidates, {len(results)} within {self.radius_km}km")
        return results[:self.result_limit]

    def autocomplete(self, prefix: Optional[str]) -> List[str]:
        """Up to `autocomplete_limit` titles of listings with `prefix` as a whole keyword."""
        keyword = normalize_term(prefix)
        if not keyword:
            return []
        return self.listings.titles_by_keyword(keyword, self.autocomplete_limit)


_search_service = None


def get_search_service() -> SearchService:
    global _search_service
    if _search_service is None:
        _search_service = SearchService()
    return _search_service


def reset_search_service():
    global _search_service
    _search_service = None
