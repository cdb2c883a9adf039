from typing import Optional, List, Dict, Any
from rehab_server.utils.helpers import normalize_doc


class ListingDTO:
    def __init__(self, id: Optional[str], title: str, description: str = '', price: float = 0.0,
                 category: str = '', imageUrl: Optional[str] = None, vendorId: Optional[str] = None,
                 location: Optional[Dict[str, float]] = None, geohash: Optional[str] = None,
                 keywords: Optional[List[str]] = None, createdAt: int = 0,
                 distanceKm: Optional[float] = None):
        self.id = id
        self.title = title
        self.description = description
        self.price = float(price) if price is not None else 0.0
        self.category = category
        self.imageUrl = imageUrl
        self.vendorId = vendorId
        self.location = location
        self.geohash = geohash
        self.keywords = keywords or []
        self.createdAt = createdAt
        self.distanceKm = distanceKm

    @classmethod
    def from_doc(cls, doc: Dict[str, Any]):
        doc = normalize_doc(doc) or {}
        return cls(
            id=doc.get('listing_id') or doc.get('_id'),
            title=doc.get('title') or '',
            description=doc.get('description') or '',
            price=doc.get('price') or 0,
            category=doc.get('category') or '',
            imageUrl=doc.get('image_url'),
            vendorId=doc.get('vendor_key'),
            location=doc.get('location'),
            geohash=doc.get('geohash'),
            keywords=doc.get('keywords') or [],
            createdAt=doc.get('created_at') or 0,
            distanceKm=doc.get('distance_km')
        )

    def to_dict(self) -> Dict[str, Any]:
        data = {
            'id': self.id,
            'title': self.title,
            'description': self.description,
            'price': self.price,
            'category': self.category,
            'imageUrl': self.imageUrl,
            'vendorId': self.vendorId,
            'location': self.location,
            'geohash': self.geohash,
            'keywords': list(self.keywords),
            'createdAt': self.createdAt
        }
        if self.distanceKm is not None:
            data['distanceKm'] = self.distanceKm
        return data
