from rehab_server.services.search_service import SearchService, get_search_service, reset_search_service
from rehab_server.services.listing_service import ListingService, get_listing_service, reset_listing_service
from rehab_server.services.review_service import ReviewService, get_review_service, reset_review_service
from rehab_server.services.user_service import UserService, get_user_service, reset_user_service
from rehab_server.services.media_service import MediaService, get_media_service, reset_media_service
from rehab_server.services.cart_service import Cart, CartItem


def reset_services():
    """Drop cached service singletons (after swapping the database)."""
    from rehab_server.messaging.service import reset_chat_service
    reset_search_service()
    reset_listing_service()
    reset_review_service()
    reset_user_service()
    reset_media_service()
    reset_chat_service()


__all__ = [
    'SearchService', 'get_search_service',
    'ListingService', 'get_listing_service',
    'ReviewService', 'get_review_service',
    'UserService', 'get_user_service',
    'MediaService', 'get_media_service',
    'Cart', 'CartItem',
    'reset_services'
]
