from rehab_server.dto.listing_dto import ListingDTO
from rehab_server.dto.review_dto import ReviewDTO
from rehab_server.dto.user_dto import UserDTO

__all__ = ['ListingDTO', 'ReviewDTO', 'UserDTO']
