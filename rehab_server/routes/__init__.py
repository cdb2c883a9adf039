from rehab_server.routes.users import users_bp
from rehab_server.routes.listings import listings_bp
from rehab_server.routes.reviews import reviews_bp
from rehab_server.routes.search import search_bp
from rehab_server.routes.chat import chat_bp
from rehab_server.routes.media import media_bp

ALL_BLUEPRINTS = [users_bp, listings_bp, reviews_bp, search_bp, chat_bp, media_bp]

__all__ = ['users_bp', 'listings_bp', 'reviews_bp', 'search_bp', 'chat_bp', 'media_bp', 'ALL_BLUEPRINTS']
