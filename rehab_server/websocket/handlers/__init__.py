from rehab_server.websocket.handlers.chat_handler import ChatHandler
from rehab_server.websocket.handlers.search_handler import SearchHandler

__all__ = ['ChatHandler', 'SearchHandler']
