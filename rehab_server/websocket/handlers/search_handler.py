"""WebSocket search handler.

- search:query {q, lat?, lng?}   debounced; newest generation only -> search:results
- search:autocomplete {q}        immediate -> search:suggestions
"""
import logging

from flask_socketio import emit

from config import config
from rehab_server.dto.listing_dto import ListingDTO
from rehab_server.realtime.debounce import DebouncedSearch
from rehab_server.services.search_service import get_search_service
from rehab_server.utils.helpers import parse_location
from rehab_server.websocket.errors import socket_event, EVENT_ERROR, error_code

logger = logging.getLogger(__name__)


class SearchHandler:
    EVENT_RESULTS = 'search:results'
    EVENT_SUGGESTIONS = 'search:suggestions'

    def __init__(self, hub):
        self.hub = hub
        self.socketio = hub.socketio

    def _debouncer(self, state) -> DebouncedSearch:
        if state.search is None:
            sid = state.sid

            def run(term, location):
                docs = get_search_service().search(term, location)
                return term, [ListingDTO.from_doc(doc).to_dict() for doc in docs]

            def on_results(generation, outcome):
                term, results = outcome
                self.hub.emit_to_sid(sid, self.EVENT_RESULTS, {
                    'generation': generation,
                    'query': term,
                    'results': results,
                    'count': len(results)
                })

            def on_error(generation, exc):
                self.hub.emit_to_sid(sid, EVENT_ERROR, {
                    'code': error_code(exc),
                    'message': str(exc),
                    'tempId': None
                })

            state.search = DebouncedSearch(
                run, on_results, on_error,
                delay_seconds=config.SEARCH_DEBOUNCE_MS / 1000.0,
                timer_factory=self.hub.timer_factory
            )
        return state.search

    def register_handlers(self):

        @self.socketio.on('search:query')
        @socket_event
        def handle_query(data):
            state = self.hub.current_state()
            location = parse_location(data.get('lat'), data.get('lng'))
            generation = self._debouncer(state).update(data.get('q') or '', location)
            return {'generation': generation}

        @self.socketio.on('search:autocomplete')
        @socket_event
        def handle_autocomplete(data):
            self.hub.current_state()
            term = data.get('q') or ''
            emit(self.EVENT_SUGGESTIONS, {'query': term, 'suggestions': get_search_service().autocomplete(term)})
