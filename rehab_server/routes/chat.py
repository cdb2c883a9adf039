"""Chat REST API routes.

REST covers initial loads and plain request/response writes; live updates
are pushed over Socket.IO (see rehab_server.websocket).

- GET  /api/chat/rooms                                      - inbox, most recent first
- GET  /api/chat/rooms/<other>/messages?cursor=&limit=      - history page, oldest first
- POST /api/chat/messages                                   - send {to, text, mediaUrl, mediaType}
- POST /api/chat/rooms/<other>/read                         - mark received messages read
- PUT  /api/chat/rooms/<other>/messages/<key>/reactions     - set {reaction}
- GET  /api/chat/typing/<user_key>                          - typing flag with staleness applied
- POST /api/chat/media                                      - upload an attachment (multipart `file`)
"""
import logging

from flask import Blueprint, request

from rehab_server.messaging.service import get_chat_service
from rehab_server.services.media_service import get_media_service
from rehab_server.utils.decorators import handle_errors, require_auth
from rehab_server.utils.helpers import respond_success, respond_error

logger = logging.getLogger(__name__)

chat_bp = Blueprint('chat', __name__, url_prefix='/api/chat')

MAX_PAGE_SIZE = 100


def _parse_limit(value):
    if value in (None, ''):
        return None
    try:
        limit = int(value)
    except (TypeError, ValueError):
        raise ValueError('limit must be an integer')
    if limit < 1:
        raise ValueError('limit must be >= 1')
    return min(limit, MAX_PAGE_SIZE)


@chat_bp.route('/rooms', methods=['GET'])
@handle_errors
@require_auth
def list_rooms(session):
    service = get_chat_service()
    rooms = []
    for summary in service.list_inbox(session):
        data = summary.to_dict()
        other = summary.other_participant
        data['unreadCount'] = service.unread_count(session, other) if other else 0
        rooms.append(data)
    return respond_success({'rooms': rooms, 'count': len(rooms)})


@chat_bp.route('/rooms/<other_user_key>/messages', methods=['GET'])
@handle_errors
@require_auth
def get_messages(other_user_key, session):
    page = get_chat_service().get_history(
        session,
        other_user_key,
        cursor=request.args.get('cursor') or None,
        page_size=_parse_limit(request.args.get('limit'))
    )
    return respond_success(page.to_dict())


@chat_bp.route('/messages', methods=['POST'])
@handle_errors
@require_auth
def send_message(session):
    data = request.get_json(silent=True) or {}
    to = data.get('to')
    if not to:
        return respond_error('to is required', status=400)
    message = get_chat_service().send_message(
        session,
        to,
        text=data.get('text') or '',
        media_url=data.get('mediaUrl'),
        media_type=data.get('mediaType')
    )
    return respond_success({'message': message.to_dict()}, status=201)


@chat_bp.route('/rooms/<other_user_key>/read', methods=['POST'])
@handle_errors
@require_auth
def mark_read(other_user_key, session):
    data = request.get_json(silent=True) or {}
    keys = data.get('messageKeys')
    if keys is not None and not isinstance(keys, list):
        return respond_error('messageKeys must be a list', status=400)
    updated = get_chat_service().mark_read(session, other_user_key, keys)
    return respond_success({'updated': updated})


@chat_bp.route('/rooms/<other_user_key>/messages/<message_key>/reactions', methods=['PUT'])
@handle_errors
@require_auth
def react(other_user_key, message_key, session):
    data = request.get_json(silent=True) or {}
    message = get_chat_service().react(session, other_user_key, message_key, data.get('reaction'))
    return respond_success({'message': message.to_dict()})


@chat_bp.route('/typing/<user_key>', methods=['GET'])
@handle_errors
@require_auth
def typing_status(user_key, session):
    return respond_success({'typing': get_chat_service().typing_status_for(session, user_key)})


@chat_bp.route('/media', methods=['POST'])
@handle_errors
@require_auth
def upload_media(session):
    upload = request.files.get('file')
    if upload is None:
        return respond_error('file is required', status=400)
    result = get_media_service().upload_media(session, upload.filename, upload.mimetype, upload.read())
    return respond_success(result, status=201)
