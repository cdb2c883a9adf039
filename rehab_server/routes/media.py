"""Stored media download.

- GET /api/media/<path> - raw bytes of an uploaded chat attachment
"""
import logging

from flask import Blueprint, Response

from rehab_server.services.media_service import get_media_service
from rehab_server.utils.decorators import handle_errors

logger = logging.getLogger(__name__)

media_bp = Blueprint('media', __name__, url_prefix='/api/media')


@media_bp.route('/<path:path>', methods=['GET'])
@handle_errors
def get_media(path):
    stored = get_media_service().open_media(path)
    content_type = getattr(stored, 'content_type', None) or 'application/octet-stream'
    return Response(stored.read(), mimetype=content_type)
