"""Profile of the authenticated user.

- GET /api/users/me - profile (created on first call after sign-in)
- PUT /api/users/me - update displayName / avatarUrl / location
"""
import logging

from flask import Blueprint, request

from rehab_server.services.user_service import get_user_service
from rehab_server.utils.decorators import handle_errors, require_auth
from rehab_server.utils.helpers import respond_success

logger = logging.getLogger(__name__)

users_bp = Blueprint('users', __name__, url_prefix='/api/users')

PROFILE_FIELDS = {'displayName': 'display_name', 'avatarUrl': 'avatar_url', 'location': 'location'}


@users_bp.route('/me', methods=['GET'])
@handle_errors
@require_auth
def get_me(session):
    user = get_user_service().ensure_user(session)
    return respond_success({'user': user.to_dict()})


@users_bp.route('/me', methods=['PUT'])
@handle_errors
@require_auth
def update_me(session):
    data = request.get_json(silent=True) or {}
    updates = {PROFILE_FIELDS[k]: v for k, v in data.items() if k in PROFILE_FIELDS}
    service = get_user_service()
    service.ensure_user(session)
    user = service.update_profile(session, **updates)
    return respond_success({'user': user.to_dict()})
