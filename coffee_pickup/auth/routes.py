
from flask import Blueprint, request, jsonify, g
from ..errors import Forbidden, Unauthorized
from ..identity import (
    bearer_token,
    get_identity_provider,
    get_role_resolver,
    grant_barista,
    invite_code_matches,
    require_auth,
)
from ..schemas import BaristaGrant, BaristaSignup, Credentials, RefreshRequest, parse_payload

auth_bp = Blueprint('auth', __name__)


def session_response(session):
    email = session["user"].get("email")
    return jsonify({**session, "isBarista": get_role_resolver().is_barista(email)})


@auth_bp.post('/signup')
def signup():
    payload = parse_payload(Credentials, request.get_json(force=True, silent=True) or {})
    return session_response(get_identity_provider().sign_up(payload.email, payload.password))


@auth_bp.post('/login')
def login():
    payload = parse_payload(Credentials, request.get_json(force=True, silent=True) or {})
    return session_response(get_identity_provider().sign_in(payload.email, payload.password))


@auth_bp.post('/refresh')
def refresh():
    payload = parse_payload(RefreshRequest, request.get_json(force=True, silent=True) or {})
    return session_response(get_identity_provider().refresh(payload.refreshToken))


@auth_bp.get('/me')
@require_auth
def me():
    return jsonify({
        "user": {"id": g.auth.user_id, "email": g.auth.email},
        "isBarista": g.auth.is_barista,
    })


@auth_bp.post('/barista-signup')
def barista_signup():
    payload = parse_payload(BaristaSignup, request.get_json(force=True, silent=True) or {})
    if not invite_code_matches(payload.inviteCode):
        raise Forbidden("Invalid invite code")
    session = get_identity_provider().sign_up(payload.email, payload.password)
    if session["user"].get("email"):
        grant_barista(session["user"]["email"])
    return jsonify({**session, "isBarista": True})


@auth_bp.post('/barista-grant')
def barista_grant():
    payload = parse_payload(BaristaGrant, request.get_json(force=True, silent=True) or {})
    token = bearer_token()
    if not token:
        raise Unauthorized("Missing Authorization token")
    identity = get_identity_provider().get_user(token)
    if not identity.email:
        raise Unauthorized("Invalid or expired token")
    if not invite_code_matches(payload.inviteCode):
        raise Forbidden("Invalid invite code")
    grant_barista(identity.email)
    return jsonify({"ok": True, "isBarista": True})
