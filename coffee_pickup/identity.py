"""
Identity and role gate.

Bearer tokens are resolved through an identity provider on every request;
the barista role is derived afterwards from a static allow-list and the
persisted ``baristas`` table. Nothing is cached between requests.
"""

import hmac
import logging
from dataclasses import dataclass
from functools import wraps
from typing import Callable, FrozenSet, Optional

from flask import current_app, g, request
from itsdangerous import BadData, URLSafeTimedSerializer
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from werkzeug.security import check_password_hash, generate_password_hash

from . import db
from .errors import Forbidden, Unauthorized, ValidationError
from .models import Barista, User

logger = logging.getLogger(__name__)

ACCESS_SALT = "access-token"
REFRESH_SALT = "refresh-token"


@dataclass(frozen=True)
class Identity:
    user_id: str
    email: Optional[str]


@dataclass(frozen=True)
class AuthContext:
    user_id: str
    email: Optional[str]
    is_barista: bool
    token: str


class LocalIdentityProvider:
    """Users in the ``users`` table, sessions as signed time-limited tokens."""

    def __init__(self, secret_key, access_max_age, refresh_max_age):
        self.access_max_age = access_max_age
        self.refresh_max_age = refresh_max_age
        self._access = URLSafeTimedSerializer(secret_key, salt=ACCESS_SALT)
        self._refresh = URLSafeTimedSerializer(secret_key, salt=REFRESH_SALT)

    def _session(self, user):
        claims = {"sub": user.id, "email": user.email}
        return {
            "user": user.to_dict(),
            "session": {
                "access_token": self._access.dumps(claims),
                "refresh_token": self._refresh.dumps(claims),
                "token_type": "bearer",
                "expires_in": self.access_max_age,
            },
        }

    def sign_up(self, email, password):
        email = email.lower()
        if User.query.filter_by(email=email).first() is not None:
            raise ValidationError("User already registered")
        user = User(email=email, password_hash=generate_password_hash(password))
        db.session.add(user)
        try:
            db.session.commit()
        except IntegrityError:
            db.session.rollback()
            raise ValidationError("User already registered")
        logger.info("Registered user %s", user.id)
        return self._session(user)

    def sign_in(self, email, password):
        user = User.query.filter_by(email=email.lower()).first()
        if user is None or not check_password_hash(user.password_hash, password):
            raise Unauthorized("Invalid login credentials")
        return self._session(user)

    def refresh(self, refresh_token):
        user = self._load_user(self._refresh, refresh_token, self.refresh_max_age)
        return self._session(user)

    def get_user(self, access_token):
        user = self._load_user(self._access, access_token, self.access_max_age)
        return Identity(user_id=user.id, email=user.email)

    def _load_user(self, serializer, token, max_age):
        try:
            claims = serializer.loads(token, max_age=max_age)
        except BadData:
            raise Unauthorized("Invalid or expired token")
        user = db.session.get(User, claims.get("sub"))
        if user is None:
            raise Unauthorized("Invalid or expired token")
        return user


def lookup_barista_email(email):
    try:
        return db.session.get(Barista, email) is not None
    except SQLAlchemyError:
        db.session.rollback()
        raise


def grant_barista(email):
    email = email.lower()
    if db.session.get(Barista, email) is None:
        db.session.add(Barista(email=email))
        try:
            db.session.commit()
        except IntegrityError:
            # Granted concurrently; the row exists either way.
            db.session.rollback()
    logger.info("Granted barista role to %s", email)


def invite_code_matches(code):
    expected = current_app.config.get("BARISTA_INVITE_CODE") or ""
    # An unset invite code disables self-provisioning.
    return bool(expected) and hmac.compare_digest(code.encode(), expected.encode())


class RoleResolver:
    """Static allow-list first, then the injected lookup.

    A failing lookup degrades to "not a barista" instead of failing the request.
    """

    def __init__(self, static_emails: FrozenSet[str], lookup: Callable[[str], bool]):
        self.static_emails = frozenset(email.lower() for email in static_emails)
        self.lookup = lookup

    def is_barista(self, email: Optional[str]) -> bool:
        if not email:
            return False
        email = email.lower()
        if email in self.static_emails:
            return True
        try:
            return bool(self.lookup(email))
        except Exception:
            logger.error("Failed to check barista email %s", email, exc_info=True)
            return False


def get_identity_provider():
    return current_app.extensions["identity_provider"]


def get_role_resolver():
    return current_app.extensions["role_resolver"]


def bearer_token():
    header = request.headers.get("Authorization", "")
    if header.startswith("Bearer "):
        return header[len("Bearer "):] or None
    return None


def resolve_context(token):
    identity = get_identity_provider().get_user(token)
    email = identity.email.lower() if identity.email else None
    return AuthContext(
        user_id=identity.user_id,
        email=email,
        is_barista=get_role_resolver().is_barista(email),
        token=token,
    )


def require_auth(view):
    @wraps(view)
    def wrapper(*args, **kwargs):
        token = bearer_token()
        if not token:
            raise Unauthorized("Missing Authorization token")
        g.auth = resolve_context(token)
        return view(*args, **kwargs)
    return wrapper


def optional_auth(view):
    """Anonymous when no token is sent; a bad token still fails."""
    @wraps(view)
    def wrapper(*args, **kwargs):
        token = bearer_token()
        g.auth = resolve_context(token) if token else None
        return view(*args, **kwargs)
    return wrapper


def require_barista(view):
    @wraps(view)
    @require_auth
    def wrapper(*args, **kwargs):
        if not g.auth.is_barista:
            raise Forbidden("Barista access only")
        return view(*args, **kwargs)
    return wrapper
