import logging
from datetime import datetime

import jwt
import pytz

from coffeebeat.services.local_store import LocalStore
from coffeebeat.utils.roles import STAFF_ROLES, parse_role, dashboard_path_for

logger = logging.getLogger(__name__)

TOKEN_KEY = 'token'
REFRESH_TOKEN_KEY = 'refreshToken'
USER_KEY = 'user'

class SessionService:
    """Current user and backend tokens of this client."""

    @staticmethod
    def token_claims(token):
        """
        Claims of a backend JWT. The signing key belongs to the backend, so the
        signature is not checked here; this only rejects tokens that are not JWTs.
        """
        return jwt.decode(token, options={"verify_signature": False})

    @staticmethod
    def start(auth_response):
        """Store the tokens and user returned by login/register."""
        access_token = auth_response.get('accessToken')
        refresh_token = auth_response.get('refreshToken')
        if not access_token or not refresh_token:
            raise ValueError("Auth response without tokens")
        SessionService.token_claims(access_token)

        LocalStore.set(TOKEN_KEY, access_token)
        LocalStore.set(REFRESH_TOKEN_KEY, refresh_token)
        if auth_response.get('user'):
            LocalStore.set(USER_KEY, auth_response['user'])
        logger.info("Session started for %s", (auth_response.get('user') or {}).get('email'))
        return auth_response.get('user')

    @staticmethod
    def load():
        """
        Current user if a complete, well-formed session is stored. Partial or
        malformed sessions are wiped.
        """
        token = LocalStore.get(TOKEN_KEY)
        refresh_token = LocalStore.get(REFRESH_TOKEN_KEY)
        user = LocalStore.get(USER_KEY)

        if not (token and refresh_token and user):
            if token or refresh_token or user:
                SessionService.clear()
            return None

        try:
            SessionService.token_claims(token)
        except jwt.PyJWTError as e:
            logger.warning("Stored access token is malformed, clearing session: %s", e)
            SessionService.clear()
            return None
        if not isinstance(user, dict):
            SessionService.clear()
            return None
        return user

    @staticmethod
    def current_user():
        return SessionService.load()

    @staticmethod
    def is_authenticated():
        return SessionService.load() is not None

    @staticmethod
    def access_token():
        return LocalStore.get(TOKEN_KEY)

    @staticmethod
    def refresh_token():
        return LocalStore.get(REFRESH_TOKEN_KEY)

    @staticmethod
    def update_tokens(access_token, refresh_token):
        LocalStore.set(TOKEN_KEY, access_token)
        if refresh_token:
            LocalStore.set(REFRESH_TOKEN_KEY, refresh_token)

    @staticmethod
    def token_expires_at():
        token = SessionService.access_token()
        if not token:
            return None
        try:
            exp = SessionService.token_claims(token).get('exp')
        except jwt.PyJWTError:
            return None
        return datetime.fromtimestamp(exp, tz=pytz.utc) if exp else None

    @staticmethod
    def clear():
        for key in (TOKEN_KEY, REFRESH_TOKEN_KEY, USER_KEY):
            LocalStore.remove(key)

    @staticmethod
    def role(user=None):
        user = user if user is not None else SessionService.load()
        if not user:
            return None
        return parse_role(user.get('role'))

    @staticmethod
    def has_role(role, user=None):
        return SessionService.has_any_role([role], user)

    @staticmethod
    def has_any_role(roles, user=None):
        current = SessionService.role(user)
        if current is None:
            return False
        return current in {parse_role(r) for r in roles}

    @staticmethod
    def is_staff(user=None):
        return SessionService.role(user) in STAFF_ROLES

    @staticmethod
    def dashboard_path(user=None):
        return dashboard_path_for(SessionService.role(user))
