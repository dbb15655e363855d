import logging

import requests

from coffeebeat.errors import ApiError, AuthenticationError, NetworkError, NotFound, PermissionDenied, ValidationError
from coffeebeat.services.session_service import SessionService

logger = logging.getLogger(__name__)

class BackendClient:
    """
    HTTP client for the Coffee Beat REST backend.

    Sends the stored bearer token, refreshes it once on a 401 and retries the
    request. Nothing else is retried: a network failure surfaces immediately
    as NetworkError.
    """

    def __init__(self, base_url, api_prefix='/api', timeout=30, session=None):
        self.base_url = base_url.rstrip('/') + api_prefix
        self.timeout = timeout
        self.http = session or requests.Session()

    @classmethod
    def from_config(cls, config):
        return cls(config['BACKEND_URL'], config['API_PREFIX'], config['REQUEST_TIMEOUT'])

    def _url(self, path):
        return f"{self.base_url}/{path.lstrip('/')}"

    def _send(self, method, path, token=None, **kwargs):
        headers = {'Content-Type': 'application/json'}
        if token:
            headers['Authorization'] = f'Bearer {token}'
        try:
            return self.http.request(method, self._url(path), headers=headers, timeout=self.timeout, **kwargs)
        except requests.RequestException as e:
            logger.error("%s %s failed: %s", method, path, e)
            raise NetworkError("Unable to reach the server. Please try again.") from e

    def request(self, method, path, authenticated=True, **kwargs):
        token = SessionService.access_token() if authenticated else None
        response = self._send(method, path, token=token, **kwargs)

        if response.status_code == 401 and authenticated and token:
            self.refresh()
            response = self._send(method, path, token=SessionService.access_token(), **kwargs)
            if response.status_code == 401:
                SessionService.clear()
                raise AuthenticationError("Session expired. Please log in again.")

        return self._handle(response)

    @staticmethod
    def _error_message(response, fallback):
        try:
            body = response.json()
        except ValueError:
            return fallback
        if isinstance(body, dict):
            return body.get('message') or body.get('error') or fallback
        return fallback

    def _handle(self, response):
        status = response.status_code
        if status in (400, 422):
            raise ValidationError(self._error_message(response, "Invalid request"), status_code=status)
        if status == 401:
            raise AuthenticationError(self._error_message(response, "Authentication required"))
        if status == 403:
            raise PermissionDenied(self._error_message(response, "Access denied"))
        if status == 404:
            raise NotFound(self._error_message(response, "Not found"))
        if status >= 400:
            logger.error("Backend answered %s: %s", status, response.text[:200])
            raise ApiError(self._error_message(response, "Server error"), status_code=502)

        if status == 204 or not response.content:
            return None
        try:
            return response.json()
        except ValueError:
            return None

    # --- AUTH ---

    def login(self, email, password):
        response = self._send('POST', '/auth/login', json={'email': email, 'password': password})
        if response.status_code in (400, 401, 403):
            raise AuthenticationError(self._error_message(response, "Invalid credentials"))
        return self._handle(response)

    def refresh(self):
        """Trade the refresh token for a new pair. Clears the session when that fails."""
        refresh_token = SessionService.refresh_token()
        if not refresh_token:
            SessionService.clear()
            raise AuthenticationError("Session expired. Please log in again.")

        logger.info("Access token rejected, attempting refresh")
        response = self._send('POST', '/auth/refresh', json={'refreshToken': refresh_token})
        if response.status_code != 200:
            logger.warning("Token refresh failed with %s", response.status_code)
            SessionService.clear()
            raise AuthenticationError("Session expired. Please log in again.")

        data = response.json()
        SessionService.update_tokens(data.get('accessToken'), data.get('refreshToken'))
        return data

    # --- BOOKINGS ---

    @staticmethod
    def _content(data):
        # list endpoints may answer with a page object
        if isinstance(data, dict):
            return data.get('content') or []
        return data or []

    def get_my_bookings(self):
        return self._content(self.request('GET', '/bookings/my-bookings'))

    def get_all_bookings(self):
        return self._content(self.request('GET', '/bookings', params={'size': 100, 'page': 0}))

    def create_booking(self, payload):
        return self.request('POST', '/bookings', json=payload)

    def update_booking(self, booking_id, payload):
        return self.request('PUT', f'/bookings/{booking_id}', json=payload)

    def cancel_booking(self, booking_id):
        return self.request('PUT', f'/bookings/{booking_id}/cancel')

    # --- ORDERS ---

    def create_order(self, payload):
        return self.request('POST', '/orders', json=payload)
