"""Error taxonomy shared by the backend client, services and views."""


class ApiError(Exception):
    status_code = 500

    def __init__(self, message, status_code=None, payload=None):
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code
        self.payload = payload or {}

    def to_dict(self):
        data = dict(self.payload)
        data['error'] = self.message
        return data


class NetworkError(ApiError):
    """Backend unreachable or timed out. Never retried automatically."""
    status_code = 503


class AuthenticationError(ApiError):
    status_code = 401

    def to_dict(self):
        data = super().to_dict()
        data['redirect'] = '/login'
        return data


class PermissionDenied(ApiError):
    status_code = 403


class ValidationError(ApiError):
    status_code = 400


class NotFound(ApiError):
    status_code = 404
