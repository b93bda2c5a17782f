# dex_api/errors.py
from typing import List, Optional


class ApiError(Exception):
    """Base for errors that map to a JSON envelope with a specific HTTP status."""
    status_code = 500

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code


class BadRequestError(ApiError):
    status_code = 400

    def __init__(self, message: str, validation_errors: Optional[List[str]] = None):
        super().__init__(message)
        self.validation_errors = validation_errors


class NotFoundError(ApiError):
    status_code = 404


class UpstreamError(ApiError):
    """The Aftermath API failed or could not be reached."""
    status_code = 502

    def __init__(self, message: str, upstream_status: Optional[int] = None):
        super().__init__(message)
        self.upstream_status = upstream_status


class ServiceNotReadyError(ApiError):
    status_code = 503
