# backend/utils/errors.py
from fastapi import HTTPException, status


# Base class for every error the API reports to clients.
# Handlers in main.py render it as {"success": false, "message": ...}
class ApiError(HTTPException):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message = "Internal Server Error"

    def __init__(self, message: str = None, headers: dict = None):
        super().__init__(status_code=self.status_code, detail=message or self.default_message, headers=headers)

    @property
    def message(self) -> str:
        return self.detail


# Missing or malformed input
class ValidationError(ApiError):
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Invalid request."


# Request is well-formed but the current state does not allow it (e.g. empty cart)
class InvalidState(ApiError):
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Operation not allowed in the current state."


class InsufficientStock(ApiError):
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Insufficient stock."


class Unauthenticated(ApiError):
    status_code = status.HTTP_401_UNAUTHORIZED
    default_message = "Access denied. Missing bearer token."

    def __init__(self, message: str = None):
        super().__init__(message, headers={"WWW-Authenticate": "Bearer"})


class Forbidden(ApiError):
    status_code = status.HTTP_403_FORBIDDEN
    default_message = "You are not authorized for this action."


class NotFound(ApiError):
    status_code = status.HTTP_404_NOT_FOUND
    default_message = "Resource not found."


class Conflict(ApiError):
    status_code = status.HTTP_409_CONFLICT
    default_message = "Resource already exists."
