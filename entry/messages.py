"""User-facing messages for classified error codes."""

from typing import Optional

DEFAULT_ERROR_MESSAGE = "An unexpected error occurred."

ERROR_MESSAGES = {
    # Authentication
    "auth/user-not-found": "User not found",
    "auth/wrong-password": "Incorrect password",
    "auth/email-already-in-use": "This email address is already in use",
    "auth/weak-password": "Password is too weak",
    "auth/invalid-email": "Email address is not valid",
    "auth/user-disabled": "This account has been disabled",
    "auth/too-many-requests": "Too many requests. Please wait and try again",
    "auth/network-request-failed": "A network error occurred",

    # Data access
    "permission-denied": "You do not have permission to access this data",
    "not-found": "Data not found",
    "already-exists": "The data already exists",
    "resource-exhausted": "Request limit reached. Please wait and try again",
    "failed-precondition": "The operation's preconditions were not met",
    "internal": "An internal server error occurred",
    "unavailable": "The service is temporarily unavailable",
    "unauthenticated": "Authentication is required",
    "timeout": "The request timed out",
}

STATUS_MESSAGES = {
    400: "The request is not valid",
    401: "Authentication is required",
    403: "You do not have permission to access this data",
    404: "Data not found",
    429: "Request limit reached. Please wait and try again",
    500: "A server error occurred",
    503: "The service is temporarily unavailable",
}


def get_error_message(error: Optional[BaseException] = None, *, code: Optional[str] = None,
                      status: Optional[int] = None) -> str:
    """Known code first, then HTTP status, then the generic fallback."""
    code = code or getattr(error, "code", None)
    if code in ERROR_MESSAGES:
        return ERROR_MESSAGES[code]
    if status is not None:
        return STATUS_MESSAGES.get(status, f"An error occurred ({status})")
    return DEFAULT_ERROR_MESSAGE
