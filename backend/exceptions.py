from typing import Optional, Dict, Any, Tuple

class MedSightBaseException(Exception):
    """Base exception for MedSight application"""
    def __init__(self, message: str, error_code: Optional[str] = None, details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.error_code = error_code
        self.details = details or {}

class EMRConnectionError(MedSightBaseException):
    """Raised when the EMR cannot be reached (timeout, DNS, refused connection)"""
    pass

class EMRDataError(MedSightBaseException):
    """Raised when the EMR answers with an error status or unusable body"""
    pass

class InvalidRequest(MedSightBaseException):
    """Raised when a required input is missing or malformed"""
    pass

class NotFound(MedSightBaseException):
    """Raised when a record or token does not exist (or has expired)"""
    pass

class TokenRevoked(MedSightBaseException):
    """Raised when a prescription token was explicitly withdrawn"""
    pass

class AuthenticationError(MedSightBaseException):
    """Raised when a protected route is called without a bearer token"""
    pass

class AIServiceError(MedSightBaseException):
    """Raised when a text generation collaborator is unavailable or fails"""
    pass

def handle_medsight_exception(exc: MedSightBaseException) -> Tuple[int, Dict[str, Any]]:
    """Convert MedSight exceptions to an HTTP status code and JSON body"""
    status_code = 500
    error_code = exc.error_code or "INTERNAL_ERROR"

    if isinstance(exc, EMRConnectionError):
        status_code = 503  # Service Unavailable
        error_code = exc.error_code or "EMR_CONNECTION_ERROR"
    elif isinstance(exc, EMRDataError):
        # Pass upstream 4xx/5xx through, as the frontend expects the EMR's own status
        upstream = exc.details.get("status_code")
        status_code = upstream if isinstance(upstream, int) and 400 <= upstream < 600 else 502
        error_code = exc.error_code or "EMR_DATA_ERROR"
    elif isinstance(exc, InvalidRequest):
        status_code = 400
        error_code = exc.error_code or "INVALID_REQUEST"
    elif isinstance(exc, NotFound):
        status_code = 404
        error_code = exc.error_code or "NOT_FOUND"
    elif isinstance(exc, TokenRevoked):
        status_code = 410  # Gone
        error_code = exc.error_code or "TOKEN_REVOKED"
    elif isinstance(exc, AuthenticationError):
        status_code = 401
        error_code = exc.error_code or "AUTHENTICATION_REQUIRED"
    elif isinstance(exc, AIServiceError):
        status_code = 503
        error_code = exc.error_code or "AI_SERVICE_UNAVAILABLE"

    return status_code, {
        "status": "error",
        "error": exc.message,
        "error_code": error_code,
        "details": exc.details
    }
