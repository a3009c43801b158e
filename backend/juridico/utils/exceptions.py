"""
Custom exception classes
"""
from fastapi import HTTPException


class AuthError(HTTPException):
    """Raised when the request carries no valid session"""
    def __init__(self, detail: str = "Not authenticated"):
        super().__init__(
            status_code=401,
            detail=detail,
            headers={"WWW-Authenticate": "Bearer"},
        )


class InvalidCredentialsError(AuthError):
    """Raised on a bad email/password pair"""
    def __init__(self):
        super().__init__(detail="Invalid email or password")


class ForbiddenError(HTTPException):
    """Raised when the user may see a resource but not act on it"""
    def __init__(self, detail: str = "You don't have permission to perform this action"):
        super().__init__(status_code=403, detail=detail)


class NotFoundError(HTTPException):
    """Raised when a record is absent or not visible to the caller"""
    def __init__(self, detail: str = "Not found"):
        super().__init__(status_code=404, detail=detail)


class ProcessNotFoundError(NotFoundError):
    def __init__(self, process_id):
        super().__init__(detail=f"Process {process_id} not found")


class RecipientNotFoundError(NotFoundError):
    """Raised when no account matches the share recipient's email"""
    def __init__(self, email: str):
        super().__init__(detail=f"No registered user with email {email}")


class UserNotFoundError(NotFoundError):
    def __init__(self, user_id):
        super().__init__(detail=f"User {user_id} not found")


class ConflictError(HTTPException):
    def __init__(self, detail: str = "Conflict"):
        super().__init__(status_code=409, detail=detail)


class AlreadySharedError(ConflictError):
    """Raised when a grant for (process, recipient) already exists"""
    def __init__(self):
        super().__init__(detail="This process is already shared with this user")


class EmailAlreadyRegisteredError(ConflictError):
    def __init__(self):
        super().__init__(detail="An account with this email already exists")


class ValidationError(HTTPException):
    """Raised when a request is well-formed but not acceptable"""
    def __init__(self, detail: str = "Invalid request"):
        super().__init__(status_code=400, detail=detail)


class SelfShareForbiddenError(ValidationError):
    """Raised when the recipient is the process owner"""
    def __init__(self):
        super().__init__(detail="You cannot share a process with its own owner")


class GenerationFailedError(HTTPException):
    """Raised when the AI workflow webhook fails"""
    def __init__(self, reason: str = "AI workflow unavailable"):
        super().__init__(
            status_code=502,
            detail=f"Generation failed: {reason}"
        )


class UploadFailedError(HTTPException):
    """Raised when storing a file fails"""
    def __init__(self, filename: str = "", reason: str = "Unknown error"):
        prefix = f"Upload of '{filename}' failed" if filename else "Upload failed"
        super().__init__(
            status_code=500,
            detail=f"{prefix}: {reason}"
        )
