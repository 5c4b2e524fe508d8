from fastapi import HTTPException, status

class BaseAppException(HTTPException):
    def __init__(self, status_code: int, detail: str):
        super().__init__(status_code=status_code, detail=detail)

class ValidationError(BaseAppException):
    def __init__(self, detail: str = "Validation error"):
        super().__init__(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=detail)

class NotFoundError(BaseAppException):
    def __init__(self, detail: str = "Resource not found"):
        super().__init__(status_code=status.HTTP_404_NOT_FOUND, detail=detail)

class DriverNotFoundError(NotFoundError):
    error_kind = "DRIVER_NOT_FOUND"

    def __init__(self, detail: str = "Driver not found for this QR code"):
        super().__init__(detail=detail)

class InvalidTransitionError(BaseAppException):
    """Raised when an operation is not allowed in the current workflow state"""
    def __init__(self, detail: str = "Operation not allowed in the current state"):
        super().__init__(status_code=status.HTTP_409_CONFLICT, detail=detail)

class CapabilityError(BaseAppException):
    """Camera/microphone capture could not be acquired"""
    def __init__(self, detail: str = "Failed to start video recording. Please check camera permissions."):
        super().__init__(status_code=status.HTTP_409_CONFLICT, detail=detail)

class BackendError(BaseAppException):
    def __init__(self, detail: str = "Backend request failed"):
        super().__init__(status_code=status.HTTP_502_BAD_GATEWAY, detail=detail)

class MalformedResponseError(BackendError):
    def __init__(self, detail: str = "Malformed response from backend"):
        super().__init__(detail=detail)

class StorageError(BackendError):
    def __init__(self, detail: str = "Storage request failed"):
        super().__init__(detail=detail)
