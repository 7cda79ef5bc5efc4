"""
Domain exceptions.

Domain exceptions represent business rule violations
and domain-specific error conditions.
"""


class DomainException(Exception):
    """Base exception for all domain exceptions."""

    def __init__(self, message: str, code: str = None):
        """
        Initialize domain exception.

        Args:
            message: Human-readable error message
            code: Machine-readable error code
        """
        super().__init__(message)
        self.message = message
        self.code = code or self.__class__.__name__


class KeyException(DomainException):
    """Base exception for access key errors."""

    pass


class InvalidKeyFormatError(KeyException):
    """Raised when a key code is malformed (local pre-flight check)."""

    def __init__(self, message: str = "Invalid key format. Use format: XXXX-XXXX-XXXX"):
        super().__init__(message, code="INVALID_KEY_FORMAT")


class KeyNotFoundError(KeyException):
    """Raised when a key does not exist in the store."""

    def __init__(self, message: str = "Key not found"):
        super().__init__(message, code="KEY_NOT_FOUND")


class KeyRevokedError(KeyException):
    """Raised when a key has been revoked."""

    def __init__(self, message: str = "Key is revoked"):
        super().__init__(message, code="KEY_REVOKED")


class KeyExpiredError(KeyException):
    """Raised when a key has expired."""

    def __init__(self, message: str = "Key has expired"):
        super().__init__(message, code="KEY_EXPIRED")


class KeyExhaustedError(KeyException):
    """Raised when a key has no uses remaining."""

    def __init__(self, message: str = "No uses remaining"):
        super().__init__(message, code="KEY_EXHAUSTED")


class InvalidKeyParametersError(KeyException):
    """Raised when key creation parameters are rejected."""

    def __init__(self, message: str = "Invalid key parameters"):
        super().__init__(message, code="INVALID_KEY_PARAMETERS")


class DuplicateKeyCodeError(KeyException):
    """Raised when a key code is already used by another record."""

    def __init__(self, message: str = "Key code already exists"):
        super().__init__(message, code="DUPLICATE_KEY_CODE")


class StoreUnavailableError(DomainException):
    """Raised when the key store or the validation service cannot be reached."""

    def __init__(self, message: str = "Key store unavailable"):
        super().__init__(message, code="STORE_UNAVAILABLE")


class UnauthorizedError(DomainException):
    """Raised when an administrative credential is missing or wrong."""

    def __init__(self, message: str = "Invalid admin credential"):
        super().__init__(message, code="UNAUTHORIZED")
