from typing import Optional, Dict, Any


class OnboardingListenerError(Exception):
    """Base exception for all onboarding listener errors."""
    def __init__(
        self,
        message: str,
        code: str = "internal_error",
        details: Optional[Dict[str, Any]] = None
    ):
        super().__init__(message)
        self.message = message
        self.code = code
        self.details = details or {}


class DecodeError(OnboardingListenerError):
    """Raised when an inbound notification payload is malformed or incomplete."""
    def __init__(self, message: str, code: str = "decode_error", details: Optional[Dict[str, Any]] = None):
        super().__init__(message, code=code, details=details)


class ResolutionError(OnboardingListenerError):
    """Raised when a stack or its tenant/service parameters cannot be found."""
    def __init__(self, message: str, code: str = "resolution_error", details: Optional[Dict[str, Any]] = None):
        super().__init__(message, code=code, details=details)


class ServiceError(OnboardingListenerError):
    """Raised when a CloudFormation or EventBridge call fails."""
    def __init__(
        self,
        message: str,
        operation: str,
        code: str = "service_error",
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message, code=code, details=details)
        self.operation = operation


class ArgumentError(OnboardingListenerError, ValueError):
    """Raised when a caller violates an argument contract."""
    def __init__(self, message: str, code: str = "argument_error", details: Optional[Dict[str, Any]] = None):
        super().__init__(message, code=code, details=details)


class InvalidTransitionError(ArgumentError):
    """Raised when a stack status change would leave a terminal state."""
    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message, code="invalid_transition", details=details)


class ConfigurationError(OnboardingListenerError):
    """Raised when listener configuration is invalid or missing."""
    def __init__(self, message: str, code: str = "config_error", details: Optional[Dict[str, Any]] = None):
        super().__init__(message, code=code, details=details)
