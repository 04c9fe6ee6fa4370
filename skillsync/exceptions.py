"""
Custom Exceptions for the SkillSync backend.

Provides specific exception types for the failure modes of external
collaborators (LLM, HR system, mail API) and for authentication.
"""


class SkillSyncError(Exception):
    """Base exception for all SkillSync errors."""
    pass


class ResourceNotFoundError(SkillSyncError):
    """Raised when a requested row does not exist."""

    def __init__(self, resource: str, resource_id: str):
        self.resource = resource
        self.resource_id = resource_id
        super().__init__(f"{resource} not found: {resource_id}")


# =============================================================================
# AI/LLM Exceptions
# =============================================================================

class LLMError(SkillSyncError):
    """Base exception for LLM-related errors."""
    pass


class LLMResponseParseError(LLMError):
    """Raised when LLM response cannot be parsed."""

    def __init__(self, expected_format: str = "JSON"):
        self.expected_format = expected_format
        super().__init__(f"Failed to parse LLM response as {expected_format}")


# =============================================================================
# External Service Exceptions
# =============================================================================

class ExternalServiceError(SkillSyncError):
    """Raised when a third-party HTTP service fails."""

    def __init__(self, service: str, reason: str = None):
        self.service = service
        self.reason = reason
        msg = f"{service} request failed"
        if reason:
            msg += f" ({reason})"
        super().__init__(msg)


class HRSystemError(ExternalServiceError):
    """Raised when the HR system API cannot be read."""

    def __init__(self, reason: str = None):
        super().__init__("HR system", reason)


class MailDeliveryError(ExternalServiceError):
    """Raised when the mail API rejects or fails a send."""

    def __init__(self, recipient: str, reason: str = None):
        self.recipient = recipient
        super().__init__(f"Mail delivery to {recipient}", reason)


# =============================================================================
# Authentication Exceptions
# =============================================================================

class AuthenticationError(SkillSyncError):
    """Base exception for authentication errors."""
    pass


class InvalidCredentialsError(AuthenticationError):
    """Raised when credentials are invalid."""

    def __init__(self):
        super().__init__("Invalid email or password")


# =============================================================================
# Configuration Exceptions
# =============================================================================

class ConfigurationError(SkillSyncError):
    """Raised when there's a configuration problem."""

    def __init__(self, setting: str, reason: str = None):
        self.setting = setting
        self.reason = reason
        msg = f"Configuration error: {setting}"
        if reason:
            msg += f" ({reason})"
        super().__init__(msg)


class MissingAPIKeyError(ConfigurationError):
    """Raised when a required API key is missing."""

    def __init__(self, key_name: str):
        self.key_name = key_name
        super().__init__(key_name, "API key not configured")
