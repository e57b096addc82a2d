from __future__ import annotations


class BrandAssistantError(Exception):
    """Base class for errors raised by the assistant core."""


class ConfigurationError(BrandAssistantError):
    """The language model provider has no project or credentials configured."""


class TransportError(BrandAssistantError):
    """A call to the language model failed (network, timeout, quota, provider error)."""


class ParseError(BrandAssistantError):
    """Model output did not contain the expected structured payload."""


class ValidationError(BrandAssistantError):
    """A requested domain operation is structurally invalid."""


class ConversationBusyError(BrandAssistantError):
    """A previous request for the same tenant conversation is still running."""

    def __init__(self, tenant_id: str) -> None:
        super().__init__(f"Conversation for tenant {tenant_id} is busy")
        self.tenant_id = tenant_id


__all__ = [
    "BrandAssistantError",
    "ConfigurationError",
    "TransportError",
    "ParseError",
    "ValidationError",
    "ConversationBusyError",
]
