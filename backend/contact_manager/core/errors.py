"""
Error taxonomy for the contact flow
"""
from typing import Any, Dict, List, Mapping, Optional


class ContactManagerError(Exception):
    """Base class for application errors"""


class ConfigurationError(ContactManagerError):
    """Settings cannot be resolved into a usable configuration"""


class ValidationFailure(ContactManagerError):
    """
    One or more field-level rule violations, uniqueness included

    Always client-correctable; surfaced as HTTP 422.
    """

    def __init__(self, errors: Mapping[str, List[str]]):
        self.errors: Dict[str, List[str]] = {field: list(messages) for field, messages in errors.items()}
        super().__init__(f"Validation failed for: {', '.join(sorted(self.errors))}")

    @property
    def fields(self) -> List[str]:
        return sorted(self.errors)

    def to_dict(self) -> Dict[str, Any]:
        return {"errors": self.errors}


class StorageFailure(ContactManagerError):
    """Persistence fault that is not a validation failure; opaque to clients (HTTP 500)"""

    def __init__(self, detail: str = "Contact could not be saved", original: Optional[BaseException] = None):
        self.detail = detail
        self.original = original
        super().__init__(detail)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "errors": {
                "type": type(self).__name__,
                "detail": self.detail,
            }
        }
