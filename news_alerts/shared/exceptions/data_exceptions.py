"""
Data-related exception classes.

Handles client-side validation of outgoing data.
"""

from typing import List, Optional

from pydantic import ValidationError

from .api_exceptions import AlertClientError


class ValidationFailure(AlertClientError):
    """Client-detected invalid input; never reaches the network"""

    def __init__(
        self,
        message: str = "Data validation failed",
        validation_errors: Optional[List[str]] = None,
        field_name: Optional[str] = None
    ):
        super().__init__(message)
        self.validation_errors = validation_errors or []
        self.field_name = field_name

    @classmethod
    def from_pydantic(cls, error: ValidationError) -> "ValidationFailure":
        """Collapse a pydantic ValidationError into a single failure"""
        messages = []
        field_name = None
        for item in error.errors():
            loc = ".".join(str(part) for part in item.get("loc", ()))
            msg = item.get("msg", "Invalid value")
            # pydantic prefixes messages raised from validators
            if msg.startswith("Value error, "):
                msg = msg[len("Value error, "):]
            if field_name is None and loc:
                field_name = loc.split(".")[0]
            messages.append(msg)
        return cls(
            messages[0] if messages else "Data validation failed",
            validation_errors=messages,
            field_name=field_name
        )
