"""Exception hierarchy for fluent_validator.

All errors raised by the library derive from :class:`FluentValidatorError`,
which carries an optional context dictionary alongside the message.

Example:
    ```python
    from fluent_validator import Validator, ValidationError

    try:
        Validator({"age": 10}).is_array_of_shape({
            "age": lambda v, key: v.is_int().min(13, "age must be at least 13", key),
        })
    except ValidationError as e:
        print(e.data, e.message)
        # age age must be at least 13
    ```
"""

from typing import Any, Dict


class FluentValidatorError(Exception):
    """Base exception for all fluent_validator errors.

    Attributes:
        context: Dictionary containing contextual information about the error
        details: Alias for context

    Args:
        message: Human-readable error message
        context: Optional dictionary with error context
        details: Alternative to context (both are supported)
    """

    def __init__(
        self,
        message: str,
        context: Dict[str, Any] | None = None,
        details: Dict[str, Any] | None = None,
    ):
        """Initialize the exception with optional context.

        Args:
            message: Error message
            context: Optional context dictionary
            details: Optional details dictionary (takes precedence over context)
        """
        super().__init__(message)
        self.context = details or context or {}
        self.details = self.context


class ValidationError(FluentValidatorError):
    """Raised when a chained check rejects the wrapped value.

    The ``data`` payload is whatever the caller passed alongside the error
    message, typically a field path such as ``"contact.email"`` that pinpoints
    which part of a nested structure failed.

    Example:
        ```python
        raise ValidationError("Email must be valid", data="contact.email")
        ```
    """

    def __init__(self, message: str = "", data: Any = None):
        self.message = message
        self.data = data
        super().__init__(message, context={"data": data} if data is not None else None)

    def __repr__(self) -> str:
        return f"ValidationError(message={self.message!r}, data={self.data!r})"


class ConfigurationError(FluentValidatorError):
    """Raised when settings are invalid or cannot be loaded.

    Example:
        ```python
        raise ConfigurationError(
            "Unknown setting",
            context={"key": "escape_htm", "source": "validator.yaml"}
        )
        ```
    """

    pass
