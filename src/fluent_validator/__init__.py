"""Fluent, chainable validation and transformation of nested data.

Wrap a value in a :class:`Validator`, chain checks and transforms, then read
the result with :meth:`Validator.get`. A failing check raises
:class:`ValidationError`.

Example:
    ```python
    from fluent_validator import Validator

    Validator("hello world").is_string().is_lowercase().min(3).max(12).get()
    # 'hello world'
    ```
"""

from .cell import ValueCell, ValueKind
from .exceptions import ConfigurationError, FluentValidatorError, ValidationError
from .settings import (
    ValidatorSettings,
    configure,
    get_settings,
    load_settings,
    reset_settings,
)
from .validator import ChainState, Validator

__version__ = "0.1.0"

__all__ = [
    "__version__",
    # Core
    "Validator",
    "ChainState",
    "ValueCell",
    "ValueKind",
    # Exceptions
    "FluentValidatorError",
    "ValidationError",
    "ConfigurationError",
    # Settings
    "ValidatorSettings",
    "get_settings",
    "configure",
    "load_settings",
    "reset_settings",
]
