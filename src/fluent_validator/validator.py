"""Fluent validator with optional/lock short-circuiting and nested shapes.

A :class:`Validator` wraps a single value in a :class:`ValueCell` and exposes
chainable checks. Each check either passes and returns the validator, or
raises :class:`ValidationError`. Transforms (``clean_string``, ``is_date``,
``transform``, ``is_array``, ``is_array_of_shape``) replace the wrapped value.

Example:
    ```python
    from fluent_validator import Validator, ValidationError

    v = Validator({"name": "  Linus ", "age": 19, "admin": True})
    try:
        v.is_array_of_shape({
            "name": lambda v, key: v.is_string("Name must be a string", key)
                .clean_string()
                .min(3, "Name must be at least 3 characters long", key),
            "age": lambda v, key: v.is_int("Age must be an integer", key)
                .min(13, "You must be at least 13 years old", key),
        })
    except ValidationError as e:
        print(f"Invalid field {e.data}: {e.message}")

    v.get()  # {'name': 'Linus', 'age': 19}
    ```
"""

from __future__ import annotations

import functools
import logging
from datetime import date
from enum import Enum
from re import Pattern as RegexPattern
from typing import Any, Callable, Mapping, NoReturn, TypeVar

from . import predicates
from .cell import ValueCell, ValueKind
from .exceptions import ValidationError
from .settings import get_settings

logger = logging.getLogger(__name__)

ShapeCallback = Callable[["Validator", Any], Any]

F = TypeVar("F", bound=Callable[..., "Validator"])


class ChainState(Enum):
    """State of a validator chain.

    Attributes:
        ACTIVE: Checks run against the wrapped value
        LOCKED: The value was marked optional-and-absent; guarded checks
            are skipped and ``get()`` returns the optional default
    """

    ACTIVE = "active"
    LOCKED = "locked"


def chain(guarded: bool = True) -> Callable[[F], F]:
    """Mark a method as a link of the validator chain.

    Guarded methods are skipped while the chain is :attr:`ChainState.LOCKED`
    and return the validator untouched.

    Args:
        guarded: Whether the method honours the lock
    """

    def decorator(method: F) -> F:
        @functools.wraps(method)
        def wrapper(self: Validator, *args: Any, **kwargs: Any) -> Validator:
            if guarded and self.state is ChainState.LOCKED:
                return self
            return method(self, *args, **kwargs)

        return wrapper  # type: ignore[return-value]

    return decorator


def _is_empty(value: Any) -> bool:
    """Loose emptiness: None, False, zero, empty string or empty collection."""
    kind = ValueKind.of(value)
    if kind is ValueKind.NULL:
        return True
    elif kind is ValueKind.BOOLEAN:
        return value is False
    elif kind in (ValueKind.INTEGER, ValueKind.FLOAT):
        return value == 0
    elif kind in (ValueKind.STRING, ValueKind.COLLECTION):
        return len(value) == 0
    return False


def _strictly_equal(left: Any, right: Any) -> bool:
    return ValueKind.of(left) is ValueKind.of(right) and left == right


class Validator:
    """Chainable validator around one value.

    Every check accepts an ``error_message`` and an optional ``data`` payload
    that end up on the raised :class:`ValidationError`. Checks return the
    same validator, so calls can be chained; :meth:`get` returns the final,
    possibly transformed value.

    Instances are not thread-safe. Do not share one validator between
    threads; independent validators share no state and can be used
    concurrently.

    Args:
        value: The raw value to validate, or an existing :class:`ValueCell`
            to operate on in place
    """

    def __init__(self, value: Any = None):
        if isinstance(value, ValueCell):
            self._cell = value
        else:
            self._cell = ValueCell(value)

    @property
    def cell(self) -> ValueCell:
        return self._cell

    @property
    def state(self) -> ChainState:
        return ChainState.LOCKED if self._cell.locked() else ChainState.ACTIVE

    def get(self) -> Any:
        """Return the validated value, or the optional default if locked."""
        return self._cell.get()

    def _fail(
        self,
        check: str,
        error_message: str,
        data: Any = None,
        cause: BaseException | None = None,
    ) -> NoReturn:
        """Raise a ValidationError for ``check``."""
        settings = get_settings()
        message = error_message or settings.format_message(check)
        if settings.log_failures:
            logger.debug(f"Check {check} failed for {self._cell!r}: {message} (data={data!r})")
        raise ValidationError(message, data) from cause

    def _require(self, condition: bool, check: str, error_message: str, data: Any) -> None:
        if not condition:
            self._fail(check, error_message, data)

    def _compare(
        self,
        comparison: Callable[[], bool],
        check: str,
        error_message: str,
        data: Any,
    ) -> None:
        """Run ``comparison``, treating incomparable operands as a failure."""
        try:
            passed = comparison()
        except TypeError as e:
            self._fail(check, error_message, data, cause=e)
        self._require(passed, check, error_message, data)

    # Optional values

    @chain(guarded=False)
    def optional(self, default: Any = None) -> Validator:
        """Skip the rest of the chain if the value is empty.

        Empty means None, False, zero, an empty string or an empty
        collection. An empty value locks the chain: later checks are no-ops
        and :meth:`get` returns ``default``.

        Args:
            default: Value returned by :meth:`get` once locked

        Returns:
            self
        """
        if _is_empty(self._cell.get()):
            logger.debug(f"Locking empty value {self._cell!r} with default {default!r}")
            self._cell.lock(default)
        return self

    @chain(guarded=False)
    def optional_if(self, is_optional: bool | Callable[[], bool], default: Any = None) -> Validator:
        """Skip the rest of the chain if ``is_optional`` holds.

        Args:
            is_optional: A bool, or a callable taking no arguments
            default: Value returned by :meth:`get` once locked

        Returns:
            self
        """
        if callable(is_optional):
            is_optional = is_optional()
        if is_optional:
            logger.debug(f"Locking {self._cell!r} with default {default!r}")
            self._cell.lock(default)
        return self

    # Strings

    @chain()
    def is_string(self, error_message: str = "", data: Any = None) -> Validator:
        self._require(self._cell.is_string(), "is_string", error_message, data)
        return self

    @chain()
    def clean_string(self, error_message: str = "", data: Any = None) -> Validator:
        """Trim, collapse whitespace and HTML-escape the string.

        Escaping follows the ``escape_html`` setting. Cleaning is idempotent.

        Raises:
            ValidationError: If the value is not a string
        """
        self._require(self._cell.is_string(), "clean_string", error_message, data)
        cleaned = predicates.clean_string(self._cell.get(), escape_html=get_settings().escape_html)
        self._cell.set(cleaned)
        return self

    @chain()
    def is_numeric(self, error_message: str = "", data: Any = None) -> Validator:
        """Check that the value is a string holding a number, e.g. ``"12.5"``."""
        self._require(self._cell.is_string(), "is_numeric", error_message, data)
        self._require(predicates.is_numeric(self._cell.get()), "is_numeric", error_message, data)
        return self

    @chain()
    def is_lowercase(self, error_message: str = "", data: Any = None) -> Validator:
        self._require(self._cell.is_string(), "is_lowercase", error_message, data)
        self._require(predicates.is_lowercase(self._cell.get()), "is_lowercase", error_message, data)
        return self

    @chain()
    def is_uppercase(self, error_message: str = "", data: Any = None) -> Validator:
        self._require(self._cell.is_string(), "is_uppercase", error_message, data)
        self._require(predicates.is_uppercase(self._cell.get()), "is_uppercase", error_message, data)
        return self

    @chain()
    def is_email(self, error_message: str = "", data: Any = None) -> Validator:
        self._require(self._cell.is_string(), "is_email", error_message, data)
        self._require(predicates.is_email(self._cell.get()), "is_email", error_message, data)
        return self

    @chain()
    def is_url(self, error_message: str = "", data: Any = None) -> Validator:
        """Check for an absolute URL with a scheme and a host."""
        self._require(self._cell.is_string(), "is_url", error_message, data)
        self._require(predicates.is_url(self._cell.get()), "is_url", error_message, data)
        return self

    @chain()
    def matches(
        self, pattern: str | RegexPattern, error_message: str = "", data: Any = None
    ) -> Validator:
        """Check that the string contains a match for ``pattern``.

        The pattern is searched, not fully matched; anchor it with ``^`` and
        ``$`` to match the whole string.

        Args:
            pattern: Regex pattern (string or compiled pattern)
            error_message: Message of the raised error
            data: Payload of the raised error

        Returns:
            self
        """
        self._require(self._cell.is_string(), "matches", error_message, data)
        self._require(predicates.matches(pattern, self._cell.get()), "matches", error_message, data)
        return self

    @chain()
    def contains(self, needle: str, error_message: str = "", data: Any = None) -> Validator:
        self._require(self._cell.is_string(), "contains", error_message, data)
        self._require(needle in self._cell.get(), "contains", error_message, data)
        return self

    @chain()
    def not_contains(self, needle: str, error_message: str = "", data: Any = None) -> Validator:
        self._require(self._cell.is_string(), "not_contains", error_message, data)
        self._require(needle not in self._cell.get(), "not_contains", error_message, data)
        return self

    @chain()
    def starts_with(self, needle: str, error_message: str = "", data: Any = None) -> Validator:
        self._require(self._cell.is_string(), "starts_with", error_message, data)
        self._require(self._cell.get().startswith(needle), "starts_with", error_message, data)
        return self

    @chain()
    def ends_with(self, needle: str, error_message: str = "", data: Any = None) -> Validator:
        self._require(self._cell.is_string(), "ends_with", error_message, data)
        self._require(self._cell.get().endswith(needle), "ends_with", error_message, data)
        return self

    # Numbers

    @chain()
    def is_int(self, error_message: str = "", data: Any = None) -> Validator:
        """Check that the value is an int. Booleans are rejected."""
        self._require(self._cell.is_int(), "is_int", error_message, data)
        return self

    @chain()
    def is_float(self, error_message: str = "", data: Any = None) -> Validator:
        self._require(self._cell.is_float(), "is_float", error_message, data)
        return self

    def _number(self, check: str, error_message: str, data: Any) -> int | float:
        self._require(self._cell.is_number(), check, error_message, data)
        return self._cell.get()

    @chain()
    def is_greater_than(self, value: int | float, error_message: str = "", data: Any = None) -> Validator:
        num = self._number("is_greater_than", error_message, data)
        self._compare(lambda: num > value, "is_greater_than", error_message, data)
        return self

    @chain()
    def is_greater_than_or_equal(
        self, value: int | float, error_message: str = "", data: Any = None
    ) -> Validator:
        num = self._number("is_greater_than_or_equal", error_message, data)
        self._compare(lambda: num >= value, "is_greater_than_or_equal", error_message, data)
        return self

    @chain()
    def is_less_than(self, value: int | float, error_message: str = "", data: Any = None) -> Validator:
        num = self._number("is_less_than", error_message, data)
        self._compare(lambda: num < value, "is_less_than", error_message, data)
        return self

    @chain()
    def is_less_than_or_equal(
        self, value: int | float, error_message: str = "", data: Any = None
    ) -> Validator:
        num = self._number("is_less_than_or_equal", error_message, data)
        self._compare(lambda: num <= value, "is_less_than_or_equal", error_message, data)
        return self

    @chain()
    def is_equal(self, value: int | float, error_message: str = "", data: Any = None) -> Validator:
        """Check that the value equals ``value`` and has the same kind.

        ``5`` and ``5.0`` are not equal here.
        """
        num = self._number("is_equal", error_message, data)
        self._require(_strictly_equal(num, value), "is_equal", error_message, data)
        return self

    @chain()
    def is_not_equal(self, value: int | float, error_message: str = "", data: Any = None) -> Validator:
        """Negation of :meth:`is_equal`; ``5`` passes against ``5.0``."""
        num = self._number("is_not_equal", error_message, data)
        self._require(not _strictly_equal(num, value), "is_not_equal", error_message, data)
        return self

    @chain()
    def is_between(
        self,
        min: int | float,
        max: int | float,
        error_message: str = "",
        data: Any = None,
    ) -> Validator:
        """Check that ``min <= value <= max``."""
        num = self._number("is_between", error_message, data)
        self._compare(lambda: min <= num <= max, "is_between", error_message, data)
        return self

    @chain()
    def is_not_between(
        self,
        min: int | float,
        max: int | float,
        error_message: str = "",
        data: Any = None,
    ) -> Validator:
        """Check that the value lies outside the inclusive range ``[min, max]``."""
        num = self._number("is_not_between", error_message, data)
        self._compare(lambda: not (min <= num <= max), "is_not_between", error_message, data)
        return self

    # Booleans

    @chain()
    def is_bool(self, error_message: str = "", data: Any = None) -> Validator:
        self._require(self._cell.is_bool(), "is_bool", error_message, data)
        return self

    @chain()
    def is_true(self, error_message: str = "", data: Any = None) -> Validator:
        self._require(self._cell.is_bool(), "is_true", error_message, data)
        self._require(self._cell.get() is True, "is_true", error_message, data)
        return self

    @chain()
    def is_false(self, error_message: str = "", data: Any = None) -> Validator:
        self._require(self._cell.is_bool(), "is_false", error_message, data)
        self._require(self._cell.get() is False, "is_false", error_message, data)
        return self

    # Dates

    @chain()
    def is_date(self, error_message: str = "", data: Any = None) -> Validator:
        """Parse a date string and replace the value with a ``datetime``.

        The ``date_formats`` setting is tried first, then ISO-8601.

        Raises:
            ValidationError: If the value is not a string or cannot be parsed
        """
        self._require(self._cell.is_string(), "is_date", error_message, data)
        try:
            parsed = predicates.parse_date(self._cell.get(), get_settings().date_formats)
        except ValueError as e:
            self._fail("is_date", error_message, data, cause=e)
        self._cell.set(parsed)
        return self

    @chain()
    def is_between_dates(
        self, min: date, max: date, error_message: str = "", data: Any = None
    ) -> Validator:
        """Check that ``min <= value <= max``. Run ``is_date`` first on strings."""
        self._require(self._cell.is_date(), "is_between_dates", error_message, data)
        value = self._cell.get()
        self._compare(lambda: min <= value <= max, "is_between_dates", error_message, data)
        return self

    @chain()
    def is_not_between_dates(
        self, min: date, max: date, error_message: str = "", data: Any = None
    ) -> Validator:
        self._require(self._cell.is_date(), "is_not_between_dates", error_message, data)
        value = self._cell.get()
        self._compare(lambda: not (min <= value <= max), "is_not_between_dates", error_message, data)
        return self

    @chain()
    def is_before_date(self, other: date, error_message: str = "", data: Any = None) -> Validator:
        self._require(self._cell.is_date(), "is_before_date", error_message, data)
        value = self._cell.get()
        self._compare(lambda: value < other, "is_before_date", error_message, data)
        return self

    @chain()
    def is_after_date(self, other: date, error_message: str = "", data: Any = None) -> Validator:
        self._require(self._cell.is_date(), "is_after_date", error_message, data)
        value = self._cell.get()
        self._compare(lambda: value > other, "is_after_date", error_message, data)
        return self

    # Collections

    @chain()
    def is_array(
        self,
        shape: ShapeCallback | None = None,
        error_message: str = "",
        data: Any = None,
    ) -> Validator:
        """Check for a list, tuple or dict and optionally validate each entry.

        With ``shape``, every entry is wrapped in a fresh child validator and
        ``shape(child, key)`` is called with the entry's index (sequences) or
        key (dicts). The collection is rebuilt from the children's final
        values once all entries passed. A failing entry aborts the loop and
        leaves this validator's value untouched.

        Args:
            shape: Callback run against each entry
            error_message: Message raised when the value is not array-like
            data: Payload raised when the value is not array-like

        Returns:
            self

        Example:
            ```python
            Validator(["a", " b "]).is_array(
                lambda v, i: v.is_string(f"Item {i} must be a string", i).clean_string()
            ).get()
            # ['a', 'b']
            ```
        """
        self._require(self._cell.is_array_like(), "is_array", error_message, data)
        if shape is None:
            return self

        value = self._cell.get()
        logger.debug(f"Validating {len(value)} array entries")

        result: Any
        if isinstance(value, dict):
            result = {}
            for key, item in value.items():
                child = Validator(item)
                shape(child, key)
                result[key] = child.get()
        else:
            result = []
            for index, item in enumerate(value):
                child = Validator(item)
                shape(child, index)
                result.append(child.get())
            if isinstance(value, tuple):
                result = tuple(result)

        self._cell.set(result)
        return self

    @chain()
    def is_array_of_shape(
        self,
        schema: Mapping[Any, ShapeCallback] | None = None,
        error_message: str = "",
        data: Any = None,
    ) -> Validator:
        """Validate and reshape an array-like value against a schema.

        ``schema`` maps each expected key to a callback. Callbacks run in
        schema order, each against a child validator wrapping ``value[key]``
        (None when the key is missing). The value is replaced by a new dict
        holding exactly the schema's keys; keys not in the schema are
        dropped. The first failing callback aborts the call and later keys
        are not visited.

        Args:
            schema: Mapping of key to ``callback(child, key)``
            error_message: Message raised when the value is not array-like
            data: Payload raised when the value is not array-like

        Returns:
            self
        """
        self._require(self._cell.is_array_like(), "is_array_of_shape", error_message, data)
        if schema is None:
            return self

        value = self._cell.get()
        logger.debug(f"Validating shape with keys {list(schema)}")

        parsed: dict[Any, Any] = {}
        for key, callback in schema.items():
            child = Validator(_lookup(value, key))
            callback(child, key)
            parsed[key] = child.get()

        self._cell.set(parsed)
        return self

    @chain(guarded=False)
    def is_unique(self, error_message: str = "", data: Any = None) -> Validator:
        """Check that the array's entries are pairwise distinct.

        This check runs even when the chain is locked, against the optional
        default.
        """
        value = self._cell.get()
        self._require(ValueKind.of(value) is ValueKind.COLLECTION, "is_unique", error_message, data)
        self._require(predicates.is_unique(value), "is_unique", error_message, data)
        return self

    # Other

    @chain()
    def is_null(self, error_message: str = "", data: Any = None) -> Validator:
        self._require(self._cell.is_null(), "is_null", error_message, data)
        return self

    @chain()
    def is_not_null(self, error_message: str = "", data: Any = None) -> Validator:
        self._require(not self._cell.is_null(), "is_not_null", error_message, data)
        return self

    @chain(guarded=False)
    def is_one_of(self, values: Any, error_message: str = "", data: Any = None) -> Validator:
        """Check that the value is in ``values``.

        This check runs even when the chain is locked, against the optional
        default.
        """
        self._require(self._cell.get() in values, "is_one_of", error_message, data)
        return self

    @chain(guarded=False)
    def is_not_one_of(self, values: Any, error_message: str = "", data: Any = None) -> Validator:
        """Check that the value is not in ``values``.

        Like :meth:`is_one_of`, this runs even when the chain is locked.
        """
        self._require(self._cell.get() not in values, "is_not_one_of", error_message, data)
        return self

    @chain()
    def transform(self, callback: Callable[[Any], Any]) -> Validator:
        """Replace the value with ``callback(value)``.

        Example:
            ```python
            Validator("TEST").transform(str.lower).get()  # 'test'
            ```
        """
        self._cell.set(callback(self._cell.get()))
        return self

    @chain()
    def validate(
        self,
        callback: Callable[[Any], Any],
        error_message: str = "",
        data: Any = None,
    ) -> Validator:
        """Run a custom check against the value.

        The callback may raise :class:`ValidationError` itself. A return value
        of exactly ``False`` is reported as a failure of this check; any other
        return value is ignored. The wrapped value is never modified.
        """
        if callback(self._cell.get()) is False:
            self._fail("validate", error_message, data)
        return self

    def _measure(self, check: str, error_message: str, data: Any) -> int | float:
        """Length of strings and collections, the number itself for numbers."""
        kind = self._cell.kind()
        value = self._cell.get()
        if kind in (ValueKind.STRING, ValueKind.COLLECTION):
            return len(value)
        elif kind in (ValueKind.INTEGER, ValueKind.FLOAT):
            return value
        self._fail(check, error_message, data)

    @chain()
    def min(self, min: int | float, error_message: str = "", data: Any = None) -> Validator:
        """Require at least ``min`` characters, entries, or a value of ``min``.

        Raises:
            ValidationError: If the quantity is below ``min`` or the value is
                neither a string, a collection nor a number
        """
        measured = self._measure("min", error_message, data)
        self._require(measured >= min, "min", error_message, data)
        return self

    @chain()
    def max(self, max: int | float, error_message: str = "", data: Any = None) -> Validator:
        """Require at most ``max`` characters, entries, or a value of ``max``."""
        measured = self._measure("max", error_message, data)
        self._require(measured <= max, "max", error_message, data)
        return self

    def __repr__(self) -> str:
        return f"Validator({self._cell!r})"


def _lookup(value: Any, key: Any) -> Any:
    """Fetch ``value[key]``, returning None when the key is absent."""
    if isinstance(value, dict):
        return value.get(key)
    if isinstance(key, int) and not isinstance(key, bool) and 0 <= key < len(value):
        return value[key]
    return None
