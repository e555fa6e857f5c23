"""Mutable value holder with lock support.

A :class:`ValueCell` wraps the value a :class:`~fluent_validator.Validator`
operates on. Locking a cell hides its value behind a default: ``get()``
returns the default while the underlying value stays intact and can still be
written.
"""

from __future__ import annotations

from datetime import date
from enum import Enum
from typing import Any

ARRAY_TYPES = (list, tuple, dict)


class ValueKind(Enum):
    """Runtime kind of a cell's value.

    Used by length/size checks to decide which quantity to compare.

    Attributes:
        NULL: ``None``
        BOOLEAN: ``True``/``False``
        INTEGER: Whole numbers (booleans excluded)
        FLOAT: Floating point numbers
        STRING: Text
        COLLECTION: Lists, tuples and dicts
        DATE: ``date`` and ``datetime`` instances
        OBJECT: Anything else, e.g. a domain object produced by ``transform``
    """

    NULL = "null"
    BOOLEAN = "boolean"
    INTEGER = "integer"
    FLOAT = "float"
    STRING = "string"
    COLLECTION = "collection"
    DATE = "date"
    OBJECT = "object"

    @classmethod
    def of(cls, value: Any) -> ValueKind:
        """Detect the kind of a value.

        Example:
            ```python
            ValueKind.of(True)       # ValueKind.BOOLEAN
            ValueKind.of([1, 2, 3])  # ValueKind.COLLECTION
            ```
        """
        if value is None:
            return cls.NULL
        elif isinstance(value, bool):
            return cls.BOOLEAN
        elif isinstance(value, int):
            return cls.INTEGER
        elif isinstance(value, float):
            return cls.FLOAT
        elif isinstance(value, str):
            return cls.STRING
        elif isinstance(value, ARRAY_TYPES):
            return cls.COLLECTION
        elif isinstance(value, date):
            return cls.DATE
        else:
            return cls.OBJECT


class ValueCell:
    """Holds one value plus a lock flag and a locked default.

    Type predicates always inspect the raw value, even while the cell is
    locked. Only :meth:`get` honours the lock.

    Example:
        ```python
        cell = ValueCell("foo")
        cell.lock("bar")
        cell.get()        # 'bar'
        cell.is_string()  # True, inspects 'foo'
        cell.unlock()
        cell.get()        # 'foo'
        ```
    """

    def __init__(self, value: Any = None):
        self._value = value
        self._locked = False
        self._locked_default: Any = None

    def get(self) -> Any:
        """Return the locked default if locked, otherwise the value."""
        if self._locked:
            return self._locked_default
        return self._value

    def set(self, value: Any) -> None:
        """Overwrite the value. The lock state is left as is."""
        self._value = value

    def lock(self, default: Any = None) -> None:
        """Lock the cell so that :meth:`get` returns ``default``."""
        self._locked = True
        self._locked_default = default

    def unlock(self) -> None:
        self._locked = False
        self._locked_default = None

    def locked(self) -> bool:
        return self._locked

    def kind(self) -> ValueKind:
        return ValueKind.of(self._value)

    def is_string(self) -> bool:
        return isinstance(self._value, str)

    def is_int(self) -> bool:
        return self.kind() is ValueKind.INTEGER

    def is_float(self) -> bool:
        return isinstance(self._value, float)

    def is_number(self) -> bool:
        return self.kind() in (ValueKind.INTEGER, ValueKind.FLOAT)

    def is_bool(self) -> bool:
        return isinstance(self._value, bool)

    def is_array_like(self) -> bool:
        return isinstance(self._value, ARRAY_TYPES)

    def is_null(self) -> bool:
        return self._value is None

    def is_date(self) -> bool:
        return isinstance(self._value, date)

    def __repr__(self) -> str:
        if self._locked:
            return f"ValueCell({self._value!r}, locked_default={self._locked_default!r})"
        return f"ValueCell({self._value!r})"
