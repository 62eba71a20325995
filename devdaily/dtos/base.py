"""Shared plumbing for request DTOs.

Request DTOs are frozen dataclasses built by a ``from_request``
classmethod. ``InputReader`` does the field-by-field parsing and
collects every error before a single ``ValidationError`` is raised.
"""

import re
from dataclasses import fields, is_dataclass
from datetime import datetime, timezone
from decimal import Decimal, InvalidOperation
from enum import Enum
from typing import Any, Mapping, TypeVar
from urllib.parse import urlparse

from devdaily.domain.exceptions import ValidationError

E = TypeVar("E", bound=Enum)

MIN_PRICE = Decimal("100")
MAX_PRICE = Decimal("1000000000")
MAX_URL_LENGTH = 500

_TRUE_VALUES = {"1", "true", "on", "yes"}
_EMAIL = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")
_PRICE_CHARS = re.compile(r"[^0-9.,]")


def clean_price(raw: Any) -> Decimal:
    """Turn user-typed price text into a two-decimal Decimal.

    Accepts ``1250000``, ``1250000.50``, ``Rp 1.250.000`` and
    ``1,250,000``. Raises ``InvalidOperation`` for anything else.
    """
    if isinstance(raw, Decimal):
        value = raw
    elif isinstance(raw, (int, float)):
        value = Decimal(str(raw))
    else:
        text = _PRICE_CHARS.sub("", str(raw)).replace(",", "")
        if text.count(".") > 1:
            text = text.replace(".", "")
        if not text:
            raise InvalidOperation(raw)
        value = Decimal(text)
    return value.quantize(Decimal("0.01"))


def is_valid_url(value: str) -> bool:
    parsed = urlparse(value)
    return parsed.scheme in {"http", "https"} and bool(parsed.netloc) and " " not in value


def is_valid_email(value: str) -> bool:
    return bool(_EMAIL.match(value))


def serialize_value(value: Any) -> Any:
    """Convert DTO field values into JSON-friendly primitives."""
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, Decimal):
        return str(value)
    if isinstance(value, datetime):
        return value.isoformat()
    if isinstance(value, (list, tuple, set, frozenset)):
        return [serialize_value(item) for item in value]
    if isinstance(value, dict):
        return {key: serialize_value(item) for key, item in value.items()}
    return value


class RequestDTO:
    """Mixin for frozen request dataclasses."""

    def to_dict(self) -> dict[str, Any]:
        assert is_dataclass(self)
        return {f.name: serialize_value(getattr(self, f.name)) for f in fields(self)}


class InputReader:
    """Reads raw request values and records one error per field."""

    def __init__(self, data: Mapping[str, Any] | None) -> None:
        self.data: Mapping[str, Any] = data or {}
        self.errors: dict[str, str] = {}

    def error(self, key: str, message: str) -> None:
        self.errors.setdefault(key, message)

    def has(self, key: str) -> bool:
        return key in self.data

    def raw(self, key: str) -> Any:
        value = self.data.get(key)
        if isinstance(value, str):
            value = value.strip()
            return value or None
        return value

    def raise_if_errors(self, message: str) -> None:
        if self.errors:
            raise ValidationError(message, self.errors)

    # ------------------------------------------------------------------
    # Typed readers
    # ------------------------------------------------------------------

    def string(
        self,
        key: str,
        *,
        required: bool = False,
        min_length: int | None = None,
        max_length: int | None = None,
        label: str | None = None,
    ) -> str | None:
        label = label or key.replace("_", " ")
        value = self.raw(key)
        if value is None:
            if required:
                self.error(key, f"The {label} field is required.")
            return None
        value = str(value)
        if min_length is not None and len(value) < min_length:
            self.error(key, f"The {label} must be at least {min_length} characters.")
        if max_length is not None and len(value) > max_length:
            self.error(key, f"The {label} cannot exceed {max_length} characters.")
        return value

    def integer(
        self,
        key: str,
        *,
        required: bool = False,
        minimum: int | None = None,
        maximum: int | None = None,
        label: str | None = None,
    ) -> int | None:
        label = label or key.replace("_", " ")
        value = self.raw(key)
        if value is None:
            if required:
                self.error(key, f"The {label} field is required.")
            return None
        if isinstance(value, bool):
            self.error(key, f"The {label} must be an integer.")
            return None
        try:
            number = int(str(value))
        except ValueError:
            self.error(key, f"The {label} must be an integer.")
            return None
        if minimum is not None and number < minimum:
            self.error(key, f"The {label} must be at least {minimum}.")
        if maximum is not None and number > maximum:
            self.error(key, f"The {label} cannot be greater than {maximum}.")
        return number

    def decimal(
        self,
        key: str,
        *,
        required: bool = False,
        minimum: Decimal | None = None,
        maximum: Decimal | None = None,
        label: str | None = None,
    ) -> Decimal | None:
        label = label or key.replace("_", " ")
        value = self.raw(key)
        if value is None:
            if required:
                self.error(key, f"The {label} field is required.")
            return None
        try:
            number = Decimal(str(value)).quantize(Decimal("0.01"))
        except InvalidOperation:
            self.error(key, f"The {label} must be a number.")
            return None
        if minimum is not None and number < minimum:
            self.error(key, f"The {label} must be at least {minimum}.")
        if maximum is not None and number > maximum:
            self.error(key, f"The {label} cannot be greater than {maximum}.")
        return number

    def price(self, key: str, *, required: bool = False, label: str = "price") -> Decimal | None:
        """Read an IDR price bounded to 100..1,000,000,000."""
        value = self.raw(key)
        if value is None:
            if required:
                self.error(key, f"The {label} field is required.")
            return None
        try:
            number = clean_price(value)
        except InvalidOperation:
            self.error(key, f"The {label} must be a valid number.")
            return None
        if number < MIN_PRICE:
            self.error(key, "Minimum price is 100 IDR")
        elif number > MAX_PRICE:
            self.error(key, "Maximum price is 1,000,000,000 IDR")
        return number

    def boolean(self, key: str, default: bool = False) -> bool:
        value = self.data.get(key)
        if value is None or value == "":
            return default
        if isinstance(value, bool):
            return value
        return str(value).strip().lower() in _TRUE_VALUES

    def choice(
        self,
        key: str,
        enum_cls: type[E],
        *,
        default: E | None = None,
        required: bool = False,
        label: str | None = None,
    ) -> E | None:
        label = label or key.replace("_", " ")
        value = self.raw(key)
        if value is None:
            if required:
                self.error(key, f"The {label} field is required.")
            return default
        try:
            return enum_cls(str(value).lower())
        except ValueError:
            allowed = ", ".join(member.value for member in enum_cls)
            self.error(key, f"The {label} must be one of: {allowed}.")
            return default

    def url(
        self,
        key: str,
        *,
        required: bool = False,
        max_length: int = MAX_URL_LENGTH,
        label: str | None = None,
    ) -> str | None:
        label = label or key.replace("_", " ")
        value = self.string(key, required=required, max_length=max_length, label=label)
        if value is not None and not is_valid_url(value):
            self.error(key, f"The {label} must be a valid http or https URL.")
        return value

    def email(self, key: str, *, required: bool = False) -> str | None:
        value = self.string(key, required=required, max_length=100)
        if value is not None and not is_valid_email(value):
            self.error(key, "The email must be a valid email address.")
        return value.lower() if value else value

    def timestamp(self, key: str, *, required: bool = False, label: str | None = None) -> datetime | None:
        label = label or key.replace("_", " ")
        value = self.raw(key)
        if value is None:
            if required:
                self.error(key, f"The {label} field is required.")
            return None
        if isinstance(value, datetime):
            parsed = value
        else:
            try:
                parsed = datetime.fromisoformat(str(value))
            except ValueError:
                self.error(key, f"The {label} must be an ISO 8601 date.")
                return None
        if parsed.tzinfo is None:
            parsed = parsed.replace(tzinfo=timezone.utc)
        return parsed

    def int_list(self, key: str, *, label: str | None = None) -> list[int]:
        """Read a list of positive ints from a list or comma separated string."""
        label = label or key.replace("_", " ")
        value = self.data.get(key)
        if value is None or value == "":
            return []
        items = value.split(",") if isinstance(value, str) else list(value)
        result: list[int] = []
        for item in items:
            try:
                number = int(str(item).strip())
            except ValueError:
                self.error(key, f"Every {label} entry must be a positive integer.")
                return []
            if number <= 0:
                self.error(key, f"Every {label} entry must be a positive integer.")
                return []
            result.append(number)
        return result
