"""
Contact input normalization and schema validation

Raw form values arrive as strings. `normalize_contact_input` turns them into
typed values; `validate_contact_input` checks the typed mapping and either
returns a `ContactInput` or raises `ValidationFailure` with messages keyed by
wire field name.
"""
import re
from typing import Any, Dict, List, Mapping, Optional

from email_validator import EmailNotValidError, validate_email
from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic import ValidationError as PydanticValidationError

from contact_manager.core.errors import ValidationFailure

CONTACT_FIELDS = ("firstName", "lastName", "email", "zipcode", "isAVampire", "age")

NAME_MAX_LENGTH = 20
# Width of the varchar columns
COLUMN_MAX_LENGTH = 255
# Range of the integer age column
AGE_MIN = -2**31
AGE_MAX = 2**31 - 1

_BOOLEAN_LITERALS = {"true": True, "false": False}
_INTEGER_LITERAL = re.compile(r"^[+-]?\d+$")

# pydantic error type -> message shown to the client
ERROR_MESSAGES = {
    "missing": "is required",
    "string_too_short": "is too short (minimum is {min_length} character)",
    "string_too_long": "is too long (maximum is {max_length} characters)",
    "string_type": "must be a string",
    "bool_type": "must be true or false",
    "bool_parsing": "must be true or false",
    "int_type": "must be an integer",
    "int_parsing": "must be an integer",
    "int_from_float": "must be an integer",
    "greater_than_equal": "must be greater than or equal to {ge}",
    "less_than_equal": "must be less than or equal to {le}",
}
INVALID_EMAIL_MESSAGE = "must be a valid email address"


def _is_blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def _coerce_boolean(value: Any) -> Any:
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        return _BOOLEAN_LITERALS.get(value.strip(), value)
    return value


def _coerce_integer(value: Any) -> Any:
    if isinstance(value, str) and _INTEGER_LITERAL.match(value.strip()):
        return int(value.strip())
    return value


def normalize_contact_input(raw: Mapping[str, Any]) -> Dict[str, Any]:
    """
    Convert raw submitted values into typed values

    Blank strings and nulls are dropped so an empty form field counts as
    absent. `isAVampire` becomes a bool when it is "true"/"false" and `age`
    an int when it is an integer literal; anything else is left for the
    validator to reject. Unknown fields pass through. Idempotent.
    """
    normalized: Dict[str, Any] = {}
    for field, value in raw.items():
        if _is_blank(value):
            continue
        if field == "isAVampire":
            value = _coerce_boolean(value)
        elif field == "age":
            value = _coerce_integer(value)
        normalized[field] = value
    return normalized


class ContactInput(BaseModel):
    """Validated contact attributes, ready to persist"""

    model_config = ConfigDict(strict=True, populate_by_name=True, extra="ignore")

    first_name: str = Field(..., alias="firstName", min_length=1, max_length=NAME_MAX_LENGTH)
    last_name: str = Field(..., alias="lastName", min_length=1, max_length=NAME_MAX_LENGTH)
    email: str = Field(..., alias="email", max_length=COLUMN_MAX_LENGTH)
    zipcode: Optional[str] = Field(None, alias="zipcode", max_length=COLUMN_MAX_LENGTH)
    is_a_vampire: bool = Field(..., alias="isAVampire")
    age: Optional[int] = Field(None, alias="age", ge=AGE_MIN, le=AGE_MAX)

    @field_validator("email")
    @classmethod
    def check_email_format(cls, value: str) -> str:
        """Check the address grammar; the submitted text is stored unchanged"""
        if value != value.strip():
            raise ValueError("email has surrounding whitespace")
        try:
            validate_email(value, check_deliverability=False)
        except EmailNotValidError as exc:
            raise ValueError(str(exc)) from exc
        return value

    def to_record(self) -> Dict[str, Any]:
        """Column attributes keyed by model attribute name"""
        return self.model_dump(by_alias=False)


_ALIASES = {name: field.alias for name, field in ContactInput.model_fields.items()}


def _error_message(field: str, error: Dict[str, Any]) -> str:
    error_type = error["type"]
    if field == "email" and error_type == "value_error":
        return INVALID_EMAIL_MESSAGE
    template = ERROR_MESSAGES.get(error_type)
    if template is None:
        return error["msg"][:1].lower() + error["msg"][1:]
    return template.format(**(error.get("ctx") or {}))


def shape_validation_errors(exc: PydanticValidationError) -> Dict[str, List[str]]:
    """Group pydantic errors into {wireField: [message, ...]}"""
    errors: Dict[str, List[str]] = {}
    for error in exc.errors():
        loc = error.get("loc") or ("body",)
        field = str(loc[0])
        field = _ALIASES.get(field, field)
        message = _error_message(field, error)
        messages = errors.setdefault(field, [])
        if message not in messages:
            messages.append(message)
    order = {name: index for index, name in enumerate(CONTACT_FIELDS)}
    return dict(sorted(errors.items(), key=lambda item: order.get(item[0], len(order))))


def validate_contact_input(normalized: Mapping[str, Any]) -> ContactInput:
    """Check a normalized mapping against the contact schema"""
    try:
        return ContactInput.model_validate(dict(normalized))
    except PydanticValidationError as exc:
        raise ValidationFailure(shape_validation_errors(exc)) from exc
