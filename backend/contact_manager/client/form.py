"""
Contact form state

The form is an immutable `FormState`; every change produces a new value
through `reduce_draft`.
"""
import re
from dataclasses import dataclass, field, fields, replace
from typing import Any, Dict, List, Mapping, Optional

# Wire field -> draft attribute
DRAFT_ATTRIBUTES = {
    "firstName": "first_name",
    "lastName": "last_name",
    "email": "email",
    "zipcode": "zipcode",
    "isAVampire": "is_a_vampire",
    "age": "age",
}

_WORD_BOUNDARY = re.compile(r"(?<=[a-z0-9])(?=[A-Z])|(?<=[A-Z])(?=[A-Z][a-z])")

FIELD_LABELS = {
    "firstName": "First Name",
    "lastName": "Last Name",
    "email": "Email",
    "zipcode": "Zip Code",
    "isAVampire": "Is A Vampire",
    "age": "Age",
}


@dataclass(frozen=True)
class ContactDraft:
    """Editable values of the six form inputs, as typed"""
    first_name: str = ""
    last_name: str = ""
    email: str = ""
    zipcode: str = ""
    is_a_vampire: str = ""
    age: str = ""

    def to_payload(self) -> Dict[str, str]:
        """JSON body for POST /api/v1/contacts"""
        return {wire: getattr(self, attr) for wire, attr in DRAFT_ATTRIBUTES.items()}

    def is_empty(self) -> bool:
        return all(getattr(self, f.name) == "" for f in fields(self))


EMPTY_DRAFT = ContactDraft()


def reduce_draft(draft: ContactDraft, field_name: str, value: Any) -> ContactDraft:
    """Return a new draft with one field changed"""
    try:
        attr = DRAFT_ATTRIBUTES[field_name]
    except KeyError:
        raise KeyError(f"Unknown contact field: {field_name}") from None
    return replace(draft, **{attr: "" if value is None else str(value)})


def humanize(name: str) -> str:
    """firstName -> First Name, isAVampire -> Is A Vampire"""
    spaced = _WORD_BOUNDARY.sub(" ", name.replace("_", " "))
    return " ".join(word[:1].upper() + word[1:] for word in spaced.split())


def translate_server_errors(errors: Mapping[str, Any]) -> Dict[str, List[str]]:
    """Turn {wireField: [messages]} from a 422 into {label: [messages]} for display"""
    translated: Dict[str, List[str]] = {}
    for name, messages in errors.items():
        label = FIELD_LABELS.get(name) or humanize(name)
        if isinstance(messages, str):
            messages = [messages]
        translated[label] = [str(message) for message in messages]
    return translated


@dataclass(frozen=True)
class FormState:
    draft: ContactDraft = EMPTY_DRAFT
    errors: Dict[str, List[str]] = field(default_factory=dict)
    banner: Optional[str] = None
    last_created: Optional[Dict[str, Any]] = None

    @property
    def has_errors(self) -> bool:
        return bool(self.errors) or self.banner is not None
