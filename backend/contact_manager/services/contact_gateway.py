"""
Persistence gateway for contacts

Writes go through `before_insert` / `before_update` hooks: plain functions
that take the column values as a dict and return the (possibly changed)
dict. Email uniqueness is enforced by the `uq_contacts_email` constraint;
the gateway only translates the resulting IntegrityError.
"""
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Callable, Dict, Mapping, Optional, Sequence, Tuple

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from contact_manager.core.errors import StorageFailure, ValidationFailure
from contact_manager.core.logging_config import LoggingConfig
from contact_manager.models.contact import EMAIL_UNIQUE_CONSTRAINT, Contact
from contact_manager.services.contact_input import ContactInput

logger = LoggingConfig.get_logger(__name__)

RecordHook = Callable[[Dict[str, Any]], Dict[str, Any]]

UNIQUE_VIOLATION_MESSAGE = "must be unique"

# Driver message fragment -> wire field it belongs to.
# PostgreSQL names the constraint, SQLite names table.column.
UNIQUE_CONSTRAINT_FIELDS: Dict[str, str] = {
    EMAIL_UNIQUE_CONSTRAINT: "email",
    "contacts.email": "email",
}

# Columns a caller may change through update_and_fetch
UPDATABLE_ATTRIBUTES = ("first_name", "last_name", "email", "zipcode", "is_a_vampire", "age")


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _as_utc(value: datetime) -> datetime:
    # SQLite hands back naive datetimes
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def stamp_created(record: Dict[str, Any]) -> Dict[str, Any]:
    """Set createdAt and updatedAt to the same instant"""
    now = utcnow()
    return {**record, "created_at": now, "updated_at": now}


def stamp_updated(record: Dict[str, Any]) -> Dict[str, Any]:
    """Refresh updatedAt without ever moving it backwards"""
    now = utcnow()
    previous = record.get("updated_at")
    if previous is not None and _as_utc(previous) > now:
        now = _as_utc(previous)
    return {**record, "updated_at": now}


@dataclass(frozen=True)
class PersistenceHooks:
    before_insert: Tuple[RecordHook, ...] = (stamp_created,)
    before_update: Tuple[RecordHook, ...] = (stamp_updated,)


DEFAULT_HOOKS = PersistenceHooks()


def run_hooks(hooks: Sequence[RecordHook], record: Dict[str, Any]) -> Dict[str, Any]:
    for hook in hooks:
        record = hook(dict(record))
    return record


def unique_violation_field(exc: IntegrityError) -> Optional[str]:
    """Wire field whose uniqueness `exc` violates, or None for other integrity errors"""
    message = str(exc.orig) if exc.orig is not None else str(exc)
    lowered = message.lower()
    if "unique" not in lowered and "duplicate" not in lowered:
        return None
    for marker, field in UNIQUE_CONSTRAINT_FIELDS.items():
        if marker.lower() in lowered:
            return field
    return None


class ContactGateway:
    """Durable writes and reads of contacts"""

    def __init__(self, db: Session, hooks: PersistenceHooks = DEFAULT_HOOKS):
        self.db = db
        self.hooks = hooks

    def insert_and_fetch(self, contact_input: ContactInput) -> Contact:
        """
        Insert a validated contact and return the stored row

        Raises:
            ValidationFailure: the email is already taken
            StorageFailure: any other storage error
        """
        record = run_hooks(self.hooks.before_insert, contact_input.to_record())
        contact = Contact(**record)
        self.db.add(contact)
        self._commit("insert")
        self.db.refresh(contact)
        logger.info("Contact created", extra={"contact_id": contact.id})
        return contact

    def update_and_fetch(self, contact_id: int, changes: Mapping[str, Any]) -> Contact:
        """
        Apply attribute changes to an existing contact and return the stored row

        Not exposed over HTTP; defines the updatedAt contract for callers that need it.
        """
        unknown = set(changes) - set(UPDATABLE_ATTRIBUTES)
        if unknown:
            raise ValueError(f"Cannot update contact attributes: {', '.join(sorted(unknown))}")

        contact = self.get(contact_id)
        if contact is None:
            raise LookupError(f"Contact {contact_id} not found")

        current = {attr: getattr(contact, attr) for attr in UPDATABLE_ATTRIBUTES}
        current["updated_at"] = contact.updated_at
        record = run_hooks(self.hooks.before_update, {**current, **changes})
        # createdAt is fixed at insert time
        record.pop("created_at", None)
        for attr, value in record.items():
            setattr(contact, attr, value)

        self._commit("update")
        self.db.refresh(contact)
        logger.info("Contact updated", extra={"contact_id": contact.id})
        return contact

    def get(self, contact_id: int) -> Optional[Contact]:
        return self.db.get(Contact, contact_id)

    def _commit(self, operation: str) -> None:
        try:
            self.db.commit()
        except IntegrityError as exc:
            self.db.rollback()
            field = unique_violation_field(exc)
            if field is not None:
                logger.info(
                    "Contact %s rejected by unique constraint", operation,
                    extra={"field": field}
                )
                raise ValidationFailure({field: [UNIQUE_VIOLATION_MESSAGE]}) from exc
            logger.error("Contact %s violated a storage constraint", operation, exc_info=True)
            raise StorageFailure(original=exc) from exc
        # pysqlite raises OverflowError for integers wider than 64 bits
        except (SQLAlchemyError, OverflowError) as exc:
            self.db.rollback()
            logger.error("Contact %s failed in the storage layer", operation, exc_info=True)
            raise StorageFailure(original=exc) from exc
