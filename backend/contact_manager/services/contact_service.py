"""
Contact creation flow: normalize -> validate -> persist
"""
from enum import Enum
from typing import Any, Mapping

from contact_manager.core.errors import StorageFailure, ValidationFailure
from contact_manager.core.logging_config import LoggingConfig
from contact_manager.core.metrics import (contact_storage_failures_total,
                                          contact_validation_failures_total,
                                          contacts_created_total)
from contact_manager.models.contact import Contact
from contact_manager.services.contact_gateway import ContactGateway
from contact_manager.services.contact_input import (normalize_contact_input,
                                                    validate_contact_input)

logger = LoggingConfig.get_logger(__name__)


class RequestStage(str, Enum):
    """Stages a create request moves through"""
    RECEIVED = "received"
    NORMALIZING = "normalizing"
    VALIDATING = "validating"
    PERSISTING = "persisting"
    RESPONDED = "responded"


class ContactService:
    """Service for creating contacts"""

    def __init__(self, gateway: ContactGateway):
        self.gateway = gateway

    def _enter(self, stage: RequestStage) -> None:
        LoggingConfig.set_context(stage=stage.value)
        logger.debug("Contact request stage: %s", stage.value)

    def create(self, raw: Mapping[str, Any]) -> Contact:
        """
        Run a raw submission through the whole creation flow

        Raises:
            ValidationFailure: input is not acceptable (includes duplicate email)
            StorageFailure: the write failed for any other reason
        """
        self._enter(RequestStage.RECEIVED)
        try:
            self._enter(RequestStage.NORMALIZING)
            normalized = normalize_contact_input(raw)

            self._enter(RequestStage.VALIDATING)
            contact_input = validate_contact_input(normalized)

            self._enter(RequestStage.PERSISTING)
            contact = self.gateway.insert_and_fetch(contact_input)
        except ValidationFailure as exc:
            for field in exc.fields:
                contact_validation_failures_total.labels(field=field).inc()
            logger.info("Contact rejected", extra={"error_fields": exc.fields})
            raise
        except StorageFailure:
            contact_storage_failures_total.inc()
            raise
        finally:
            self._enter(RequestStage.RESPONDED)

        contacts_created_total.inc()
        return contact
