"""
Contact form controller

Holds the form state, posts the draft to the contacts API and folds the
response back into a new state. The draft is only cleared after the server
confirms the contact was created.
"""
from typing import Any, Optional

import httpx

from contact_manager.client.form import (EMPTY_DRAFT, FormState, reduce_draft,
                                         translate_server_errors)
from contact_manager.core.logging_config import LoggingConfig

logger = LoggingConfig.get_logger(__name__)

CONTACTS_ENDPOINT = "/api/v1/contacts"
TRANSPORT_ERROR_BANNER = "Could not reach the server. Please try again."


class ContactFormController:
    """Drives the new-contact form against the HTTP API"""

    def __init__(self, http_client: httpx.Client, endpoint: str = CONTACTS_ENDPOINT):
        self.http_client = http_client
        self.endpoint = endpoint
        self._state = FormState()

    @property
    def state(self) -> FormState:
        return self._state

    def change(self, field_name: str, value: Any) -> FormState:
        """Apply one input change"""
        self._state = FormState(
            draft=reduce_draft(self._state.draft, field_name, value),
            errors=self._state.errors,
            banner=self._state.banner,
            last_created=self._state.last_created,
        )
        return self._state

    def submit(self) -> FormState:
        """
        POST the current draft and fold the outcome into the form state

        422 shows field errors, any other failure shows a banner; in both
        cases the draft is kept so the user can correct and resubmit.
        """
        draft = self._state.draft
        try:
            response = self.http_client.post(self.endpoint, json=draft.to_payload())
        except httpx.TransportError as exc:
            logger.error(f"Error in fetch: {exc}", extra={"error_type": type(exc).__name__})
            self._state = FormState(draft=draft, banner=TRANSPORT_ERROR_BANNER)
            return self._state

        if response.status_code == 422:
            errors = self._response_errors(response)
            self._state = FormState(draft=draft, errors=translate_server_errors(errors))
            return self._state

        if not response.is_success:
            logger.error(
                "Contact submission failed",
                extra={"status_code": response.status_code, "reason": response.reason_phrase}
            )
            banner = f"Could not save contact ({response.status_code} {response.reason_phrase})"
            self._state = FormState(draft=draft, banner=banner)
            return self._state

        new_contact = self._created_contact(response)
        logger.info("Contact saved", extra={"contact_id": (new_contact or {}).get("id")})
        self._state = FormState(draft=EMPTY_DRAFT, last_created=new_contact)
        return self._state

    @staticmethod
    def _created_contact(response: httpx.Response) -> Optional[dict]:
        """The `newContact` object of a success body, or None when the body is not one"""
        try:
            body = response.json()
        except ValueError:
            logger.warning("Success response without a JSON body", extra={"status_code": response.status_code})
            return None
        new_contact = body.get("newContact") if isinstance(body, dict) else None
        return new_contact if isinstance(new_contact, dict) else None

    @staticmethod
    def _response_errors(response: httpx.Response) -> dict:
        try:
            body = response.json()
        except ValueError:
            logger.error("422 response without a JSON body")
            return {"form": ["was rejected by the server"]}
        errors = body.get("errors") if isinstance(body, dict) else None
        if not isinstance(errors, dict):
            return {"form": ["was rejected by the server"]}
        return errors
