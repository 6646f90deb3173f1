"""
Python client for the contact form
"""
from contact_manager.client.controller import ContactFormController
from contact_manager.client.form import (EMPTY_DRAFT, ContactDraft, FormState,
                                         reduce_draft, translate_server_errors)

__all__ = [
    "ContactFormController",
    "ContactDraft",
    "EMPTY_DRAFT",
    "FormState",
    "reduce_draft",
    "translate_server_errors",
]
