"""
API routes for contacts
"""
from typing import Any, Dict

from fastapi import APIRouter, Body, Depends, Request
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session

from contact_manager.core.database import get_db
from contact_manager.core.errors import StorageFailure, ValidationFailure
from contact_manager.core.logging_config import LoggingConfig
from contact_manager.services.contact_gateway import ContactGateway
from contact_manager.services.contact_service import ContactService

router = APIRouter(prefix="/api/v1/contacts", tags=["contacts"])
logger = LoggingConfig.get_logger(__name__)


def get_contact_service(request: Request, db: Session = Depends(get_db)) -> ContactService:
    """Build the service for one request from app-scoped collaborators"""
    gateway = ContactGateway(db, hooks=request.app.state.persistence_hooks)
    return ContactService(gateway)


@router.post("", status_code=201)
def create_contact(
    payload: Dict[str, Any] = Body(...),
    service: ContactService = Depends(get_contact_service),
):
    """
    Create a contact

    Returns:
        201 {"newContact": {...}} on success,
        422 {"errors": {field: [messages]}} when the input is rejected,
        500 {"errors": {...}} when the write fails
    """
    try:
        contact = service.create(payload)
    except ValidationFailure as exc:
        return JSONResponse(status_code=422, content=exc.to_dict())
    except StorageFailure as exc:
        return JSONResponse(status_code=500, content=exc.to_dict())

    return JSONResponse(status_code=201, content={"newContact": contact.to_dict()})
