"""
Database models
"""
from contact_manager.models.contact import Contact

__all__ = ["Contact"]
