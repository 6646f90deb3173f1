"""
Contact model
"""
from typing import Any, Dict

from sqlalchemy import (BigInteger, Boolean, Column, DateTime, Integer, String,
                        UniqueConstraint, func)

from contact_manager.core.database import Base

# Name of the storage constraint that enforces email uniqueness
EMAIL_UNIQUE_CONSTRAINT = "uq_contacts_email"


class Contact(Base):
    """
    A person in the address book

    Column names are camelCase to match the wire format and the migrated
    schema; Python attributes are snake_case.
    """
    __tablename__ = "contacts"

    # SQLite only auto-increments INTEGER PRIMARY KEY
    id = Column(BigInteger().with_variant(Integer, "sqlite"), primary_key=True, autoincrement=True)

    first_name = Column("firstName", String(255), nullable=False)
    last_name = Column("lastName", String(255), nullable=False)
    email = Column("email", String(255), nullable=False)
    zipcode = Column("zipcode", String(255), nullable=True)
    is_a_vampire = Column("isAVampire", Boolean, nullable=False)
    age = Column("age", Integer, nullable=True)

    # Timestamps
    created_at = Column("createdAt", DateTime(timezone=True), nullable=False, server_default=func.now())
    updated_at = Column("updatedAt", DateTime(timezone=True), nullable=False, server_default=func.now())

    __table_args__ = (
        UniqueConstraint("email", name=EMAIL_UNIQUE_CONSTRAINT),
    )

    def __repr__(self):
        return f"<Contact(id={self.id}, name='{self.first_name} {self.last_name}')>"

    def to_dict(self) -> Dict[str, Any]:
        """Convert to the camelCase wire representation"""
        return {
            "id": self.id,
            "firstName": self.first_name,
            "lastName": self.last_name,
            "email": self.email,
            "zipcode": self.zipcode,
            "isAVampire": self.is_a_vampire,
            "age": self.age,
            "createdAt": self.created_at.isoformat() if self.created_at else None,
            "updatedAt": self.updated_at.isoformat() if self.updated_at else None,
        }
