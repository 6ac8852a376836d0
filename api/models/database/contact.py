"""
Landing page contact model
Only the account reference matters to this service; contact CRUD lives elsewhere.
"""
from sqlalchemy import Column, String, Text, Integer, ForeignKey, Index
from sqlalchemy.orm import relationship
from common.types import ContactStatus, ContactPriority
from models.database.base import BaseModel


class Contact(BaseModel):

    __tablename__ = "contacts"

    full_name = Column(String(255), nullable=False)
    email = Column(String(255), nullable=False, index=True)
    phone = Column(String(20), nullable=False)
    message = Column(Text, nullable=False)
    status = Column(
        String(20),
        nullable=False,
        default=ContactStatus.NOT_ATTENDED.value,
        server_default=ContactStatus.NOT_ATTENDED.value,
        index=True,
    )
    priority = Column(
        String(10),
        nullable=False,
        default=ContactPriority.MEDIUM.value,
        server_default=ContactPriority.MEDIUM.value,
    )
    notes = Column(Text, nullable=True)
    source = Column(String(100), nullable=False, default="landing_page", server_default="landing_page")
    assigned_to = Column(
        Integer,
        ForeignKey("users.id", ondelete="SET NULL"),
        nullable=True,
        comment="Staff account handling the contact; cleared when the account is deleted"
    )

    assignee = relationship("User", back_populates="assigned_contacts")

    __table_args__ = (
        Index('idx_contacts_assigned_to', 'assigned_to'),
        Index('idx_contacts_created_at', 'created_at'),
    )
