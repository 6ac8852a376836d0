from sqlalchemy import Column, Integer, DateTime
from sqlalchemy.orm import declarative_base
from sqlalchemy.sql import text
from utils.datetime_utils import DateTimeManager

Base = declarative_base()


class TimestampMixin:
    """
    Mixin for timestamp fields
    Provides created_at and updated_at fields
    """
    
    created_at = Column(
        DateTime(timezone=True),
        nullable=False,
        default=DateTimeManager._now,
        server_default=text("CURRENT_TIMESTAMP"),
        comment="Record creation timestamp"
    )
    
    updated_at = Column(
        DateTime(timezone=True),
        nullable=False,
        default=DateTimeManager._now,
        onupdate=DateTimeManager._now,
        server_default=text("CURRENT_TIMESTAMP"),
        comment="Record last update timestamp"
    )


class BaseModel(Base, TimestampMixin):
    """
    Base model class for all database models
    """
    
    __abstract__ = True
    
    id = Column(
        Integer,
        primary_key=True,
        autoincrement=True,
        comment="Primary key"
    )
    
    def __repr__(self) -> str:
        """String representation of model"""
        return f"<{self.__class__.__name__}(id={self.id})>"
