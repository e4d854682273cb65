from datetime import datetime
from enum import Enum as PyEnum

from sqlalchemy import DateTime, Enum, func
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


class Base(DeclarativeBase):
    """Declarative base shared by all ORM models"""

    pass


class TimestampMixin:
    """Adds created_at / updated_at columns maintained by the database"""

    created_at: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, server_default=func.now()
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, server_default=func.now(), onupdate=func.now()
    )


def enum_column(enum_cls: type[PyEnum], length: int = 20) -> Enum:
    """String-backed enum column storing member values ('active', not 'ACTIVE')"""
    return Enum(
        enum_cls,
        native_enum=False,
        length=length,
        values_callable=lambda x: [e.value for e in x],
        validate_strings=True,
    )
