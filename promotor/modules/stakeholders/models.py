"""SQLAlchemy model for contacts (clients and providers)."""

from enum import Enum

from sqlalchemy import Enum as SQLEnum
from sqlalchemy import String, Text
from sqlalchemy.orm import Mapped, mapped_column

from promotor.core.database import Base
from promotor.shared.mixins import TimestampMixin, UUIDMixin


class StakeholderType(str, Enum):
    """Role of a contact."""

    CLIENT = "Client"
    PROVIDER = "Provider"


class Stakeholder(UUIDMixin, TimestampMixin, Base):
    """
    Client or provider contact.

    Attributes:
        name: Company or person name
        type: Client or Provider
        activity: Trade or role (Obra Civil, Inversor, ...)
        email: Contact e-mail
        phone: Contact phone
        address: Postal address
        tax_id: NIF/CIF
        notes: Free-text notes
    """

    __tablename__ = "stakeholders"

    name: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    type: Mapped[StakeholderType] = mapped_column(
        SQLEnum(
            StakeholderType,
            native_enum=False,
            values_callable=lambda x: [e.value for e in x],
            validate_strings=True,
        ),
        nullable=False,
        default=StakeholderType.PROVIDER,
    )
    activity: Mapped[str] = mapped_column(String(255), nullable=False, default="")
    email: Mapped[str] = mapped_column(String(255), nullable=False, default="")
    phone: Mapped[str] = mapped_column(String(64), nullable=False, default="")
    address: Mapped[str | None] = mapped_column(String(500), nullable=True)
    tax_id: Mapped[str | None] = mapped_column(String(32), nullable=True)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)
