"""UUID7 implementation for time-ordered identifiers."""

import time
import uuid
from typing import Any

from sqlalchemy import String, TypeDecorator


def uuid7() -> uuid.UUID:
    """Generate UUID7 (time-ordered UUID).

    Layout:
    - 48 bits: Unix timestamp in milliseconds
    - 4 bits: Version (7)
    - 12 bits: Random
    - 2 bits: Variant (RFC 4122)
    - 62 bits: Random

    Returns:
        A new UUID7 instance.
    """
    timestamp_ms = int(time.time() * 1000)
    uuid_int = timestamp_ms << 80
    uuid_int |= 0x7000 << 64
    uuid_int |= uuid.uuid4().int & ((1 << 62) - 1)
    uuid_int = (uuid_int & ~(0x3 << 62)) | (0x2 << 62)
    return uuid.UUID(int=uuid_int)


class UUID7(TypeDecorator):
    """UUID column stored as its canonical 36-character string.

    SQLite has no native UUID type, so values travel as text and come
    back as ``uuid.UUID``.

    Example:
        class Project(Base):
            id: Mapped[uuid.UUID] = mapped_column(UUID7, primary_key=True, default=uuid7)
    """

    impl = String(36)
    cache_ok = True

    def process_bind_param(self, value: Any, dialect) -> str | None:
        """Convert a Python UUID to its database form.

        Args:
            value: The UUID value to convert, or None.
            dialect: The SQLAlchemy dialect being used.

        Returns:
            String representation of the UUID, or None.
        """
        if value is None:
            return None
        if isinstance(value, uuid.UUID):
            return str(value)
        return str(uuid.UUID(str(value)))

    def process_result_value(self, value: Any, dialect) -> uuid.UUID | None:
        """Convert a database value to a Python UUID.

        Args:
            value: The database value to convert, or None.
            dialect: The SQLAlchemy dialect being used.

        Returns:
            Python UUID object, or None.
        """
        if value is None:
            return None
        if isinstance(value, uuid.UUID):
            return value
        return uuid.UUID(value)
