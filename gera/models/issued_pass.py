"""
IssuedPass model — a signed pass archive kept for later retrieval.

The archive is stored exactly as it was returned at issuance, so every
GET /card/{serial_number} answers with the same bytes. Rows are never
updated; the serial number is the primary key.
"""

from datetime import datetime, timezone

from sqlalchemy import String, DateTime, LargeBinary
from sqlalchemy.orm import Mapped, mapped_column

from gera.database import Base


class IssuedPass(Base):
    __tablename__ = "issued_passes"

    # UUID4 string generated at issuance
    serial_number: Mapped[str] = mapped_column(
        String(36),
        primary_key=True,
    )

    # Signed .pkpass archive
    archive: Mapped[bytes] = mapped_column(
        LargeBinary,
        nullable=False,
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        nullable=False,
    )
