"""
Memory Journal Backend — Image SQLAlchemy Model
=================================================

What:  ORM model representing the `images` table.
Why:   Records every uploaded file. Groups and posts reference images only by
       URL string, copied in by the client, so there is no relationship here.
"""

import uuid
from datetime import datetime, timezone

from sqlalchemy import DateTime, String, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from journal.database import Base


class Image(Base):
    __tablename__ = "images"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)

    # Name under STORAGE_ROOT (uuid + extension; never client input)
    filename: Mapped[str] = mapped_column(String(255), nullable=False, unique=True)
    content_type: Mapped[str] = mapped_column(String(100), nullable=False)
    url: Mapped[str] = mapped_column(Text, nullable=False)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )

    def __repr__(self) -> str:
        return f"<Image(id={self.id}, filename='{self.filename}', content_type='{self.content_type}')>"
