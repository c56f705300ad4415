import uuid
from typing import Optional
from datetime import datetime

from sqlalchemy import DateTime, ForeignKey, LargeBinary, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from speechcoach.db.base import Base
from speechcoach.db.models.project import utc_now


class AudioUpload(Base):
    __tablename__ = "audio_uploads"
    __table_args__ = (
        # the same recording may only be uploaded once per user
        UniqueConstraint("user_id", "file_hash", name="uq_upload_user_hash"),
    )

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    user_id: Mapped[str] = mapped_column(String(64), index=True, nullable=False)
    project_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("projects.id", ondelete="CASCADE"), index=True, nullable=False
    )

    file_name: Mapped[str] = mapped_column(String(255), nullable=False)
    file_data: Mapped[bytes] = mapped_column(LargeBinary, nullable=False, deferred=True)
    file_hash: Mapped[str] = mapped_column(String(64), nullable=False)
    content_type: Mapped[str | None] = mapped_column(String(100), nullable=True)

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utc_now, nullable=False)

    project: Mapped["Project"] = relationship("Project", back_populates="uploads")
    analysis: Mapped[Optional["SpeechAnalysis"]] = relationship(
        "SpeechAnalysis",
        back_populates="upload",
        uselist=False,
        cascade="all, delete-orphan",
    )
