from __future__ import annotations

from sqlalchemy import select
from sqlalchemy.orm import Session, undefer

from speechcoach.db.models.upload import AudioUpload


def list_uploads(db: Session, user_id: str, project_id: str) -> list[AudioUpload]:
    stmt = (
        select(AudioUpload)
        .where(AudioUpload.user_id == user_id, AudioUpload.project_id == project_id)
        .order_by(AudioUpload.created_at.desc())
    )
    return list(db.execute(stmt).scalars().all())


def get_upload(
    db: Session,
    upload_id: str,
    user_id: str,
    project_id: str,
    with_data: bool = False,
) -> AudioUpload | None:
    stmt = select(AudioUpload).where(
        AudioUpload.id == upload_id,
        AudioUpload.user_id == user_id,
        AudioUpload.project_id == project_id,
    )
    if with_data:
        stmt = stmt.options(undefer(AudioUpload.file_data))
    return db.execute(stmt).scalars().first()


def find_by_hash(db: Session, user_id: str, file_hash: str) -> AudioUpload | None:
    stmt = select(AudioUpload).where(AudioUpload.user_id == user_id, AudioUpload.file_hash == file_hash)
    return db.execute(stmt).scalars().first()


def create_upload(
    db: Session,
    user_id: str,
    project_id: str,
    file_name: str,
    data: bytes,
    file_hash: str,
    content_type: str | None = None,
) -> AudioUpload:
    upload = AudioUpload(
        user_id=user_id,
        project_id=project_id,
        file_name=file_name,
        file_data=data,
        file_hash=file_hash,
        content_type=content_type,
    )
    db.add(upload)
    db.commit()
    db.refresh(upload)
    return upload


def delete_upload(db: Session, upload: AudioUpload) -> None:
    # the analysis goes with it (relationship cascade + ON DELETE CASCADE)
    db.delete(upload)
    db.commit()
