import logging
from urllib.parse import quote

from fastapi import APIRouter, Depends, File, Response, UploadFile
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from speechcoach.api.deps import get_current_user_id
from speechcoach.core.config import settings
from speechcoach.core.errors import BadRequest, Conflict, NotFound, PayloadTooLarge
from speechcoach.crud.project import get_project
from speechcoach.crud.upload import create_upload, delete_upload, find_by_hash, get_upload, list_uploads
from speechcoach.db.session import get_db
from speechcoach.schemas.upload import UploadListResponse, UploadOut, UploadResponse
from speechcoach.utils.audio import playback_content_type, sha256_hex

logger = logging.getLogger(__name__)

router = APIRouter()


def _owned_upload(db: Session, project_id: str, upload_id: str, user_id: str, with_data: bool = False):
    upload = get_upload(db, upload_id, user_id, project_id, with_data=with_data)
    if upload is None:
        raise NotFound("Upload not found")
    return upload


@router.get("/{project_id}", response_model=UploadListResponse)
def get_uploads(project_id: str, user_id: str = Depends(get_current_user_id), db: Session = Depends(get_db)):
    uploads = list_uploads(db, user_id, project_id)
    return UploadListResponse(uploads=[UploadOut.model_validate(u) for u in uploads])


@router.post("/{project_id}", response_model=UploadResponse, status_code=201)
def post_upload(
    project_id: str,
    file: UploadFile = File(...),
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    if get_project(db, project_id, user_id) is None:
        raise NotFound("Project not found")

    if file.size is not None and file.size > settings.MAX_UPLOAD_BYTES:
        raise PayloadTooLarge(f"File too large. Maximum allowed size is {settings.MAX_UPLOAD_BYTES // (1024 * 1024)}MB.")
    if not (file.content_type or "").startswith("audio/"):
        raise BadRequest("File must be an audio file")

    data = file.file.read()
    if not data:
        raise BadRequest("Empty audio file")
    if len(data) > settings.MAX_UPLOAD_BYTES:
        raise PayloadTooLarge(f"File too large. Maximum allowed size is {settings.MAX_UPLOAD_BYTES // (1024 * 1024)}MB.")

    file_hash = sha256_hex(data)
    if find_by_hash(db, user_id, file_hash) is not None:
        raise Conflict("This file has already been uploaded")

    try:
        upload = create_upload(
            db,
            user_id=user_id,
            project_id=project_id,
            file_name=file.filename or "recording",
            data=data,
            file_hash=file_hash,
            content_type=file.content_type,
        )
    except IntegrityError:
        db.rollback()
        raise Conflict("This file has already been uploaded")

    logger.info("Stored upload %s (%s, %d bytes) in project %s", upload.id, upload.file_name, len(data), project_id)
    return UploadResponse(upload=UploadOut.model_validate(upload))


@router.get("/{project_id}/{upload_id}")
def get_upload_audio(
    project_id: str,
    upload_id: str,
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    upload = _owned_upload(db, project_id, upload_id, user_id, with_data=True)
    return Response(
        content=upload.file_data,
        media_type=playback_content_type(upload.file_name),
        headers={
            "Content-Disposition": f"inline; filename*=UTF-8''{quote(upload.file_name)}",
            "Cache-Control": "private, max-age=31536000",
        },
    )


@router.delete("/{project_id}/{upload_id}")
def remove_upload(
    project_id: str,
    upload_id: str,
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    upload = _owned_upload(db, project_id, upload_id, user_id)
    delete_upload(db, upload)
    return {"success": True}
