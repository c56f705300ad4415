from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from speechcoach.api.deps import get_current_user_id
from speechcoach.core.errors import BadRequest, NotFound
from speechcoach.crud.project import create_project, delete_project, get_project, list_projects, update_project
from speechcoach.db.session import get_db
from speechcoach.schemas.project import (
    ProjectCreate,
    ProjectListResponse,
    ProjectOut,
    ProjectResponse,
    ProjectUpdate,
)

router = APIRouter()


def _owned_project(db: Session, project_id: str, user_id: str):
    project = get_project(db, project_id, user_id)
    if project is None:
        raise NotFound("Project not found")
    return project


@router.get("", response_model=ProjectListResponse)
def get_projects(user_id: str = Depends(get_current_user_id), db: Session = Depends(get_db)):
    projects = list_projects(db, user_id)
    return ProjectListResponse(projects=[ProjectOut.model_validate(p) for p in projects])


@router.post("", response_model=ProjectResponse, status_code=201)
def post_project(
    payload: ProjectCreate,
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    project = create_project(db, user_id, payload)
    return ProjectResponse(project=ProjectOut.model_validate(project))


@router.get("/{project_id}", response_model=ProjectResponse)
def get_one_project(project_id: str, user_id: str = Depends(get_current_user_id), db: Session = Depends(get_db)):
    project = _owned_project(db, project_id, user_id)
    return ProjectResponse(project=ProjectOut.model_validate(project))


@router.patch("/{project_id}", response_model=ProjectResponse)
def patch_project(
    project_id: str,
    payload: ProjectUpdate,
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    if not payload.model_fields_set:
        raise BadRequest("At least one field must be provided")
    project = _owned_project(db, project_id, user_id)
    project = update_project(db, project, payload)
    return ProjectResponse(project=ProjectOut.model_validate(project))


@router.delete("/{project_id}")
def remove_project(project_id: str, user_id: str = Depends(get_current_user_id), db: Session = Depends(get_db)):
    project = _owned_project(db, project_id, user_id)
    delete_project(db, project)
    return {"success": True}
