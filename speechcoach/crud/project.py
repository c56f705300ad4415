from __future__ import annotations

import logging

from sqlalchemy import select
from sqlalchemy.orm import Session

from speechcoach.crud.analysis import clear_performance_for_project
from speechcoach.db.models.project import Project
from speechcoach.schemas.project import ProjectCreate, ProjectUpdate

logger = logging.getLogger(__name__)


def list_projects(db: Session, user_id: str) -> list[Project]:
    stmt = (
        select(Project)
        .where(Project.user_id == user_id)
        .order_by(Project.created_at.desc())
    )
    return list(db.execute(stmt).scalars().all())


def get_project(db: Session, project_id: str, user_id: str) -> Project | None:
    stmt = select(Project).where(Project.id == project_id, Project.user_id == user_id)
    return db.execute(stmt).scalars().first()


def create_project(db: Session, user_id: str, payload: ProjectCreate) -> Project:
    project = Project(user_id=user_id, name=payload.name, description=payload.description)
    db.add(project)
    db.commit()
    db.refresh(project)
    return project


def update_project(db: Session, project: Project, payload: ProjectUpdate) -> Project:
    """
    Apply the fields present in the request.

    A changed timeframe invalidates the cached grades of the project's
    analyses; they are rescored against the new target on next read.
    """
    sent = payload.model_fields_set

    if "name" in sent and payload.name is not None:
        project.name = payload.name
    if "description" in sent:
        project.description = payload.description
    if "vibe" in sent:
        vibe = (payload.vibe or "").strip()
        project.vibe = vibe or None
    if "strict" in sent and payload.strict is not None:
        project.strict = payload.strict
    if "timeframe" in sent:
        timeframe = payload.timeframe or 0
        if timeframe != project.timeframe:
            project.timeframe = timeframe
            cleared = clear_performance_for_project(db, project.id)
            logger.info("Project %s timeframe -> %sms, cleared %s cached grades", project.id, timeframe, cleared)

    db.commit()
    db.refresh(project)
    return project


def delete_project(db: Session, project: Project) -> None:
    db.delete(project)
    db.commit()
