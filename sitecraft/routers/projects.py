from __future__ import annotations

import logging
from typing import Optional

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from sitecraft.database import get_db
from sitecraft.schemas import ProjectRead, PublishedProjectRead, RevisionRequest, SaveCodeRequest
from sitecraft.services import projects, revisions
from sitecraft.utils import http_error, require_authenticated_user

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/project", tags=["project"])


@router.post("/revision/{project_id}")
async def make_revision(
    project_id: int,
    body: Optional[RevisionRequest] = None,
    user=Depends(require_authenticated_user),
    db: AsyncSession = Depends(get_db),
):
    try:
        version = await revisions.request_revision(
            db,
            project_id=project_id,
            user_id=user.id,
            message=body.message if body else None,
        )
    except Exception as exc:
        raise http_error(exc) from exc
    logger.info("Project %s revised to version %s", project_id, version.id)
    return {"message": "changes made successfully"}


@router.put("/save/{project_id}")
async def save_project_code(
    project_id: int,
    body: Optional[SaveCodeRequest] = None,
    user=Depends(require_authenticated_user),
    db: AsyncSession = Depends(get_db),
):
    try:
        await projects.save_code(db, project_id=project_id, user_id=user.id, code=body.code if body else None)
    except Exception as exc:
        raise http_error(exc) from exc
    return {"message": "Project saved successfully"}


@router.get("/rollback/{project_id}/{version_id}")
async def rollback_to_version(
    project_id: int,
    version_id: int,
    user=Depends(require_authenticated_user),
    db: AsyncSession = Depends(get_db),
):
    try:
        await revisions.rollback(db, project_id=project_id, user_id=user.id, version_id=version_id)
    except Exception as exc:
        raise http_error(exc) from exc
    return {"message": "Version rolled back"}


@router.get("/preview/{project_id}")
async def get_project_preview(
    project_id: int,
    user=Depends(require_authenticated_user),
    db: AsyncSession = Depends(get_db),
):
    try:
        project = await projects.get_preview(db, project_id=project_id, user_id=user.id)
    except Exception as exc:
        raise http_error(exc) from exc
    return {"project": ProjectRead.model_validate(project)}


@router.get("/published")
async def get_published_projects(db: AsyncSession = Depends(get_db)):
    try:
        rows = await projects.list_published(db)
    except Exception as exc:
        raise http_error(exc) from exc
    return {"projects": [PublishedProjectRead.model_validate(p) for p in rows]}


@router.get("/published/{project_id}")
async def get_published_project(project_id: int, db: AsyncSession = Depends(get_db)):
    try:
        code = await projects.get_published_code(db, project_id)
    except Exception as exc:
        raise http_error(exc) from exc
    return {"code": code}


@router.delete("/{project_id}")
async def delete_project(
    project_id: int,
    user=Depends(require_authenticated_user),
    db: AsyncSession = Depends(get_db),
):
    try:
        await projects.delete_project(db, project_id=project_id, user_id=user.id)
    except Exception as exc:
        raise http_error(exc) from exc
    return {"message": "Project deleted successfully"}


__all__ = ["router"]
