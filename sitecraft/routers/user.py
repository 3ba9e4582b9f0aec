from __future__ import annotations

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from sitecraft.database import get_db
from sitecraft.schemas import ProjectCreate, ProjectSummary, PublishUpdate
from sitecraft.services import credits, projects
from sitecraft.utils import http_error, require_authenticated_user


router = APIRouter(prefix="/api/user", tags=["user"])


@router.get("/credits")
async def get_credits(
    user=Depends(require_authenticated_user),
    db: AsyncSession = Depends(get_db),
):
    return {"credits": await credits.balance(db, user.id)}


@router.get("/projects")
async def get_user_projects(
    user=Depends(require_authenticated_user),
    db: AsyncSession = Depends(get_db),
):
    rows = await projects.list_user_projects(db, user.id)
    return {"projects": [ProjectSummary.model_validate(p) for p in rows]}


@router.post("/projects", status_code=status.HTTP_201_CREATED)
async def create_project(
    body: ProjectCreate,
    user=Depends(require_authenticated_user),
    db: AsyncSession = Depends(get_db),
):
    try:
        project = await projects.create_project(
            db,
            user_id=user.id,
            name=body.name,
            initial_prompt=body.initial_prompt,
            initial_code=body.initial_code,
        )
    except Exception as exc:
        raise http_error(exc) from exc
    return {"projectId": project.id}


@router.patch("/projects/{project_id}/publish")
async def toggle_publish(
    project_id: int,
    body: PublishUpdate,
    user=Depends(require_authenticated_user),
    db: AsyncSession = Depends(get_db),
):
    try:
        project = await projects.set_published(
            db, project_id=project_id, user_id=user.id, published=body.is_published
        )
    except Exception as exc:
        raise http_error(exc) from exc
    message = "Project published" if project.is_published else "Project unpublished"
    return {"message": message, "is_published": project.is_published}


__all__ = ["router"]
