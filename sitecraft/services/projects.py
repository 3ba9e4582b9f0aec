# services/projects.py
import logging

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload
from sqlalchemy.orm.exc import StaleDataError

from sitecraft.models import WebsiteProject
from sitecraft.services.errors import Forbidden, InvalidInput, NotFound, RevisionConflict, Unauthenticated

logger = logging.getLogger(__name__)


async def commit_or_conflict(db: AsyncSession) -> None:
    """Commit, turning a lost optimistic-lock race on a project into RevisionConflict."""
    try:
        await db.commit()
    except StaleDataError as exc:
        await db.rollback()
        raise RevisionConflict() from exc


async def get_owned_project(db: AsyncSession, project_id: int, user_id: int, *options) -> WebsiteProject:
    """Load a project by id and owner. Missing and foreign projects look the same."""
    stmt = select(WebsiteProject).where(
        WebsiteProject.id == project_id,
        WebsiteProject.user_id == user_id,
    )
    if options:
        stmt = stmt.options(*options)
    project = (await db.execute(stmt)).scalars().first()
    if not project:
        raise NotFound("Project not found")
    return project


async def get_preview(db: AsyncSession, *, project_id: int, user_id: int | None) -> WebsiteProject:
    """
    Project with all versions and conversations for its owner.
    Which version's code to display is left to the caller.
    """
    if not user_id:
        raise Unauthenticated()

    exists = await db.get(WebsiteProject, project_id)
    if not exists:
        logger.info("Preview: project %s does not exist", project_id)
        raise NotFound("Project not found")
    if exists.user_id != user_id:
        logger.info("Preview: user %s does not own project %s", user_id, project_id)
        raise Forbidden("You do not have permission to view this project")

    return await get_owned_project(
        db,
        project_id,
        user_id,
        selectinload(WebsiteProject.versions),
        selectinload(WebsiteProject.conversations),
    )


async def list_published(db: AsyncSession) -> list[WebsiteProject]:
    rows = (
        await db.execute(
            select(WebsiteProject)
            .options(selectinload(WebsiteProject.owner))
            .where(WebsiteProject.is_published.is_(True))
            .order_by(WebsiteProject.updated_at.desc(), WebsiteProject.id.desc())
        )
    ).scalars().all()
    return list(rows or [])


async def get_published_code(db: AsyncSession, project_id: int) -> str:
    project = await db.get(WebsiteProject, project_id)
    # unpublished and missing projects are indistinguishable to anonymous callers
    if not project or not project.is_published:
        raise NotFound("Project not found")
    return project.current_code or ""


async def save_code(db: AsyncSession, *, project_id: int, user_id: int | None, code: str | None) -> WebsiteProject:
    """Overwrite the live code with a manual edit; the project no longer points at any version."""
    if not user_id:
        raise Unauthenticated()
    if not code:
        raise InvalidInput("Code is required")

    project = await get_owned_project(db, project_id, user_id)
    project.current_code = code
    project.current_version_index = None
    await commit_or_conflict(db)
    return project


async def delete_project(db: AsyncSession, *, project_id: int, user_id: int | None) -> None:
    if not user_id:
        raise Unauthenticated()
    project = await get_owned_project(
        db,
        project_id,
        user_id,
        selectinload(WebsiteProject.versions),
        selectinload(WebsiteProject.conversations),
    )
    await db.delete(project)
    await db.commit()
    logger.info("Project %s deleted by user %s", project_id, user_id)


# -------------------------------
# Owner dashboard
# -------------------------------

async def create_project(db: AsyncSession, *, user_id: int, name: str | None, initial_code: str | None = None,
                         initial_prompt: str | None = None) -> WebsiteProject:
    p = WebsiteProject(
        user_id=user_id,
        name=(name or "").strip() or "Untitled project",
        initial_prompt=(initial_prompt or "").strip() or None,
        current_code=initial_code or "",
    )
    db.add(p)
    await db.commit()
    return p


async def list_user_projects(db: AsyncSession, user_id: int) -> list[WebsiteProject]:
    rows = (
        await db.execute(
            select(WebsiteProject)
            .where(WebsiteProject.user_id == user_id)
            .order_by(WebsiteProject.updated_at.desc(), WebsiteProject.id.desc())
        )
    ).scalars().all()
    return list(rows or [])


async def set_published(db: AsyncSession, *, project_id: int, user_id: int, published: bool) -> WebsiteProject:
    project = await get_owned_project(db, project_id, user_id)
    project.is_published = bool(published)
    await commit_or_conflict(db)
    return project
