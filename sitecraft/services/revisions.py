# services/revisions.py
"""Prompt-driven revisions of a project's HTML, plus rollback to a stored version.

A revision is billed up front and refunded when it cannot finish. The final
write (new Version, success note and the project's current pointer) is a single
transaction guarded by the project's optimistic lock, so a concurrent revision
or manual save makes the later writer fail with RevisionConflict instead of
silently overwriting the other's pointer.
"""
from __future__ import annotations

import logging

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm.exc import StaleDataError

from sitecraft import llm_client
from sitecraft.models import Conversation, ConversationRole, User, Version
from sitecraft.services import credits
from sitecraft.services.errors import (
    InsufficientCredits,
    InvalidInput,
    NotFound,
    OracleFailure,
    RevisionConflict,
    Unauthenticated,
)
from sitecraft.services.projects import commit_or_conflict, get_owned_project
from sitecraft.settings.config import settings

logger = logging.getLogger(__name__)

VERSION_DESCRIPTION = "Changes made"

ENHANCED_NOTE = "I've enhanced your prompt to: \"{prompt}\""
STARTING_NOTE = "Now making changes to your website..."
FAILED_NOTE = "Unable to generate the code please try again"
SUCCESS_NOTE = "I've made the changes to your Website! you can now preview it"
ROLLBACK_NOTE = "I've rolled back your website to selected version. You can now preview it"


def _note(project_id: int, content: str, role: ConversationRole = ConversationRole.assistant) -> Conversation:
    return Conversation(project_id=project_id, role=role.value, content=content)


async def _refund_after_failure(db: AsyncSession, *, project_id: int, user_id: int, amount: int,
                                note: str | None = None) -> None:
    """Compensate a failed revision. Best effort: a failing refund is logged, not raised."""
    await db.rollback()
    try:
        if note:
            db.add(_note(project_id, note))
        await credits.refund(db, user_id, amount)
        await db.commit()
        logger.info("Refunded %s credits to user %s for project %s", amount, user_id, project_id)
    except Exception:
        logger.exception("Credit refund of %s failed for user %s (project %s)", amount, user_id, project_id)
        await db.rollback()


async def request_revision(db: AsyncSession, *, project_id: int | None, user_id: int | None,
                           message: str | None) -> Version:
    """
    Run one prompt-driven revision and return the new Version.

    Raises a WorkflowError subclass for every expected failure; anything else
    propagates after the credits have been refunded.
    """
    cost = settings.REVISION_COST

    if not user_id:
        raise Unauthenticated()
    if not project_id:
        raise InvalidInput("Project ID is required")

    user = await db.get(User, user_id)
    if not user:
        raise Unauthenticated()
    if (user.credits or 0) < cost:
        raise InsufficientCredits()
    if not message or not message.strip():
        raise InvalidInput("Please enter a valid prompt", status_code=403)

    project = await get_owned_project(db, project_id, user_id)

    db.add(_note(project_id, message, role=ConversationRole.user))
    await db.commit()

    if not await credits.debit(db, user_id, cost):
        await db.rollback()
        raise InsufficientCredits()
    await db.commit()

    try:
        enhanced = await llm_client.enhance_prompt(message)
        logger.info("Project %s: prompt enhanced: %s", project_id, enhanced)

        db.add(_note(project_id, ENHANCED_NOTE.format(prompt=enhanced)))
        db.add(_note(project_id, STARTING_NOTE))
        await db.commit()

        logger.info("Project %s: starting code generation", project_id)
        raw = await llm_client.generate_code(project.current_code or "", enhanced)
        code = llm_client.sanitize_html(raw)
        logger.info("Project %s: code generated, length %d", project_id, len(raw or ""))

        if not code:
            raise OracleFailure()

        version = Version(project_id=project_id, code=code, description=VERSION_DESCRIPTION)
        db.add(version)
        await db.flush()

        db.add(_note(project_id, SUCCESS_NOTE))
        project.current_code = code
        project.current_version_index = version.id
        await db.commit()
    except OracleFailure:
        logger.error("Project %s: empty code response from the model", project_id)
        await _refund_after_failure(db, project_id=project_id, user_id=user_id, amount=cost, note=FAILED_NOTE)
        raise
    except StaleDataError as exc:
        logger.warning("Project %s: changed during revision, discarding result", project_id)
        await _refund_after_failure(db, project_id=project_id, user_id=user_id, amount=cost)
        raise RevisionConflict() from exc
    except Exception:
        logger.exception("Project %s: revision failed", project_id)
        await _refund_after_failure(db, project_id=project_id, user_id=user_id, amount=cost)
        raise

    return version


async def rollback(db: AsyncSession, *, project_id: int, user_id: int | None, version_id: int) -> Version:
    """Repoint the project at an existing version. Never creates a version and costs nothing."""
    if not user_id:
        raise Unauthenticated()

    project = await get_owned_project(db, project_id, user_id)
    version = (
        await db.execute(
            select(Version).where(Version.id == version_id, Version.project_id == project.id)
        )
    ).scalars().first()
    if not version:
        raise NotFound("Version not found")

    project.current_code = version.code
    project.current_version_index = version.id
    db.add(_note(project_id, ROLLBACK_NOTE))
    await commit_or_conflict(db)
    return version
