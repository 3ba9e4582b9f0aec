from sqlalchemy import func, select

from sitecraft.models import Conversation, Version

BASE_HTML = (
    "<!DOCTYPE html><html><head><script src=\"https://cdn.tailwindcss.com\"></script></head>"
    "<body><header class=\"bg-gray-800\">Acme</header></body></html>"
)


async def reload(db, model, pk):
    return await db.get(model, pk, populate_existing=True)


async def count_versions(db, project_id: int) -> int:
    return (
        await db.execute(select(func.count()).select_from(Version).where(Version.project_id == project_id))
    ).scalar_one()


async def conversation_log(db, project_id: int) -> list[tuple[str, str]]:
    rows = (
        await db.execute(
            select(Conversation.role, Conversation.content)
            .where(Conversation.project_id == project_id)
            .order_by(Conversation.id)
        )
    ).all()
    return [(r, c) for r, c in rows]
