# services/credits.py
from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from sitecraft.models import User


async def balance(db: AsyncSession, user_id: int) -> int:
    value = (await db.execute(select(User.credits).where(User.id == user_id))).scalar_one_or_none()
    return int(value or 0)


async def debit(db: AsyncSession, user_id: int, amount: int) -> bool:
    """Take `amount` credits in a single guarded UPDATE. False if the balance is too low."""
    res = await db.execute(
        update(User)
        .where(User.id == user_id, User.credits >= amount)
        .values(credits=User.credits - amount)
        .execution_options(synchronize_session="fetch")
    )
    return (res.rowcount or 0) > 0


async def refund(db: AsyncSession, user_id: int, amount: int) -> None:
    await db.execute(
        update(User)
        .where(User.id == user_id)
        .values(credits=User.credits + amount)
        .execution_options(synchronize_session="fetch")
    )
