from __future__ import annotations

from datetime import datetime

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from survey_gems.db.models.users import User


class UsersRepo:
    @staticmethod
    async def get_by_id(session: AsyncSession, user_id: str) -> User | None:
        return await session.get(User, user_id)

    @staticmethod
    async def get_by_id_for_update(session: AsyncSession, user_id: str) -> User | None:
        stmt = select(User).where(User.id == user_id).with_for_update()
        result = await session.execute(stmt)
        return result.scalar_one_or_none()

    @staticmethod
    async def list_all(session: AsyncSession) -> list[User]:
        stmt = select(User).order_by(User.created_at.desc(), User.id.desc())
        result = await session.execute(stmt)
        return list(result.scalars().all())

    @staticmethod
    async def upsert(
        session: AsyncSession,
        *,
        user_id: str,
        email: str,
        first_name: str | None,
        last_name: str | None,
        profile_image_url: str | None,
        grant_admin: bool,
        now_utc: datetime,
    ) -> tuple[User, bool]:
        """Insert a new user or refresh the identity fields of an existing one.

        ``grant_admin`` only applies on insert; role changes for existing users
        go through ``set_admin``. Returns the user and whether it was created.
        """
        user = await UsersRepo.get_by_id_for_update(session, user_id)
        if user is None:
            user = User(
                id=user_id,
                email=email,
                first_name=first_name,
                last_name=last_name,
                profile_image_url=profile_image_url,
                gem_balance=0,
                is_verified=False,
                status="active",
                is_admin=grant_admin,
                created_at=now_utc,
                updated_at=now_utc,
            )
            session.add(user)
            await session.flush()
            return user, True

        user.email = email
        user.first_name = first_name
        user.last_name = last_name
        user.profile_image_url = profile_image_url
        user.updated_at = now_utc
        await session.flush()
        return user, False

    @staticmethod
    async def set_gem_balance(
        session: AsyncSession,
        user_id: str,
        gem_balance: int,
        *,
        now_utc: datetime,
    ) -> int:
        stmt = (
            update(User)
            .where(User.id == user_id)
            .values(gem_balance=gem_balance, updated_at=now_utc)
        )
        result = await session.execute(stmt)
        return result.rowcount or 0

    @staticmethod
    async def adjust_gem_balance(
        session: AsyncSession,
        user_id: str,
        delta: int,
        *,
        now_utc: datetime,
        require_at_least: int | None = None,
    ) -> int | None:
        """Apply ``delta`` in a single statement and return the new balance.

        With ``require_at_least`` the update only happens while the stored
        balance is still at least that value. None means no row matched.
        """
        stmt = (
            update(User)
            .where(User.id == user_id)
            .values(gem_balance=User.gem_balance + delta, updated_at=now_utc)
            .returning(User.gem_balance)
        )
        if require_at_least is not None:
            stmt = stmt.where(User.gem_balance >= require_at_least)
        result = await session.execute(stmt)
        new_balance = result.scalar_one_or_none()
        return None if new_balance is None else int(new_balance)

    @staticmethod
    async def update_status(
        session: AsyncSession,
        user_id: str,
        status: str,
        *,
        now_utc: datetime,
    ) -> User | None:
        user = await UsersRepo.get_by_id_for_update(session, user_id)
        if user is None:
            return None
        user.status = status
        user.updated_at = now_utc
        await session.flush()
        return user

    @staticmethod
    async def set_admin(
        session: AsyncSession,
        user_id: str,
        is_admin: bool,
        *,
        now_utc: datetime,
    ) -> User | None:
        user = await UsersRepo.get_by_id_for_update(session, user_id)
        if user is None:
            return None
        user.is_admin = is_admin
        user.updated_at = now_utc
        await session.flush()
        return user

    @staticmethod
    async def mark_verified(session: AsyncSession, user_id: str, *, now_utc: datetime) -> int:
        stmt = (
            update(User)
            .where(User.id == user_id)
            .values(is_verified=True, verification_code=None, updated_at=now_utc)
        )
        result = await session.execute(stmt)
        return result.rowcount or 0
