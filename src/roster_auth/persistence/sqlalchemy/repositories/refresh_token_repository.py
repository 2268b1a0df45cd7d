"""SQLAlchemy implementation of RefreshTokenRepository."""

import logging
from datetime import datetime
from uuid import UUID

from sqlalchemy import delete, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from roster_auth.persistence.sqlalchemy.models import RefreshTokenModel
from roster_auth.repositories import RefreshTokenData, RefreshTokenRepository
from roster_auth.timestamps import ensure_tz_aware, utc_now

logger = logging.getLogger(__name__)


class RefreshTokenRepositorySQLAlchemy(RefreshTokenRepository):
    """Stores refresh token digests in the ``refresh_tokens`` table."""

    def __init__(self, session: AsyncSession):
        self._session = session

    def _to_data(self, model: RefreshTokenModel) -> RefreshTokenData:
        return RefreshTokenData(
            id=model.id,
            user_id=model.user_id,
            token_hash=model.token_hash,
            expires_at=ensure_tz_aware(model.expires_at),
            revoked_at=ensure_tz_aware(model.revoked_at) if model.revoked_at else None,
            created_at=ensure_tz_aware(model.created_at),
        )

    async def save(
        self,
        user_id: UUID,
        token_hash: str,
        expires_at: datetime,
    ) -> RefreshTokenData:
        model = RefreshTokenModel(
            user_id=str(user_id),
            token_hash=token_hash,
            expires_at=expires_at,
            created_at=utc_now(),
        )
        self._session.add(model)
        await self._session.flush()
        return self._to_data(model)

    async def find_by_hash(self, token_hash: str) -> RefreshTokenData | None:
        stmt = select(RefreshTokenModel).where(
            RefreshTokenModel.token_hash == token_hash,
        )
        result = await self._session.execute(stmt)
        model = result.scalar_one_or_none()
        return self._to_data(model) if model else None

    async def revoke(self, token_hash: str) -> bool:
        stmt = (
            update(RefreshTokenModel)
            .where(RefreshTokenModel.token_hash == token_hash)
            .where(RefreshTokenModel.revoked_at.is_(None))
            .values(revoked_at=utc_now())
        )
        result = await self._session.execute(stmt)
        await self._session.flush()
        return result.rowcount > 0

    async def revoke_all_for_user(self, user_id: UUID) -> int:
        stmt = (
            update(RefreshTokenModel)
            .where(RefreshTokenModel.user_id == str(user_id))
            .where(RefreshTokenModel.revoked_at.is_(None))
            .values(revoked_at=utc_now())
        )
        result = await self._session.execute(stmt)
        await self._session.flush()
        if result.rowcount:
            logger.info(
                "Revoked %d refresh token(s) for user %s",
                result.rowcount,
                user_id,
            )
        return result.rowcount

    async def delete_expired(self) -> int:
        stmt = delete(RefreshTokenModel).where(
            RefreshTokenModel.expires_at < utc_now(),
        )
        result = await self._session.execute(stmt)
        await self._session.flush()
        return result.rowcount
