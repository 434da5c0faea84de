"""
SQL challenge repository (SQLAlchemy 2.0 async).

The claim is one conditional UPDATE (`completed AND NOT claimed`) issued
as the first statement of its transaction, followed by the wallet credit
in the same transaction. A concurrent claimer blocks on the write lock
(SQLite) or the row lock (PostgreSQL), then matches zero rows and gets
`ChallengeAlreadyClaimedError`.

Daily top-ups are capped by per-day slots: each row takes a free slot
number in `1..count` under a unique constraint, so two concurrent top-ups
for the same user and day cannot both succeed.
"""

from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING, Iterable, List, Sequence

from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError

from petengine.core.clock import ensure_utc
from petengine.core.logging.logger import get_logger
from petengine.database.models.challenge import ChallengeRow, UserChallengeRow
from petengine.domain.models.challenge import ChallengeTemplate, ChallengeType, ClaimReceipt, UserChallenge
from petengine.modules.challenges.repository import ChallengeRepository
from petengine.modules.economy.wallet import SqlWallet
from petengine.modules.shared.base_repository import BaseRepository
from petengine.modules.shared.exceptions import (
    ChallengeAlreadyClaimedError,
    ChallengeNotCompletedError,
    NotFoundError,
)

if TYPE_CHECKING:
    from logging import Logger

    from petengine.core.database.service import DatabaseService


def _template_from_row(row: ChallengeRow) -> ChallengeTemplate:
    return ChallengeTemplate(
        id=row.id,
        type=ChallengeType(row.type),
        target=row.target,
        coin_reward=row.coin_reward,
        xp_reward=row.xp_reward,
        name=row.name,
        description=row.description,
    )


def _instance_from_row(row: UserChallengeRow) -> UserChallenge:
    return UserChallenge(
        id=row.id,
        user_id=row.user_id,
        challenge=_template_from_row(row.challenge),
        day_key=row.day_key,
        assigned_at=ensure_utc(row.assigned_at),
        progress=row.progress,
        completed=row.completed,
        completed_at=ensure_utc(row.completed_at) if row.completed_at else None,
        claimed=row.claimed,
        claimed_at=ensure_utc(row.claimed_at) if row.claimed_at else None,
    )


class SqlChallengeRepository(BaseRepository[UserChallengeRow], ChallengeRepository):
    def __init__(self, database: type[DatabaseService], wallet: SqlWallet, logger: Logger | None = None) -> None:
        super().__init__(UserChallengeRow, logger or get_logger(__name__))
        self._db = database
        self._wallet = wallet

    async def seed_templates(self, templates: Iterable[ChallengeTemplate]) -> int:
        """Insert templates whose id is not stored yet. Returns how many were added."""
        added = 0
        async with self._db.get_transaction() as session:
            existing = set((await session.execute(select(ChallengeRow.id))).scalars().all())
            for template in templates:
                if template.id in existing:
                    continue
                session.add(
                    ChallengeRow(
                        id=template.id,
                        type=template.type.value,
                        target=template.target,
                        coin_reward=template.coin_reward,
                        xp_reward=template.xp_reward,
                        name=template.name,
                        description=template.description,
                    )
                )
                added += 1
        self.log.info("Challenge templates seeded", extra={"added": added})
        return added

    async def list_templates(self) -> List[ChallengeTemplate]:
        async with self._db.get_session() as session:
            rows = (await session.execute(select(ChallengeRow).order_by(ChallengeRow.id))).scalars().all()
            return [_template_from_row(row) for row in rows]

    async def get_for_day(self, user_id: int, day_key: str) -> List[UserChallenge]:
        async with self._db.get_session() as session:
            rows = await self.find_many_where(
                session,
                UserChallengeRow.user_id == user_id,
                UserChallengeRow.day_key == day_key,
                order_by=[UserChallengeRow.id],
            )
            return [_instance_from_row(row) for row in rows]

    async def add_instances(
        self,
        user_id: int,
        templates: Sequence[ChallengeTemplate],
        day_key: str,
        now: datetime,
        count: int,
    ) -> List[UserChallenge]:
        try:
            async with self._db.get_transaction() as session:
                assigned = (
                    await session.execute(
                        select(UserChallengeRow.challenge_id, UserChallengeRow.slot).where(
                            UserChallengeRow.user_id == user_id,
                            UserChallengeRow.day_key == day_key,
                        )
                    )
                ).all()
                taken = {row.challenge_id for row in assigned}
                used_slots = {row.slot for row in assigned}
                free_slots = [slot for slot in range(1, count + 1) if slot not in used_slots]
                free_slots = free_slots[: max(count - len(assigned), 0)]

                rows: List[UserChallengeRow] = []
                for template in templates:
                    if len(rows) == len(free_slots):
                        break
                    if template.id in taken:
                        continue
                    taken.add(template.id)
                    rows.append(
                        self.add(
                            session,
                            UserChallengeRow(
                                user_id=user_id,
                                challenge_id=template.id,
                                day_key=day_key,
                                slot=free_slots[len(rows)],
                                assigned_at=now,
                                progress=0,
                                completed=False,
                                claimed=False,
                            ),
                        )
                    )
                await session.flush()
                ids = [row.id for row in rows]
        except IntegrityError:
            # A concurrent top-up filled the same slots first; keep its rows.
            self.log.info(
                "Concurrent challenge assignment detected",
                extra={"user_id": user_id, "day_key": day_key},
            )
            return []

        if not ids:
            return []
        async with self._db.get_session() as session:
            rows = await self.find_many_where(session, UserChallengeRow.id.in_(ids), order_by=[UserChallengeRow.id])
            return [_instance_from_row(row) for row in rows]

    async def save_progress(self, challenges: Iterable[UserChallenge]) -> None:
        async with self._db.get_transaction() as session:
            for challenge in challenges:
                await session.execute(
                    update(UserChallengeRow)
                    .where(UserChallengeRow.id == challenge.id, UserChallengeRow.completed.is_(False))
                    .values(
                        progress=challenge.progress,
                        completed=challenge.completed,
                        completed_at=challenge.completed_at,
                    )
                    .execution_options(synchronize_session=False)
                )

    async def claim(self, user_id: int, user_challenge_id: int, now: datetime) -> ClaimReceipt:
        async with self._db.get_transaction() as session:
            result = await session.execute(
                update(UserChallengeRow)
                .where(
                    UserChallengeRow.id == user_challenge_id,
                    UserChallengeRow.user_id == user_id,
                    UserChallengeRow.completed.is_(True),
                    UserChallengeRow.claimed.is_(False),
                )
                .values(claimed=True, claimed_at=now)
                .execution_options(synchronize_session=False)
            )

            if result.rowcount != 1:
                row = (
                    await session.execute(
                        select(UserChallengeRow.user_id, UserChallengeRow.completed).where(
                            UserChallengeRow.id == user_challenge_id
                        )
                    )
                ).one_or_none()
                if row is None or row.user_id != user_id:
                    raise NotFoundError("Challenge", user_challenge_id)
                if not row.completed:
                    raise ChallengeNotCompletedError(user_challenge_id)
                raise ChallengeAlreadyClaimedError(user_challenge_id)

            coin_reward, xp_reward = (
                await session.execute(
                    select(ChallengeRow.coin_reward, ChallengeRow.xp_reward)
                    .join(UserChallengeRow, UserChallengeRow.challenge_id == ChallengeRow.id)
                    .where(UserChallengeRow.id == user_challenge_id)
                )
            ).one()

            new_balance = await self._wallet.credit_in_session(session, user_id, coin_reward)

        self.log.info(
            "Challenge claimed",
            extra={
                "user_id": user_id,
                "user_challenge_id": user_challenge_id,
                "coins_awarded": coin_reward,
            },
        )
        return ClaimReceipt(
            user_challenge_id=user_challenge_id,
            user_id=user_id,
            coins_awarded=coin_reward,
            xp_reward=xp_reward,
            new_balance=new_balance,
            claimed_at=now,
        )
