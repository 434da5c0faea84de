"""
Wallet table, schema only. One coin balance per user.
"""

from __future__ import annotations

from sqlalchemy import CheckConstraint, Integer
from sqlalchemy.orm import Mapped, mapped_column

from petengine.core.database.base import Base, TimestampMixin


class WalletRow(Base, TimestampMixin):
    __tablename__ = "wallets"
    __table_args__ = (CheckConstraint("coins >= 0", name="ck_wallets_coins_non_negative"),)

    user_id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=False)
    coins: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
