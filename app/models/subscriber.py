from __future__ import annotations

from sqlalchemy import BigInteger
from sqlalchemy.orm import Mapped, mapped_column

from .base import Base


class Subscriber(Base):
    """Chat registered to receive the daily report broadcast."""

    __tablename__ = "subscribers"

    chat_id: Mapped[int] = mapped_column(BigInteger, unique=True, nullable=False, index=True)
