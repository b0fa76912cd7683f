from __future__ import annotations

import uuid
from datetime import datetime

from sqlalchemy import BigInteger, Boolean, CheckConstraint, Index, text
from sqlalchemy.dialects.postgresql import TIMESTAMP, UUID
from sqlalchemy.orm import Mapped, mapped_column, relationship

from dm_service.infrastructure.db.base import Base


class ChatModel(Base):
    """Two-participant chat. The pair is stored sorted so (a, b) and (b, a) collide."""

    __tablename__ = "chats"

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4,
        server_default=text("gen_random_uuid()"),
    )
    user_low_id: Mapped[int] = mapped_column(BigInteger, nullable=False)
    user_high_id: Mapped[int] = mapped_column(BigInteger, nullable=False)
    active: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=True, server_default=text("true"),
    )
    last_message_at: Mapped[datetime] = mapped_column(
        TIMESTAMP(timezone=True),
        nullable=False,
        server_default=text("now()"),
    )
    created_at: Mapped[datetime] = mapped_column(
        TIMESTAMP(timezone=True),
        nullable=False,
        server_default=text("now()"),
    )
    updated_at: Mapped[datetime] = mapped_column(
        TIMESTAMP(timezone=True),
        nullable=False,
        server_default=text("now()"),
        onupdate=text("now()"),
    )

    messages = relationship("MessageModel", back_populates="chat", lazy="noload")

    __table_args__ = (
        CheckConstraint("user_low_id < user_high_id", name="ck_chats_sorted_pair"),
        Index(
            "uq_chats_active_pair",
            "user_low_id",
            "user_high_id",
            unique=True,
            postgresql_where=text("active"),
        ),
        Index("ix_chats_low_activity", "user_low_id", last_message_at.desc()),
        Index("ix_chats_high_activity", "user_high_id", last_message_at.desc()),
    )
