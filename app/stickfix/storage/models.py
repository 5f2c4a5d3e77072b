from datetime import datetime

from sqlalchemy import BigInteger, Boolean, DateTime, String, func
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column

MAX_USERNAME_LENGTH = 255
MAX_STATE_LENGTH = 50


class Base(DeclarativeBase):
    pass


class User(Base):
    __tablename__ = "users"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    telegram_id: Mapped[int] = mapped_column(BigInteger, unique=True, nullable=False, index=True)
    username: Mapped[str] = mapped_column(String(MAX_USERNAME_LENGTH), nullable=False)
    # Имя варианта State: idle, start, revoke, private_mode, shuffle
    state: Mapped[str] = mapped_column(String(MAX_STATE_LENGTH), nullable=False, default="idle", server_default="idle")
    private_mode: Mapped[bool] = mapped_column(Boolean, default=False, server_default="false")
    shuffle_mode: Mapped[bool] = mapped_column(Boolean, default=False, server_default="false")
    registration: Mapped[str] = mapped_column(
        String(20),
        nullable=False,
        default="unregistered",
        server_default="unregistered",
    )
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
    )
