from sqlalchemy import ForeignKey, String, Text, DateTime, Index
from sqlalchemy.types import TypeDecorator
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship
from datetime import datetime, timezone
from typing import List, Optional


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class UTCDateTime(TypeDecorator):
    """
    Timezone-aware UTC timestamps on every backend.
    SQLite keeps no zone, so values read back are marked UTC again.
    """
    impl = DateTime(timezone=True)
    cache_ok = True

    def process_bind_param(self, value, dialect):
        if value is not None:
            if value.tzinfo is None:
                value = value.replace(tzinfo=timezone.utc)
            value = value.astimezone(timezone.utc)
        return value

    def process_result_value(self, value, dialect):
        if value is not None and value.tzinfo is None:
            value = value.replace(tzinfo=timezone.utc)
        return value


class Base(DeclarativeBase):
    pass

class User(Base):
    __tablename__ = "users"

    username: Mapped[str] = mapped_column(String(50), primary_key=True)
    password: Mapped[str] = mapped_column(String(100), nullable=False)
    first_name: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    last_name: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    phone: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    join_at: Mapped[datetime] = mapped_column(UTCDateTime, default=utcnow)
    last_login_at: Mapped[Optional[datetime]] = mapped_column(UTCDateTime, nullable=True)

    sent_messages: Mapped[List["Message"]] = relationship(
        "Message",
        foreign_keys="Message.from_username",
        back_populates="from_user"
    )
    received_messages: Mapped[List["Message"]] = relationship(
        "Message",
        foreign_keys="Message.to_username",
        back_populates="to_user"
    )

class Message(Base):
    __tablename__ = "messages"

    __table_args__ = (
        Index('ix_messages_from_username', 'from_username'),
        Index('ix_messages_to_username', 'to_username'),
    )

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    from_username: Mapped[str] = mapped_column(ForeignKey("users.username"), nullable=False)
    to_username: Mapped[str] = mapped_column(ForeignKey("users.username"), nullable=False)
    body: Mapped[str] = mapped_column(Text, nullable=False)
    sent_at: Mapped[datetime] = mapped_column(UTCDateTime, default=utcnow)
    read_at: Mapped[Optional[datetime]] = mapped_column(UTCDateTime, nullable=True)

    from_user: Mapped["User"] = relationship(
        "User",
        foreign_keys=[from_username],
        back_populates="sent_messages"
    )
    to_user: Mapped["User"] = relationship(
        "User",
        foreign_keys=[to_username],
        back_populates="received_messages"
    )
