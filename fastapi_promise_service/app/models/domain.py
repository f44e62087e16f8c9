from __future__ import annotations

from datetime import datetime

from sqlalchemy import (
    BigInteger,
    Boolean,
    DateTime,
    ForeignKey,
    Integer,
    LargeBinary,
    String,
    Text,
    UniqueConstraint,
    Index,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.core.statuses import (
    ACTIVE_USER_STATUS,
    IdentityProvider,
    MeetingStatus,
    ParticipantRole,
    ParticipantStatus,
)
from app.models.base import Base, BigIntPK, TimestampMixin


class User(TimestampMixin, Base):
    __tablename__ = "users"

    id: Mapped[int] = mapped_column(BigIntPK, primary_key=True)
    name: Mapped[str] = mapped_column(String(50), nullable=False)
    status: Mapped[str] = mapped_column(String(20), nullable=False, default=ACTIVE_USER_STATUS)

    consent: Mapped["UserConsent | None"] = relationship(back_populates="user", uselist=False)
    identities: Mapped[list["UserIdentity"]] = relationship(back_populates="user")

    @property
    def is_active(self) -> bool:
        return self.status == ACTIVE_USER_STATUS


class UserIdentity(TimestampMixin, Base):
    __tablename__ = "user_identities"
    __table_args__ = (UniqueConstraint("user_id", "provider", name="uq_user_identity_provider"),)

    id: Mapped[int] = mapped_column(BigIntPK, primary_key=True)
    user_id: Mapped[int] = mapped_column(
        BigInteger, ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    provider: Mapped[str] = mapped_column(
        String(20), nullable=False, default=IdentityProvider.KAKAO.value
    )
    provider_user_id: Mapped[str | None] = mapped_column(String(64))
    access_token_enc: Mapped[bytes | None] = mapped_column(LargeBinary)
    token_expires_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))

    user: Mapped[User] = relationship(back_populates="identities")


class UserConsent(TimestampMixin, Base):
    __tablename__ = "user_consents"

    id: Mapped[int] = mapped_column(BigIntPK, primary_key=True)
    user_id: Mapped[int] = mapped_column(
        BigInteger, ForeignKey("users.id", ondelete="CASCADE"), unique=True, nullable=False
    )
    talk_message_consent: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    friends_consent: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    marketing_consent: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    user: Mapped[User] = relationship(back_populates="consent")

    @property
    def can_use_kakao_features(self) -> bool:
        return bool(self.talk_message_consent and self.friends_consent)


class Meeting(TimestampMixin, Base):
    __tablename__ = "meetings"
    __table_args__ = (Index("ix_meeting_host_status", "host_id", "status"),)

    id: Mapped[int] = mapped_column(BigIntPK, primary_key=True)
    host_id: Mapped[int] = mapped_column(BigInteger, ForeignKey("users.id"), nullable=False)
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str | None] = mapped_column(Text)
    meeting_time: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    max_participants: Mapped[int] = mapped_column(Integer, nullable=False, default=10)
    status: Mapped[str] = mapped_column(
        String(50), nullable=False, default=MeetingStatus.INVITING.value
    )
    location_name: Mapped[str | None] = mapped_column(String(500))
    location_address: Mapped[str | None] = mapped_column(String(500))

    participants: Mapped[list["MeetingParticipant"]] = relationship(
        back_populates="meeting",
        cascade="all, delete-orphan",
        order_by="MeetingParticipant.id",
    )


class MeetingParticipant(TimestampMixin, Base):
    __tablename__ = "meeting_participants"
    __table_args__ = (UniqueConstraint("meeting_id", "user_id", name="uq_meeting_participant"),)

    id: Mapped[int] = mapped_column(BigIntPK, primary_key=True)
    meeting_id: Mapped[int] = mapped_column(
        BigInteger, ForeignKey("meetings.id", ondelete="CASCADE"), nullable=False
    )
    user_id: Mapped[int] = mapped_column(BigInteger, ForeignKey("users.id"), nullable=False)
    role: Mapped[str] = mapped_column(
        String(20), nullable=False, default=ParticipantRole.PARTICIPANT.value
    )
    response: Mapped[str] = mapped_column(
        String(20), nullable=False, default=ParticipantStatus.INVITED.value
    )

    meeting: Mapped[Meeting] = relationship(back_populates="participants")
