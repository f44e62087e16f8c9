from __future__ import annotations

from enum import Enum


class MeetingStatus(str, Enum):
    INVITING = "INVITING"
    PENDING = "PENDING"
    CONFIRMED = "CONFIRMED"
    IN_PROGRESS = "IN_PROGRESS"
    COMPLETED = "COMPLETED"
    CANCELLED = "CANCELLED"


class ParticipantRole(str, Enum):
    HOST = "HOST"
    PARTICIPANT = "PARTICIPANT"


class ParticipantStatus(str, Enum):
    INVITED = "INVITED"
    ACCEPTED = "ACCEPTED"
    DECLINED = "DECLINED"


class IdentityProvider(str, Enum):
    KAKAO = "KAKAO"


ACTIVE_USER_STATUS = "ACTIVE"
