from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class SessionType(str, Enum):
    CHAT = "chat"
    AUDIO = "audio"
    VIDEO = "video"


class SessionStatus(str, Enum):
    SCHEDULED = "scheduled"
    ONGOING = "ongoing"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class PaymentStatus(str, Enum):
    PENDING = "pending"
    COMPLETED = "completed"
    FAILED = "failed"
    REFUNDED = "refunded"


class _CamelModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        use_enum_values=True,
        validate_default=True,
    )


class CreateSessionRequest(_CamelModel):
    """
    POST /sessions

    Required: sessionId, user, listener, type, startTime, amount. They are
    declared optional so a missing one is reported as a 400 naming all of them.
    """
    session_id: Optional[str] = None
    user: Optional[str] = None
    listener: Optional[str] = None
    type: Optional[SessionType] = None
    start_time: Optional[datetime] = None
    amount: Optional[float] = Field(None, ge=0)
    duration_in_minutes: int = Field(0, ge=0)
    status: SessionStatus = SessionStatus.SCHEDULED
    payment_status: PaymentStatus = PaymentStatus.PENDING


class UpdateSessionRequest(_CamelModel):
    """PUT /sessions/{id}"""
    type: Optional[SessionType] = None
    start_time: Optional[datetime] = None
    amount: Optional[float] = Field(None, ge=0)
    duration_in_minutes: Optional[int] = Field(None, ge=0)
    status: Optional[SessionStatus] = None
    payment_status: Optional[PaymentStatus] = None
