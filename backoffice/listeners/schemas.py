from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class ListenerStatus(str, Enum):
    PENDING = "pending"
    APPROVED = "approved"
    SUSPENDED = "suspended"


class PromoteListenerRequest(BaseModel):
    """POST /listeners — promote an existing user."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    user_id: str
    expertise: List[str] = []
    experience: int = Field(0, ge=0, description="Years of experience")
    commission: Optional[str] = None


class UpdateListenerRequest(BaseModel):
    """PUT /listeners/{id}"""
    model_config = ConfigDict(
        alias_generator=to_camel, populate_by_name=True, use_enum_values=True
    )

    expertise: Optional[List[str]] = None
    experience: Optional[int] = Field(None, ge=0)
    commission: Optional[str] = None
    status: Optional[ListenerStatus] = None
