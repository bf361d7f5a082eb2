from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field
from pydantic.alias_generators import to_camel


class UserRole(str, Enum):
    SUPER_ADMIN = "superAdmin"
    SUPPORT = "support"
    FINANCE = "finance"
    COMPLIANCE = "compliance"
    USER = "user"
    LISTENER = "listener"


class UserStatus(str, Enum):
    ACTIVE = "active"
    INACTIVE = "inactive"
    BLOCKED = "blocked"
    PENDING = "pending"


class UpdateUserRequest(BaseModel):
    """PUT /users/{user_id} — every field optional; unknown fields ignored."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    email: Optional[EmailStr] = None
    username: Optional[str] = Field(None, min_length=1)
    password: Optional[str] = None
    c_code: Optional[str] = None
    phone_number: Optional[str] = None
    role: Optional[UserRole] = None
    status: Optional[UserStatus] = None
