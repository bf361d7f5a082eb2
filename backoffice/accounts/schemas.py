from pydantic import BaseModel, ConfigDict, EmailStr, Field
from pydantic.alias_generators import to_camel


class RegisterRequest(BaseModel):
    """POST /register"""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    email: EmailStr
    username: str = Field(..., min_length=1, max_length=50)
    password: str = Field(..., min_length=1)
    c_code: str = Field(..., min_length=1, description="Country calling code, e.g. +91")
    phone_number: str = Field(..., min_length=4)


class LoginRequest(BaseModel):
    """POST /login"""
    email: str
    password: str
