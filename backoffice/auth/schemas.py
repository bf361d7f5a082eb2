from pydantic import BaseModel, Field


class AdminLoginRequest(BaseModel):
    """POST /admin/auth/login"""
    email: str = Field(..., min_length=1, description="Admin email")
    password: str = ""
