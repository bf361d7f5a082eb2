from fastapi import APIRouter, Depends

from backoffice.dependencies import get_account_service
from backoffice.users.service import serialize_user
from backoffice.utils import success_response
from .schemas import LoginRequest, RegisterRequest
from .service import AccountService

accounts_router = APIRouter()


@accounts_router.post("/register")
async def register(body: RegisterRequest, svc: AccountService = Depends(get_account_service)):
    user = await svc.register(
        email=body.email,
        username=body.username,
        password=body.password,
        c_code=body.c_code,
        phone_number=body.phone_number,
    )
    return success_response(data=serialize_user(user), message="User registered", code=201)


@accounts_router.post("/login")
async def login(body: LoginRequest, svc: AccountService = Depends(get_account_service)):
    result = await svc.login(email=body.email, password=body.password)
    return success_response(data=result, message="Login successful")
