"""
Declarative permission decorators for route handlers.

Usage:
    @router.put("/{admin_id}/role")
    @require_permission("rolesPermissions", "edit")
    async def assign_role(request: Request, ...):
        ...
"""

from functools import wraps

from fastapi import HTTPException, status
from starlette.requests import Request

from backoffice.utils.exceptions import AuthorizationError
from .permissions import has_action_permission


def require_permission(module: str, action: str):
    """
    Decorator that checks the current admin's matrix (set by middleware on
    request.state) grants `module.action`.

    Must be applied AFTER the route decorator.
    """

    def decorator(func):
        @wraps(func)
        async def wrapper(*args, **kwargs):
            request: Request | None = kwargs.get("request")
            if request is None:
                for arg in args:
                    if isinstance(arg, Request):
                        request = arg
                        break

            if request is None:
                raise HTTPException(
                    status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                    detail="Request object not found in handler",
                )

            matrix = getattr(request.state, "permissions", None)
            if not has_action_permission(matrix, module, action):
                raise AuthorizationError(
                    f"Permission denied. Requires: {module}.{action}"
                )

            return await func(*args, **kwargs)

        return wrapper

    return decorator
