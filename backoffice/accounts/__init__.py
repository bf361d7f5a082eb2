from .service import AccountService

__all__ = ["AccountService"]
