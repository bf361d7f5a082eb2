from .helpers import (
    serialize_mongo_doc,
    from_mongo,
    new_object_id,
    parse_object_id,
    page_window,
    success_response,
    paginated_response,
    error_response,
)
from .logger import Logger, configure_logging
from .exceptions import (
    ValidationError,
    AuthenticationError,
    AuthorizationError,
    NotFoundError,
    ConflictError,
)

__all__ = [
    "serialize_mongo_doc",
    "from_mongo",
    "new_object_id",
    "parse_object_id",
    "page_window",
    "success_response",
    "paginated_response",
    "error_response",
    "Logger",
    "configure_logging",
    "ValidationError",
    "AuthenticationError",
    "AuthorizationError",
    "NotFoundError",
    "ConflictError",
]
