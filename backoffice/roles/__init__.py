from .repository import RoleRepository, InMemoryRoleRepository, MongoRoleRepository
from .service import RoleService, serialize_role, normalize_matrix

__all__ = [
    "RoleRepository",
    "InMemoryRoleRepository",
    "MongoRoleRepository",
    "RoleService",
    "serialize_role",
    "normalize_matrix",
]
