from models.users import User
from models.roles import Role, UserClaim, user_roles
from models.refresh_tokens import RefreshToken
from models.items import Item

__all__ = ["User", "Role", "UserClaim", "user_roles", "RefreshToken", "Item"]
