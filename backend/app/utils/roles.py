from fastapi import Depends

from .dependencies import CurrentUser, get_active_user
from .error_handlers import ForbiddenError


def require_user_type(required_type: str):
    def check_user_type(user: CurrentUser = Depends(get_active_user)) -> CurrentUser:
        if user.user_type != required_type:
            raise ForbiddenError(f"Access denied. {required_type} role required.")
        return user
    return check_user_type


client_only = require_user_type("client")
freelancer_only = require_user_type("freelancer")
