from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from eduhub.auth import jwt_handler
from eduhub.auth.credentials import Credential, Role
from eduhub.core.errors import Forbidden, Unauthorized

security = HTTPBearer(auto_error=False)


def get_optional_credential(
    credentials: HTTPAuthorizationCredentials | None = Depends(security),
) -> Credential | None:
    if credentials is None:
        return None
    return jwt_handler.verify_credential(credentials.credentials)


def get_current_credential(
    credential: Credential | None = Depends(get_optional_credential),
) -> Credential:
    if credential is None:
        raise Unauthorized("Invalid or expired token.")
    return credential


def require_roles(*roles: Role):
    allowed = frozenset(roles)

    def dependency(credential: Credential = Depends(get_current_credential)) -> Credential:
        if credential.role not in allowed:
            raise Forbidden("Access denied for this role.")
        return credential

    return dependency
