import logging
from datetime import datetime, timedelta, timezone

import jwt
from pydantic import ValidationError

from eduhub.auth.credentials import Credential
from eduhub.core import config

logger = logging.getLogger(__name__)


def create_access_token(credential: Credential, expires_minutes: int | None = None) -> str:
    expire_minutes = expires_minutes or config.JWT_EXPIRES_MINUTES
    issued_at = datetime.now(timezone.utc)
    payload = credential.to_claims()
    payload.update({"exp": issued_at + timedelta(minutes=expire_minutes), "iat": issued_at})
    return jwt.encode(payload, config.JWT_SECRET_KEY, algorithm=config.JWT_ALGORITHM)


def decode_access_token(token: str) -> dict:
    return jwt.decode(token, config.JWT_SECRET_KEY, algorithms=[config.JWT_ALGORITHM])


def verify_credential(token: str | None) -> Credential | None:
    """Return the credential a token carries, or ``None`` when it is missing or invalid."""
    if not token:
        return None
    try:
        return Credential.model_validate(decode_access_token(token))
    except jwt.PyJWTError as exc:
        logger.debug("Rejected token: %s", exc)
    except ValidationError:
        logger.warning("Token with a valid signature carried an unusable payload")
    return None
