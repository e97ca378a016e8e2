from __future__ import annotations

import logging
from typing import Callable, Iterable, Optional

from fastapi import Depends
from pydantic import ValidationError as PydanticValidationError
from sqlalchemy.orm import Session
from starlette.concurrency import run_in_threadpool

from .db import get_db
from .exceptions import AuthenticationError, AuthorizationError, InvalidTokenError
from .logging_config import set_user_id
from .models.user import Role, User
from .schemas.auth import TokenPayload
from .security import decode_access_token, oauth2_scheme

logger = logging.getLogger(__name__)


def _load_user(db: Session, user_id: int) -> Optional[User]:
    return db.query(User).filter(User.id == user_id).first()


async def get_current_user(
    token: Optional[str] = Depends(oauth2_scheme),
    db: Session = Depends(get_db),
) -> User:
    # set_user_id has to run on the request context, not a threadpool copy of it
    if not token:
        raise AuthenticationError("Authentication token missing")

    payload = decode_access_token(token)
    try:
        token_data = TokenPayload(**payload)
    except PydanticValidationError as exc:
        raise InvalidTokenError() from exc

    user = await run_in_threadpool(_load_user, db, token_data.sub)
    if user is None:
        logger.warning("Token for unknown user id=%s", token_data.sub)
        raise AuthenticationError("User not found")
    if not user.is_verified:
        raise AuthorizationError("Account is not verified")

    set_user_id(str(user.id))
    return user


def authorize(role: Role, allowed: Iterable[Role]) -> None:
    """Raise AuthorizationError unless ``role`` is one of ``allowed``."""
    if Role(role) not in set(allowed):
        raise AuthorizationError("Insufficient permissions")


def require_roles(*roles: Role) -> Callable[..., User]:
    def _wrapper(current_user: User = Depends(get_current_user)) -> User:
        authorize(current_user.role, roles)
        return current_user

    return _wrapper
