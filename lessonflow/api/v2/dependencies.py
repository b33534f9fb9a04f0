import logging
import re
from urllib.parse import unquote

from typing import Generator

from fastapi import Depends, HTTPException, Request, status
from sqlalchemy.orm import Session
from jose import JWTError, ExpiredSignatureError

from lessonflow.db import session as db_session
from lessonflow.core import security
from lessonflow.models.user.user_model import User, UserRole

log = logging.getLogger(__name__)


def get_db() -> Generator[Session, None, None]:
    """Session SQLAlchemy dédiée à la requête, fermée à la fin de celle-ci."""
    db = db_session.SessionLocal()
    try:
        yield db
    finally:
        db.close()


def _normalize_token_value(raw_token: str | None) -> str | None:
    """Return a clean JWT string extracted from various transport formats.

    Tokens reach the API through cookies, headers or query parameters.
    Cookie values may be percent-encoded (``Bearer%20…``) or quoted, and the
    ``Bearer`` prefix is matched case-insensitively.
    """

    if raw_token is None:
        return None

    token = unquote(raw_token.strip().strip('"').strip("'"))
    if not token:
        return None

    match = re.match(r"^(bearer|token)[\s,:]+(.+)$", token, flags=re.IGNORECASE)
    if match:
        token = match.group(2)

    token = token.strip()
    return token or None


def _decode_user_from_token(token: str | None, db: Session) -> User:
    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Could not validate credentials",
    )

    token = _normalize_token_value(token)
    if not token:
        log.warning("Validation échouée: Pas de token fourni.")
        raise credentials_exception

    try:
        payload = security.decode_access_token(token)
        user_id_str = payload.get("sub")
        if user_id_str is None:
            log.warning("Validation échouée: Le token ne contient pas de 'sub'.")
            raise credentials_exception

        user_id = int(user_id_str)
    except ExpiredSignatureError:
        log.warning("Validation échouée: Le token a expiré.")
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="token_expired")
    except (JWTError, ValueError, TypeError):
        log.warning("Validation échouée: Le token est invalide ou mal formé.")
        raise credentials_exception

    user = db.get(User, user_id)
    if user is None:
        log.warning("Validation échouée: Utilisateur avec ID %s non trouvé.", user_id)
        raise credentials_exception

    if not user.is_active:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="inactive_user")

    return user


def get_current_user(request: Request, db: Session = Depends(get_db)) -> User:
    token_sources = (
        request.cookies.get("access_token"),
        request.headers.get("Authorization"),
        request.query_params.get("access_token"),
    )

    last_unauthorized_error: HTTPException | None = None

    for candidate in token_sources:
        token = _normalize_token_value(candidate)
        if not token:
            continue

        try:
            return _decode_user_from_token(token, db)
        except HTTPException as exc:
            if exc.status_code != status.HTTP_401_UNAUTHORIZED:
                raise
            last_unauthorized_error = exc

    if last_unauthorized_error is not None:
        raise last_unauthorized_error

    return _decode_user_from_token(None, db)


def get_current_learner(current_user: User = Depends(get_current_user)) -> User:
    """Restreint l'accès aux comptes apprenants."""
    if current_user.role != UserRole.LEARNER:
        log.warning("Accès apprenant refusé pour l'utilisateur %s (rôle %s).", current_user.id, current_user.role)
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="learner_role_required")
    return current_user
