# Fichier: lessonflow/core/security.py

from datetime import datetime, timedelta, timezone
from typing import Any, Optional, Union

from jose import jwt

from lessonflow.core.config import settings

# --- Configuration de la Sécurité ---
SECRET_KEY = settings.SECRET_KEY
ALGORITHM = "HS256"


def create_access_token(subject: Union[str, Any], expires_delta: Optional[timedelta] = None) -> str:
    """Crée un token d'accès JWT."""
    if expires_delta:
        expire = datetime.now(timezone.utc) + expires_delta
    else:
        expire = datetime.now(timezone.utc) + timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)

    to_encode = {"exp": expire, "sub": str(subject)}
    return jwt.encode(to_encode, SECRET_KEY, algorithm=ALGORITHM)


def decode_access_token(token: str) -> dict:
    """Décode un token et renvoie son payload (lève ``JWTError`` si invalide)."""
    return jwt.decode(token, SECRET_KEY, algorithms=[ALGORITHM])
