"""Зависимости (dependencies) FastAPI."""

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError, jwt

from inventory_api.core.config import settings

bearer_scheme = HTTPBearer(auto_error=False)


async def get_current_actor(
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
) -> str:
    """
    Проверяет bearer-токен и возвращает имя пользователя.

    Токен выпускается внешним сервисом авторизации; здесь проверяются
    только подпись и наличие claim "username" (или "sub").

    Returns:
        Идентификатор пользователя для журнала изменений.
    """
    unauthorized = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Invalid or missing Bearer token",
        headers={"WWW-Authenticate": "Bearer"},
    )
    if credentials is None:
        raise unauthorized

    try:
        claims = jwt.decode(
            credentials.credentials,
            settings.JWT_SECRET_KEY,
            algorithms=[settings.JWT_ALGORITHM],
        )
    except JWTError as exc:
        raise unauthorized from exc

    actor = claims.get("username") or claims.get("sub")
    if not actor:
        raise unauthorized
    return str(actor)
