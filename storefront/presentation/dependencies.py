import secrets
from typing import Optional
from fastapi import Header, HTTPException, status

from storefront.database import AsyncSessionLocal
from storefront.infrastructure.unit_of_work import UnitOfWork
from storefront.domain.models import USER_ID_MAX_LENGTH
from storefront.config import settings


def get_unit_of_work() -> UnitOfWork:
    return UnitOfWork(AsyncSessionLocal)


async def get_current_user_id(x_user_id: Optional[str] = Header(default=None)) -> str:
    """Пользователь приходит из внешнего контекста аутентификации"""
    if not x_user_id:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Требуется аутентификация")
    if len(x_user_id) > USER_ID_MAX_LENGTH:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Некорректный идентификатор пользователя")
    return x_user_id


def _is_admin_key(api_key: Optional[str]) -> bool:
    return bool(settings.API_TOKEN and api_key and secrets.compare_digest(api_key, settings.API_TOKEN))


async def is_admin(x_api_key: Optional[str] = Header(default=None)) -> bool:
    """Ключ администратора необязателен: без него доступ ограничен своими данными"""
    return _is_admin_key(x_api_key)


async def require_admin(x_api_key: Optional[str] = Header(default=None)) -> None:
    if not _is_admin_key(x_api_key):
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Требуются права администратора")
