# permissions.py
# -*- coding: utf-8 -*-
"""
RBAC для API.
- role_required([...]) - основной декоратор на роуты (root всегда имеет доступ).
- can_* - флаги для клиента (отдаются в /api/auth/me): возвращают True/False.

Роли:
- user   - просмотр склада (запчасти, диски, шаблоны, статистика)
- admin  - всё как user + создание/редактирование/удаление, продажа, импорт
- root   - полный доступ
"""

from functools import wraps
from typing import Iterable, Set

from flask import abort
from flask_login import current_user, login_required


# ----------------------------- БАЗОВЫЙ ДЕКОРАТОР ----------------------------- #
def role_required(allowed_roles: Iterable[str]):
    """
    Декоратор для ограничения доступа по ролям.
    Пример:
        @role_required(["admin"])
        def view(): ...

    Правила:
    - Неавторизованный → 401 (через login_manager.unauthorized).
    - root имеет доступ всегда.
    - Если не хватает прав → 403.
    """
    if isinstance(allowed_roles, str):
        allowed: Set[str] = {allowed_roles}
    else:
        allowed = set(allowed_roles or [])

    def decorator(view_func):
        @wraps(view_func)
        @login_required
        def wrapped(*args, **kwargs):
            role = getattr(current_user, "role", None)
            if role == "root" or role in allowed:
                return view_func(*args, **kwargs)
            abort(403)

        return wrapped
    return decorator


# --------------------------- ВСПОМОГАТЕЛЬНЫЕ ФУНКЦИИ ------------------------ #
def _is(*roles: str) -> bool:
    """Проверка роли текущего пользователя (root проходит всегда)."""
    if not current_user.is_authenticated:
        return False
    role = getattr(current_user, "role", None)
    return role == "root" or role in roles


# ================================ ПРАВА СКЛАДА =============================== #
def can_inventory_view():   return _is("user", "admin")
def can_inventory_edit():   return _is("admin")
def can_inventory_delete(): return _is("admin")
def can_mark_sold():        return _is("admin")
def can_import():           return _is("admin")


def permission_flags() -> dict:
    return {
        "can_inventory_view": can_inventory_view(),
        "can_inventory_edit": can_inventory_edit(),
        "can_inventory_delete": can_inventory_delete(),
        "can_mark_sold": can_mark_sold(),
        "can_import": can_import(),
    }
