from typing import Any, Dict, List

from psycopg2.errors import UniqueViolation

from app.errors import ConflictError, NotFoundError, ValidationError
from app.models.user import (
    create_user,
    delete_user,
    get_user,
    get_user_role,
    list_users_with_roles,
    set_user_role,
    update_user,
)
from app.services.auth_service import hash_password
from app.utils.validators import clean_email, clean_str

ROLES = ("admin", "moderator", "user")


def _clean_role(body: Dict[str, Any], default: str = "user") -> str:
    role = (clean_str(body, "role", max_len=20) or default).lower()
    if role not in ROLES:
        raise ValidationError(f"role must be one of {', '.join(ROLES)}")
    return role


def fetch_users() -> List[Dict[str, Any]]:
    return list_users_with_roles()


def get_user_by_id(user_id: str) -> Dict[str, Any]:
    user = get_user(user_id)
    if not user:
        raise NotFoundError("user not found")
    return {**user, "role": get_user_role(user_id) or "user"}


def add_user(body: Dict[str, Any]) -> Dict[str, Any]:
    email = clean_email(body, "email")
    password = body.get("password") or ""
    if not isinstance(password, str) or len(password) < 8:
        raise ValidationError("Password must be at least 8 characters")
    try:
        return create_user(
            email=email,
            password_hash=hash_password(password),
            full_name=clean_str(body, "full_name", max_len=120),
            role=_clean_role(body),
        )
    except UniqueViolation:
        raise ConflictError("Email already registered")


def edit_user(user_id: str, body: Dict[str, Any]) -> Dict[str, Any]:
    updates: Dict[str, Any] = {}
    if "email" in body:
        updates["email"] = clean_email(body, "email")
    if "full_name" in body:
        updates["full_name"] = clean_str(body, "full_name", max_len=120)
    try:
        user = update_user(user_id, **updates)
    except UniqueViolation:
        raise ConflictError("Email already registered")
    if not user:
        raise NotFoundError("user not found")
    return user


def change_role(user_id: str, body: Dict[str, Any]) -> Dict[str, Any]:
    if not get_user(user_id):
        raise NotFoundError("user not found")
    role = _clean_role(body, default="")
    set_user_role(user_id, role)
    return {"id": user_id, "role": role}


def remove_user(user_id: str, acting_user_id: str) -> None:
    if str(user_id) == str(acting_user_id):
        raise ValidationError("You cannot delete your own account")
    if not delete_user(user_id):
        raise NotFoundError("user not found")
