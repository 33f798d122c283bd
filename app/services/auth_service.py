import logging
from typing import Any, Dict

import bcrypt
from flask_jwt_extended import create_access_token, create_refresh_token

from app.models.user import get_user_by_email, get_user_role
from app.utils.formatting import mask_email

logger = logging.getLogger(__name__)


def _normalize_email(email: Any) -> str:
    return str(email or "").strip().lower()


def hash_password(password: str) -> str:
    return bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt()).decode("utf-8")


def verify_password(password: str, password_hash: str) -> bool:
    if not password_hash:
        return False
    try:
        return bcrypt.checkpw(password.encode("utf-8"), password_hash.encode("utf-8"))
    except ValueError:
        return False


def make_tokens(user_id: str, role: str) -> Dict[str, str]:
    claims = {"role": role}
    return {
        "access_token": create_access_token(identity=user_id, additional_claims=claims),
        "refresh_token": create_refresh_token(
            identity=user_id, additional_claims=claims
        ),
    }


def login_user(data: Dict[str, Any]) -> Dict[str, Any]:
    email = _normalize_email(data.get("email", ""))
    password = str(data.get("password") or "")

    user = get_user_by_email(email)
    if not user or not verify_password(password, user["password_hash"]):
        logger.info("[auth] failed login for %s", mask_email(email))
        return {"error": "Invalid credentials"}

    user_id = str(user["id"])
    role = get_user_role(user_id) or "user"
    return {"id": user_id, "email": user["email"], "role": role, **make_tokens(user_id, role)}
