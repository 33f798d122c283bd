from functools import wraps

from flask import jsonify
from flask_jwt_extended import get_jwt_identity, verify_jwt_in_request

from app.models.user import get_user_role


def require_role(*allowed):
    """
    JWT required, and the caller's role in user_roles must be one of
    `allowed`. The role is read from the database on every request; the
    token's role claim is not trusted.
    """

    def deco(fn):
        @wraps(fn)
        def wrapper(*args, **kwargs):
            verify_jwt_in_request()
            user_id = get_jwt_identity()

            role = get_user_role(user_id)
            if role is None:
                return jsonify({"error": "no role assigned", "code": "forbidden"}), 403
            if allowed and role not in allowed:
                return (
                    jsonify(
                        {
                            "error": "forbidden",
                            "code": "forbidden",
                            "required": list(allowed),
                            "have": role,
                        }
                    ),
                    403,
                )
            return fn(*args, **kwargs)

        return wrapper

    return deco


require_admin = require_role("admin")
