# Overview: Flask API routes for auth operations; parses input and returns JSON responses.

from flask import Blueprint, request, jsonify, current_app, g

from ..services import auth_service
from ..services import session_service
from ..services.auth_service import AuthError
from ..decorators import require_auth
from ..validation import ErrorBag, ValidationError


auth_bp = Blueprint("auth", __name__, url_prefix="/api")


def _validate_login(data) -> tuple[str, str]:
    if not isinstance(data, dict):
        data = {}
    errors = ErrorBag()

    email = data.get("email")
    if not isinstance(email, str) or not email.strip():
        errors.add("email", "The email field is required.")
    elif "@" not in email or email.strip().startswith("@") or email.strip().endswith("@"):
        errors.add("email", "The email field must be a valid email address.")

    password = data.get("password")
    if password is None or password == "":
        errors.add("password", "The password field is required.")
    elif not isinstance(password, str):
        errors.add("password", "The password field must be a string.")

    errors.raise_if_any()
    return email, password


@auth_bp.post("/login")
def login_route():
    """
    Authenticate by email/password and issue a bearer token.

    Token must be included in Authorization header for protected routes.
    """
    try:
        email, password = _validate_login(request.get_json(silent=True))
        user = auth_service.authenticate_by_email(email, password)
        _, token = session_service.create_session(user_id=user.id)

        return jsonify({
            "message": "Login successful",
            "access_token": token,
            "user": user.to_dict(),
        }), 200

    except ValidationError as e:
        return jsonify({"message": e.summary(), "errors": e.errors}), 422
    except AuthError as e:
        return jsonify({"message": str(e)}), e.status
    except Exception:
        current_app.logger.exception("Failed to login user")
        return jsonify({"message": "Internal server error"}), 500


@auth_bp.post("/logout")
@require_auth
def logout_route():
    """Revoke the token used for this request."""
    try:
        session_service.revoke_session(g.access_token)
        return jsonify({"message": "Logout successful"}), 200
    except Exception:
        current_app.logger.exception("Failed to logout user")
        return jsonify({"message": "Internal server error"}), 500


@auth_bp.get("/user")
@require_auth
def current_user_route():
    return jsonify(g.current_user.to_dict()), 200
