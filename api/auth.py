"""
Authentication blueprint (mounted under /api/v1/users):
- POST /register
- POST /login
- POST /refresh
- POST /logout

The implementation:
- Uses argon2 for password hashing (via utils.security)
- Issues short-lived access tokens and longer-lived refresh tokens (JWTs
  signed with HS256, one secret per token kind)
- Stores the single live refresh token on the user row so it can be rotated
  on every refresh and revoked on logout
- Sends both tokens as HttpOnly cookies and also in the JSON body
"""
from __future__ import annotations

from flask import Blueprint, request, jsonify, g, current_app

from api.errors import ServiceErrorResponse
from models.schemas.user import UserCreateSchema, UserOutSchema, UserLoginSchema
from utils.decorators import jwt_required, ACCESS_COOKIE
from utils.tokens import TokenPair

REFRESH_COOKIE = "refreshToken"

bp = Blueprint("auth", __name__)

user_create_schema = UserCreateSchema()
user_out_schema = UserOutSchema()
user_login_schema = UserLoginSchema()


def _cookie_options() -> dict:
    return {
        "httponly": True,
        "secure": current_app.config.get("COOKIE_SECURE", False),
        "samesite": current_app.config.get("COOKIE_SAMESITE", "Lax"),
    }


def _with_token_cookies(response, tokens: TokenPair):
    opts = _cookie_options()
    response.set_cookie(ACCESS_COOKIE, tokens.access_token, max_age=tokens.access_expires_in, **opts)
    response.set_cookie(REFRESH_COOKIE, tokens.refresh_token, max_age=tokens.refresh_expires_in, **opts)
    return response


def _token_body(tokens: TokenPair) -> dict:
    return {
        "access_token": tokens.access_token,
        "refresh_token": tokens.refresh_token,
        "token_type": "bearer",
        "expires_in": tokens.access_expires_in,
        "refresh_expires_in": tokens.refresh_expires_in,
    }


@bp.post("/register")
def register():
    """
    Register a new user with an avatar image.
    ---
    tags:
      - Auth
    consumes:
      - multipart/form-data
    parameters:
      - in: formData
        name: username
        type: string
        required: true
      - in: formData
        name: email
        type: string
        required: true
      - in: formData
        name: password
        type: string
        required: true
      - in: formData
        name: avatar
        type: file
        required: true
    responses:
      201:
        description: Created
      400:
        description: Missing fields or avatar
      409:
        description: User already exists
      502:
        description: Avatar upload failed
    """
    data = user_create_schema.load(request.form.to_dict())
    avatar = request.files.get("avatar")

    accounts = current_app.extensions["account_service"]
    result = accounts.register(
        data["username"],
        data["email"],
        data["password"],
        avatar.stream if avatar else None,
        avatar_name=(avatar.filename or "avatar") if avatar else "avatar",
    )
    if not result.is_ok:
        raise ServiceErrorResponse(result.error)

    return jsonify(
        {
            "data": user_out_schema.dump(result.value),
            "message": "User registered successfully",
        }
    ), 201


@bp.post("/login")
def login():
    """
    Login: sets accessToken/refreshToken cookies and returns the tokens
    ---
    tags:
      - Auth
    consumes:
      - application/json
    parameters:
      -  in: body
         name: body
         schema:
           type: object
           properties:
             email: { type: string }
             password: { type: string }
    responses:
      200:
        description: OK (returns tokens)
      401:
        description: Invalid credentials
      404:
        description: User does not exist
    """
    payload = user_login_schema.load(request.get_json(silent=True) or {})

    sessions = current_app.extensions["session_service"]
    result = sessions.login(payload["email"], payload["password"])
    if not result.is_ok:
        raise ServiceErrorResponse(result.error)

    outcome = result.value
    response = jsonify(
        {
            "data": {"user": user_out_schema.dump(outcome.user), **_token_body(outcome.tokens)},
            "message": "Login successful",
        }
    )
    return _with_token_cookies(response, outcome.tokens), 200


@bp.post("/refresh")
def refresh():
    """
    Use the refresh token to obtain new access and refresh tokens (rotation).
    The old refresh token stops working as soon as this succeeds.
    ---
    tags:
      - Auth
    consumes:
      - application/json
    parameters:
      -  in: body
         name: body
         required: false
         schema:
           type: object
           properties:
             refresh_token: { type: string }
    responses:
      200:
        description: OK (returns rotated tokens)
      401:
        description: Missing, invalid, expired or reused refresh token
    """
    token = request.cookies.get(REFRESH_COOKIE)
    if not token:
        payload = request.get_json(silent=True) or {}
        token = payload.get("refresh_token")

    sessions = current_app.extensions["session_service"]
    result = sessions.refresh(token)
    if not result.is_ok:
        raise ServiceErrorResponse(result.error)

    tokens = result.value
    response = jsonify(
        {
            "data": _token_body(tokens),
            "message": "Access token refreshed successfully",
        }
    )
    return _with_token_cookies(response, tokens), 200


@bp.post("/logout")
@jwt_required()
def logout():
    """
    Logout: revokes the stored refresh token and clears both cookies.
    The access token stays valid until it expires.
    ---
    tags:
      - Auth
    security:
      - Bearer: []
    responses:
      200:
        description: Logged out
      401:
        description: Unauthorized
    """
    sessions = current_app.extensions["session_service"]
    sessions.logout(g.current_user_id)

    response = jsonify({"data": None, "message": "Logged out successfully"})
    opts = _cookie_options()
    response.delete_cookie(ACCESS_COOKIE, **opts)
    response.delete_cookie(REFRESH_COOKIE, **opts)
    return response, 200
