"""Bearer-token authentication against the identity provider."""
import logging
from typing import Optional

import jwt
from flask import redirect, request
from flask_login import LoginManager

from tonganreader.config import settings
from tonganreader.models.models import User
from tonganreader.services.user_service import UserService
from tonganreader.web.context import get_session

logger = logging.getLogger(__name__)

login_manager = LoginManager()


def bearer_token(header: Optional[str]) -> Optional[str]:
    if not header:
        return None
    scheme, _, token = header.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        return None
    return token.strip()


def decode_token(token: str) -> Optional[dict]:
    """Verify a session token and return its claims, or None if it is invalid."""
    if not settings.auth.jwt_key:
        logger.error("AUTH_JWT_KEY is not configured; rejecting token")
        return None

    options = {"require": ["sub", "exp"]}
    kwargs = {}
    if settings.auth.jwt_issuer:
        kwargs["issuer"] = settings.auth.jwt_issuer
    try:
        return jwt.decode(
            token,
            settings.auth.jwt_key,
            algorithms=settings.auth.jwt_algorithms,
            options=options,
            **kwargs,
        )
    except jwt.InvalidTokenError as e:
        logger.warning(f"Rejected session token: {e}")
        return None


@login_manager.request_loader
def load_user_from_request(req) -> Optional[User]:
    token = bearer_token(req.headers.get("Authorization"))
    if token is None:
        return None
    claims = decode_token(token)
    if claims is None:
        return None
    # First sight of an identity creates its user row
    return UserService(get_session()).get_or_create_user(claims["sub"], email=claims.get("email"))


@login_manager.unauthorized_handler
def handle_unauthorized():
    logger.info(f"Sign-in required for {request.path}")
    return redirect(settings.auth.sign_in_url)
