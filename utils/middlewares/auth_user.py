import logging
from typing import Dict, Optional

import jwt
from fastapi import HTTPException, Request
from jwt.exceptions import ExpiredSignatureError, InvalidTokenError

from business.user import get_or_create_user_from_auth
from models.auth_user import AuthUser
from utils.constants import COOKIE_NAME, JWT_AUDIENCE, JWT_ISSUER, JWT_SECRET

logger = logging.getLogger(__name__)


def parse_cookies(cookie_header: str) -> Dict[str, str]:
    """Parse cookie header string into a dictionary"""
    cookies = {}
    if cookie_header:
        for cookie in cookie_header.split(";"):
            if "=" in cookie:
                key, value = cookie.strip().split("=", 1)
                cookies[key.strip()] = value
    return cookies


def extract_token_from_request(request: Request) -> Optional[str]:
    """Extract JWT token from Authorization header or cookies"""
    token = None

    # First, try to get token from Authorization header (for native apps)
    auth_header = request.headers.get("authorization")
    if auth_header and auth_header.startswith("Bearer "):
        token = auth_header.split(" ")[1]

    # If no token in header, try to get from cookies (for web)
    if not token:
        cookie_header = request.headers.get("cookie")
        if cookie_header:
            cookies = parse_cookies(cookie_header)
            token = cookies.get(COOKIE_NAME)

    return token


def verify_token(token: str) -> AuthUser:
    """Verify JWT token and return user data"""
    if not JWT_SECRET:
        raise HTTPException(status_code=500, detail="Server misconfiguration")

    try:
        decoded = jwt.decode(
            token,
            JWT_SECRET,
            algorithms=["HS256"],
            audience=JWT_AUDIENCE,
            issuer=JWT_ISSUER,
        )
    except ExpiredSignatureError:
        raise HTTPException(status_code=401, detail="Token expired")
    except InvalidTokenError:
        raise HTTPException(status_code=401, detail="Invalid token")

    subject = decoded.get("sub")
    if not subject:
        raise HTTPException(status_code=401, detail="Invalid token")

    return AuthUser(
        id=str(subject),
        name=decoded.get("name", ""),
        picture=decoded.get("picture"),
        phone_number=decoded.get("phone_number"),
        exp=decoded.get("exp"),
    )


# Dependency function for route-level authentication
def get_current_user(request: Request) -> AuthUser:
    """Dependency to get current authenticated user"""
    token = extract_token_from_request(request)

    if not token:
        raise HTTPException(status_code=401, detail="Authentication required")

    auth_user = verify_token(token)

    # Users are materialized the first time their subject shows up
    try:
        get_or_create_user_from_auth(auth_user)
    except Exception as e:
        logger.error(f"Error creating/getting user from auth: {e}")
        raise HTTPException(status_code=500, detail="Unable to load user")

    return auth_user
