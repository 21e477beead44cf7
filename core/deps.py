import logging
from typing import Annotated

from fastapi import Depends, Request
from firebase_admin import auth as firebase_auth
from sqlmodel import Session

from core.access import CallerRole, classify
from core.exceptions import Forbidden, Unauthenticated
from core.firebase import verify_id_token
from db.session import get_session

logger = logging.getLogger(__name__)


def extract_bearer_token(request: Request) -> str:
    auth_header = request.headers.get("Authorization", "")

    # Make Sure Formatting Valid
    if not auth_header.startswith("Bearer "):
        raise Unauthenticated("Missing or invalid Authorization header")

    token = auth_header.split(" ", 1)[1].strip()
    if not token:
        raise Unauthenticated("Missing bearer token")
    return token


# Resolves the caller from the bearer credential, then classifies them
def get_current_caller(
    request: Request,
    session: Annotated[Session, Depends(get_session)],
) -> dict:
    token = extract_bearer_token(request)

    try:
        decoded = verify_id_token(token)
    except (
        ValueError,
        firebase_auth.InvalidIdTokenError,
        firebase_auth.UserDisabledError,
        firebase_auth.CertificateFetchError,
    ):
        raise Unauthenticated("Invalid or expired token")

    uid = decoded.get("uid")
    email = decoded.get("email")
    if not uid:
        raise Unauthenticated("Token did not contain uid")
    if not email:
        raise Unauthenticated("Token did not contain an email")

    role = classify(session, email)

    return {
        "uid": uid,
        "email": email,
        "role": role,
    }


# Manager Role Check Dependency
def require_manager_role(
    current_caller: Annotated[dict, Depends(get_current_caller)],
) -> dict:
    if current_caller.get("role") != CallerRole.MANAGER:
        logger.info(f"Rejected manager-only request from {current_caller.get('email')}")
        raise Forbidden()
    return current_caller


def is_manager(caller: dict) -> bool:
    return caller.get("role") == CallerRole.MANAGER
