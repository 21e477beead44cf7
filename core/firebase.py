import json
import logging
import os
from typing import Optional

import firebase_admin
from firebase_admin import auth as firebase_auth
from firebase_admin import credentials

logger = logging.getLogger(__name__)


def initialize_firebase():
    """Initialize Firebase Admin SDK with production-ready credential handling"""

    # Method 1: Service Account Key from Environment Variable (Recommended for production)
    service_account_key_json = os.getenv("FIREBASE_SERVICE_ACCOUNT_KEY")
    if service_account_key_json:
        try:
            service_account_info = json.loads(service_account_key_json)
            cred = credentials.Certificate(service_account_info)
            firebase_admin.initialize_app(cred)
            logger.info("Firebase Admin SDK initialized with Service Account Key from environment variable.")
            return
        except (json.JSONDecodeError, ValueError) as e:
            logger.error(f"Error parsing FIREBASE_SERVICE_ACCOUNT_KEY: {e}")

    # Method 2: Service Account Key File (for local development only)
    service_account_key_path = os.getenv("FIREBASE_SERVICE_ACCOUNT_KEY_PATH")
    if service_account_key_path and os.path.exists(service_account_key_path):
        cred = credentials.Certificate(service_account_key_path)
        firebase_admin.initialize_app(cred)
        logger.info("Firebase Admin SDK initialized with Service Account Key from file path.")
        return

    # Method 3: GOOGLE_APPLICATION_CREDENTIALS (Cloud environments)
    if os.getenv("GOOGLE_APPLICATION_CREDENTIALS"):
        firebase_admin.initialize_app()
        logger.info("Firebase Admin SDK initialized with GOOGLE_APPLICATION_CREDENTIALS.")
        return

    # Method 4: Default Application Default Credentials (fallback)
    firebase_admin.initialize_app()
    logger.warning("Firebase Admin SDK initialized with default Application Default Credentials.")


def get_app() -> firebase_admin.App:
    # Initialized on first use so importing this module never touches credentials
    try:
        return firebase_admin.get_app()
    except ValueError:
        initialize_firebase()
        return firebase_admin.get_app()


def verify_id_token(token: str) -> dict:
    return firebase_auth.verify_id_token(token, app=get_app())


def get_user_email(uid: str) -> Optional[str]:
    user = firebase_auth.get_user(uid, app=get_app())
    return user.email
