"""Identifier hashing for logs.

User ids, emails and message text never reach application logs.
Log lines carry a salted SHA-256 of the user id instead, so events for
one user can still be correlated without exposing who they are.
"""
import hashlib
import logging
from typing import Optional

logger = logging.getLogger(__name__)

MIN_SALT_LENGTH = 32

_HASH_SALT: Optional[str] = None


def configure_hash_salt(salt: str) -> None:
    """Configure the salt used by hash_user_id.

    Must be called during application startup before any logging
    that includes a user identifier.

    Args:
        salt: Secret salt value (PII_HASH_SALT)

    Raises:
        ValueError: If salt is empty or too short
    """
    global _HASH_SALT
    if not salt or len(salt) < MIN_SALT_LENGTH:
        logger.critical(
            "HASH_SALT_CONFIGURATION_FAILED",
            extra={"reason": "Salt too short or empty", "min_length": MIN_SALT_LENGTH}
        )
        raise ValueError(f"Hash salt must be at least {MIN_SALT_LENGTH} characters")

    _HASH_SALT = salt
    logger.info("HASH_SALT_CONFIGURED", extra={"salt_length": len(salt)})


def hash_user_id(user_id: str) -> str:
    """Hash a user identifier for safe logging.

    Args:
        user_id: Raw user id (or email)

    Returns:
        64-char hex digest, stable for a given salt

    Raises:
        RuntimeError: If the salt has not been configured
    """
    if _HASH_SALT is None:
        logger.critical(
            "USER_ID_HASH_FAILED",
            extra={"reason": "Salt not configured", "action": "call configure_hash_salt()"}
        )
        raise RuntimeError("Hash salt not configured. Call configure_hash_salt() first.")

    return hashlib.sha256(f"{_HASH_SALT}{user_id}".encode()).hexdigest()
