import math
from jose import jwt, JWTError
from jwt_blacklist.exceptions import InvalidTokenError

# Largest epoch-millisecond value a BIGINT column can hold
MAX_EXPIRY_MS = 2**63 - 1


def get_expiry(token: str) -> int:
    """
    Returns the token's ``exp`` claim in epoch milliseconds.

    The signature is not checked: revocation has to work for tokens the
    caller could not (or did not yet) verify, e.g. at logout time.
    """
    if not token or not isinstance(token, str):
        raise InvalidTokenError("Invalid token or token without expiration")
    try:
        claims = jwt.get_unverified_claims(token)
    except JWTError as e:
        raise InvalidTokenError(f"Invalid token or token without expiration: {e}") from e

    exp = claims.get("exp")
    if isinstance(exp, bool) or not isinstance(exp, (int, float)):
        raise InvalidTokenError("Invalid token or token without expiration")
    if not math.isfinite(exp):
        raise InvalidTokenError(f"Invalid token expiration: {exp}")

    expires_at = int(exp * 1000)
    if abs(expires_at) > MAX_EXPIRY_MS:
        raise InvalidTokenError(f"Token expiration out of range: {exp}")
    return expires_at
