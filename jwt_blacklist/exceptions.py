from authx.exceptions import JWTDecodeError


class BlacklistError(Exception):
    """Base class for token blacklist errors."""


class InvalidTokenError(BlacklistError, JWTDecodeError):
    """The token cannot be decoded or carries no ``exp`` claim."""


class StorageError(BlacklistError):
    """A storage adapter failed to read or write an entry."""
