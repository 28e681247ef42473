import re

from solders.pubkey import Pubkey

from .errors import ConfigurationError

pattern = re.compile(r"(?<=[a-z])(?=[A-Z])|(?<=[A-Z])(?=[A-Z][a-z])")
def camel_to_snake(a_str):
    return pattern.sub('_', a_str).lower()

def secret_text(t, n):
    if len(t) > ((2 * n) + 3):
        return t[:n] + "..." + t[-1 * n:]
    else:
        return t[:n] + "***..."

def as_pubkey(value, what='key'):
    """Coerce a base58 string (or a Pubkey) into a Pubkey, or raise ConfigurationError."""

    if isinstance(value, Pubkey):
        return value

    if not isinstance(value, str):
        raise ConfigurationError(f"{what} must be a base58 string, got {type(value).__name__}")

    try:
        return Pubkey.from_string(value)
    except ValueError as e:
        raise ConfigurationError(f"{what} '{value}' is not a valid public key: {e}") from e
