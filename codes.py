import secrets
import string
import uuid

DIGITS = string.digits
# Characters that read alike in a distorted image are left out
CAPTCHA_ALPHABET = ''.join(
    c for c in string.ascii_letters + string.digits if c not in '0Oo1IiLl'
)


def random_digits(length: int) -> str:
    """Return ``length`` independent uniform digits; leading zeros allowed."""
    return random_string(length, DIGITS)


def random_string(length: int, alphabet: str) -> str:
    if length <= 0:
        raise ValueError("Length must be positive")
    if not alphabet:
        raise ValueError("Alphabet must not be empty")
    return ''.join(secrets.choice(alphabet) for _ in range(length))


def random_uuid() -> str:
    return str(uuid.uuid4())
