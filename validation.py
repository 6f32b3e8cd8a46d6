import re

# Email must look like local@domain.tld
_EMAIL_REGEX = re.compile(
    r"^[A-Za-z0-9._%+-]+@[A-Za-z0-9.-]+\.[A-Za-z]{2,}$"
)


def normalize_email(email: str) -> str:
    """Strip surrounding whitespace and lower-case the address."""
    return (email or '').strip().lower()


def is_valid_email(email: str) -> bool:
    """Return True if email has a valid format."""
    return bool(_EMAIL_REGEX.fullmatch(email))
