"""Email acceptance rules shared by every attendee intake path."""
import re

# Syntactic shape only: local@domain.tld with no whitespace or extra "@"
EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")


def is_valid_email(candidate: str) -> bool:
    """Return True if ``candidate`` looks like ``local-part@domain.tld``.

    No DNS or MX lookup is made. Surrounding whitespace is not stripped, so
    callers normalize first when the value comes from user input.
    """
    if not isinstance(candidate, str):
        return False
    return EMAIL_PATTERN.fullmatch(candidate) is not None


def normalize_email(value: str) -> str:
    """Trim and lower-case an email. Together with the event id this is the
    attendee's identity key."""
    return value.strip().lower()
