import re
from datetime import date, datetime

from werkzeug.security import check_password_hash, generate_password_hash

EXPIRY_PATTERN = re.compile(r"^\d{2}/\d{2}$")
EXPIRY_FORMAT = "%m/%y"
CVC_LENGTH = 3
HASH_PREFIXES = ("scrypt:", "pbkdf2:")


def parse_expiry(value):
    """
    Parse an "MM/YY" string into (year, month).
    Returns None when the value is not a valid month/year.

    Two-digit years follow strptime: 69-99 are 19xx, 00-68 are 20xx.
    """
    if not isinstance(value, str) or not EXPIRY_PATTERN.match(value):
        return None

    try:
        parsed = datetime.strptime(value, EXPIRY_FORMAT)
    except ValueError:
        return None

    return parsed.year, parsed.month


def is_card_expired(expiry_date, today=None):
    """An unparseable expiry counts as expired."""
    parsed = parse_expiry(expiry_date)
    if parsed is None:
        return True

    today = today or date.today()
    return parsed < (today.year, today.month)


def is_valid_cvc(value):
    if len(value) != CVC_LENGTH:
        return False
    try:
        int(value)
    except ValueError:
        return False
    return True


def is_hashed_pin(pin):
    return pin.startswith(HASH_PREFIXES)


def check_pin(stored_pin, entered_pin):
    # Hashed PINs come from migrate_pins; plaintext ones are compared as-is
    if is_hashed_pin(stored_pin):
        return check_password_hash(stored_pin, entered_pin)
    return stored_pin == entered_pin


def hash_pin(pin):
    return generate_password_hash(pin)
