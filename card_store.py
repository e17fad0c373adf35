import json
import os
import tempfile
from decimal import Decimal, InvalidOperation

from atm_config import CARD_FILE, HISTORY_LIMIT
from atm_errors import PersistenceError
from atm_logger import get_logger

logger = get_logger("store")

REQUIRED_FIELDS = ("cardNumber", "expiryDate", "pin", "cvc")
BALANCE_FIELDS = ("balance", "euroBalance", "dollarBalance")


def _to_amount(key, value):
    if isinstance(value, bool):
        raise PersistenceError(f"{key} is not an amount: {value!r}")
    try:
        amount = Decimal(str(value))
    except InvalidOperation:
        raise PersistenceError(f"{key} is not an amount: {value!r}") from None
    if not amount.is_finite() or amount < 0:
        raise PersistenceError(f"{key} must be a non-negative amount: {value!r}")
    return amount


class Card:
    """The single persisted card record."""

    def __init__(self, card_number: str, expiry_date: str, pin: str, cvc: str,
                 balance=Decimal("0"), euro_balance=Decimal("0"),
                 dollar_balance=Decimal("0"), transaction_history=None):
        self.card_number = card_number
        self.expiry_date = expiry_date
        self.pin = pin
        self.cvc = cvc
        self.balance = Decimal(str(balance))
        self.euro_balance = Decimal(str(euro_balance))
        self.dollar_balance = Decimal(str(dollar_balance))
        self.transaction_history = list(transaction_history or [])

    @classmethod
    def from_dict(cls, data):
        if not isinstance(data, dict):
            raise PersistenceError("Card data must be a JSON object")

        missing = [key for key in REQUIRED_FIELDS if data.get(key) is None]
        if missing:
            raise PersistenceError(f"Card data is missing: {', '.join(missing)}")

        history = data.get("transactionHistory") or []
        if not isinstance(history, list):
            raise PersistenceError("transactionHistory must be a list")

        return cls(
            card_number=str(data["cardNumber"]),
            expiry_date=str(data["expiryDate"]),
            pin=str(data["pin"]),
            cvc=str(data["cvc"]),
            balance=_to_amount("balance", data.get("balance", 0)),
            euro_balance=_to_amount("euroBalance", data.get("euroBalance", 0)),
            dollar_balance=_to_amount("dollarBalance", data.get("dollarBalance", 0)),
            transaction_history=[str(entry) for entry in history][-HISTORY_LIMIT:],
        )

    def to_dict(self):
        # Amounts go out as strings so they never pass through float
        return {
            "cardNumber": self.card_number,
            "expiryDate": self.expiry_date,
            "pin": self.pin,
            "cvc": self.cvc,
            "balance": str(self.balance),
            "euroBalance": str(self.euro_balance),
            "dollarBalance": str(self.dollar_balance),
            "transactionHistory": list(self.transaction_history),
        }

    def __eq__(self, other):
        if not isinstance(other, Card):
            return NotImplemented
        return self.to_dict() == other.to_dict()

    def __repr__(self):
        return f"<Card {self.card_number[-4:]} balance={self.balance}>"


def load_card(path=CARD_FILE) -> Card:
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f, parse_float=Decimal)
        card = Card.from_dict(data)
    except (OSError, ValueError, PersistenceError) as e:
        logger.error("Error loading card data from %s: %s", path, e)
        if isinstance(e, PersistenceError):
            raise
        raise PersistenceError(f"Cannot load card data from {path}: {e}") from e

    logger.info("Card data loaded")
    return card


def save_card(card: Card, path=CARD_FILE):
    """
    Overwrite the card file with the full record.

    The record is written to a temporary file in the same directory and
    moved over the target, so a crash never leaves a half-written file.
    """
    directory = os.path.dirname(os.path.abspath(path))
    temp_name = None
    try:
        with tempfile.NamedTemporaryFile("w", dir=directory, suffix=".json",
                                         delete=False, encoding="utf-8") as temp_file:
            temp_name = temp_file.name
            json.dump(card.to_dict(), temp_file, indent=2)
            temp_file.flush()
            os.fsync(temp_file.fileno())
        os.replace(temp_name, path)
    except OSError as e:
        logger.error("Error saving card data to %s: %s", path, e)
        if temp_name and os.path.exists(temp_name):
            os.unlink(temp_name)
        raise PersistenceError(f"Cannot save card data to {path}: {e}") from e

    logger.info("Card data saved")
