import os
from decimal import Decimal

BASE_DIR = os.path.dirname(os.path.abspath(__file__))

# ---------------- FILES ----------------
CARD_FILE = os.environ.get("ATM_CARD_FILE", os.path.join(BASE_DIR, "cardData.json"))
LOG_FILE = os.environ.get("ATM_LOG_FILE", os.path.join(BASE_DIR, "atm.log"))
LOG_LEVEL = os.environ.get("ATM_LOG_LEVEL", "INFO")

# ---------------- MONEY ----------------
HOME_CURRENCY = "GEL"
WITHDRAW_CURRENCIES = ("GEL", "EUR", "USD")

# Fixed rates, GEL -> target
CONVERSION_RATES = {
    "EUR": Decimal("0.34"),
    "USD": Decimal("0.37"),
}

# ---------------- HISTORY ----------------
HISTORY_LIMIT = 5
TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M:%S"
