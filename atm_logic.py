from datetime import datetime
import re
from decimal import Decimal, InvalidOperation

from atm_config import (
    CONVERSION_RATES,
    HISTORY_LIMIT,
    HOME_CURRENCY,
    TIMESTAMP_FORMAT,
    WITHDRAW_CURRENCIES,
)
from atm_errors import InsufficientFundsError, UserInputError, ValidationError
from atm_session import ATMSession
from atm_states import ATMState
from security_checks import check_pin, hash_pin, is_card_expired, is_hashed_pin, is_valid_cvc, parse_expiry

AMOUNT_PATTERN = re.compile(r"^[+-]?(\d+(\.\d*)?|\.\d+)$")

BALANCE_ATTRS = {
    "GEL": "balance",
    "EUR": "euro_balance",
    "USD": "dollar_balance",
}


def parse_amount(text) -> Decimal:
    text = (text or "").strip()
    if not text:
        raise UserInputError("Amount required.")
    # plain numerals only: no exponents, underscores, NaN or Infinity
    if not AMOUNT_PATTERN.match(text):
        raise UserInputError(f"Invalid amount: {text}")
    try:
        amount = Decimal(text)
    except InvalidOperation:
        raise UserInputError(f"Invalid amount: {text}") from None
    if amount < 0:
        raise UserInputError("Amount must not be negative.")
    return amount


# ---------------- AUTHENTICATION ----------------
def verify_card(session: ATMSession, card_number: str, expiry_input: str, cvc_input: str, today=None):
    session.require_state(ATMState.AUTHENTICATING)
    card = session.card

    reason = None
    if card.card_number != card_number:
        reason = "card number mismatch"
    elif parse_expiry(expiry_input) is None:
        reason = "malformed expiry date"
    elif is_card_expired(card.expiry_date, today):
        reason = "card expired"
    elif not is_valid_cvc(cvc_input):
        reason = "malformed CVC"
    elif card.cvc != cvc_input:
        reason = "CVC mismatch"

    if reason:
        session.logger.info("Card validation failed")
        session.logger.warning("Invalid card: %s", reason)
        raise ValidationError("Invalid card details.")

    session.state = ATMState.CARD_VERIFIED
    session.logger.info("Card validation successful")


def verify_pin(session: ATMSession, pin: str):
    session.require_state(ATMState.CARD_VERIFIED)

    if not check_pin(session.card.pin, pin):
        # No second attempt: a wrong PIN ends the session
        session.end()
        session.logger.info("PIN validation failed")
        session.logger.warning("Invalid PIN entered")
        raise ValidationError("Invalid PIN.")

    session.state = ATMState.AUTHENTICATED
    session.logger.info("PIN validation successful")


# ---------------- HISTORY ----------------
def record_transaction(session: ATMSession, action: str, now=None):
    now = now or datetime.now()
    history = session.card.transaction_history
    history.append(f"{now.strftime(TIMESTAMP_FORMAT)}: {action}")

    # oldest entries go first
    del history[:-HISTORY_LIMIT]

    session.logger.info(action)


def last_transactions(session: ATMSession):
    session.require_state(ATMState.AUTHENTICATED)
    session.logger.info("Viewed last %d transactions", HISTORY_LIMIT)
    return list(session.card.transaction_history[-HISTORY_LIMIT:])


# ---------------- MENU ACTIONS ----------------
def view_balance(session: ATMSession):
    session.require_state(ATMState.AUTHENTICATED)
    card = session.card
    balances = (card.balance, card.euro_balance, card.dollar_balance)
    record_transaction(session, "Viewed balance")
    session.save()
    return balances


def reject_selection(session: ATMSession, action: str, choice):
    """Turn down an unknown sub-menu option. Nothing changes but the record is still saved."""
    session.require_state(ATMState.AUTHENTICATED)
    session.logger.warning("Invalid %s option selected: %r", action, choice)
    session.save()


def withdraw(session: ATMSession, currency: str, amount: Decimal):
    session.require_state(ATMState.AUTHENTICATED)
    try:
        if currency not in WITHDRAW_CURRENCIES:
            session.logger.warning("Invalid withdrawal currency: %r", currency)
            raise UserInputError("Invalid choice.")
        if amount < 0:
            raise UserInputError("Amount must not be negative.")

        attr = BALANCE_ATTRS[currency]
        available = getattr(session.card, attr)
        if amount > available:
            session.logger.warning("%s withdrawal failed due to insufficient balance", currency)
            raise InsufficientFundsError(currency, amount, available)

        new_balance = available - amount
        setattr(session.card, attr, new_balance)
        record_transaction(session, f"Withdrew {amount} {currency}")
        return new_balance
    finally:
        session.save()


def deposit(session: ATMSession, amount: Decimal):
    session.require_state(ATMState.AUTHENTICATED)
    if amount < 0:
        raise UserInputError("Amount must not be negative.")

    session.card.balance += amount
    record_transaction(session, f"Deposited {amount} {HOME_CURRENCY}")
    session.save()
    return session.card.balance


def change_pin(session: ATMSession, new_pin: str):
    session.require_state(ATMState.AUTHENTICATED)
    card = session.card

    # a migrated card keeps its PIN hashed
    card.pin = hash_pin(new_pin) if is_hashed_pin(card.pin) else new_pin
    record_transaction(session, "Changed PIN")
    session.save()


def convert_currency(session: ATMSession, target: str, amount: Decimal):
    """
    Credit amount * rate to the target currency balance.

    The GEL balance is left untouched; conversion only ever adds to the
    foreign balance.
    """
    session.require_state(ATMState.AUTHENTICATED)
    try:
        rate = CONVERSION_RATES.get(target)
        if rate is None:
            session.logger.warning("Invalid conversion currency: %r", target)
            raise UserInputError("Invalid choice.")
        if amount < 0:
            raise UserInputError("Amount must not be negative.")

        converted = amount * rate
        attr = BALANCE_ATTRS[target]
        setattr(session.card, attr, getattr(session.card, attr) + converted)
        session.logger.info("Converted %s %s to %.2f %s", amount, HOME_CURRENCY, converted, target)
        return converted
    finally:
        session.save()


def end_session(session: ATMSession):
    session.require_state(ATMState.AUTHENTICATED)
    session.end()
    session.logger.info("User exited the system")
