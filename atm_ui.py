import argparse
import sys

import atm_logic
from atm_config import CARD_FILE, HOME_CURRENCY, LOG_FILE, LOG_LEVEL
from atm_errors import InsufficientFundsError, PersistenceError, UserInputError, ValidationError
from atm_logger import setup_logging, shutdown_logging
from atm_session import ATMSession
from atm_states import ATMState
from card_store import load_card

MENU = (
    "\n1. View Balance\n2. Withdraw Money\n3. View Last 5 Transactions"
    "\n4. Deposit Money\n5. Change PIN\n6. Convert Currency\n7. Exit"
)
WITHDRAW_MENU = {"1": "GEL", "2": "EUR", "3": "USD"}
CONVERT_MENU = {"1": "EUR", "2": "USD"}
EXIT_CHOICE = "7"


def ask(prompt):
    """For menu choices and amounts. Card details and PINs are read as typed."""
    return input(prompt).strip()


# ---------------- AUTHENTICATION ----------------
def authenticate_card(session: ATMSession) -> bool:
    card_number = input("Enter card number: ")
    expiry = input("Enter expiry date (MM/YY): ")
    cvc = input("Enter CVC: ")
    try:
        atm_logic.verify_card(session, card_number, expiry, cvc)
    except ValidationError:
        print("Invalid card details. Restarting.")
        return False
    return True


def authenticate_pin(session: ATMSession) -> bool:
    pin = input("Enter PIN: ")
    try:
        atm_logic.verify_pin(session, pin)
    except ValidationError:
        print("Invalid PIN. Exiting.")
        return False
    return True


# ---------------- MENU HANDLERS ----------------
def show_balance(session):
    balance, euro, dollar = atm_logic.view_balance(session)
    print(f"Your balance: {balance} {HOME_CURRENCY}")
    print(f"Your balance: {euro:.2f} EUR")
    print(f"Your balance: {dollar:.2f} USD")


def handle_withdraw(session):
    print("Select currency to withdraw:")
    print("1. GEL\n2. EUR\n3. USD")
    choice = ask("")
    currency = WITHDRAW_MENU.get(choice)
    if currency is None:
        print("Invalid choice.")
        atm_logic.reject_selection(session, "withdrawal", choice)
        return

    amount = atm_logic.parse_amount(ask(f"Enter amount to withdraw in {currency}: "))
    try:
        new_balance = atm_logic.withdraw(session, currency, amount)
    except InsufficientFundsError as e:
        print(e)
        return
    print(f"You withdrew {amount} {currency}. New balance: {new_balance} {currency}.")


def show_transactions(session):
    print("Last 5 transactions:")
    for entry in atm_logic.last_transactions(session):
        print(entry)


def handle_deposit(session):
    amount = atm_logic.parse_amount(ask(f"Enter amount to deposit in {HOME_CURRENCY}: "))
    new_balance = atm_logic.deposit(session, amount)
    print(f"You deposited {amount} {HOME_CURRENCY}. New balance: {new_balance} {HOME_CURRENCY}.")


def handle_change_pin(session):
    atm_logic.change_pin(session, input("Enter new PIN: "))
    print("PIN changed successfully.")


def handle_convert(session):
    print("Select currency to convert to:")
    print("1. Euro\n2. US Dollar")
    choice = ask("")
    amount = atm_logic.parse_amount(ask(f"Enter amount in {HOME_CURRENCY}: "))

    target = CONVERT_MENU.get(choice)
    converted = atm_logic.convert_currency(session, target, amount)
    print(f"{amount} {HOME_CURRENCY} is approximately {converted:.2f} {target}.")


HANDLERS = {
    "1": show_balance,
    "2": handle_withdraw,
    "3": show_transactions,
    "4": handle_deposit,
    "5": handle_change_pin,
    "6": handle_convert,
}


def run_menu(session: ATMSession):
    while session.state == ATMState.AUTHENTICATED:
        print(MENU)
        choice = ask("Choice: ")

        if choice == EXIT_CHOICE:
            atm_logic.end_session(session)
            print("Thank you for using the ATM. Goodbye!")
            break

        handler = HANDLERS.get(choice)
        if handler is None:
            print("Invalid choice. Try again.")
            session.logger.warning("Invalid menu option selected: %r", choice)
            continue

        try:
            handler(session)
        except UserInputError as e:
            print(e)
            session.logger.warning("Rejected input: %s", e)


# ---------------- ENTRY POINT ----------------
def run_atm(card_file=CARD_FILE, logger=None) -> int:
    while True:
        # a failed card check starts over from a fresh load
        card = load_card(card_file)
        session = ATMSession(card, card_file, logger)

        if not authenticate_card(session):
            continue
        if not authenticate_pin(session):
            return 1

        run_menu(session)
        return 0


def parse_args(argv=None):
    parser = argparse.ArgumentParser(description="Single-card ATM simulator")
    parser.add_argument("--card-file", default=CARD_FILE, help=f"card data JSON file (default: {CARD_FILE})")
    parser.add_argument("--log-file", default=LOG_FILE, help=f"diagnostic log file (default: {LOG_FILE})")
    parser.add_argument("--log-level", default=LOG_LEVEL)
    return parser.parse_args(argv)


def main(argv=None) -> int:
    args = parse_args(argv)
    logger = setup_logging(args.log_file, args.log_level)
    logger.info("Application started")

    try:
        return run_atm(args.card_file, logger.getChild("session"))
    except PersistenceError as e:
        print(f"Card data error: {e}")
        logger.critical("Aborting: %s", e)
        return 1
    except (KeyboardInterrupt, EOFError):
        print("\nSession cancelled.")
        logger.warning("Session cancelled by user")
        return 1
    finally:
        logger.info("Application finished")
        shutdown_logging()


if __name__ == "__main__":
    sys.exit(main())
