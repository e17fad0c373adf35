import argparse
import os
import sys

from atm_config import CARD_FILE
from atm_errors import UserInputError
from atm_logic import parse_amount
from card_store import Card, save_card
from security_checks import is_valid_cvc, parse_expiry


def create_card(card_file, card_number, expiry_date, pin, cvc, balance="0", force=False):
    if os.path.exists(card_file) and not force:
        raise FileExistsError(f"{card_file} already exists (use --force to overwrite)")
    if parse_expiry(expiry_date) is None:
        raise ValueError(f"Expiry date must be MM/YY, got {expiry_date!r}")
    if not is_valid_cvc(cvc):
        raise ValueError("CVC must be 3 digits")

    card = Card(card_number, expiry_date, pin, cvc, balance=parse_amount(str(balance)))
    save_card(card, card_file)
    return card


def main(argv=None):
    parser = argparse.ArgumentParser(description="Create the ATM card data file")
    parser.add_argument("card_number")
    parser.add_argument("expiry_date", help="MM/YY")
    parser.add_argument("pin")
    parser.add_argument("cvc")
    parser.add_argument("--balance", default="0")
    parser.add_argument("--card-file", default=CARD_FILE)
    parser.add_argument("--force", action="store_true")
    args = parser.parse_args(argv)

    try:
        create_card(args.card_file, args.card_number, args.expiry_date, args.pin, args.cvc,
                    balance=args.balance, force=args.force)
    except (FileExistsError, ValueError, UserInputError) as e:
        print(e)
        return 1

    print(f"Card data written to {args.card_file}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
