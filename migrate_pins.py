import argparse
import sys

from atm_config import CARD_FILE
from card_store import load_card, save_card
from security_checks import hash_pin, is_hashed_pin


def migrate_pins(card_file=CARD_FILE):
    card = load_card(card_file)

    if is_hashed_pin(card.pin):
        print(f"PIN for card ending {card.card_number[-4:]} is already hashed.")
        return False

    card.pin = hash_pin(card.pin)
    save_card(card, card_file)
    print(f"Hashed PIN for card ending {card.card_number[-4:]}")
    return True


def main(argv=None):
    parser = argparse.ArgumentParser(description="Replace a plaintext card PIN with a hash")
    parser.add_argument("--card-file", default=CARD_FILE)
    args = parser.parse_args(argv)

    migrate_pins(args.card_file)
    return 0


if __name__ == "__main__":
    sys.exit(main())
