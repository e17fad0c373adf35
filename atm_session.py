
from atm_config import CARD_FILE
from atm_errors import SessionStateError
from atm_logger import get_logger
from atm_states import ATMState
from card_store import Card, save_card


class ATMSession:
    """
    One authenticate-then-menu run against the card record.

    The session owns the in-memory card: handlers mutate it through the
    session and never keep a copy of their own.
    """

    def __init__(self, card: Card, card_file=CARD_FILE, logger=None):
        self.card = card
        self.card_file = card_file
        self.state = ATMState.AUTHENTICATING
        self.logger = logger or get_logger("session")

    def require_state(self, required_state: ATMState):
        if self.state != required_state:
            raise SessionStateError(f"Action not allowed. Required: {required_state.name}, Current: {self.state.name}")

    def save(self):
        save_card(self.card, self.card_file)

    def end(self):
        self.state = ATMState.TERMINATED
