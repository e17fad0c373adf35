from enum import Enum, auto

class ATMState(Enum):
    AUTHENTICATING = auto()
    CARD_VERIFIED = auto()
    AUTHENTICATED = auto()
    TERMINATED = auto()
