class ATMError(Exception):
    """Base class for every error raised by the ATM."""


class PersistenceError(ATMError):
    """Card file could not be read, parsed or written."""


class ValidationError(ATMError):
    """Card details or PIN did not match."""


class UserInputError(ATMError):
    """Malformed amount or an option that is not on the menu."""


INSUFFICIENT_MESSAGES = {
    "GEL": "Insufficient balance.",
    "EUR": "Insufficient Euro balance.",
    "USD": "Insufficient Dollar balance.",
}


class InsufficientFundsError(ATMError):
    def __init__(self, currency, requested, available):
        self.currency = currency
        self.requested = requested
        self.available = available
        super().__init__(INSUFFICIENT_MESSAGES.get(currency, "Insufficient balance."))


class SessionStateError(ATMError):
    pass
