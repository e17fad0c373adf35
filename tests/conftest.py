import json
import logging

import pytest

from atm_session import ATMSession
from atm_states import ATMState
from card_store import load_card

CARD_DATA = {
    "cardNumber": "4111111111111111",
    "expiryDate": "12/49",
    "pin": "1234",
    "cvc": "123",
    "balance": 500.0,
    "euroBalance": 0,
    "dollarBalance": 0,
    "transactionHistory": [],
}


@pytest.fixture
def card_data():
    return json.loads(json.dumps(CARD_DATA))


@pytest.fixture
def card_file(tmp_path, card_data):
    path = tmp_path / "cardData.json"
    path.write_text(json.dumps(card_data, indent=2), encoding="utf-8")
    return str(path)


@pytest.fixture
def session(card_file):
    return ATMSession(load_card(card_file), card_file, logging.getLogger("atm.test"))


@pytest.fixture
def authed_session(session):
    session.state = ATMState.AUTHENTICATED
    return session
