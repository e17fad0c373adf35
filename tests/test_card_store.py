import json
import os
from decimal import Decimal

import pytest

from atm_errors import PersistenceError
from card_store import Card, load_card, save_card


class TestLoadCard:
    def test_loads_all_fields(self, card_file):
        card = load_card(card_file)
        assert card.card_number == "4111111111111111"
        assert card.expiry_date == "12/49"
        assert card.pin == "1234"
        assert card.cvc == "123"
        assert card.balance == Decimal("500")
        assert card.euro_balance == Decimal("0")
        assert card.transaction_history == []

    def test_amounts_are_decimal(self, tmp_path, card_data):
        card_data["euroBalance"] = 0.1
        path = tmp_path / "card.json"
        path.write_text(json.dumps(card_data))
        card = load_card(str(path))
        assert isinstance(card.euro_balance, Decimal)
        assert card.euro_balance + Decimal("0.2") == Decimal("0.3")

    def test_numeric_identifiers_become_strings(self, tmp_path, card_data):
        card_data["pin"] = 1234
        card_data["cvc"] = 123
        path = tmp_path / "card.json"
        path.write_text(json.dumps(card_data))
        card = load_card(str(path))
        assert card.pin == "1234"
        assert card.cvc == "123"

    def test_missing_history_defaults_to_empty(self, tmp_path, card_data):
        del card_data["transactionHistory"]
        path = tmp_path / "card.json"
        path.write_text(json.dumps(card_data))
        assert load_card(str(path)).transaction_history == []

    def test_long_history_keeps_last_five(self, tmp_path, card_data):
        card_data["transactionHistory"] = [f"entry {i}" for i in range(8)]
        path = tmp_path / "card.json"
        path.write_text(json.dumps(card_data))
        assert load_card(str(path)).transaction_history == [f"entry {i}" for i in range(3, 8)]

    def test_missing_file(self, tmp_path):
        with pytest.raises(PersistenceError):
            load_card(str(tmp_path / "missing.json"))

    def test_invalid_json(self, tmp_path):
        path = tmp_path / "card.json"
        path.write_text("{not json")
        with pytest.raises(PersistenceError):
            load_card(str(path))

    def test_not_an_object(self, tmp_path):
        path = tmp_path / "card.json"
        path.write_text("[1, 2, 3]")
        with pytest.raises(PersistenceError):
            load_card(str(path))

    @pytest.mark.parametrize("key", ["cardNumber", "expiryDate", "pin", "cvc"])
    def test_missing_required_field(self, tmp_path, card_data, key):
        del card_data[key]
        path = tmp_path / "card.json"
        path.write_text(json.dumps(card_data))
        with pytest.raises(PersistenceError, match=key):
            load_card(str(path))

    @pytest.mark.parametrize("value", [-1, "abc", True])
    def test_bad_balance(self, tmp_path, card_data, value):
        card_data["balance"] = value
        path = tmp_path / "card.json"
        path.write_text(json.dumps(card_data))
        with pytest.raises(PersistenceError):
            load_card(str(path))


class TestSaveCard:
    def test_round_trip(self, card_file):
        card = load_card(card_file)
        card.transaction_history.append("2026-01-01 10:00:00: Viewed balance")
        card.euro_balance = Decimal("34.0000")
        save_card(card, card_file)
        assert load_card(card_file) == card

    def test_save_load_save_is_stable(self, card_file):
        save_card(load_card(card_file), card_file)
        with open(card_file, encoding="utf-8") as f:
            first = f.read()
        save_card(load_card(card_file), card_file)
        with open(card_file, encoding="utf-8") as f:
            assert f.read() == first

    def test_writes_camel_case_keys(self, card_file):
        save_card(load_card(card_file), card_file)
        with open(card_file, encoding="utf-8") as f:
            data = json.load(f)
        assert set(data) == {
            "cardNumber", "expiryDate", "pin", "cvc",
            "balance", "euroBalance", "dollarBalance", "transactionHistory",
        }
        assert data["balance"] == "500.0"

    def test_leaves_no_temp_files(self, tmp_path, card_file):
        save_card(load_card(card_file), card_file)
        assert os.listdir(tmp_path) == ["cardData.json"]

    def test_unwritable_path(self, tmp_path, card_file):
        card = load_card(card_file)
        with pytest.raises(PersistenceError):
            save_card(card, str(tmp_path / "no-such-dir" / "card.json"))

    def test_failed_save_keeps_previous_content(self, tmp_path, card_file, monkeypatch):
        with open(card_file, encoding="utf-8") as f:
            before = f.read()
        card = load_card(card_file)
        card.balance = Decimal("1")

        def broken_replace(src, dst):
            raise OSError("disk full")

        monkeypatch.setattr(os, "replace", broken_replace)
        with pytest.raises(PersistenceError, match="disk full"):
            save_card(card, card_file)

        with open(card_file, encoding="utf-8") as f:
            assert f.read() == before
        assert os.listdir(tmp_path) == ["cardData.json"]


def test_card_equality():
    a = Card("1", "01/30", "0000", "111", balance="10.50")
    b = Card("1", "01/30", "0000", "111", balance=Decimal("10.50"))
    assert a == b
    b.transaction_history.append("x")
    assert a != b
