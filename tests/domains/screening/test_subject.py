"""Tests for subject parsing and wallet detection."""

import pytest

from src.domains.screening.errors import InvalidSubjectError
from src.domains.screening.models import SubjectKind
from src.domains.screening.subject import detect_wallet, parse_subject

ETH = "0x" + "ab12" * 10


class TestDetectWallet:
    @pytest.mark.parametrize(
        "address,chain",
        [
            (ETH, "ETH"),
            ("bc1qar0srrr7xfkvy5l643lydnw9re59gtzzwf5mdq", "BTC"),
            ("1A1zP1eP5QGefi2DMPTfTL5SLmv7DivfNa", "BTC"),
            ("TQn9Y2khEsLJW1ChVWFMSMeRDow5KcbLSE", "TRON"),
            ("rHb9CJAWyB4rj91VRWn96DkukG4bwdtyTh", "XRP"),
            ("7EcDhSYGxXyscszYEp35KHN8vvw3svAuLKTzXwCFLtV", "SOL"),
        ],
    )
    def test_known_formats(self, address, chain):
        assert detect_wallet(address) == (address, chain)

    def test_surrounding_whitespace(self):
        assert detect_wallet(f"  {ETH} ") == (ETH, "ETH")

    @pytest.mark.parametrize("text", ["Jane Doe", "0x1234", "Acme Trading LLC", ""])
    def test_not_a_wallet(self, text):
        assert detect_wallet(text) is None


class TestParseSubject:
    def test_name_defaults_to_individual(self):
        subject = parse_subject("  Jane   Doe ")
        assert subject.kind == SubjectKind.INDIVIDUAL
        assert subject.name == "Jane Doe"
        assert subject.query == "Jane Doe"

    def test_wallet_detected(self):
        subject = parse_subject(ETH)
        assert subject.kind == SubjectKind.WALLET
        assert subject.wallet_address == ETH
        assert subject.chain == "ETH"
        assert subject.is_wallet

    def test_kind_is_case_insensitive(self):
        assert parse_subject("Acme Holdings", "entity").kind == SubjectKind.ENTITY

    def test_explicit_name_kind_skips_wallet_detection(self):
        subject = parse_subject(ETH, SubjectKind.INDIVIDUAL)
        assert subject.kind == SubjectKind.INDIVIDUAL
        assert subject.name == ETH

    def test_explicit_wallet_must_parse(self):
        with pytest.raises(InvalidSubjectError):
            parse_subject("Jane Doe", SubjectKind.WALLET)

    @pytest.mark.parametrize("query", ["", "   ", "Jane\x00Doe", "x" * 513, None, 42])
    def test_invalid(self, query):
        with pytest.raises(InvalidSubjectError):
            parse_subject(query)

    def test_unknown_kind(self):
        with pytest.raises(InvalidSubjectError):
            parse_subject("Jane Doe", "robot")

    def test_invalid_subject_is_a_value_error(self):
        with pytest.raises(ValueError):
            parse_subject("")
