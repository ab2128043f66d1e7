from decimal import Decimal

import pytest

from conftest import OTHER_SENDER, SENDER, tx_payload
from tron_raffle.errors import (
    AddressMismatch,
    AmountMismatch,
    DuplicateTransaction,
    OracleError,
    TransactionInvalid,
)
from tron_raffle.ledger import ParticipantLedger
from tron_raffle.participation import (
    ParticipationClaim,
    format_amount,
    match_claim,
    parse_amount,
    validate_participation,
)
from tron_raffle.trongrid import VerifiedTransaction


def claim(amount="7.034", address=SENDER, txid="tx1"):
    return ParticipationClaim(
        entry_code="A1B2C3", txid=txid, address=address, amount=Decimal(amount)
    )


def verified(amount="7.034", sender=SENDER, txid="tx1"):
    return VerifiedTransaction(
        txid=txid, success=True, amount=Decimal(amount), sender=sender
    )


class TestMatchClaim:
    def test_accepts_matching_claim(self):
        p = match_claim(claim(), verified())
        assert p.validated is True
        assert p.txid == "tx1"
        assert p.address == SENDER
        assert p.amount == Decimal("7.034")
        assert p.entry_code == "A1B2C3"

    def test_trailing_zero_is_equal(self):
        assert match_claim(claim("7.0340"), verified("7.034")).validated

    def test_sub_milli_difference_rounds_together(self):
        assert match_claim(claim("7.034"), verified("7.0344")).validated

    def test_third_decimal_differs(self):
        with pytest.raises(AmountMismatch):
            match_claim(claim("7.035"), verified("7.034"))

    def test_half_rounds_up(self):
        with pytest.raises(AmountMismatch):
            match_claim(claim("7.034"), verified("7.0345"))

    def test_amount_checked_regardless_of_address(self):
        with pytest.raises(AmountMismatch):
            match_claim(claim("7.035", address=OTHER_SENDER), verified("7.034"))

    def test_address_one_char_off(self):
        with pytest.raises(AddressMismatch):
            match_claim(claim(address=OTHER_SENDER), verified())

    def test_address_is_case_sensitive(self):
        with pytest.raises(AddressMismatch):
            match_claim(claim(address=SENDER.upper()), verified())

    def test_huge_claimed_amount_is_a_mismatch(self):
        with pytest.raises(AmountMismatch):
            match_claim(claim("1e30"), verified("7.034"))

    def test_huge_verified_amount_is_a_mismatch(self):
        with pytest.raises(AmountMismatch):
            match_claim(claim("7.034"), verified("1e40"))

    def test_unsuccessful_transaction_is_rejected(self):
        unsuccessful = VerifiedTransaction(
            txid="tx1", success=False, amount=Decimal("7.034"), sender=SENDER
        )
        with pytest.raises(TransactionInvalid):
            match_claim(claim(), unsuccessful)


class TestAmounts:
    def test_format_amount(self):
        assert format_amount(Decimal("7")) == "7.000"
        assert format_amount(Decimal("7.0345")) == "7.035"

    def test_parse_amount(self):
        assert parse_amount(" 7.034 ") == Decimal("7.034")

    def test_parse_amount_accepts_large_in_range_value(self):
        assert parse_amount("1000000000000") == Decimal("1000000000000")

    @pytest.mark.parametrize(
        "text",
        ["abc", "", "NaN", "Infinity", "-7.034", "1e30", "99999999999999999999999999.5"],
    )
    def test_parse_amount_rejects(self, text):
        with pytest.raises(ValueError):
            parse_amount(text)


class TestValidateParticipation:
    @pytest.fixture
    def ledger(self, tmp_path):
        return ParticipantLedger(str(tmp_path / "participants.db"))

    @pytest.fixture
    def events(self):
        return []

    @pytest.fixture
    def publish(self, events):
        return lambda event, participant: events.append((event, participant))

    def test_records_and_broadcasts(self, tron, ledger, events, publish):
        tron.add("tx1", tx_payload(amount=7_034_000))
        p = validate_participation(claim(), tron.client(), ledger, publish)

        assert ledger.validated_participants() == [p]
        assert events == [("new-participation", p)]

    def test_mismatch_leaves_nothing_behind(self, tron, ledger, events, publish):
        tron.add("tx1", tx_payload(amount=7_034_000))
        with pytest.raises(AmountMismatch):
            validate_participation(claim("7.035"), tron.client(), ledger, publish)

        assert ledger.validated_participants() == []
        assert events == []

    def test_oracle_failure_leaves_nothing_behind(self, tron, ledger, events, publish):
        tron.add("tx1", {}, status_code=503)
        with pytest.raises(OracleError):
            validate_participation(claim(), tron.client(), ledger, publish)

        assert ledger.validated_participants() == []
        assert events == []

    def test_duplicate_txid_rejected(self, tron, ledger, events, publish):
        tron.add("tx1", tx_payload())
        validate_participation(claim(), tron.client(), ledger, publish)
        with pytest.raises(DuplicateTransaction):
            validate_participation(claim(), tron.client(), ledger, publish)

        assert len(ledger.validated_participants()) == 1
        assert len(events) == 1

    def test_broadcast_failure_does_not_fail_validation(self, tron, ledger):
        def broken(event, participant):
            raise ConnectionError("no subscribers")

        tron.add("tx1", tx_payload())
        p = validate_participation(claim(), tron.client(), ledger, broken)
        assert ledger.validated_participants() == [p]
