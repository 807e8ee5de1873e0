import pytest

from launchpad_core.common.enums import Badge, EventType, OrderSide, WithdrawalAsset


class TestOrderSide:
    @pytest.mark.parametrize(
        "side_str, expected",
        [
            ("BUY", OrderSide.BUY),
            ("buy", OrderSide.BUY),
            ("Sell", OrderSide.SELL),
        ]
    )
    def test_from_str(self, side_str, expected):
        assert OrderSide.from_str(side_str) == expected

    def test_from_str_invalid(self):
        with pytest.raises(NotImplementedError):
            OrderSide.from_str("HOLD")

    def test_str_and_repr(self):
        assert str(OrderSide.BUY) == "BUY"
        assert repr(OrderSide.SELL) == "SELL"


class TestBadge:
    @pytest.mark.parametrize("badge", list(Badge))
    def test_from_str_round_trip(self, badge):
        assert Badge.from_str(badge.name.lower()) == badge

    def test_from_str_invalid(self):
        with pytest.raises(NotImplementedError):
            Badge.from_str("VERIFIED")


def test_event_type_str():
    assert str(EventType.TRADE) == "TRADE"
    assert repr(EventType.GRADUATED) == "GRADUATED"


def test_withdrawal_asset_str():
    assert str(WithdrawalAsset.RESERVE) == "RESERVE"
    assert repr(WithdrawalAsset.TOKENS) == "TOKENS"
