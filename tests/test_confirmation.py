"""Tests for confirmation descriptors."""

from __future__ import annotations

import pytest

from steamguard_linker.confirmation import Confirmation, ConfirmationType, confirmation_type_from_int


@pytest.mark.parametrize(
    "value, expected",
    [
        (1, ConfirmationType.GENERIC),
        (2, ConfirmationType.TRADE),
        (3, ConfirmationType.MARKET_SELL_TRANSACTION),
        (0, ConfirmationType.UNKNOWN),
        (4, ConfirmationType.UNKNOWN),
        (999, ConfirmationType.UNKNOWN),
        (-1, ConfirmationType.UNKNOWN),
    ],
)
def test_type_mapping_is_total(value, expected):
    assert confirmation_type_from_int(value) is expected


def test_trade_confirmation():
    confirmation = Confirmation(id=1001, key=55, int_type=2, creator=4242)

    assert confirmation.conf_type is ConfirmationType.TRADE
    assert confirmation.creator == 4242


def test_unknown_type_never_fails():
    confirmation = Confirmation(id=1, key=2, int_type=999, creator=3)

    assert confirmation.conf_type is ConfirmationType.UNKNOWN
    assert confirmation.model_dump()["conf_type"] == ConfirmationType.UNKNOWN
