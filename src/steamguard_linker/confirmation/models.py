"""Mobile confirmation descriptors."""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, computed_field


class ConfirmationType(str, Enum):
    """Kinds of confirmation the mobile app can be asked to accept."""

    GENERIC = "generic"
    TRADE = "trade"
    MARKET_SELL_TRANSACTION = "market_sell_transaction"
    UNKNOWN = "unknown"


_CONFIRMATION_TYPES = {
    1: ConfirmationType.GENERIC,
    2: ConfirmationType.TRADE,
    3: ConfirmationType.MARKET_SELL_TRANSACTION,
}


def confirmation_type_from_int(value: int) -> ConfirmationType:
    """Map the raw data-type attribute to a ConfirmationType.

    Not every type Steam sends is known, so anything unmapped is UNKNOWN.
    """
    return _CONFIRMATION_TYPES.get(value, ConfirmationType.UNKNOWN)


class Confirmation(BaseModel):
    """A pending confirmation on the account."""

    model_config = ConfigDict(frozen=True)

    id: int = Field(..., ge=0, description="ID of this confirmation")
    key: int = Field(..., ge=0, description="Key used to act upon this confirmation")
    int_type: int = Field(..., description="Raw data-type attribute returned for this confirmation")
    creator: int = Field(..., ge=0, description="Trade offer or market transaction that created it")

    @computed_field  # type: ignore[prop-decorator]
    @property
    def conf_type(self) -> ConfirmationType:
        return confirmation_type_from_int(self.int_type)
