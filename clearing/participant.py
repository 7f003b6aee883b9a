"""
Participant record for one batch-auction round.

Each participant is either a seller (``ask`` set) or a buyer (``bid`` set),
never both. ``quantity`` is what is still unfilled; the pipeline mutates
``quantity`` and ``balance`` during settlement and derives
``filled_quantity`` when the round is reconciled.

Records can be read from the JSON layout the ledger layer stores, which uses
``vno_id`` / ``vno_name`` / ``won_quantity`` as field names.
"""

import math
import numbers
from dataclasses import asdict, dataclass, replace
from enum import Enum
from typing import Any

from clearing.errors import MalformedOrderError


class Side(str, Enum):
    """Which side of the book a participant trades on."""

    SELL = "sell"
    BUY = "buy"


# Balances move by price x quantity, which must stay a finite float
MAX_PRICE = 1e12

# Ledger-layer field names accepted by from_dict()
_FIELD_ALIASES = {
    "vno_id": "id",
    "vno_name": "name",
    "won_quantity": "filled_quantity",
}


@dataclass
class Participant:
    """
    One participant's order and account state for a round.

    Attributes:
        id: Identity, unique and stable within a round
        name: Display name
        balance: Signed account balance (changed only by settlement)
        ask: Seller's minimum acceptable price, or None for buyers
        bid: Buyer's maximum acceptable price, or None for sellers
        quantity: Units still unfilled (non-negative)
        filled_quantity: Units matched this round (set by the reconciler)
    """

    id: int
    name: str
    balance: float
    ask: float | None = None
    bid: float | None = None
    quantity: int = 0
    filled_quantity: int = 0

    @property
    def side(self) -> Side:
        """Book side; call validate() first for malformed records."""
        return Side.SELL if self.ask is not None else Side.BUY

    @property
    def is_seller(self) -> bool:
        return self.ask is not None and self.bid is None

    @property
    def is_buyer(self) -> bool:
        return self.bid is not None and self.ask is None

    @property
    def price(self) -> float:
        """The ask for sellers, the bid for buyers."""
        if self.ask is not None:
            return self.ask
        if self.bid is not None:
            return self.bid
        raise MalformedOrderError(self.id, "neither ask nor bid is set")

    def validate(self) -> None:
        """
        Check that the record describes exactly one well-formed order.

        Raises:
            MalformedOrderError: If both or neither of ask/bid are set, the
                price is not a real number in [0, MAX_PRICE], or quantity is
                not a non-negative integer
        """
        if self.ask is not None and self.bid is not None:
            raise MalformedOrderError(self.id, "both ask and bid are set")
        if self.ask is None and self.bid is None:
            raise MalformedOrderError(self.id, "neither ask nor bid is set")

        price = self.price
        if isinstance(price, bool) or not isinstance(price, numbers.Real):
            raise MalformedOrderError(self.id, f"price must be a number, got {price!r}")
        if isinstance(self.quantity, bool) or not isinstance(self.quantity, numbers.Integral):
            raise MalformedOrderError(self.id, f"quantity must be an integer, got {self.quantity!r}")
        if not math.isfinite(price) or not 0 <= price <= MAX_PRICE:
            raise MalformedOrderError(self.id, f"invalid price {price!r}")
        if self.quantity < 0:
            raise MalformedOrderError(self.id, f"negative quantity {self.quantity}")

    def copy(self) -> "Participant":
        return replace(self)

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Participant":
        """
        Build a participant from a record dict.

        Accepts both this package's field names and the ledger layer's
        (``vno_id``, ``vno_name``, ``won_quantity``). Unknown keys are ignored.
        """
        fields: dict[str, Any] = {}
        for key, value in data.items():
            key = _FIELD_ALIASES.get(key, key)
            if key in cls.__dataclass_fields__:
                fields[key] = value

        if fields.get("filled_quantity") is None:
            fields["filled_quantity"] = 0
        if "name" not in fields and "id" in fields:
            fields["name"] = f"VNO{fields['id']}"

        return cls(**fields)
