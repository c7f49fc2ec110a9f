"""Cart item model."""

from decimal import Decimal
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

ItemKind = Literal["equipment", "accessory"]


class CartItem(BaseModel):
    """A line in the quote cart.

    Items are immutable; every change produces a new item and a new cart
    tuple. Unknown fields (descriptions, image URLs) are kept as given.
    """

    model_config = ConfigDict(extra="allow", frozen=True)

    id: int
    kind: ItemKind
    name: str | None = None
    unit_price: Decimal | None = None
    quantity: int = Field(default=1, ge=1)

    @property
    def subtotal(self) -> Decimal:
        return (self.unit_price or Decimal(0)) * self.quantity
