"""Cart consistency manager.

Holds the quote cart, persists it on every change and re-prices equipment
lines when the pricing region changes. Re-pricing reads a snapshot, awaits
one lookup per line and commits a single full replacement, so an
interleaved add or remove is either kept or overwritten as a whole, never
half applied.
"""

from collections.abc import Mapping
from decimal import Decimal
from typing import Any, Protocol

from pydantic import ValidationError

from cotador.core.logging import get_logger
from cotador.db.models import VendorRecord
from cotador.services.cart.models import CartItem, ItemKind
from cotador.services.cart.storage import CartStorage
from cotador.services.regions import PricingRegion, is_dual_tax_region, normalize_region

logger = get_logger(__name__)

CART_STORAGE_KEY = "carrinho"

# Step of the quote flow from which the customer's tax registration answer
# is known and affects pricing
TAX_REGISTRATION_STEP = 2


class PriceLookup(Protocol):
    async def get_region_price(self, item_id: int, region: str) -> Decimal | None: ...


class CartManager:
    """Quote cart of a single vendor."""

    def __init__(
        self,
        prices: PriceLookup,
        storage: CartStorage,
        *,
        vendor_region: str | None = None,
        storage_key: str = CART_STORAGE_KEY,
    ) -> None:
        self._prices = prices
        self._storage = storage
        self._storage_key = storage_key
        self.vendor_region = vendor_region
        self.customer_has_tax_registration = True
        self._recalculating = False
        self._items: tuple[CartItem, ...] = self._restore()

    def _restore(self) -> tuple[CartItem, ...]:
        items: list[CartItem] = []
        for raw in self._storage.load(self._storage_key):
            try:
                items.append(CartItem.model_validate(raw))
            except ValidationError as e:
                logger.warning(
                    "Dropping unreadable cart item",
                    key=self._storage_key,
                    errors=e.error_count(),
                )
        return tuple(items)

    def _commit(self, items: tuple[CartItem, ...]) -> None:
        self._items = items
        self._storage.save(
            self._storage_key, [item.model_dump(mode="json") for item in items]
        )

    @property
    def items(self) -> tuple[CartItem, ...]:
        """Current cart; the same object until the cart changes."""
        return self._items

    @property
    def is_recalculating(self) -> bool:
        return self._recalculating

    # ========== Mutations ==========

    def add(self, item: CartItem | Mapping[str, Any], kind: ItemKind) -> CartItem:
        """Append a line.

        A cart holds at most one equipment line: adding equipment replaces
        the current one. Accessories are appended unconditionally.
        """
        if isinstance(item, CartItem):
            line = item.model_copy(update={"kind": kind})
        else:
            line = CartItem.model_validate({**item, "kind": kind})
        kept = self._items
        if kind == "equipment":
            kept = tuple(i for i in kept if i.kind != "equipment")
        self._commit((*kept, line))
        logger.info("Cart item added", item_id=line.id, kind=kind, items=len(self._items))
        return line

    def remove(self, item_id: int, kind: ItemKind) -> bool:
        """Drop every line matching id and kind. Returns False if none did."""
        kept = tuple(i for i in self._items if not (i.id == item_id and i.kind == kind))
        if len(kept) == len(self._items):
            return False
        self._commit(kept)
        logger.info("Cart item removed", item_id=item_id, kind=kind)
        return True

    def set_quantity(self, item_id: int, kind: ItemKind, quantity: int) -> CartItem | None:
        """Change the quantity of the first matching line; zero or less removes it."""
        if quantity <= 0:
            self.remove(item_id, kind)
            return None
        for index, line in enumerate(self._items):
            if line.id == item_id and line.kind == kind:
                updated = line.model_copy(update={"quantity": quantity})
                self._commit((*self._items[:index], updated, *self._items[index + 1:]))
                return updated
        return None

    def clear(self) -> None:
        self._items = ()
        self._storage.delete(self._storage_key)
        logger.info("Cart cleared", key=self._storage_key)

    # ========== Regional pricing ==========

    def effective_tax_registration(self, current_step: int) -> bool:
        """Registration flag used for pricing at a given quote step.

        Before the customer has answered, and for vendors outside Rio Grande
        do Sul, pricing assumes the customer is registered.
        """
        if current_step >= TAX_REGISTRATION_STEP and is_dual_tax_region(self.vendor_region):
            return self.customer_has_tax_registration
        return True

    def pricing_region(self, current_step: int) -> PricingRegion:
        return normalize_region(self.vendor_region, self.effective_tax_registration(current_step))

    async def recalculate_prices(
        self,
        current_step: int = 1,
        payment_context: Mapping[str, Any] | None = None,
    ) -> bool:
        """Re-price equipment lines for the current region.

        Returns True when a new price list was committed. Nothing happens when
        the cart is empty, the vendor region is unknown or another pass is in
        flight. A failed or empty lookup keeps the line's current price.
        """
        if not self._items or not self.vendor_region:
            return False
        if self._recalculating:
            logger.debug("Price recalculation already running")
            return False

        self._recalculating = True
        try:
            region = self.pricing_region(current_step)
            snapshot = self._items
            logger.debug(
                "Recalculating cart prices",
                region=region.value,
                step=current_step,
                items=len(snapshot),
                has_payment_context=payment_context is not None,
            )

            updated: list[CartItem] = []
            changed = False
            for line in snapshot:
                if line.kind != "equipment":
                    updated.append(line)
                    continue
                try:
                    price = await self._prices.get_region_price(line.id, region.value)
                except Exception as e:
                    logger.warning(
                        "Price lookup failed, keeping current price",
                        item_id=line.id,
                        region=region.value,
                        error=str(e),
                    )
                    updated.append(line)
                    continue

                if price is None or price == line.unit_price:
                    updated.append(line)
                    continue

                logger.info(
                    "Cart price updated",
                    item_id=line.id,
                    region=region.value,
                    old_price=str(line.unit_price),
                    new_price=str(price),
                )
                updated.append(line.model_copy(update={"unit_price": price}))
                changed = True

            if changed:
                self._commit(tuple(updated))
            return changed
        finally:
            self._recalculating = False

    # ========== Views ==========

    @property
    def equipment(self) -> list[CartItem]:
        return [i for i in self._items if i.kind == "equipment"]

    @property
    def accessories(self) -> list[CartItem]:
        return [i for i in self._items if i.kind == "accessory"]

    @property
    def has_equipment(self) -> bool:
        return any(i.kind == "equipment" for i in self._items)

    @property
    def item_count(self) -> int:
        """Sum of quantities."""
        return sum(i.quantity for i in self._items)

    @property
    def total(self) -> Decimal:
        """Sum of unit price times quantity; unpriced lines count as zero."""
        return sum((i.subtotal for i in self._items), Decimal(0))


class CartRegistry:
    """One cart manager per vendor, created on first use."""

    def __init__(self, prices: PriceLookup, storage: CartStorage) -> None:
        self._prices = prices
        self._storage = storage
        self._carts: dict[int, CartManager] = {}

    def get(self, vendor: VendorRecord) -> CartManager:
        cart = self._carts.get(vendor.id)
        if cart is None:
            cart = CartManager(
                self._prices,
                self._storage,
                vendor_region=vendor.region,
                storage_key=f"{CART_STORAGE_KEY}:{vendor.id}",
            )
            self._carts[vendor.id] = cart
        else:
            cart.vendor_region = vendor.region
        return cart

    def __len__(self) -> int:
        return len(self._carts)
