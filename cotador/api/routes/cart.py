"""Quote cart endpoints."""

from fastapi import APIRouter, status

from cotador.api.deps import Cart
from cotador.api.schemas import (
    CartItemCreate,
    CartResponse,
    QuantityUpdate,
    RecalculateRequest,
    RecalculateResponse,
    TaxRegistrationUpdate,
)
from cotador.core.exceptions import NotFoundError
from cotador.services.cart import CartManager, ItemKind

router = APIRouter(prefix="/cart", tags=["Cart"])


def _cart_response(cart: CartManager, current_step: int = 1) -> CartResponse:
    return CartResponse(
        items=list(cart.items),
        total=cart.total,
        item_count=cart.item_count,
        has_equipment=cart.has_equipment,
        customer_has_tax_registration=cart.customer_has_tax_registration,
        pricing_region=cart.pricing_region(current_step).value,
    )


@router.get("", response_model=CartResponse, summary="Current cart")
async def get_cart(cart: Cart) -> CartResponse:
    return _cart_response(cart)


@router.post(
    "/items",
    response_model=CartResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Add a cart line",
)
async def add_item(payload: CartItemCreate, cart: Cart) -> CartResponse:
    """
    Add a crane or accessory.

    Adding equipment replaces the crane already in the cart.
    """
    cart.add(payload.model_dump(), payload.kind)
    return _cart_response(cart)


@router.patch(
    "/items/{kind}/{item_id}",
    response_model=CartResponse,
    summary="Change a line's quantity",
)
async def update_quantity(
    kind: ItemKind, item_id: int, payload: QuantityUpdate, cart: Cart
) -> CartResponse:
    if not any(i.id == item_id and i.kind == kind for i in cart.items):
        raise NotFoundError("Cart item")
    cart.set_quantity(item_id, kind, payload.quantity)
    return _cart_response(cart)


@router.delete(
    "/items/{kind}/{item_id}",
    response_model=CartResponse,
    summary="Remove a cart line",
)
async def remove_item(kind: ItemKind, item_id: int, cart: Cart) -> CartResponse:
    if not cart.remove(item_id, kind):
        raise NotFoundError("Cart item")
    return _cart_response(cart)


@router.delete("", response_model=CartResponse, summary="Empty the cart")
async def clear_cart(cart: Cart) -> CartResponse:
    cart.clear()
    return _cart_response(cart)


@router.put(
    "/tax-registration",
    response_model=CartResponse,
    summary="Set the customer's tax registration status",
)
async def set_tax_registration(payload: TaxRegistrationUpdate, cart: Cart) -> CartResponse:
    """
    Record whether the customer holds a state tax registration.

    Only changes prices for Rio Grande do Sul vendors, and only once the
    quote has moved past item selection; call ``/cart/recalculate`` to
    re-price. ``pricing_region`` in the response is resolved at
    ``current_step``.
    """
    cart.customer_has_tax_registration = payload.customer_has_tax_registration
    return _cart_response(cart, payload.current_step)


@router.post(
    "/recalculate",
    response_model=RecalculateResponse,
    summary="Re-price equipment for the vendor's region",
)
async def recalculate(payload: RecalculateRequest, cart: Cart) -> RecalculateResponse:
    updated = await cart.recalculate_prices(payload.current_step, payload.payment_context)
    base = _cart_response(cart, payload.current_step)
    return RecalculateResponse(**base.model_dump(), updated=updated)
