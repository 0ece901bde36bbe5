"""
Cart Router

A single form endpoint for every cart mutation, plus the cart read.

Response format:
- 200 with {cart, errors, cart_id}; `errors` holds backend user errors
- 4xx for bad forms, unknown actions and a missing cart id
- 502 when the Storefront API fails
"""
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Request, Response

from cartkit.cart import CartHandler, CartOptionalParams
from cartkit.errors import CartError
from cartkit.logging import get_logger
from .deps import get_cart_handler

logger = get_logger(__name__)

router = APIRouter(tags=["cart"])


def _http_error(e: CartError) -> HTTPException:
    return HTTPException(status_code=e.status_code, detail=e.to_dict())


@router.get("/cart")
async def get_cart(cart: CartHandler = Depends(get_cart_handler)):
    """Current cart; `cart` is null when the visitor has none."""
    try:
        return {"cart": await cart.get()}
    except CartError as e:
        logger.error(f"Failed to get cart: {e.message}")
        raise _http_error(e)


@router.post("/cart")
async def cart_action(
    request: Request,
    response: Response,
    country: Optional[str] = None,
    language: Optional[str] = None,
    cart: CartHandler = Depends(get_cart_handler),
):
    """Run the cart action submitted in the `cartFormInput` form field."""
    form_data = await request.form()
    request_params = CartOptionalParams(
        country=country.upper() if country else None,
        language=language.upper() if language else None,
    )

    try:
        result = await cart.dispatch(form_data, response.headers, request_params=request_params)
    except CartError as e:
        if e.status_code >= 500:
            logger.error(f"Cart action failed: {e.message}")
        raise _http_error(e)

    return result.to_dict()
