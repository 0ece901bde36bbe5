"""
Default Cart Handlers

One factory per cart action. Each factory closes over CartQueryOptions and
returns an async handler `(primary_arg, optional_params=None)` that issues
exactly one Storefront API operation.

Every handler except `create` needs a cart id: the explicit
`optional_params.cart_id` wins over `options.get_cart_id()`, and neither
being available raises MissingCartId.
"""
from typing import Any, Awaitable, Callable, Dict, List, Optional, Sequence, Union

from cartkit.errors import MissingCartId
from cartkit.logging import get_logger, sanitize_id_for_logging
from . import queries
from .models import (
    CartAction,
    CartOptionalParams,
    CartQueryOptions,
    CartQueryResult,
    UserError,
    to_variables,
)

logger = get_logger(__name__)

OptionalParams = Union[CartOptionalParams, Dict[str, Any], None]
CartHandlerFunction = Callable[..., Awaitable[CartQueryResult]]

DEFAULT_NUM_CART_LINES = 100


def _resolve_cart_id(
    options: CartQueryOptions, params: CartOptionalParams, action: CartAction
) -> str:
    cart_id = params.cart_id or options.get_cart_id()
    if not cart_id:
        logger.info(f"Rejected {action.value}: no cart id")
        raise MissingCartId(action.value)
    return cart_id


def _i18n_variables(options: CartQueryOptions, params: CartOptionalParams) -> Dict[str, Any]:
    """Explicit country/language, else the storefront client's i18n defaults."""
    i18n = getattr(options.storefront, "i18n", None)
    return {
        "country": params.country or getattr(i18n, "country", None),
        "language": params.language or getattr(i18n, "language", None),
    }


def _format_result(
    data: Dict[str, Any],
    field: str,
    cart_id: Optional[str] = None,
    stub_cart: bool = False,
) -> CartQueryResult:
    payload = data.get(field) or {}
    errors = [UserError.from_dict(error) for error in payload.get("errors") or []]
    cart = payload.get("cart")
    if cart is None and stub_cart and cart_id:
        cart = {"id": cart_id}
    result = CartQueryResult(
        cart=cart, errors=errors, cart_id=(cart or {}).get("id") or cart_id
    )
    if errors:
        logger.info(
            f"{field} returned {len(errors)} user error(s) for cart "
            f"{sanitize_id_for_logging(result.cart_id)}"
        )
    return result


def _cart_mutation_handler(
    options: CartQueryOptions,
    action: CartAction,
    field: str,
    document: str,
    variable_name: str,
    prepare: Optional[Callable[[Any], Any]] = None,
) -> CartHandlerFunction:
    """Build a handler for a mutation shaped `field(cartId, <variable_name>)`."""
    async def handler(value: Any, optional_params: OptionalParams = None) -> CartQueryResult:
        params = CartOptionalParams.coerce(optional_params)
        cart_id = _resolve_cart_id(options, params, action)
        variables = {
            "cartId": cart_id,
            variable_name: prepare(value) if prepare else to_variables(value),
            **_i18n_variables(options, params),
        }
        data = await options.storefront.mutate(document, variables=variables)
        return _format_result(data, field, cart_id)

    handler.__name__ = field
    return handler


def cart_create_default(options: CartQueryOptions) -> CartHandlerFunction:
    """Create a cart; the only handler that does not need a cart id."""
    document = queries.cart_create_mutation(options.cart_fragment)

    async def create(cart_input: Optional[Dict[str, Any]] = None, optional_params: OptionalParams = None) -> CartQueryResult:
        params = CartOptionalParams.coerce(optional_params)
        variables = {"input": to_variables(cart_input or {}), **_i18n_variables(options, params)}
        data = await options.storefront.mutate(document, variables=variables)
        result = _format_result(data, "cartCreate")
        logger.info(f"Created cart {sanitize_id_for_logging(result.cart_id)}")
        return result

    return create


def cart_lines_add_default(options: CartQueryOptions) -> CartHandlerFunction:
    return _cart_mutation_handler(
        options, CartAction.LINES_ADD, "cartLinesAdd",
        queries.cart_lines_add_mutation(options.cart_fragment), "lines",
    )


def cart_lines_update_default(options: CartQueryOptions) -> CartHandlerFunction:
    return _cart_mutation_handler(
        options, CartAction.LINES_UPDATE, "cartLinesUpdate",
        queries.cart_lines_update_mutation(options.cart_fragment), "lines",
    )


def cart_lines_remove_default(options: CartQueryOptions) -> CartHandlerFunction:
    return _cart_mutation_handler(
        options, CartAction.LINES_REMOVE, "cartLinesRemove",
        queries.cart_lines_remove_mutation(options.cart_fragment), "lineIds",
        prepare=list,
    )


def _unique_codes(discount_codes: Sequence[str]) -> List[str]:
    # Same code twice is rejected by the backend
    return list(dict.fromkeys(discount_codes))


def cart_discount_codes_update_default(options: CartQueryOptions) -> CartHandlerFunction:
    return _cart_mutation_handler(
        options, CartAction.DISCOUNT_CODES_UPDATE, "cartDiscountCodesUpdate",
        queries.cart_discount_codes_update_mutation(options.cart_fragment), "discountCodes",
        prepare=_unique_codes,
    )


def cart_buyer_identity_update_default(options: CartQueryOptions) -> CartHandlerFunction:
    return _cart_mutation_handler(
        options, CartAction.BUYER_IDENTITY_UPDATE, "cartBuyerIdentityUpdate",
        queries.cart_buyer_identity_update_mutation(options.cart_fragment), "buyerIdentity",
    )


def cart_note_update_default(options: CartQueryOptions) -> CartHandlerFunction:
    return _cart_mutation_handler(
        options, CartAction.NOTE_UPDATE, "cartNoteUpdate",
        queries.cart_note_update_mutation(options.cart_fragment), "note",
    )


def cart_selected_delivery_options_update_default(options: CartQueryOptions) -> CartHandlerFunction:
    return _cart_mutation_handler(
        options, CartAction.SELECTED_DELIVERY_OPTIONS_UPDATE, "cartSelectedDeliveryOptionsUpdate",
        queries.cart_selected_delivery_options_update_mutation(options.cart_fragment),
        "selectedDeliveryOptions",
    )


def cart_attributes_update_default(options: CartQueryOptions) -> CartHandlerFunction:
    return _cart_mutation_handler(
        options, CartAction.ATTRIBUTES_UPDATE_INPUT, "cartAttributesUpdate",
        queries.cart_attributes_update_mutation(options.cart_fragment), "attributes",
    )


def cart_metafields_set_default(options: CartQueryOptions) -> CartHandlerFunction:
    """Set cart metafields; each metafield is owned by the resolved cart."""
    document = queries.cart_metafields_set_mutation()

    async def set_metafields(metafields: Sequence[Any], optional_params: OptionalParams = None) -> CartQueryResult:
        params = CartOptionalParams.coerce(optional_params)
        cart_id = _resolve_cart_id(options, params, CartAction.METAFIELDS_SET)
        variables = {
            "metafields": [{**to_variables(metafield), "ownerId": cart_id} for metafield in metafields],
            **_i18n_variables(options, params),
        }
        data = await options.storefront.mutate(document, variables=variables)
        return _format_result(data, "cartMetafieldsSet", cart_id, stub_cart=True)

    return set_metafields


def cart_metafield_delete_default(options: CartQueryOptions) -> CartHandlerFunction:
    """Delete one cart metafield by key."""
    document = queries.cart_metafield_delete_mutation()

    async def delete_metafield(key: str, optional_params: OptionalParams = None) -> CartQueryResult:
        params = CartOptionalParams.coerce(optional_params)
        cart_id = _resolve_cart_id(options, params, CartAction.METAFIELD_DELETE)
        variables = {
            "input": {"ownerId": cart_id, "key": key},
            **_i18n_variables(options, params),
        }
        data = await options.storefront.mutate(document, variables=variables)
        return _format_result(data, "cartMetafieldDelete", cart_id, stub_cart=True)

    return delete_metafield


def cart_get_default(options: CartQueryOptions) -> Callable[..., Awaitable[Optional[Dict[str, Any]]]]:
    """
    Read accessor for the current cart.

    No resolvable cart id is a normal state (the visitor has no cart yet),
    so it returns None instead of raising.
    """
    document = queries.cart_query(options.cart_fragment)

    async def get(cart_input: Optional[Dict[str, Any]] = None) -> Optional[Dict[str, Any]]:
        cart_input = dict(cart_input or {})
        params = CartOptionalParams.coerce(cart_input)
        cart_id = params.cart_id or options.get_cart_id()
        if not cart_id:
            return None

        variables = {
            "cartId": cart_id,
            "numCartLines": cart_input.get("num_cart_lines", cart_input.get("numCartLines", DEFAULT_NUM_CART_LINES)),
            **_i18n_variables(options, params),
        }
        data = await options.storefront.query(
            document, variables=variables, cache=options.storefront.cache_none()
        )
        return data.get("cart")

    return get


DEFAULT_HANDLER_FACTORIES: Dict[CartAction, Callable[[CartQueryOptions], CartHandlerFunction]] = {
    CartAction.CREATE: cart_create_default,
    CartAction.LINES_ADD: cart_lines_add_default,
    CartAction.LINES_UPDATE: cart_lines_update_default,
    CartAction.LINES_REMOVE: cart_lines_remove_default,
    CartAction.DISCOUNT_CODES_UPDATE: cart_discount_codes_update_default,
    CartAction.BUYER_IDENTITY_UPDATE: cart_buyer_identity_update_default,
    CartAction.NOTE_UPDATE: cart_note_update_default,
    CartAction.SELECTED_DELIVERY_OPTIONS_UPDATE: cart_selected_delivery_options_update_default,
    CartAction.ATTRIBUTES_UPDATE_INPUT: cart_attributes_update_default,
    CartAction.METAFIELDS_SET: cart_metafields_set_default,
    CartAction.METAFIELD_DELETE: cart_metafield_delete_default,
}


def create_default_handlers(options: CartQueryOptions) -> Dict[CartAction, CartHandlerFunction]:
    """Build every default handler for one set of query options."""
    return {action: factory(options) for action, factory in DEFAULT_HANDLER_FACTORIES.items()}
