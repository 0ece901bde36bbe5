"""Cart package: form codec, cart id cookie, default handlers, registry and dispatcher."""
from .cookies import (
    CART_COOKIE_NAME,
    cart_get_id_default,
    cart_set_id_default,
    get_cart_id,
    set_cart_id,
)
from .dispatcher import CartDispatcher, dispatch
from .form import INPUT_NAME, decode, encode, encode_form, validate_inputs
from .handlers import (
    cart_attributes_update_default,
    cart_buyer_identity_update_default,
    cart_create_default,
    cart_discount_codes_update_default,
    cart_get_default,
    cart_lines_add_default,
    cart_lines_remove_default,
    cart_lines_update_default,
    cart_metafield_delete_default,
    cart_metafields_set_default,
    cart_note_update_default,
    cart_selected_delivery_options_update_default,
    create_default_handlers,
)
from .models import (
    CartAction,
    CartActionInput,
    CartOptionalParams,
    CartQueryOptions,
    CartQueryResult,
    CookieOptions,
    UserError,
)
from .registry import CartRegistry, build_registry, default_action_handlers
from .service import CartHandler, create_cart_handler

__all__ = [
    "CART_COOKIE_NAME",
    "INPUT_NAME",
    "CartAction",
    "CartActionInput",
    "CartDispatcher",
    "CartHandler",
    "CartOptionalParams",
    "CartQueryOptions",
    "CartQueryResult",
    "CartRegistry",
    "CookieOptions",
    "UserError",
    "build_registry",
    "cart_attributes_update_default",
    "cart_buyer_identity_update_default",
    "cart_create_default",
    "cart_discount_codes_update_default",
    "cart_get_default",
    "cart_get_id_default",
    "cart_lines_add_default",
    "cart_lines_remove_default",
    "cart_lines_update_default",
    "cart_metafield_delete_default",
    "cart_metafields_set_default",
    "cart_note_update_default",
    "cart_selected_delivery_options_update_default",
    "cart_set_id_default",
    "create_cart_handler",
    "create_default_handlers",
    "decode",
    "default_action_handlers",
    "dispatch",
    "encode",
    "encode_form",
    "get_cart_id",
    "set_cart_id",
    "validate_inputs",
]
