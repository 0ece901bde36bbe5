"""Cart handler facade: one object per request bundling every cart operation."""
from typing import Any, Callable, Dict, Mapping, Optional, Union

from cartkit.logging import get_logger
from .cookies import cart_get_id_default, cart_set_id_default
from .dispatcher import CartDispatcher, ParamsLike
from .form import decode
from .handlers import (
    cart_get_default,
    create_default_handlers,
    OptionalParams,
)
from .models import (
    CartAction,
    CartActionInput,
    CartOptionalParams,
    CartQueryOptions,
    CartQueryResult,
    CookieOptions,
    FormData,
    GetCartId,
    ResponseHeaders,
    SetCartId,
)
from .registry import CartRegistry, build_registry, default_action_handlers

logger = get_logger(__name__)

# Methods that start a new cart (with the same payload) when there is none yet
CREATE_ON_DEMAND: Dict[CartAction, str] = {
    CartAction.LINES_ADD: "lines",
    CartAction.DISCOUNT_CODES_UPDATE: "discountCodes",
    CartAction.BUYER_IDENTITY_UPDATE: "buyerIdentity",
    CartAction.NOTE_UPDATE: "note",
    CartAction.ATTRIBUTES_UPDATE_INPUT: "attributes",
    CartAction.METAFIELDS_SET: "metafields",
}

METHOD_NAMES: Dict[CartAction, str] = {
    CartAction.CREATE: "create",
    CartAction.LINES_ADD: "add_lines",
    CartAction.LINES_UPDATE: "update_lines",
    CartAction.LINES_REMOVE: "remove_lines",
    CartAction.DISCOUNT_CODES_UPDATE: "update_discount_codes",
    CartAction.BUYER_IDENTITY_UPDATE: "update_buyer_identity",
    CartAction.NOTE_UPDATE: "update_note",
    CartAction.SELECTED_DELIVERY_OPTIONS_UPDATE: "update_selected_delivery_options",
    CartAction.ATTRIBUTES_UPDATE_INPUT: "update_attributes",
    CartAction.METAFIELDS_SET: "set_metafields",
    CartAction.METAFIELD_DELETE: "delete_metafield",
}


class CartHandler:
    """
    Cart operations for one request.

    Features:
    - Default methods for every cart action (add_lines, update_note, ...)
    - Create-on-demand for actions that make sense on an empty cart
    - Custom methods by attribute access; a custom method named like a
      default method replaces it, also for form dispatch
    """

    def __init__(
        self,
        options: CartQueryOptions,
        custom_methods: Optional[Mapping[str, Callable[..., Any]]] = None,
    ):
        self.options = options
        self._defaults = create_default_handlers(options)
        self._get = cart_get_default(options)
        self._custom: Dict[str, Callable[..., Any]] = dict(custom_methods or {})
        self._registry: Optional[CartRegistry] = None

    # ==================== CART ID ====================

    def get_cart_id(self) -> Optional[str]:
        return self.options.get_cart_id()

    def set_cart_id(self, cart_id: str, response_headers: ResponseHeaders) -> None:
        if self.options.set_cart_id is None:
            raise RuntimeError("CartHandler has no set_cart_id configured")
        self.options.set_cart_id(cart_id, response_headers)

    @staticmethod
    def get_form_input(form_data: FormData) -> CartActionInput:
        return decode(form_data)

    # ==================== DEFAULT METHODS ====================

    def _has_cart(self, optional_params: OptionalParams) -> bool:
        return bool(CartOptionalParams.coerce(optional_params).cart_id or self.get_cart_id())

    def _method(self, action: CartAction) -> Callable[..., Any]:
        """Default method for an action, with create-on-demand where it applies."""
        method = self._defaults[action]
        cart_input_key = CREATE_ON_DEMAND.get(action)
        if cart_input_key is None:
            return method

        create = self._defaults[CartAction.CREATE]

        async def method_or_create(value: Any, optional_params: OptionalParams = None) -> CartQueryResult:
            if self._has_cart(optional_params):
                return await method(value, optional_params)
            logger.info(f"No cart yet, creating one for {action.value}")
            return await create({cart_input_key: value}, optional_params)

        return method_or_create

    async def get(self, cart_input: Optional[Dict[str, Any]] = None) -> Optional[Dict[str, Any]]:
        """Current cart, or None when the visitor has no cart."""
        return await self._get(cart_input)

    async def create(self, cart_input: Optional[Dict[str, Any]] = None, optional_params: OptionalParams = None) -> CartQueryResult:
        return await self._call(CartAction.CREATE, cart_input, optional_params)

    async def add_lines(self, lines, optional_params: OptionalParams = None) -> CartQueryResult:
        return await self._call(CartAction.LINES_ADD, lines, optional_params)

    async def update_lines(self, lines, optional_params: OptionalParams = None) -> CartQueryResult:
        return await self._call(CartAction.LINES_UPDATE, lines, optional_params)

    async def remove_lines(self, line_ids, optional_params: OptionalParams = None) -> CartQueryResult:
        return await self._call(CartAction.LINES_REMOVE, line_ids, optional_params)

    async def update_discount_codes(self, discount_codes, optional_params: OptionalParams = None) -> CartQueryResult:
        return await self._call(CartAction.DISCOUNT_CODES_UPDATE, discount_codes, optional_params)

    async def update_buyer_identity(self, buyer_identity, optional_params: OptionalParams = None) -> CartQueryResult:
        return await self._call(CartAction.BUYER_IDENTITY_UPDATE, buyer_identity, optional_params)

    async def update_note(self, note: str, optional_params: OptionalParams = None) -> CartQueryResult:
        return await self._call(CartAction.NOTE_UPDATE, note, optional_params)

    async def update_selected_delivery_options(self, selected_delivery_options, optional_params: OptionalParams = None) -> CartQueryResult:
        return await self._call(
            CartAction.SELECTED_DELIVERY_OPTIONS_UPDATE, selected_delivery_options, optional_params
        )

    async def update_attributes(self, attributes, optional_params: OptionalParams = None) -> CartQueryResult:
        return await self._call(CartAction.ATTRIBUTES_UPDATE_INPUT, attributes, optional_params)

    async def set_metafields(self, metafields, optional_params: OptionalParams = None) -> CartQueryResult:
        return await self._call(CartAction.METAFIELDS_SET, metafields, optional_params)

    async def delete_metafield(self, key: str, optional_params: OptionalParams = None) -> CartQueryResult:
        return await self._call(CartAction.METAFIELD_DELETE, key, optional_params)

    async def _call(self, action: CartAction, value: Any, optional_params: OptionalParams) -> CartQueryResult:
        custom = self._custom.get(METHOD_NAMES[action])
        if custom is not None:
            return await custom(value, optional_params)
        return await self._method(action)(value, optional_params)

    # ==================== CUSTOM METHODS ====================

    def __getattr__(self, name: str) -> Callable[..., Any]:
        # Only reached for names not defined on the class
        custom = self.__dict__.get("_custom", {})
        if name in custom:
            return custom[name]
        raise AttributeError(f"'{type(self).__name__}' object has no attribute '{name}'")

    # ==================== FORM DISPATCH ====================

    @property
    def registry(self) -> CartRegistry:
        """Action registry: defaults plus custom methods keyed by action name."""
        if self._registry is None:
            defaults = default_action_handlers(
                {action: self._method(action) for action in CartAction}
            )
            # Custom methods named after a default method override that action and
            # get the same plain values as a direct call
            custom_actions = {}
            for action, method_name in METHOD_NAMES.items():
                if method_name in self._custom:
                    custom_actions[action.value] = default_action_handlers(
                        {action: self._custom[method_name]}, plain_values=True
                    )[action.value]
            custom_actions.update(
                {name: method for name, method in self._custom.items() if name not in METHOD_NAMES.values()}
            )
            self._registry = build_registry(defaults, custom_actions)
        return self._registry

    async def dispatch(
        self,
        form_data: FormData,
        response_headers: ResponseHeaders,
        optional_params: ParamsLike = None,
        request_params: ParamsLike = None,
    ) -> CartQueryResult:
        """Dispatch a submitted cart form and refresh the cart cookie."""
        dispatcher = CartDispatcher(self.registry, self.set_cart_id, self.get_cart_id)
        return await dispatcher.dispatch(form_data, response_headers, optional_params, request_params)


def create_cart_handler(
    storefront: Any,
    request_headers: Optional[Mapping[str, str]] = None,
    *,
    get_cart_id: Optional[GetCartId] = None,
    set_cart_id: Optional[SetCartId] = None,
    cart_fragment: Optional[str] = None,
    cookie_options: Union[CookieOptions, Mapping, None] = None,
    custom_methods: Optional[Mapping[str, Callable[..., Any]]] = None,
) -> CartHandler:
    """
    Build the cart handler for one request.

    Args:
        storefront: Storefront API client (query/mutate/i18n/cache_none)
        request_headers: Inbound headers; the cart cookie is read from them
        get_cart_id: Custom cart id getter (defaults to the cart cookie)
        set_cart_id: Custom cart id setter (defaults to the cart cookie)
        cart_fragment: Cart selection set for queries and mutations
        cookie_options: Attributes for the default cart cookie setter
        custom_methods: Extra or overriding methods

    Returns:
        CartHandler
    """
    if get_cart_id is None:
        if request_headers is None:
            raise ValueError("request_headers is required when get_cart_id is not provided")
        get_cart_id = cart_get_id_default(request_headers)
    if set_cart_id is None:
        set_cart_id = cart_set_id_default(cookie_options)

    options = CartQueryOptions(
        storefront=storefront,
        get_cart_id=get_cart_id,
        set_cart_id=set_cart_id,
        cart_fragment=cart_fragment,
    )
    return CartHandler(options, custom_methods)
