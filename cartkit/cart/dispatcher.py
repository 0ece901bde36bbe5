"""
Cart Action Dispatcher

Routes one submitted cart form to its handler:

    decode -> lookup -> validate -> invoke -> cart id write-back

Every step runs once and in order per request. Errors from decoding and
from handlers propagate unchanged; there is no retry here.
"""
from enum import Enum
from typing import Any, Dict, Optional, Union

from cartkit.errors import UnknownAction
from cartkit.logging import get_logger, sanitize_action_for_logging, sanitize_id_for_logging
from .form import decode, validate_inputs
from .models import (
    CartOptionalParams,
    CartQueryResult,
    FormData,
    ResponseHeaders,
    GetCartId,
    SetCartId,
)
from .registry import CartRegistry

logger = get_logger(__name__)


class DispatchState(str, Enum):
    AWAITING_DECODE = "awaiting-decode"
    DISPATCHED = "dispatched"


ParamsLike = Union[CartOptionalParams, Dict[str, Any], None]


class CartDispatcher:
    """
    Dispatches cart forms against a registry built once per process.

    Args:
        registry: Merged action handlers
        set_cart_id: Writes the resolved cart id into the response headers
        get_cart_id: Request cart id, the last fallback for the write-back
    """

    def __init__(
        self,
        registry: CartRegistry,
        set_cart_id: SetCartId,
        get_cart_id: Optional[GetCartId] = None,
    ):
        self.registry = registry
        self.set_cart_id = set_cart_id
        self.get_cart_id = get_cart_id

    async def dispatch(
        self,
        form_data: FormData,
        response_headers: ResponseHeaders,
        optional_params: ParamsLike = None,
        request_params: ParamsLike = None,
    ) -> CartQueryResult:
        """
        Decode the form, run the action's handler and refresh the cart cookie.

        Args:
            form_data: Submitted form
            response_headers: Headers of the response being assembled
            optional_params: Caller overrides (cart id, country, language)
            request_params: Values taken from elsewhere in the request;
                explicit caller values win over them

        Raises:
            MissingFormInput, MalformedFormInput: Bad form payload
            UnknownAction: No handler registered for the action
        """
        state = DispatchState.AWAITING_DECODE
        action_input = decode(form_data)

        handler = self.registry.get(action_input.action)
        if handler is None:
            logger.warning(
                f"Unknown cart action: {sanitize_action_for_logging(action_input.action)}"
            )
            raise UnknownAction(action_input.action)

        inputs: Any = action_input.inputs
        if self.registry.is_default(action_input.action):
            inputs = validate_inputs(action_input.action, action_input.inputs)

        params = CartOptionalParams.coerce(optional_params).merged_over(
            CartOptionalParams.coerce(request_params)
        )

        action_label = sanitize_action_for_logging(action_input.action)
        state = DispatchState.DISPATCHED
        logger.debug(f"Cart action {action_label} {state.value}")
        result = await handler(inputs, params)
        if isinstance(result, dict):
            result = CartQueryResult.from_dict(result)

        cart_id = self._resolve_cart_id(result, params)
        if cart_id:
            self.set_cart_id(cart_id, response_headers)
            if result.cart_id is None:
                result.cart_id = cart_id
        else:
            logger.info(f"Cart action {action_label} resolved no cart id; cookie untouched")

        logger.info(
            f"Cart action {action_label} done for cart {sanitize_id_for_logging(cart_id)}"
            f" ({len(result.errors)} user error(s))"
        )
        return result

    def _resolve_cart_id(self, result: CartQueryResult, params: CartOptionalParams) -> Optional[str]:
        if result.cart_id:
            return result.cart_id
        if result.cart and result.cart.get("id"):
            return result.cart["id"]
        if params.cart_id:
            return params.cart_id
        return self.get_cart_id() if self.get_cart_id else None


async def dispatch(
    form_data: FormData,
    registry: CartRegistry,
    set_cart_id: SetCartId,
    response_headers: ResponseHeaders,
    optional_params: ParamsLike = None,
) -> CartQueryResult:
    """Functional form of `CartDispatcher.dispatch`."""
    return await CartDispatcher(registry, set_cart_id).dispatch(
        form_data, response_headers, optional_params
    )
