"""
Cart Handler Registry

Merges the default action handlers with caller-supplied custom handlers.
A custom handler registered under a default action's name replaces the
default entirely; any other custom name adds a new action.
"""
from collections.abc import Mapping
from typing import Any, Callable, Dict, Iterator, Optional, Union

from pydantic import BaseModel

from cartkit.logging import get_logger
from .form import validate_inputs
from .models import CartAction, CartOptionalParams, CartQueryResult, Handler, to_variables

logger = get_logger(__name__)

# Payload attribute holding each default handler's primary argument
ACTION_PRIMARY_INPUT: Dict[CartAction, str] = {
    CartAction.CREATE: "input",
    CartAction.LINES_ADD: "lines",
    CartAction.LINES_UPDATE: "lines",
    CartAction.LINES_REMOVE: "line_ids",
    CartAction.NOTE_UPDATE: "note",
    CartAction.BUYER_IDENTITY_UPDATE: "buyer_identity",
    CartAction.DISCOUNT_CODES_UPDATE: "discount_codes",
    CartAction.SELECTED_DELIVERY_OPTIONS_UPDATE: "selected_delivery_options",
    CartAction.ATTRIBUTES_UPDATE_INPUT: "attributes",
    CartAction.METAFIELDS_SET: "metafields",
    CartAction.METAFIELD_DELETE: "key",
}


def _action_key(name: Union[CartAction, str]) -> str:
    return name.value if isinstance(name, CartAction) else name


def as_action_handler(
    action: CartAction, method: Callable[..., Any], plain_values: bool = False
) -> Handler:
    """
    Adapt a `(primary_arg, optional_params)` cart method to the registry shape.

    Args:
        action: Default action the method implements
        method: Factory handler or custom method
        plain_values: Pass the primary argument as camelCase dicts and lists
            instead of payload models (for custom methods)
    """
    attribute = ACTION_PRIMARY_INPUT[action]

    async def handler(
        inputs: Union[BaseModel, Dict[str, Any]],
        optional_params: Optional[CartOptionalParams] = None,
    ) -> CartQueryResult:
        payload = inputs if isinstance(inputs, BaseModel) else validate_inputs(action.value, inputs)
        value = getattr(payload, attribute)
        return await method(to_variables(value) if plain_values else value, optional_params)

    handler.__name__ = f"{action.value}_handler"
    handler.cart_action = action
    return handler


def is_action_handler(handler: Any) -> bool:
    """True for handlers produced by `as_action_handler`."""
    return isinstance(getattr(handler, "cart_action", None), CartAction)


def default_action_handlers(methods: Mapping, plain_values: bool = False) -> Dict[str, Handler]:
    """Adapt a CartAction -> cart method mapping into registry handlers."""
    return {
        _action_key(action): as_action_handler(CartAction(_action_key(action)), method, plain_values)
        for action, method in methods.items()
    }


def _adapt_default(name: str, handler: Handler) -> Handler:
    # Factory handlers take the primary argument; the registry passes the payload
    action = CartAction.parse(name)
    if action is None or is_action_handler(handler):
        return handler
    return as_action_handler(action, handler)


class CartRegistry(Mapping):
    """Read-only action name -> handler mapping built by `build_registry`."""

    def __init__(self, defaults: Mapping, custom: Optional[Mapping] = None):
        self._defaults: Dict[str, Handler] = {
            _action_key(name): _adapt_default(_action_key(name), handler)
            for name, handler in defaults.items()
        }
        self._custom: Dict[str, Handler] = {
            _action_key(name): handler for name, handler in (custom or {}).items()
        }
        for name in self._custom:
            if not name:
                raise ValueError("Custom cart action names must be non-empty strings")
        self._handlers: Dict[str, Handler] = {**self._defaults, **self._custom}

    def __getitem__(self, name: str) -> Handler:
        return self._handlers[_action_key(name)]

    def __iter__(self) -> Iterator[str]:
        return iter(self._handlers)

    def __len__(self) -> int:
        return len(self._handlers)

    def __repr__(self) -> str:
        return f"CartRegistry(actions={sorted(self._handlers)})"

    def is_default(self, name: str) -> bool:
        """True when `name` resolves to a default handler that was not overridden."""
        key = _action_key(name)
        return key in self._defaults and key not in self._custom

    def is_overridden(self, name: str) -> bool:
        key = _action_key(name)
        return key in self._defaults and key in self._custom

    @property
    def custom_actions(self) -> list[str]:
        """Actions that exist only because a caller registered them."""
        return [name for name in self._custom if name not in self._defaults]


def build_registry(defaults: Mapping, custom: Optional[Mapping] = None) -> CartRegistry:
    """
    Merge default and custom handlers.

    Args:
        defaults: Default action handlers, keyed by CartAction or its value;
            factory handlers (`create_default_handlers`) are adapted here
        custom: Caller handlers; they win over defaults sharing their name

    Returns:
        CartRegistry (inputs are never mutated)
    """
    registry = CartRegistry(defaults, custom)
    overridden = [name for name in registry if registry.is_overridden(name)]
    if overridden or registry.custom_actions:
        logger.debug(
            f"Cart registry: overridden={overridden}, custom={registry.custom_actions}"
        )
    return registry
