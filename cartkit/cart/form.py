"""
Cart Form Codec

A cart action travels as one form field, `cartFormInput`, whose value is
the JSON object `{"action": ..., **inputs}`. The inputs are flattened next
to the action on the wire and unwrapped again on decode.
"""
import json
from typing import Any, Dict, Optional

from pydantic import BaseModel, ValidationError

from cartkit.errors import MalformedFormInput, MissingFormInput
from cartkit.logging import get_logger, sanitize_string_for_logging
from .models import ACTION_INPUT_MODELS, CartAction, CartActionInput, FormData

logger = get_logger(__name__)

INPUT_NAME = "cartFormInput"
ACTION_KEY = "action"


def encode(action_input: CartActionInput) -> str:
    """
    Serialize an action and its inputs into the form field value.

    Raises:
        MalformedFormInput: If the action is empty or an input is named "action"
    """
    if not action_input.action:
        raise MalformedFormInput("action must be a non-empty string")
    if ACTION_KEY in action_input.inputs:
        raise MalformedFormInput(f"inputs cannot contain the reserved key '{ACTION_KEY}'")

    payload = {ACTION_KEY: action_input.action, **action_input.inputs}
    return json.dumps(payload, ensure_ascii=False)


def encode_form(action_input: CartActionInput) -> Dict[str, str]:
    """Build the form body carrying a cart action."""
    return {INPUT_NAME: encode(action_input)}


def _has_field(form_data: FormData, key: str) -> bool:
    has = getattr(form_data, "has", None)
    if callable(has):
        return bool(has(key))
    try:
        return key in form_data  # type: ignore[operator]
    except TypeError:
        return form_data.get(key) is not None


def decode(form_data: FormData) -> CartActionInput:
    """
    Read the cart action from submitted form data.

    Args:
        form_data: Any mapping-like form (starlette FormData, dict, ...)

    Returns:
        CartActionInput with every property except `action` as inputs

    Raises:
        MissingFormInput: If the cart form field is absent
        MalformedFormInput: If the value is not a JSON object with an action
    """
    if not _has_field(form_data, INPUT_NAME):
        raise MissingFormInput(INPUT_NAME)

    raw = form_data.get(INPUT_NAME)
    if raw is None or (isinstance(raw, (str, bytes)) and not raw):
        raise MissingFormInput(INPUT_NAME)
    if not isinstance(raw, (str, bytes)):
        # e.g. a file upload submitted under the cart field
        raise MalformedFormInput("expected a string value")

    try:
        payload = json.loads(raw)
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        logger.warning(
            f"Invalid JSON in {INPUT_NAME}: {sanitize_string_for_logging(str(raw))}"
        )
        raise MalformedFormInput(f"invalid JSON: {e}")

    if not isinstance(payload, dict):
        raise MalformedFormInput("expected a JSON object")

    action = payload.pop(ACTION_KEY, None)
    if not isinstance(action, str) or not action:
        raise MalformedFormInput("missing 'action' property")

    return CartActionInput(action=action, inputs=payload)


def validate_inputs(action: str, inputs: Dict[str, Any]) -> Optional[BaseModel]:
    """
    Validate the inputs of a default action against its payload model.

    Returns:
        The validated payload, or None for custom actions (left unvalidated)

    Raises:
        MalformedFormInput: If the inputs do not match the action's shape
    """
    default_action = CartAction.parse(action)
    if default_action is None:
        return None

    model = ACTION_INPUT_MODELS[default_action]
    try:
        return model.model_validate(inputs)
    except ValidationError as e:
        logger.info(f"Rejected {action} inputs: {e.error_count()} validation error(s)")
        raise MalformedFormInput(
            f"invalid inputs for {action}",
            details=e.errors(include_url=False, include_context=False),
        )
