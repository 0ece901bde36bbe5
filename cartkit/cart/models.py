"""Cart action protocol models: actions, results, options and payload shapes."""
from dataclasses import dataclass, field, fields, replace
from datetime import datetime
from enum import Enum
from typing import Any, Awaitable, Callable, Dict, List, Optional, Protocol, Union

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

CART_GID_PREFIX = "gid://shopify/Cart/"


class CartAction(str, Enum):
    """Actions with a default handler."""
    ATTRIBUTES_UPDATE_INPUT = "AttributesUpdateInput"
    BUYER_IDENTITY_UPDATE = "BuyerIdentityUpdate"
    CREATE = "Create"
    DISCOUNT_CODES_UPDATE = "DiscountCodesUpdate"
    LINES_ADD = "LinesAdd"
    LINES_REMOVE = "LinesRemove"
    LINES_UPDATE = "LinesUpdate"
    NOTE_UPDATE = "NoteUpdate"
    SELECTED_DELIVERY_OPTIONS_UPDATE = "SelectedDeliveryOptionsUpdate"
    METAFIELDS_SET = "MetafieldsSet"
    METAFIELD_DELETE = "MetafieldDelete"

    @classmethod
    def parse(cls, name: str) -> Optional["CartAction"]:
        """Return the default action for a name, or None for custom names."""
        try:
            return cls(name)
        except ValueError:
            return None


@dataclass
class CartActionInput:
    """An action name plus its action-specific inputs."""
    action: str
    inputs: Dict[str, Any] = field(default_factory=dict)


@dataclass
class UserError:
    """Validation error reported by the backend alongside a result."""
    message: str
    field: Optional[List[str]] = None
    code: Optional[str] = None

    @classmethod
    def from_dict(cls, data: dict) -> "UserError":
        return cls(
            message=data.get("message", ""),
            field=data.get("field"),
            code=data.get("code"),
        )

    def to_dict(self) -> dict:
        return {"message": self.message, "field": self.field, "code": self.code}


@dataclass
class CartQueryResult:
    """
    Uniform result of a cart handler.

    A non-empty `errors` list is a soft failure: the call succeeded at the
    transport level and `cart` may still hold the (partially) updated cart.
    """
    cart: Optional[Dict[str, Any]] = None
    errors: List[UserError] = field(default_factory=list)
    cart_id: Optional[str] = None

    def __post_init__(self):
        if self.cart_id is None and self.cart and self.cart.get("id"):
            self.cart_id = self.cart["id"]

    @classmethod
    def from_dict(cls, data: dict) -> "CartQueryResult":
        """Build a result from a raw `{cart, errors}` mapping."""
        return cls(
            cart=data.get("cart"),
            errors=[
                error if isinstance(error, UserError) else UserError.from_dict(error)
                for error in data.get("errors") or []
            ],
            cart_id=data.get("cart_id"),
        )

    @property
    def has_errors(self) -> bool:
        return bool(self.errors)

    def to_dict(self) -> dict:
        """Convert to dictionary for a JSON response."""
        return {
            "cart": self.cart,
            "errors": [error.to_dict() for error in self.errors],
            "cart_id": self.cart_id,
        }


@dataclass
class CartOptionalParams:
    """Per-call overrides for the cart id and the i18n context."""
    cart_id: Optional[str] = None
    country: Optional[str] = None
    language: Optional[str] = None

    @classmethod
    def coerce(
        cls, value: Union["CartOptionalParams", Dict[str, Any], None]
    ) -> "CartOptionalParams":
        """Accept params as an instance, a snake/camel-case dict, or None."""
        if value is None:
            return cls()
        if isinstance(value, cls):
            return value
        return cls(
            cart_id=value.get("cart_id", value.get("cartId")),
            country=value.get("country"),
            language=value.get("language"),
        )

    def merged_over(self, base: Optional["CartOptionalParams"]) -> "CartOptionalParams":
        """Return `base` with every value explicitly set here taking precedence."""
        if base is None:
            return self
        overrides = {
            f.name: getattr(self, f.name) for f in fields(self) if getattr(self, f.name) is not None
        }
        return replace(base, **overrides)


@dataclass
class CookieOptions:
    """Set-Cookie attributes for the cart cookie; None means not rendered."""
    max_age: Optional[int] = None
    expires: Optional[Union[datetime, int, float]] = None
    domain: Optional[str] = None
    path: Optional[str] = None
    same_site: Optional[str] = None  # Strict | Lax | None
    secure: Optional[bool] = None
    http_only: Optional[bool] = None


class ResponseHeaders(Protocol):
    """Anything that can collect response headers (e.g. starlette MutableHeaders)."""

    def append(self, key: str, value: str) -> None: ...


class FormData(Protocol):
    """Submitted form lookups the codec relies on."""

    def get(self, key: str) -> Any: ...


Handler = Callable[[Dict[str, Any], Optional[CartOptionalParams]], Awaitable[CartQueryResult]]
GetCartId = Callable[[], Optional[str]]
SetCartId = Callable[[str, ResponseHeaders], None]


@dataclass
class CartQueryOptions:
    """Everything a default handler closes over."""
    storefront: Any
    get_cart_id: GetCartId
    set_cart_id: Optional[SetCartId] = None
    cart_fragment: Optional[str] = None


# ==================== ACTION PAYLOADS ====================

class _ActionInputs(BaseModel):
    """Wire payloads use camelCase keys; unknown keys are kept."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="allow")


class AttributeInput(_ActionInputs):
    key: str
    value: str


class CartLineInput(_ActionInputs):
    merchandise_id: str
    quantity: int = Field(default=1, ge=1)
    attributes: Optional[List[AttributeInput]] = None
    selling_plan_id: Optional[str] = None


class CartLineUpdateInput(_ActionInputs):
    id: str
    merchandise_id: Optional[str] = None
    quantity: Optional[int] = Field(default=None, ge=0)
    attributes: Optional[List[AttributeInput]] = None
    selling_plan_id: Optional[str] = None


class CartSelectedDeliveryOptionInput(_ActionInputs):
    delivery_group_id: str
    delivery_option_handle: str


class MetafieldInput(_ActionInputs):
    key: str
    type: str
    value: str


class LinesAddInputs(_ActionInputs):
    lines: List[CartLineInput]


class LinesUpdateInputs(_ActionInputs):
    lines: List[CartLineUpdateInput]


class LinesRemoveInputs(_ActionInputs):
    line_ids: List[str]


class NoteUpdateInputs(_ActionInputs):
    note: str


class BuyerIdentityUpdateInputs(_ActionInputs):
    buyer_identity: Dict[str, Any]


class DiscountCodesUpdateInputs(_ActionInputs):
    discount_codes: List[str]


class SelectedDeliveryOptionsUpdateInputs(_ActionInputs):
    selected_delivery_options: List[CartSelectedDeliveryOptionInput]


class AttributesUpdateInputs(_ActionInputs):
    attributes: List[AttributeInput]


class CreateInputs(_ActionInputs):
    input: Dict[str, Any] = Field(default_factory=dict)


class MetafieldsSetInputs(_ActionInputs):
    metafields: List[MetafieldInput]


class MetafieldDeleteInputs(_ActionInputs):
    key: str


ACTION_INPUT_MODELS: Dict[CartAction, type] = {
    CartAction.LINES_ADD: LinesAddInputs,
    CartAction.LINES_UPDATE: LinesUpdateInputs,
    CartAction.LINES_REMOVE: LinesRemoveInputs,
    CartAction.NOTE_UPDATE: NoteUpdateInputs,
    CartAction.BUYER_IDENTITY_UPDATE: BuyerIdentityUpdateInputs,
    CartAction.DISCOUNT_CODES_UPDATE: DiscountCodesUpdateInputs,
    CartAction.SELECTED_DELIVERY_OPTIONS_UPDATE: SelectedDeliveryOptionsUpdateInputs,
    CartAction.ATTRIBUTES_UPDATE_INPUT: AttributesUpdateInputs,
    CartAction.CREATE: CreateInputs,
    CartAction.METAFIELDS_SET: MetafieldsSetInputs,
    CartAction.METAFIELD_DELETE: MetafieldDeleteInputs,
}


def to_variables(value: Any) -> Any:
    """Dump validated payload models back to camelCase GraphQL variables."""
    if isinstance(value, BaseModel):
        return value.model_dump(by_alias=True, exclude_none=True)
    if isinstance(value, (list, tuple)):
        return [to_variables(item) for item in value]
    if isinstance(value, dict):
        return {key: to_variables(item) for key, item in value.items()}
    return value
