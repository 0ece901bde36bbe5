"""Pytest configuration and fixtures"""
import os
import pytest
from unittest.mock import Mock, AsyncMock

from starlette.datastructures import MutableHeaders

# Set test environment variables
os.environ.setdefault("STOREFRONT_DOMAIN", "test-shop.myshopify.com")
os.environ.setdefault("STOREFRONT_API_TOKEN", "test_storefront_token")

from cartkit.cart import CartQueryOptions
from cartkit.storefront import I18nConfig

CART_ID = "gid://shopify/Cart/c1-123"
NEW_CART_ID = "gid://shopify/Cart/c1-new"

# Backend fields, in the order they are looked up in a mutation document
MUTATION_FIELDS = [
    "cartCreate",
    "cartLinesAdd",
    "cartLinesUpdate",
    "cartLinesRemove",
    "cartDiscountCodesUpdate",
    "cartBuyerIdentityUpdate",
    "cartNoteUpdate",
    "cartSelectedDeliveryOptionsUpdate",
    "cartAttributesUpdate",
    "cartMetafieldsSet",
    "cartMetafieldDelete",
]


def _mutation_field(document: str) -> str:
    for field in MUTATION_FIELDS:
        if field in document:
            return field
    raise AssertionError(f"Unexpected mutation document: {document[:80]}")


def _fake_mutate(document, variables=None):
    field = _mutation_field(document)
    variables = variables or {}
    if field == "cartCreate":
        lines = variables.get("input", {}).get("lines", [])
        return {field: {"cart": {"id": NEW_CART_ID, "totalQuantity": len(lines)}, "errors": []}}
    if field in ("cartMetafieldsSet", "cartMetafieldDelete"):
        return {field: {"errors": []}}
    return {field: {"cart": {"id": variables["cartId"], "totalQuantity": 1}, "errors": []}}


def _fake_query(document, variables=None, cache=None):
    return {"cart": {"id": variables["cartId"], "totalQuantity": 2, "note": ""}}


@pytest.fixture
def mock_storefront():
    """Mock Storefront API client"""
    storefront = Mock()
    storefront.i18n = I18nConfig(country="US", language="EN")
    storefront.mutate = AsyncMock(side_effect=_fake_mutate)
    storefront.query = AsyncMock(side_effect=_fake_query)
    storefront.cache_none = Mock(return_value="no-store")
    return storefront


@pytest.fixture
def query_options(mock_storefront):
    """Query options for a request that carries a cart cookie"""
    return CartQueryOptions(storefront=mock_storefront, get_cart_id=lambda: CART_ID)


@pytest.fixture
def no_cart_options(mock_storefront):
    """Query options for a request without a cart cookie"""
    return CartQueryOptions(storefront=mock_storefront, get_cart_id=lambda: None)


@pytest.fixture
def response_headers():
    """Empty response headers"""
    return MutableHeaders()


@pytest.fixture
def cart_cookie_headers():
    """Request headers carrying the cart cookie"""
    return {"cookie": "theme=dark; cart=c1-123"}
