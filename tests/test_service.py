"""
Tests for the per-request cart handler facade
"""

import json

import pytest
from unittest.mock import AsyncMock

from cartkit.cart import INPUT_NAME, CartAction, CartHandler, CartQueryResult, create_cart_handler
from cartkit.errors import MissingCartId, UnknownAction
from tests.conftest import CART_ID, NEW_CART_ID


def form(action, **inputs):
    return {INPUT_NAME: json.dumps({"action": action, **inputs})}


@pytest.fixture
def cart(mock_storefront, cart_cookie_headers):
    """Handler for a request carrying the cart cookie"""
    return create_cart_handler(mock_storefront, cart_cookie_headers)


@pytest.fixture
def empty_cart(mock_storefront):
    """Handler for a first-time visitor"""
    return create_cart_handler(mock_storefront, {}, cookie_options={"path": "/", "httponly": True})


class TestCreateCartHandler:
    """Tests for building the facade."""

    def test_reads_cart_cookie(self, cart):
        assert isinstance(cart, CartHandler)
        assert cart.get_cart_id() == CART_ID

    def test_requires_headers_or_getter(self, mock_storefront):
        with pytest.raises(ValueError):
            create_cart_handler(mock_storefront)

    def test_custom_getter(self, mock_storefront):
        cart = create_cart_handler(mock_storefront, get_cart_id=lambda: "gid://shopify/Cart/from-session")

        assert cart.get_cart_id() == "gid://shopify/Cart/from-session"

    def test_set_cart_id_uses_cookie_options(self, empty_cart, response_headers):
        empty_cart.set_cart_id(NEW_CART_ID, response_headers)

        assert response_headers["set-cookie"] == "cart=c1-new; Path=/; HttpOnly"

    def test_get_form_input(self):
        action_input = CartHandler.get_form_input(form("NoteUpdate", note="hi"))

        assert action_input.action == "NoteUpdate"
        assert action_input.inputs == {"note": "hi"}


class TestDefaultMethods:
    """Tests for the facade's default cart methods."""

    @pytest.mark.asyncio
    async def test_get(self, cart, mock_storefront):
        result = await cart.get()

        assert result["id"] == CART_ID
        mock_storefront.query.assert_called_once()

    @pytest.mark.asyncio
    async def test_get_without_cart(self, empty_cart, mock_storefront):
        assert await empty_cart.get() is None
        mock_storefront.query.assert_not_called()

    @pytest.mark.asyncio
    async def test_add_lines_to_existing_cart(self, cart, mock_storefront):
        result = await cart.add_lines([{"merchandiseId": "v1", "quantity": 1}])

        assert result.cart_id == CART_ID
        assert "cartLinesAdd" in mock_storefront.mutate.call_args.args[0]

    @pytest.mark.asyncio
    async def test_remove_lines_needs_cart(self, empty_cart):
        with pytest.raises(MissingCartId):
            await empty_cart.remove_lines(["line-1"])

    @pytest.mark.asyncio
    async def test_delete_metafield(self, cart, mock_storefront):
        result = await cart.delete_metafield("public.gift")

        assert result.cart_id == CART_ID
        assert mock_storefront.mutate.call_args.kwargs["variables"]["input"]["key"] == "public.gift"


class TestCreateOnDemand:
    """Tests for starting a cart when there is none yet."""

    @pytest.mark.asyncio
    async def test_add_lines_creates_cart(self, empty_cart, mock_storefront):
        result = await empty_cart.add_lines([{"merchandiseId": "v1", "quantity": 2}])

        assert result.cart_id == NEW_CART_ID
        document = mock_storefront.mutate.call_args.args[0]
        variables = mock_storefront.mutate.call_args.kwargs["variables"]
        assert "cartCreate" in document
        assert variables["input"] == {"lines": [{"merchandiseId": "v1", "quantity": 2}]}

    @pytest.mark.asyncio
    async def test_note_update_creates_cart(self, empty_cart, mock_storefront):
        await empty_cart.update_note("Gift wrap please")

        assert mock_storefront.mutate.call_args.kwargs["variables"]["input"] == {"note": "Gift wrap please"}

    @pytest.mark.asyncio
    async def test_discount_codes_create_cart(self, empty_cart, mock_storefront):
        await empty_cart.update_discount_codes(["SAVE10"])

        assert mock_storefront.mutate.call_args.kwargs["variables"]["input"] == {"discountCodes": ["SAVE10"]}

    @pytest.mark.asyncio
    async def test_explicit_cart_id_skips_create(self, empty_cart, mock_storefront):
        result = await empty_cart.update_note("x", {"cartId": CART_ID})

        assert "cartNoteUpdate" in mock_storefront.mutate.call_args.args[0]
        assert result.cart_id == CART_ID

    @pytest.mark.asyncio
    async def test_dispatch_add_lines_sets_new_cookie(self, empty_cart, response_headers):
        result = await empty_cart.dispatch(
            form("LinesAdd", lines=[{"merchandiseId": "v1", "quantity": 1}]), response_headers
        )

        assert result.cart_id == NEW_CART_ID
        assert response_headers["set-cookie"] == "cart=c1-new; Path=/; HttpOnly"

    @pytest.mark.asyncio
    async def test_dispatch_lines_update_without_cart(self, empty_cart, response_headers):
        with pytest.raises(MissingCartId):
            await empty_cart.dispatch(form("LinesUpdate", lines=[{"id": "l1", "quantity": 0}]), response_headers)


class TestCustomMethods:
    """Tests for extending and overriding the facade."""

    @pytest.mark.asyncio
    async def test_custom_method_by_attribute(self, mock_storefront, cart_cookie_headers):
        greet = AsyncMock(return_value="hello")
        cart = create_cart_handler(mock_storefront, cart_cookie_headers, custom_methods={"greet": greet})

        assert await cart.greet("x") == "hello"

    def test_unknown_attribute(self, cart):
        with pytest.raises(AttributeError):
            cart.not_a_method

    @pytest.mark.asyncio
    async def test_override_replaces_default(self, mock_storefront, cart_cookie_headers):
        add_lines = AsyncMock(return_value=CartQueryResult(cart={"id": CART_ID}))
        cart = create_cart_handler(
            mock_storefront, cart_cookie_headers, custom_methods={"add_lines": add_lines}
        )

        await cart.add_lines([{"merchandiseId": "v1"}])

        add_lines.assert_awaited_once()
        mock_storefront.mutate.assert_not_called()

    @pytest.mark.asyncio
    async def test_override_used_by_dispatch(self, mock_storefront, cart_cookie_headers, response_headers):
        update_note = AsyncMock(return_value=CartQueryResult(cart={"id": CART_ID, "note": "custom"}))
        cart = create_cart_handler(
            mock_storefront, cart_cookie_headers, custom_methods={"update_note": update_note}
        )

        result = await cart.dispatch(form("NoteUpdate", note="hi"), response_headers)

        assert result.cart["note"] == "custom"
        assert update_note.call_args.args[0] == "hi"
        mock_storefront.mutate.assert_not_called()
        assert response_headers["set-cookie"] == "cart=c1-123"

    @pytest.mark.asyncio
    async def test_override_gets_plain_lines_from_dispatch(
        self, mock_storefront, cart_cookie_headers, response_headers
    ):
        received = []

        async def add_lines(lines, optional_params=None):
            received.append(lines)
            json.dumps({"lines": lines})
            return CartQueryResult(cart={"id": CART_ID})

        cart = create_cart_handler(
            mock_storefront, cart_cookie_headers, custom_methods={"add_lines": add_lines}
        )
        lines = [{"merchandiseId": "gid://shopify/ProductVariant/1", "quantity": 2}]

        await cart.add_lines(lines)
        await cart.dispatch(form("LinesAdd", lines=lines), response_headers)

        direct, dispatched = received
        assert dispatched == direct == lines
        assert all(isinstance(line, dict) for line in dispatched)
        assert response_headers["set-cookie"] == "cart=c1-123"

    @pytest.mark.asyncio
    async def test_composed_custom_action(self, mock_storefront, cart_cookie_headers, response_headers):
        cart = None

        async def edit_in_place(inputs, optional_params=None):
            await cart.remove_lines(inputs["removeLines"], optional_params)
            return await cart.add_lines(inputs["addLines"], optional_params)

        cart = create_cart_handler(
            mock_storefront, cart_cookie_headers, custom_methods={"editInPlace": edit_in_place}
        )

        result = await cart.dispatch(
            form(
                "editInPlace",
                removeLines=["gid://shopify/CartLine/1"],
                addLines=[{"merchandiseId": "gid://shopify/ProductVariant/2", "quantity": 1}],
            ),
            response_headers,
        )

        documents = [call.args[0] for call in mock_storefront.mutate.call_args_list]
        assert "cartLinesRemove" in documents[0]
        assert "cartLinesAdd" in documents[1]
        assert result.cart_id == CART_ID
        assert response_headers["set-cookie"] == "cart=c1-123"

    def test_registry_contents(self, mock_storefront, cart_cookie_headers):
        cart = create_cart_handler(
            mock_storefront,
            cart_cookie_headers,
            custom_methods={"update_note": AsyncMock(), "editInPlace": AsyncMock()},
        )

        registry = cart.registry

        assert all(action.value in registry for action in CartAction)
        assert registry.is_overridden("NoteUpdate")
        assert registry.custom_actions == ["editInPlace"]
        assert cart.registry is registry

    @pytest.mark.asyncio
    async def test_dispatch_unknown_action(self, cart, response_headers):
        with pytest.raises(UnknownAction):
            await cart.dispatch(form("Nope"), response_headers)

        assert response_headers.getlist("set-cookie") == []
