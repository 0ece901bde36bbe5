"""Tests for the cart id cookie store"""
from datetime import datetime, timezone

import pytest
from starlette.datastructures import Headers, MutableHeaders

from cartkit.cart import CookieOptions, cart_get_id_default, cart_set_id_default, get_cart_id, set_cart_id
from cartkit.cart.cookies import serialize_cart_cookie


def test_get_cart_id_from_cookie():
    """Test reading the cart cookie back as a gid"""
    headers = {"cookie": "theme=dark; cart=c1-123"}
    assert get_cart_id(headers) == "gid://shopify/Cart/c1-123"


def test_get_cart_id_case_insensitive_headers():
    """Test reading from starlette request headers"""
    headers = Headers({"Cookie": "cart=c1-123"})
    assert get_cart_id(headers) == "gid://shopify/Cart/c1-123"


def test_get_cart_id_without_cookie():
    """Test absent cookie gives None, not an error"""
    assert get_cart_id({}) is None
    assert get_cart_id({"cookie": "theme=dark"}) is None
    assert get_cart_id({"cookie": "cart="}) is None


def test_cart_get_id_default_is_bound_to_headers():
    """Test the getter factory"""
    get_id = cart_get_id_default({"cookie": "cart=c1-456"})
    assert get_id() == "gid://shopify/Cart/c1-456"


def test_set_cart_id_without_options():
    """Test Set-Cookie carries the bare id only"""
    headers = MutableHeaders()
    set_cart_id("gid://shopify/Cart/c1-123", headers)
    assert headers["set-cookie"] == "cart=c1-123"


def test_set_cart_id_with_max_age():
    """Test only supplied options are rendered"""
    headers = MutableHeaders()
    set_cart_id("gid://shopify/Cart/c1-123", headers, {"max_age": 1000})
    assert headers["set-cookie"] == "cart=c1-123; Max-Age=1000"


def test_cart_set_id_default_with_options():
    """Test the setter factory accepts Set-Cookie attribute spellings"""
    set_id = cart_set_id_default({"maxage": 1000})
    headers = MutableHeaders()
    set_id("gid://shopify/Cart/c1-123", headers)
    assert headers["set-cookie"] == "cart=c1-123; Max-Age=1000"


def test_set_cart_id_bare_id_unchanged():
    """Test an id without a gid prefix is stored as is"""
    headers = MutableHeaders()
    set_cart_id("c1-789", headers)
    assert headers["set-cookie"] == "cart=c1-789"


def test_all_cookie_options():
    """Test rendering every supported attribute"""
    options = CookieOptions(
        max_age=60,
        expires=datetime(2030, 1, 2, 3, 4, 5, tzinfo=timezone.utc),
        domain="shop.example.com",
        path="/",
        same_site="lax",
        secure=True,
        http_only=True,
    )
    assert serialize_cart_cookie("gid://shopify/Cart/c1-123", options) == (
        "cart=c1-123; Max-Age=60; Expires=Wed, 02 Jan 2030 03:04:05 GMT; "
        "Domain=shop.example.com; Path=/; SameSite=Lax; Secure; HttpOnly"
    )


def test_false_flags_not_rendered():
    """Test explicit False flags add nothing"""
    assert serialize_cart_cookie("c1", CookieOptions(secure=False, http_only=False)) == "cart=c1"


def test_invalid_same_site():
    """Test unknown SameSite values are rejected"""
    with pytest.raises(ValueError):
        serialize_cart_cookie("c1", CookieOptions(same_site="sometimes"))


def test_cookie_round_trip():
    """Test a written cookie reads back as the same cart"""
    headers = MutableHeaders()
    set_cart_id("gid://shopify/Cart/c1-123", headers, CookieOptions(path="/", same_site="Strict"))
    cookie_pair = headers["set-cookie"].split(";", 1)[0]
    assert get_cart_id({"cookie": cookie_pair}) == "gid://shopify/Cart/c1-123"
