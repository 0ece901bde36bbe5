"""
Cart Id Store

The cart id lives in the `cart` cookie as its bare token; handlers work
with the canonical gid form (`gid://shopify/Cart/<token>`).
"""
from datetime import datetime, timezone
from email.utils import format_datetime
from typing import Mapping, Optional, Union
from urllib.parse import quote, unquote

from starlette.requests import cookie_parser

from .models import CART_GID_PREFIX, CookieOptions, GetCartId, ResponseHeaders, SetCartId

CART_COOKIE_NAME = "cart"

_SAME_SITE_VALUES = {"strict": "Strict", "lax": "Lax", "none": "None"}


def _cart_token(cart_id: str) -> str:
    """Keep only the opaque trailing segment of a (possibly gid) cart id."""
    return cart_id.rsplit("/", 1)[-1]


def get_cart_id(request_headers: Mapping[str, str]) -> Optional[str]:
    """
    Read the cart id from the request's `cart` cookie.

    Returns:
        The cart id in gid form, or None when there is no cart cookie
    """
    cookie_header = request_headers.get("cookie") or request_headers.get("Cookie")
    if not cookie_header:
        return None

    token = cookie_parser(cookie_header).get(CART_COOKIE_NAME)
    if not token:
        return None
    return f"{CART_GID_PREFIX}{_cart_token(unquote(token))}"


def _format_expires(expires: Union[datetime, int, float]) -> str:
    if isinstance(expires, datetime):
        moment = expires if expires.tzinfo else expires.replace(tzinfo=timezone.utc)
    else:
        moment = datetime.fromtimestamp(expires, tz=timezone.utc)
    return format_datetime(moment.astimezone(timezone.utc), usegmt=True)


def _coerce_options(options: Union[CookieOptions, Mapping, None]) -> CookieOptions:
    if options is None:
        return CookieOptions()
    if isinstance(options, CookieOptions):
        return options
    # Accept the attribute spellings used in Set-Cookie too (maxage, samesite, ...)
    aliases = {
        "maxage": "max_age",
        "maxAge": "max_age",
        "samesite": "same_site",
        "sameSite": "same_site",
        "httponly": "http_only",
        "httpOnly": "http_only",
    }
    return CookieOptions(**{aliases.get(key, key): value for key, value in options.items()})


def serialize_cart_cookie(cart_id: str, options: Union[CookieOptions, Mapping, None] = None) -> str:
    """Render the Set-Cookie value for a cart id; only supplied attributes appear."""
    opts = _coerce_options(options)
    parts = [f"{CART_COOKIE_NAME}={quote(_cart_token(cart_id), safe='')}"]

    if opts.max_age is not None:
        parts.append(f"Max-Age={int(opts.max_age)}")
    if opts.expires is not None:
        parts.append(f"Expires={_format_expires(opts.expires)}")
    if opts.domain:
        parts.append(f"Domain={opts.domain}")
    if opts.path:
        parts.append(f"Path={opts.path}")
    if opts.same_site:
        same_site = _SAME_SITE_VALUES.get(str(opts.same_site).lower())
        if same_site is None:
            raise ValueError(f"Invalid SameSite value: {opts.same_site}")
        parts.append(f"SameSite={same_site}")
    if opts.secure:
        parts.append("Secure")
    if opts.http_only:
        parts.append("HttpOnly")

    return "; ".join(parts)


def set_cart_id(
    cart_id: str,
    response_headers: ResponseHeaders,
    options: Union[CookieOptions, Mapping, None] = None,
) -> None:
    """Append a Set-Cookie header carrying the cart id to the response headers."""
    response_headers.append("Set-Cookie", serialize_cart_cookie(cart_id, options))


def cart_get_id_default(request_headers: Mapping[str, str]) -> GetCartId:
    """Build a cart id getter bound to one request's headers."""
    def get_id() -> Optional[str]:
        return get_cart_id(request_headers)

    return get_id


def cart_set_id_default(cookie_options: Union[CookieOptions, Mapping, None] = None) -> SetCartId:
    """Build a cart id setter that renders the given cookie options."""
    options = _coerce_options(cookie_options)

    def set_id(cart_id: str, response_headers: ResponseHeaders) -> None:
        set_cart_id(cart_id, response_headers, options)

    return set_id
