"""
cartkit

Cart action protocol for Storefront API backed carts:
- cart: form codec, cart id cookie, default handlers, registry, dispatcher
- storefront: Storefront API GraphQL client
- routers: FastAPI endpoints

Note: Imports are lazy so that importing the package does not pull in
the Storefront client or FastAPI.
"""

__all__ = [
    "create_cart_handler",
    "StorefrontClient",
]


def __getattr__(name):
    """Lazy attribute access."""
    if name == "create_cart_handler":
        from cartkit.cart import create_cart_handler
        return create_cart_handler
    elif name == "StorefrontClient":
        from cartkit.storefront import StorefrontClient
        return StorefrontClient
    raise AttributeError(f"module 'cartkit' has no attribute '{name}'")
