"""
Storefront API operation documents for cart queries and mutations.

See https://shopify.dev/docs/api/storefront/latest/objects/Cart
"""

USER_ERROR_FRAGMENT = """
  fragment CartApiError on CartUserError {
    message
    field
    code
  }
"""

METAFIELD_ERROR_FRAGMENT = """
  fragment MetafieldError on MetafieldsSetUserError {
    message
    field
    code
  }
"""

# Selection returned by mutations unless a custom fragment is configured
MINIMAL_CART_FRAGMENT = """
  fragment CartApiMutation on Cart {
    id
    totalQuantity
  }
"""

DEFAULT_CART_FRAGMENT = """
  fragment CartApiQuery on Cart {
    id
    checkoutUrl
    totalQuantity
    buyerIdentity {
      countryCode
      customer {
        id
        email
        firstName
        lastName
        displayName
      }
      email
      phone
    }
    lines(first: $numCartLines) {
      edges {
        node {
          id
          quantity
          attributes {
            key
            value
          }
          cost {
            totalAmount {
              ...CartApiMoney
            }
            amountPerQuantity {
              ...CartApiMoney
            }
            compareAtAmountPerQuantity {
              ...CartApiMoney
            }
          }
          merchandise {
            ... on ProductVariant {
              id
              availableForSale
              compareAtPrice {
                ...CartApiMoney
              }
              price {
                ...CartApiMoney
              }
              requiresShipping
              title
              image {
                id
                url
                altText
                width
                height
              }
              product {
                handle
                title
                id
              }
              selectedOptions {
                name
                value
              }
            }
          }
        }
      }
    }
    cost {
      subtotalAmount {
        ...CartApiMoney
      }
      totalAmount {
        ...CartApiMoney
      }
      totalDutyAmount {
        ...CartApiMoney
      }
      totalTaxAmount {
        ...CartApiMoney
      }
    }
    note
    attributes {
      key
      value
    }
    discountCodes {
      applicable
      code
    }
  }

  fragment CartApiMoney on MoneyV2 {
    currencyCode
    amount
  }
"""


def _fragment_name(fragment: str) -> str:
    """Name of the first fragment defined in a selection document."""
    head = fragment.split("fragment", 1)[1].strip()
    return head.split()[0]


def cart_query(cart_fragment: str | None = None) -> str:
    fragment = cart_fragment or DEFAULT_CART_FRAGMENT
    return f"""
  query CartQuery(
    $cartId: ID!
    $numCartLines: Int = 100
    $country: CountryCode = ZZ
    $language: LanguageCode
  ) @inContext(country: $country, language: $language) {{
    cart(id: $cartId) {{
      ...{_fragment_name(fragment)}
    }}
  }}
{fragment}"""


def _cart_mutation(
    operation: str,
    field: str,
    arguments: str,
    variables: str,
    cart_fragment: str | None,
) -> str:
    fragment = cart_fragment or MINIMAL_CART_FRAGMENT
    return f"""
  mutation {operation}(
    {variables}
    $country: CountryCode = ZZ
    $language: LanguageCode
  ) @inContext(country: $country, language: $language) {{
    {field}({arguments}) {{
      cart {{
        ...{_fragment_name(fragment)}
      }}
      errors: userErrors {{
        ...CartApiError
      }}
    }}
  }}
{fragment}{USER_ERROR_FRAGMENT}"""


def cart_create_mutation(cart_fragment: str | None = None) -> str:
    return _cart_mutation(
        "cartCreate", "cartCreate", "input: $input",
        "$input: CartInput!", cart_fragment,
    )


def cart_lines_add_mutation(cart_fragment: str | None = None) -> str:
    return _cart_mutation(
        "cartLinesAdd", "cartLinesAdd", "cartId: $cartId, lines: $lines",
        "$cartId: ID!\n    $lines: [CartLineInput!]!", cart_fragment,
    )


def cart_lines_update_mutation(cart_fragment: str | None = None) -> str:
    return _cart_mutation(
        "cartLinesUpdate", "cartLinesUpdate", "cartId: $cartId, lines: $lines",
        "$cartId: ID!\n    $lines: [CartLineUpdateInput!]!", cart_fragment,
    )


def cart_lines_remove_mutation(cart_fragment: str | None = None) -> str:
    return _cart_mutation(
        "cartLinesRemove", "cartLinesRemove", "cartId: $cartId, lineIds: $lineIds",
        "$cartId: ID!\n    $lineIds: [ID!]!", cart_fragment,
    )


def cart_discount_codes_update_mutation(cart_fragment: str | None = None) -> str:
    return _cart_mutation(
        "cartDiscountCodesUpdate", "cartDiscountCodesUpdate",
        "cartId: $cartId, discountCodes: $discountCodes",
        "$cartId: ID!\n    $discountCodes: [String!]", cart_fragment,
    )


def cart_buyer_identity_update_mutation(cart_fragment: str | None = None) -> str:
    return _cart_mutation(
        "cartBuyerIdentityUpdate", "cartBuyerIdentityUpdate",
        "cartId: $cartId, buyerIdentity: $buyerIdentity",
        "$cartId: ID!\n    $buyerIdentity: CartBuyerIdentityInput!", cart_fragment,
    )


def cart_note_update_mutation(cart_fragment: str | None = None) -> str:
    return _cart_mutation(
        "cartNoteUpdate", "cartNoteUpdate", "cartId: $cartId, note: $note",
        "$cartId: ID!\n    $note: String!", cart_fragment,
    )


def cart_selected_delivery_options_update_mutation(cart_fragment: str | None = None) -> str:
    return _cart_mutation(
        "cartSelectedDeliveryOptionsUpdate", "cartSelectedDeliveryOptionsUpdate",
        "cartId: $cartId, selectedDeliveryOptions: $selectedDeliveryOptions",
        "$cartId: ID!\n    $selectedDeliveryOptions: [CartSelectedDeliveryOptionInput!]!",
        cart_fragment,
    )


def cart_attributes_update_mutation(cart_fragment: str | None = None) -> str:
    return _cart_mutation(
        "cartAttributesUpdate", "cartAttributesUpdate",
        "cartId: $cartId, attributes: $attributes",
        "$cartId: ID!\n    $attributes: [AttributeInput!]!", cart_fragment,
    )


# Metafield mutations return no cart, only user errors
def cart_metafields_set_mutation() -> str:
    return f"""
  mutation cartMetafieldsSet(
    $metafields: [CartMetafieldsSetInput!]!
    $country: CountryCode = ZZ
    $language: LanguageCode
  ) @inContext(country: $country, language: $language) {{
    cartMetafieldsSet(metafields: $metafields) {{
      errors: userErrors {{
        ...MetafieldError
      }}
    }}
  }}
{METAFIELD_ERROR_FRAGMENT}"""


def cart_metafield_delete_mutation() -> str:
    return """
  mutation cartMetafieldDelete(
    $input: CartMetafieldDeleteInput!
    $country: CountryCode = ZZ
    $language: LanguageCode
  ) @inContext(country: $country, language: $language) {
    cartMetafieldDelete(input: $input) {
      errors: userErrors {
        code
        field
        message
      }
    }
  }
"""
