"""Storefront API documents used by ``StorefrontRepository``."""

IMAGE_FRAGMENT = """
  fragment image on Image {
    url
    altText
    width
    height
  }
"""

SEO_FRAGMENT = """
  fragment seo on SEO {
    description
    title
  }
"""

PRODUCT_FRAGMENT = (
    """
  fragment product on Product {
    id
    handle
    availableForSale
    title
    description
    descriptionHtml
    options { id name values }
    priceRange {
      maxVariantPrice { amount currencyCode }
      minVariantPrice { amount currencyCode }
    }
    variants(first: 250) {
      edges {
        node {
          id
          title
          availableForSale
          selectedOptions { name value }
          price { amount currencyCode }
        }
      }
    }
    featuredImage { ...image }
    images(first: 20) {
      edges { node { ...image } }
    }
    seo { ...seo }
    tags
    updatedAt
  }
"""
    + IMAGE_FRAGMENT
    + SEO_FRAGMENT
)

CART_FRAGMENT = (
    """
  fragment cart on Cart {
    id
    checkoutUrl
    cost {
      subtotalAmount { amount currencyCode }
      totalAmount { amount currencyCode }
      totalTaxAmount { amount currencyCode }
    }
    lines(first: 100) {
      edges {
        node {
          id
          quantity
          cost { totalAmount { amount currencyCode } }
          merchandise {
            ... on ProductVariant {
              id
              title
              selectedOptions { name value }
              product {
                id
                handle
                title
                featuredImage { ...image }
              }
            }
          }
        }
      }
    }
    totalQuantity
  }
"""
    + IMAGE_FRAGMENT
)

COLLECTION_FRAGMENT = (
    """
  fragment collection on Collection {
    handle
    title
    description
    seo { ...seo }
    updatedAt
  }
"""
    + SEO_FRAGMENT
)

PAGE_FRAGMENT = (
    """
  fragment page on Page {
    id
    title
    handle
    body
    bodySummary
    seo { ...seo }
    createdAt
    updatedAt
  }
"""
    + SEO_FRAGMENT
)

GET_PRODUCT_QUERY = (
    """
  query getProduct($handle: String!) {
    product(handle: $handle) { ...product }
  }
"""
    + PRODUCT_FRAGMENT
)

GET_PRODUCTS_QUERY = (
    """
  query getProducts($query: String) {
    products(query: $query, first: 100) {
      edges { node { ...product } }
    }
  }
"""
    + PRODUCT_FRAGMENT
)

GET_PRODUCT_RECOMMENDATIONS_QUERY = (
    """
  query getProductRecommendations($productId: ID!) {
    productRecommendations(productId: $productId) { ...product }
  }
"""
    + PRODUCT_FRAGMENT
)

GET_COLLECTION_QUERY = (
    """
  query getCollection($handle: String!) {
    collection(handle: $handle) { ...collection }
  }
"""
    + COLLECTION_FRAGMENT
)

GET_COLLECTIONS_QUERY = (
    """
  query getCollections {
    collections(first: 100, sortKey: TITLE) {
      edges { node { ...collection } }
    }
  }
"""
    + COLLECTION_FRAGMENT
)

GET_COLLECTION_PRODUCTS_QUERY = (
    """
  query getCollectionProducts($handle: String!) {
    collection(handle: $handle) {
      products(first: 100) {
        edges { node { ...product } }
      }
    }
  }
"""
    + PRODUCT_FRAGMENT
)

GET_MENU_QUERY = """
  query getMenu($handle: String!) {
    menu(handle: $handle) {
      items { title url }
    }
  }
"""

GET_PAGE_QUERY = (
    """
  query getPage($handle: String!) {
    pageByHandle(handle: $handle) { ...page }
  }
"""
    + PAGE_FRAGMENT
)

GET_PAGES_QUERY = (
    """
  query getPages {
    pages(first: 100) {
      edges { node { ...page } }
    }
  }
"""
    + PAGE_FRAGMENT
)

GET_CART_QUERY = (
    """
  query getCart($cartId: ID!) {
    cart(id: $cartId) { ...cart }
  }
"""
    + CART_FRAGMENT
)

CREATE_CART_MUTATION = (
    """
  mutation createCart($lineItems: [CartLineInput!]) {
    cartCreate(input: { lines: $lineItems }) {
      cart { ...cart }
      userErrors { code field message }
    }
  }
"""
    + CART_FRAGMENT
)

ADD_TO_CART_MUTATION = (
    """
  mutation addToCart($cartId: ID!, $lines: [CartLineInput!]!) {
    cartLinesAdd(cartId: $cartId, lines: $lines) {
      cart { ...cart }
      userErrors { code field message }
    }
  }
"""
    + CART_FRAGMENT
)

REMOVE_FROM_CART_MUTATION = (
    """
  mutation removeFromCart($cartId: ID!, $lineIds: [ID!]!) {
    cartLinesRemove(cartId: $cartId, lineIds: $lineIds) {
      cart { ...cart }
      userErrors { code field message }
    }
  }
"""
    + CART_FRAGMENT
)

EDIT_CART_ITEMS_MUTATION = (
    """
  mutation editCartItems($cartId: ID!, $lines: [CartLineUpdateInput!]!) {
    cartLinesUpdate(cartId: $cartId, lines: $lines) {
      cart { ...cart }
      userErrors { code field message }
    }
  }
"""
    + CART_FRAGMENT
)
