LOCATION_NAMESPACE = "stock"
LOCATION_KEY = "location"
LOCATION_TYPE = "single_line_text_field"

VARIANTS_BY_BARCODE_QUERY = """
query VariantsByBarcode($q: String!, $first: Int!) {
  productVariants(first: $first, query: $q) {
    edges {
      node {
        id
        title
        barcode
        product { title }
        metafield(namespace: "stock", key: "location") { value }
      }
    }
  }
}
"""

SET_LOCATION_MUTATION = """
mutation SetVariantLocation($metafields: [MetafieldsSetInput!]!) {
  metafieldsSet(metafields: $metafields) {
    metafields { id namespace key value }
    userErrors { field message }
  }
}
"""


def barcode_filter(barcode: str) -> str:
    return f"barcode:{barcode}"


def location_metafield_input(variant_id: str, value: str) -> dict:
    return {
        "ownerId": variant_id,
        "namespace": LOCATION_NAMESPACE,
        "key": LOCATION_KEY,
        "type": LOCATION_TYPE,
        "value": value,
    }
