from pydantic import BaseModel, ConfigDict, Field, field_validator
from typing import Any, Dict, List, Optional


class _CamelModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True)


# -------------------------
# Requests
# -------------------------
class LookupRequest(_CamelModel):
    barcode: Optional[str] = None

    @field_validator("barcode", mode="before")
    @classmethod
    def numeric_barcode_as_text(cls, value: Any) -> Any:
        # scanners and spreadsheets often send EAN/UPC codes as JSON numbers
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            return str(value)
        return value


class UpdateLocationRequest(_CamelModel):
    variant_id: Optional[str] = Field(default=None, alias="variantId")
    location_value: Optional[str] = Field(default=None, alias="locationValue")


# -------------------------
# Responses
# -------------------------
class VariantRef(_CamelModel):
    id: str


class ResolvedVariant(_CamelModel):
    variant: VariantRef
    product_title: str = Field(alias="productTitle")
    current_location: str = Field(default="", alias="currentLocation")


class VariantCandidate(_CamelModel):
    id: str
    title: str
    current_location: str = Field(default="", alias="currentLocation")


class AmbiguousVariants(_CamelModel):
    variants: List[VariantCandidate]


class SavedMetafield(_CamelModel):
    id: Optional[str] = None
    value: Optional[str] = None


class UpdateLocationResponse(_CamelModel):
    success: bool = True
    metafield: Optional[SavedMetafield] = None


class UserError(_CamelModel):
    field: Optional[List[str]] = None
    message: str

    @classmethod
    def from_graphql(cls, raw: Dict[str, Any]) -> "UserError":
        return cls(field=raw.get("field"), message=str(raw.get("message", "")))
