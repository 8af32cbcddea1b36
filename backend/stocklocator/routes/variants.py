from fastapi import APIRouter, Depends, Request

from stocklocator.schemas.variants import LookupRequest, UpdateLocationRequest
from stocklocator.services.variants import VariantLocationService

router = APIRouter()


def get_variant_service(request: Request) -> VariantLocationService:
    return request.app.state.variant_service


@router.post("/lookup-variant")
def lookup_variant(
    req: LookupRequest,
    service: VariantLocationService = Depends(get_variant_service),
):
    result = service.lookup(req.barcode)
    return result.model_dump(by_alias=True)


@router.post("/update-location")
def update_location(
    req: UpdateLocationRequest,
    service: VariantLocationService = Depends(get_variant_service),
):
    result = service.update_location(req.variant_id, req.location_value)
    return result.model_dump(by_alias=True, exclude_none=True)
