"""Vendor listing and vendor dashboard endpoints."""

from ..models import City, Vendor, VendorStats, VendorType
from .client import IApiClient
from .schemas import CityPayload, VendorPayload, VendorTypePayload


def _items(data, key: str) -> list:
    # Listing endpoints answer either a bare array or {key: [...]}
    if isinstance(data, list):
        return data
    return data.get(key, [])


class VendorService:
    def __init__(self, api: IApiClient):
        self._api = api

    async def get_cities(self) -> list[City]:
        data = await self._api.get("/cities", auth=False)
        return [CityPayload.model_validate(c).to_domain() for c in _items(data, "cities")]

    async def get_vendor_types(self, city_id: str) -> list[VendorType]:
        data = await self._api.get(f"/cities/{city_id}/vendor-types", auth=False)
        return [
            VendorTypePayload.model_validate(t).to_domain()
            for t in _items(data, "vendorTypes")
        ]

    async def get_vendors(self, city_id: str, vendor_type_id: str) -> list[Vendor]:
        data = await self._api.get(f"/cities/{city_id}/vendors/{vendor_type_id}", auth=False)
        return [VendorPayload.model_validate(v).to_domain() for v in _items(data, "vendors")]

    async def get_vendor_stats(self) -> VendorStats:
        """Dashboard counters for the logged-in vendor."""
        data = await self._api.get("/vendor/stats")
        return VendorStats(data=dict(data))
