"""Vendor listing data models."""

from dataclasses import dataclass, field


@dataclass
class City:
    id: str
    name: str
    state: str = ""


@dataclass
class VendorType:
    id: str
    name: str
    icon: str = ""


@dataclass
class Vendor:
    """A vendor listed under a city and vendor type."""

    id: str
    name: str
    description: str = ""
    vendor_type: str = ""
    city: str = ""
    images: list[str] = field(default_factory=list)
    price_range: int = 0
    rating: float = 0.0
    verified: bool = False


@dataclass
class VendorStats:
    """Dashboard counters for a vendor account."""

    data: dict = field(default_factory=dict)

    def get(self, key: str, default=0):
        return self.data.get(key, default)
