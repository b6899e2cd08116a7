from typing import Dict, Protocol, Tuple

from modules.shipping_plan.shipping_plan_schema import Zone
from modules.serviceability.serviceability_schema import ZoneResolution
from utils.exceptions import UnsupportedZoneError


class ZoneResolver(Protocol):
    """Pincode to zone lookup, owned by the pincode master service."""

    def resolve(self, pickup_pincode: str, delivery_pincode: str) -> ZoneResolution:
        ...


class MappingZoneResolver:
    """Zone lookup over a (pickup, delivery) -> zone table supplied by the caller."""

    def __init__(self, zones: Dict[Tuple[str, str], str]):
        self.zones = {
            (str(pickup), str(delivery)): Zone.parse(zone)
            for (pickup, delivery), zone in zones.items()
        }

    def resolve(self, pickup_pincode: str, delivery_pincode: str) -> ZoneResolution:
        zone = self.zones.get((str(pickup_pincode), str(delivery_pincode)))
        if zone is None:
            raise UnsupportedZoneError(f"{pickup_pincode}->{delivery_pincode}")
        return ZoneResolution(zone=zone, zoneName=zone.display_name)
