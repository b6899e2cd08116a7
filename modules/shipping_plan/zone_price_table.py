from typing import Dict, Iterator, Tuple

from utils.exceptions import UnsupportedZoneError

from .shipping_plan_schema import ALL_ZONES, CourierPricing, Zone, ZonePricing


class ZonePriceTable:
    """Read-only per-zone view of one courier's rate card."""

    def __init__(self, courier_pricing: CourierPricing):
        self.courier_pricing = courier_pricing
        self._zones: Dict[Zone, ZonePricing] = dict(courier_pricing.zonePricing)

    @property
    def courier_id(self) -> str:
        return self.courier_pricing.courierId

    def for_zone(self, zone) -> ZonePricing:
        zone = Zone.parse(zone)
        pricing = self._zones.get(zone)
        if pricing is None:
            raise UnsupportedZoneError(zone.value, courier_id=self.courier_id)
        return pricing

    def forward_price(self, zone, increments: int) -> float:
        """Base price of the zone plus the increments billed beyond the slab."""
        pricing = self.for_zone(zone)
        return pricing.base_price + pricing.increment_price * increments

    def items(self) -> Iterator[Tuple[Zone, ZonePricing]]:
        for zone in ALL_ZONES:
            yield zone, self._zones[zone]

    def __contains__(self, zone) -> bool:
        try:
            return Zone.parse(zone) in self._zones
        except UnsupportedZoneError:
            return False
