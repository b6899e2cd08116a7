from typing import Any, Dict

from modules.serviceability.serviceability_schema import (
    CourierInfoModel,
    ShipmentParams,
)
from modules.serviceability.serviceability_service import ServiceabilityService
from modules.serviceability.zone_resolver import ZoneResolver
from modules.shipping_plan.shipping_plan_schema import CourierPricing

from shipping_partner.base import CourierSource


class PlanRateSource(CourierSource):
    """
    Prices a shipment from the rate card of the seller's shipping plan,
    without calling the courier.
    """

    name = "plan"

    def __init__(
        self,
        courier: CourierInfoModel,
        rate_card: CourierPricing,
        zone_resolver: ZoneResolver,
    ):
        self.courier = courier
        self.rate_card = rate_card
        self.zone_resolver = zone_resolver

    @property
    def source_id(self) -> str:
        return f"{self.name}:{self.courier.id}"

    async def fetch_raw_quote(self, shipment_params: ShipmentParams) -> Dict[str, Any]:
        zone = self.zone_resolver.resolve(
            shipment_params.pickup_pincode, shipment_params.delivery_pincode
        )
        return ServiceabilityService.calculate_price(
            shipment_params, self.courier, self.rate_card, zone
        )
