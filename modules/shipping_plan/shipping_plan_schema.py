from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field, field_validator, model_validator

from utils.exceptions import UnsupportedZoneError


class Zone(str, Enum):
    """Cost/distance tier between pickup and delivery pincodes, A (nearest) to E."""

    A = "A"
    B = "B"
    C = "C"
    D = "D"
    E = "E"

    @property
    def display_name(self) -> str:
        return f"Zone {self.value}"

    @classmethod
    def parse(cls, value: Any) -> "Zone":
        if isinstance(value, Zone):
            return value
        if not isinstance(value, str):
            raise UnsupportedZoneError(value)

        zone = ZONE_ALIASES.get(value.strip().lower())
        if zone is None:
            raise UnsupportedZoneError(value)
        return zone


# every spelling of a zone used by courier adapters and the plan editor
ZONE_ALIASES: Dict[str, Zone] = {}
for _zone, _form_key, _label in (
    (Zone.A, "withinCity", "WITHIN_CITY"),
    (Zone.B, "withinZone", "WITHIN_STATE"),
    (Zone.C, "withinMetro", "WITHIN_METRO"),
    (Zone.D, "withinRoi", "WITHIN_ROI"),
    (Zone.E, "northEast", "NORTH_EAST"),
):
    for _alias in (
        _zone.value,
        f"z_{_zone.value}",
        f"zone_{_zone.value}",
        f"zone {_zone.value}",
        _form_key,
        _label,
    ):
        ZONE_ALIASES[_alias.lower()] = _zone


ALL_ZONES = list(Zone)

ZONE_PRICE_FIELDS = (
    "base_price",
    "increment_price",
    "rto_base_price",
    "rto_increment_price",
    "flat_rto_charge",
)


class ZonePricing(BaseModel):
    base_price: float = Field(default=0, ge=0)
    increment_price: float = Field(default=0, ge=0)
    is_rto_same_as_fw: bool = True
    rto_base_price: float = Field(default=0, ge=0)
    rto_increment_price: float = Field(default=0, ge=0)
    flat_rto_charge: float = Field(default=0, ge=0)

    @model_validator(mode="after")
    def mirror_forward_rto(self):
        # RTO follows forward pricing whenever the card says so
        if self.is_rto_same_as_fw:
            self.rto_base_price = self.base_price
            self.rto_increment_price = self.increment_price
        return self


class CourierPricing(BaseModel):
    """A courier's rate card inside a shipping plan"""

    courierId: str
    weight_slab: float = Field(default=0.5, gt=0)
    increment_weight: float = Field(default=0.5, gt=0)
    increment_price: float = Field(default=0, ge=0)

    cod_charge_hard: float = Field(default=0, ge=0)
    cod_charge_percent: float = Field(default=0, ge=0, le=100)

    is_fw_applicable: bool = True
    is_rto_applicable: bool = False
    is_cod_applicable: bool = True
    is_cod_reversal_applicable: bool = True

    zonePricing: Dict[Zone, ZonePricing]

    @field_validator("zonePricing", mode="before")
    @classmethod
    def key_zone_pricing_by_zone(cls, value):
        # accepts {"withinCity": {...}} style maps and [{"zone": "Z_A", ...}] lists
        try:
            if isinstance(value, list):
                keyed = {}
                for entry in value:
                    entry = dict(entry)
                    zone = Zone.parse(entry.pop("zone", None))
                    keyed[zone] = entry
                return keyed

            if isinstance(value, dict):
                return {Zone.parse(zone): pricing for zone, pricing in value.items()}
        except UnsupportedZoneError as e:
            raise ValueError(e.message)

        return value

    @field_validator("zonePricing")
    @classmethod
    def check_all_zones_present(cls, value: Dict[Zone, ZonePricing]):
        missing = [zone.value for zone in ALL_ZONES if zone not in value]
        if missing:
            raise ValueError(f"Zone pricing missing for zone(s): {', '.join(missing)}")
        return value


class ShippingPlan(BaseModel):
    id: Optional[str] = None
    name: str = Field(min_length=1, max_length=100)
    description: Optional[str] = None
    isDefault: bool = False
    features: List[str] = []
    courierPricing: List[CourierPricing] = []

    @field_validator("courierPricing")
    @classmethod
    def check_distinct_couriers(cls, value: List[CourierPricing]):
        seen = set()
        for pricing in value:
            if pricing.courierId in seen:
                raise ValueError(
                    f"Courier {pricing.courierId} is priced more than once in the plan"
                )
            seen.add(pricing.courierId)
        return value

    def get_courier_pricing(self, courier_id: str) -> Optional[CourierPricing]:
        for pricing in self.courierPricing:
            if pricing.courierId == courier_id:
                return pricing
        return None


def ensure_single_default(plans: List[ShippingPlan]) -> List[ShippingPlan]:
    """An account may mark at most one of its plans as default."""
    defaults = [plan.name for plan in plans if plan.isDefault]
    if len(defaults) > 1:
        raise ValueError(
            f"Only one plan can be marked default, found: {', '.join(defaults)}"
        )
    return plans


# ============================================
# PLAN EDIT REQUEST / RESPONSE MODELS
# ============================================


class PlanDiffRequestModel(BaseModel):
    current: List[Dict[str, Any]] = []
    original: List[Dict[str, Any]] = []
    keyed_by_courier_id: bool = False


class PlanDiffResponseModel(BaseModel):
    hasChanges: bool
    changedCouriers: List[Any]


class PriceAdjustmentRequestModel(BaseModel):
    courierPricing: List[CourierPricing]
    selectedIndices: List[int]
    adjustmentPercent: float
