import re
from typing import Annotated, Any, Dict, List, Optional

from pydantic import BaseModel, BeforeValidator, ConfigDict, Field, field_validator

# schema
from modules.shipping_plan.shipping_plan_schema import CourierPricing, Zone


class PackageDetails(BaseModel):
    # cm
    length: float
    breadth: float
    height: float
    # kg
    deadWeight: float


class ShipmentParams(BaseModel):
    pickup_pincode: str
    delivery_pincode: str
    package: PackageDetails
    payment_type: str = "prepaid"
    collectable_amount: float = 0.0
    is_reverse: bool = False


class ZoneResolution(BaseModel):
    zone: Zone
    zoneName: str


class CourierInfoModel(BaseModel):
    id: str
    name: str
    courier_code: str
    type: str = "surface"
    nickname: Optional[str] = None
    rating: Optional[float] = None
    pickup_performance: Optional[float] = None
    delivery_performance: Optional[float] = None
    rto_performance: Optional[float] = None
    estimated_delivery_days: Optional[str] = None
    etd: Optional[str] = None
    pickup_time: Optional[str] = None
    is_active: bool = True
    is_reversed_courier: bool = False
    recommended: bool = False

    model_config = ConfigDict(coerce_numbers_to_str=True)


class CourierWithPricingModel(BaseModel):
    courier: CourierInfoModel
    pricing: CourierPricing


class RateCalculatorParamsModel(BaseModel):
    pickup_pincode: Optional[str] = None
    delivery_pincode: Optional[str] = None
    zone: str

    actualWeight: float
    weightUnit: str = "kg"
    length: float
    breadth: float
    height: float
    sizeUnit: str = "cm"

    paymentType: str = "prepaid"
    collectableAmount: float = 0.0
    isReversedOrder: bool = False

    couriers: List[CourierWithPricingModel]


class RateFilterModel(BaseModel):
    maxPrice: Optional[float] = None
    minPrice: Optional[float] = None
    courierType: Optional[str] = None
    codSupported: Optional[bool] = None
    rtoSupported: Optional[bool] = None
    zone: Optional[Zone] = None
    excludeCourierIds: List[str] = []


# ============================================
# CANONICAL RATE QUOTE
# ============================================


class QuotePricingModel(BaseModel):
    basePrice: float = 0.0
    weightCharges: float = 0.0
    codCharges: float = 0.0
    rtoCharges: float = 0.0
    fwCharges: float = 0.0
    totalPrice: float = 0.0


class WeightDetailsModel(BaseModel):
    actual: float
    volumetric: float
    chargeable: float = 0.0
    min: float = 0.0
    weightIncrementRatio: float = 0.0
    finalWeight: float = 0.0


class CodDetailsModel(BaseModel):
    hardCharge: float = 0.0
    percentCharge: float = 0.0
    isApplicable: bool = False


class RateQuote(BaseModel):
    courierId: str
    courierName: str
    courierNickname: Optional[str] = None
    courierCode: str
    type: str
    rating: Optional[float] = None
    pickupPerformance: Optional[float] = None
    deliveryPerformance: Optional[float] = None
    rtoPerformance: Optional[float] = None
    etd: Optional[str] = None
    edd: Optional[int] = None
    expectedPickup: Optional[str] = None

    zone: Zone
    zoneName: str

    pricing: QuotePricingModel
    weightDetails: WeightDetailsModel
    cod: CodDetailsModel

    fwApplicable: bool = False
    rtoApplicable: bool = False
    codApplicable: bool = False
    codReversalApplicable: bool = False


class RateSummaryModel(BaseModel):
    totalCouriers: int
    serviceable: int
    cheapest: Optional[RateQuote] = None
    mostExpensive: Optional[RateQuote] = None
    averagePrice: float
    priceRange: Dict[str, float]


class RateNormalizeRequestModel(BaseModel):
    quotes: List[Dict[str, Any]]


# ============================================
# RAW COURIER QUOTE (adapter output, parsed strictly)
# ============================================


def _none_to_zero(value):
    if value is None or value == "":
        return 0
    return value


def _none_to_false(value):
    if value is None:
        return False
    return value


# optional surcharge fields default to 0 / false when absent or null
OptionalAmount = Annotated[float, BeforeValidator(_none_to_zero)]
OptionalFlag = Annotated[bool, BeforeValidator(_none_to_false)]


LEADING_INTEGER = re.compile(r"^\s*([+-]?\d+)")


class RawCourierModel(BaseModel):
    model_config = ConfigDict(extra="ignore", coerce_numbers_to_str=True)

    id: str
    name: str
    courier_code: str
    type: str

    nickname: Optional[str] = None
    rating: Optional[float] = None
    pickup_performance: Optional[float] = None
    delivery_performance: Optional[float] = None
    rto_performance: Optional[float] = None
    etd: Optional[str] = None
    # days, never negative
    estimated_delivery_days: Optional[int] = Field(default=None, ge=0)

    @field_validator("estimated_delivery_days", mode="before")
    @classmethod
    def parse_delivery_days(cls, value):
        if value is None or isinstance(value, int) and not isinstance(value, bool):
            return value
        if isinstance(value, float) and value == value and abs(value) != float("inf"):
            return int(value)
        if isinstance(value, str):
            match = LEADING_INTEGER.match(value)
            if match:
                return int(match.group(1))
        raise ValueError(f"estimated delivery days must be numeric, got {value!r}")


class RawPricingModel(BaseModel):
    model_config = ConfigDict(extra="ignore")

    cod_charge_hard: OptionalAmount = 0.0
    cod_charge_percent: OptionalAmount = 0.0
    is_cod_applicable: OptionalFlag = False
    is_rto_applicable: OptionalFlag = False
    is_fw_applicable: OptionalFlag = False
    is_cod_reversal_applicable: OptionalFlag = False


class RawBreakdownModel(BaseModel):
    model_config = ConfigDict(extra="ignore")

    actual_weight: float
    volumetric_weight: float
    chargeable_weight: OptionalAmount = 0.0
    min_weight: OptionalAmount = 0.0
    weight_increment_ratio: OptionalAmount = 0.0


class RawQuoteModel(BaseModel):
    model_config = ConfigDict(extra="ignore")

    courier: RawCourierModel
    breakdown: RawBreakdownModel
    pricing: RawPricingModel = RawPricingModel()

    zone: Any
    zoneName: Optional[str] = None
    expected_pickup: Optional[str] = None

    final_weight: OptionalAmount = 0.0
    base_price: OptionalAmount = 0.0
    weight_charges: OptionalAmount = 0.0
    cod_charges: OptionalAmount = 0.0
    rto_charges: OptionalAmount = 0.0
    fw_charges: OptionalAmount = 0.0
    total_price: OptionalAmount = 0.0

    @field_validator("pricing", mode="before")
    @classmethod
    def default_pricing(cls, value):
        if value is None:
            return {}
        return value
