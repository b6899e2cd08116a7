import http
from datetime import datetime
from typing import Any, Dict, List, Optional

import pytz

from context_manager.context import context_user_data

from logger import logger

# schema
from schema.base import GenericResponseModel
from modules.shipping_plan.shipping_plan_schema import CourierPricing, Zone
from modules.serviceability.serviceability_schema import (
    CourierInfoModel,
    CourierWithPricingModel,
    PackageDetails,
    RateCalculatorParamsModel,
    RateFilterModel,
    RateNormalizeRequestModel,
    RateQuote,
    RateSummaryModel,
    ShipmentParams,
    ZoneResolution,
)

# services
from modules.shipping_plan.zone_price_table import ZonePriceTable
from .surcharge_service import SurchargeCalculator, round_price
from .rate_normalizer import RateNormalizer, log_dropped_quote

# utils
from utils.exceptions import (
    InvalidWeightError,
    MalformedQuoteError,
    UnsupportedZoneError,
)
from utils.weight_calc import WeightResolver


IST = pytz.timezone("Asia/Kolkata")


class ServiceabilityService:

    # ============================================
    # FORWARD PRICING
    # ============================================

    @staticmethod
    def calculate_price(
        shipment: ShipmentParams,
        courier: CourierInfoModel,
        rate_card: CourierPricing,
        zone: ZoneResolution,
        now: Optional[datetime] = None,
    ) -> Dict[str, Any]:
        """
        Price one shipment against one courier's rate card.

        The result follows the raw courier quote contract, so plan prices go
        through the same RateNormalizer as quotes fetched from courier APIs.

        Raises:
            InvalidWeightError: non-positive package dimensions or weight
            UnsupportedZoneError: zone not priced by the rate card
        """
        weight = WeightResolver().resolve(
            shipment.package, rate_card.weight_slab, rate_card.increment_weight
        )

        zone_pricing = ZonePriceTable(rate_card).for_zone(zone.zone)

        base_price = round_price(zone_pricing.base_price)
        weight_charges = round_price(zone_pricing.increment_price * weight.increments)
        forward_price = round_price(base_price + weight_charges)

        cod_applicable = SurchargeCalculator.is_cod_applicable(
            shipment.payment_type, rate_card
        )
        cod_charges = SurchargeCalculator.cod_charge(
            collectable_amount=shipment.collectable_amount,
            cod_charge_hard=rate_card.cod_charge_hard,
            cod_charge_percent=rate_card.cod_charge_percent,
            is_applicable=cod_applicable,
        )

        # RTO is contingent, reported but never part of the total
        rto_charges = SurchargeCalculator.rto_charge(
            rate_card, zone_pricing, weight.increments, forward_price
        )
        fw_charges = forward_price if rate_card.is_fw_applicable else 0.0
        total_price = round_price(base_price + weight_charges + cod_charges)

        flags = SurchargeCalculator.applicability(rate_card)

        return {
            "courier": {
                "id": courier.id,
                "name": courier.name,
                "nickname": courier.nickname,
                "courier_code": courier.courier_code,
                "type": courier.type,
                "rating": courier.rating,
                "pickup_performance": courier.pickup_performance,
                "delivery_performance": courier.delivery_performance,
                "rto_performance": courier.rto_performance,
                "estimated_delivery_days": courier.estimated_delivery_days,
                "etd": courier.etd,
            },
            "pricing": {
                "cod_charge_hard": rate_card.cod_charge_hard,
                "cod_charge_percent": rate_card.cod_charge_percent,
                **flags.to_dict(),
            },
            "zone": zone.zone.value,
            "zoneName": zone.zoneName,
            "expected_pickup": ServiceabilityService.calculate_expected_pickup(
                courier.pickup_time, now=now
            ),
            "final_weight": weight.final_weight,
            "base_price": base_price,
            "weight_charges": weight_charges,
            "cod_charges": cod_charges,
            "rto_charges": rto_charges,
            "fw_charges": fw_charges,
            "total_price": total_price,
            "breakdown": {
                "actual_weight": weight.actual,
                "volumetric_weight": weight.volumetric,
                "chargeable_weight": weight.chargeable,
                "min_weight": rate_card.weight_slab,
                "weight_increment_ratio": weight.increments,
            },
        }

    @staticmethod
    def calculate_prices_for_couriers(
        shipment: ShipmentParams,
        couriers: List[CourierWithPricingModel],
        zone: ZoneResolution,
        now: Optional[datetime] = None,
    ) -> List[Dict[str, Any]]:
        """
        Price the shipment for every active courier matching the shipment
        direction. A courier whose card cannot price the zone is skipped.
        """
        raw_quotes = []

        for entry in couriers:
            courier = entry.courier

            if not courier.is_active:
                continue

            if courier.is_reversed_courier != shipment.is_reverse:
                continue

            try:
                raw_quotes.append(
                    ServiceabilityService.calculate_price(
                        shipment, courier, entry.pricing, zone, now=now
                    )
                )
            except (MalformedQuoteError, UnsupportedZoneError) as e:
                e.courier_id = e.courier_id or courier.id
                log_dropped_quote(e)

        return raw_quotes

    @staticmethod
    def get_rate_quotes(
        rate_calculator_params: RateCalculatorParamsModel,
    ) -> GenericResponseModel:

        try:
            zone = ServiceabilityService.resolve_zone(rate_calculator_params.zone)

            shipment = ShipmentParams(
                pickup_pincode=rate_calculator_params.pickup_pincode or "",
                delivery_pincode=rate_calculator_params.delivery_pincode or "",
                package=PackageDetails(
                    length=WeightResolver.normalize_dimension(
                        rate_calculator_params.length, rate_calculator_params.sizeUnit
                    ),
                    breadth=WeightResolver.normalize_dimension(
                        rate_calculator_params.breadth, rate_calculator_params.sizeUnit
                    ),
                    height=WeightResolver.normalize_dimension(
                        rate_calculator_params.height, rate_calculator_params.sizeUnit
                    ),
                    deadWeight=WeightResolver.normalize_weight(
                        rate_calculator_params.actualWeight,
                        rate_calculator_params.weightUnit,
                    ),
                ),
                payment_type=rate_calculator_params.paymentType,
                collectable_amount=rate_calculator_params.collectableAmount,
                is_reverse=rate_calculator_params.isReversedOrder,
            )

            raw_quotes = ServiceabilityService.calculate_prices_for_couriers(
                shipment, rate_calculator_params.couriers, zone
            )

            quotes, _ = RateNormalizer.normalize_many(raw_quotes)
            quotes = ServiceabilityService.sort_by_price(quotes)

            if not quotes:
                return GenericResponseModel(
                    status_code=http.HTTPStatus.OK,
                    status=True,
                    data=[],
                    message="No rates available",
                )

            return GenericResponseModel(
                status_code=http.HTTPStatus.OK,
                status=True,
                data=quotes,
                message="Rates calculated successfully",
            )

        except (InvalidWeightError, UnsupportedZoneError) as e:
            logger.error(
                extra=context_user_data.get(),
                msg="Invalid rate calculation input: {}".format(e.message),
            )
            return GenericResponseModel(
                status_code=http.HTTPStatus.UNPROCESSABLE_ENTITY,
                status=False,
                message=e.message,
            )

    @staticmethod
    def resolve_zone(zone) -> ZoneResolution:
        parsed = Zone.parse(zone)
        return ZoneResolution(zone=parsed, zoneName=parsed.display_name)

    # ============================================
    # PICKUP ESTIMATION
    # ============================================

    @staticmethod
    def calculate_expected_pickup(
        pickup_time: Optional[str], now: Optional[datetime] = None
    ) -> str:
        """
        'Today' if the courier's daily pickup cut-off (HH:MM[:SS], IST) has not
        passed yet, otherwise 'Tomorrow'.
        """
        if not pickup_time:
            return "Today"

        now = now or datetime.now(IST)

        try:
            parts = [int(part) for part in pickup_time.split(":")]
        except ValueError:
            return "Today"

        hour = parts[0] if len(parts) > 0 else 12
        minute = parts[1] if len(parts) > 1 else 0
        second = parts[2] if len(parts) > 2 else 0

        try:
            pickup_at = now.replace(
                hour=hour, minute=minute, second=second, microsecond=0
            )
        except ValueError:
            return "Today"

        return "Tomorrow" if pickup_at < now else "Today"

    # ============================================
    # QUOTE LIST UTILITIES
    # ============================================

    @staticmethod
    def filter_quotes(
        quotes: List[RateQuote], filters: RateFilterModel
    ) -> List[RateQuote]:
        def matches(quote: RateQuote) -> bool:
            total = quote.pricing.totalPrice
            if filters.maxPrice is not None and total > filters.maxPrice:
                return False
            if filters.minPrice is not None and total < filters.minPrice:
                return False
            if filters.courierType and quote.type != filters.courierType:
                return False
            if (
                filters.codSupported is not None
                and quote.codApplicable != filters.codSupported
            ):
                return False
            if (
                filters.rtoSupported is not None
                and quote.rtoApplicable != filters.rtoSupported
            ):
                return False
            if filters.zone and quote.zone != filters.zone:
                return False
            if quote.courierId in filters.excludeCourierIds:
                return False
            return True

        return [quote for quote in quotes if matches(quote)]

    @staticmethod
    def sort_by_price(quotes: List[RateQuote], order: str = "asc") -> List[RateQuote]:
        return sorted(
            quotes,
            key=lambda quote: quote.pricing.totalPrice,
            reverse=order == "desc",
        )

    @staticmethod
    def get_cheapest_option(quotes: List[RateQuote]) -> Optional[RateQuote]:
        if not quotes:
            return None
        return min(quotes, key=lambda quote: quote.pricing.totalPrice)

    @staticmethod
    def get_most_expensive_option(quotes: List[RateQuote]) -> Optional[RateQuote]:
        if not quotes:
            return None
        return max(quotes, key=lambda quote: quote.pricing.totalPrice)

    @staticmethod
    def get_price_summary(quotes: List[RateQuote]) -> RateSummaryModel:
        if not quotes:
            return RateSummaryModel(
                totalCouriers=0,
                serviceable=0,
                averagePrice=0,
                priceRange={"min": 0, "max": 0},
            )

        prices = [quote.pricing.totalPrice for quote in quotes]

        return RateSummaryModel(
            totalCouriers=len(quotes),
            serviceable=len(quotes),
            cheapest=ServiceabilityService.get_cheapest_option(quotes),
            mostExpensive=ServiceabilityService.get_most_expensive_option(quotes),
            averagePrice=round_price(sum(prices) / len(prices)),
            priceRange={"min": min(prices), "max": max(prices)},
        )

    # ============================================
    # RAW QUOTE NORMALIZATION
    # ============================================

    @staticmethod
    def normalize_quotes(
        normalize_params: RateNormalizeRequestModel,
    ) -> GenericResponseModel:
        quotes, dropped = RateNormalizer.normalize_many(normalize_params.quotes)

        if dropped:
            logger.info(
                extra=context_user_data.get(),
                msg="Normalized {} quotes, dropped {}".format(len(quotes), dropped),
            )

        return GenericResponseModel(
            status_code=http.HTTPStatus.OK,
            status=True,
            data={
                "quotes": ServiceabilityService.sort_by_price(quotes),
                "dropped": dropped,
            },
            message="Quotes normalized successfully",
        )
