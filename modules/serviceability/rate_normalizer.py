from typing import Any, Dict, Iterable, List, Optional, Tuple

from pydantic import ValidationError

from context_manager.context import context_user_data
from logger import logger

# schema
from modules.shipping_plan.shipping_plan_schema import Zone
from modules.serviceability.serviceability_schema import (
    CodDetailsModel,
    QuotePricingModel,
    RateQuote,
    RawQuoteModel,
    WeightDetailsModel,
)

# utils
from utils.exceptions import MalformedQuoteError, RateEngineError, UnsupportedZoneError


class RateNormalizer:
    """
    Turns a raw courier quote (nested courier / pricing / breakdown objects as
    produced by the courier adapters) into the canonical RateQuote.

    Required identity, weight and zone fields are never defaulted; optional
    surcharge amounts default to 0.
    """

    @staticmethod
    def normalize(raw_quote: Dict[str, Any]) -> RateQuote:
        if not isinstance(raw_quote, dict):
            raise MalformedQuoteError("", reason="quote must be an object")

        courier_id = _raw_courier_id(raw_quote)

        try:
            quote = RawQuoteModel.model_validate(raw_quote)
        except ValidationError as e:
            path, reason = _first_error(e)
            raise MalformedQuoteError(path, reason=reason, courier_id=courier_id)

        if quote.zone is None:
            raise MalformedQuoteError("zone", courier_id=courier_id)

        try:
            zone = Zone.parse(quote.zone)
        except UnsupportedZoneError:
            raise UnsupportedZoneError(quote.zone, courier_id=courier_id)

        courier = quote.courier
        pricing = quote.pricing
        breakdown = quote.breakdown

        return RateQuote(
            courierId=courier.id,
            courierName=courier.name,
            courierNickname=courier.nickname,
            courierCode=courier.courier_code,
            type=courier.type,
            rating=courier.rating,
            pickupPerformance=courier.pickup_performance,
            deliveryPerformance=courier.delivery_performance,
            rtoPerformance=courier.rto_performance,
            etd=courier.etd,
            edd=courier.estimated_delivery_days,
            expectedPickup=quote.expected_pickup,
            zone=zone,
            zoneName=quote.zoneName or zone.display_name,
            pricing=QuotePricingModel(
                basePrice=quote.base_price,
                weightCharges=quote.weight_charges,
                codCharges=quote.cod_charges,
                rtoCharges=quote.rto_charges,
                fwCharges=quote.fw_charges,
                totalPrice=quote.total_price,
            ),
            weightDetails=WeightDetailsModel(
                actual=breakdown.actual_weight,
                volumetric=breakdown.volumetric_weight,
                chargeable=breakdown.chargeable_weight,
                min=breakdown.min_weight,
                weightIncrementRatio=breakdown.weight_increment_ratio,
                finalWeight=quote.final_weight,
            ),
            cod=CodDetailsModel(
                hardCharge=pricing.cod_charge_hard,
                percentCharge=pricing.cod_charge_percent,
                isApplicable=pricing.is_cod_applicable,
            ),
            fwApplicable=pricing.is_fw_applicable,
            rtoApplicable=pricing.is_rto_applicable,
            codApplicable=pricing.is_cod_applicable,
            codReversalApplicable=pricing.is_cod_reversal_applicable,
        )

    @staticmethod
    def normalize_many(
        raw_quotes: Iterable[Dict[str, Any]],
    ) -> Tuple[List[RateQuote], int]:
        """
        Normalize every quote, dropping the ones that fail.

        Returns:
            (normalized quotes, number of dropped quotes)
        """
        normalized = []
        dropped = 0

        for raw_quote in raw_quotes:
            try:
                normalized.append(RateNormalizer.normalize(raw_quote))
            except RateEngineError as e:
                dropped += 1
                log_dropped_quote(e)

        return normalized, dropped


def log_dropped_quote(error: RateEngineError):
    logger.warning(
        extra=context_user_data.get(),
        msg="Dropping quote from courier {}: {}".format(
            getattr(error, "courier_id", None) or "unknown", error.message
        ),
    )


def _raw_courier_id(raw_quote: Dict[str, Any]) -> Optional[str]:
    courier = raw_quote.get("courier")
    if isinstance(courier, dict) and courier.get("id") is not None:
        return str(courier["id"])
    return None


def _first_error(error: ValidationError) -> Tuple[str, str]:
    first = error.errors()[0]
    path = ".".join(str(part) for part in first["loc"])
    if first["type"] == "missing":
        return path, "field required"
    return path, first["msg"]
