"""
Surcharge Calculation

COD and RTO charges of a quote plus the applicability flags of the rate card.

RTO precedence (first match wins):
1. rate card is not RTO applicable  -> 0
2. zone is_rto_same_as_fw           -> forward price (base + weight charges)
3. zone flat_rto_charge > 0         -> flat_rto_charge
4. otherwise                        -> rto_base_price + rto_increment_price x increments
"""

from typing import Any, Dict
from dataclasses import dataclass
from decimal import Decimal, ROUND_HALF_UP

from modules.shipping_plan.shipping_plan_schema import CourierPricing, ZonePricing
from utils.weight_calc import WeightResolver


PAYMENT_TYPE_COD = "cod"


@dataclass
class ApplicabilityFlags:
    fw_applicable: bool
    rto_applicable: bool
    cod_applicable: bool
    cod_reversal_applicable: bool

    def to_dict(self) -> Dict[str, bool]:
        return {
            "is_fw_applicable": self.fw_applicable,
            "is_rto_applicable": self.rto_applicable,
            "is_cod_applicable": self.cod_applicable,
            "is_cod_reversal_applicable": self.cod_reversal_applicable,
        }


class SurchargeCalculator:

    @staticmethod
    def is_cod_applicable(payment_type: str, rate_card: CourierPricing) -> bool:
        """COD is charged only on COD payments against a COD-enabled rate card"""
        return (
            (payment_type or "").strip().lower() == PAYMENT_TYPE_COD
            and rate_card.is_cod_applicable
        )

    @staticmethod
    def cod_charge(
        collectable_amount: float,
        cod_charge_hard: float,
        cod_charge_percent: float,
        is_applicable: bool,
    ) -> float:
        """
        COD charge is the larger of the flat (hard) charge and the percentage
        of the collectable amount.
        """
        if not is_applicable:
            return 0.0

        hard = _to_decimal(cod_charge_hard)
        percent_component = (
            _to_decimal(cod_charge_percent)
            * _to_decimal(collectable_amount)
            / Decimal("100")
        )
        return round_price(max(hard, percent_component))

    @staticmethod
    def rto_charge(
        rate_card: CourierPricing,
        zone_pricing: ZonePricing,
        increments: int,
        forward_price: float,
    ) -> float:
        if not rate_card.is_rto_applicable:
            return 0.0

        if zone_pricing.is_rto_same_as_fw:
            return round_price(max(Decimal("0"), _to_decimal(forward_price)))

        if zone_pricing.flat_rto_charge > 0:
            return round_price(zone_pricing.flat_rto_charge)

        rto = _to_decimal(zone_pricing.rto_base_price) + _to_decimal(
            zone_pricing.rto_increment_price
        ) * max(0, increments)
        return round_price(rto)

    @staticmethod
    def applicability(rate_card: CourierPricing) -> ApplicabilityFlags:
        return ApplicabilityFlags(
            fw_applicable=rate_card.is_fw_applicable,
            rto_applicable=rate_card.is_rto_applicable,
            cod_applicable=rate_card.is_cod_applicable,
            cod_reversal_applicable=rate_card.is_cod_reversal_applicable,
        )

    @staticmethod
    def excess_charges(
        weight_difference: float,
        rate_card: CourierPricing,
        zone_pricing: ZonePricing,
    ) -> Dict[str, float]:
        """
        Forward and RTO charges owed for weight found above the declared
        weight (weight discrepancy).
        """
        increments = WeightResolver().calculate_excess_increments(
            weight_difference, rate_card.increment_weight
        )
        if increments == 0:
            return {"fwExcess": 0.0, "rtoExcess": 0.0}

        fw_excess = _to_decimal(zone_pricing.increment_price) * increments

        rto_excess = Decimal("0")
        if rate_card.is_rto_applicable:
            if zone_pricing.is_rto_same_as_fw:
                rto_excess = fw_excess
            else:
                rto_excess = _to_decimal(zone_pricing.rto_increment_price) * increments

        return {"fwExcess": round_price(fw_excess), "rtoExcess": round_price(rto_excess)}


def _to_decimal(value: Any) -> Decimal:
    if value is None:
        return Decimal("0")
    return Decimal(str(value))


def round_price(value: Any) -> float:
    return float(_to_decimal(value).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP))
