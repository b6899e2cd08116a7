"""
Plan Diff

Detects couriers whose zone pricing changed between two revisions of a
shipping plan so the change can be reviewed before it is applied.

A courier is changed when any of the five monetary fields of any of its five
zones differs by more than the tolerance (absolute, currency units).

Diffing is advisory: malformed input never raises, it reads as "no change".
"""

from dataclasses import dataclass, field
from decimal import Decimal, InvalidOperation
from typing import Any, Dict, Iterable, List, Optional, Sequence, Set

from context_manager.context import context_user_data
from logger import logger

from settings import PLAN_DIFF_TOLERANCE
from utils.exceptions import UnsupportedZoneError

from .shipping_plan_schema import (
    ALL_ZONES,
    ZONE_PRICE_FIELDS,
    CourierPricing,
    ShippingPlan,
    Zone,
    ZonePricing,
)


@dataclass
class PlanDiffResult:
    has_changes: bool = False
    changed_couriers: Set[Any] = field(default_factory=set)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "hasChanges": self.has_changes,
            "changedCouriers": sorted(self.changed_couriers, key=str),
        }


class PlanDiffEngine:

    def __init__(self, tolerance: float = PLAN_DIFF_TOLERANCE):
        self.tolerance = tolerance
        self._tolerance = Decimal(str(tolerance))

    # ============================================
    # DIFFING
    # ============================================

    def diff(self, current: Sequence[Any], original: Sequence[Any]) -> PlanDiffResult:
        """
        Compare two index-aligned courier pricing lists.

        Couriers present at an index of only one list are skipped.

        Returns:
            PlanDiffResult with the changed indices
        """
        if not _is_sequence(current) or not _is_sequence(original):
            return PlanDiffResult()
        if not current or not original:
            return PlanDiffResult()

        changed = set()
        for index in range(min(len(current), len(original))):
            if self.courier_changed(current[index], original[index], label=index):
                changed.add(index)

        return PlanDiffResult(has_changes=bool(changed), changed_couriers=changed)

    def diff_by_courier_id(
        self, current: Sequence[Any], original: Sequence[Any]
    ) -> PlanDiffResult:
        """
        Compare two courier pricing lists matched on courierId instead of
        position. Couriers present in only one list are skipped.

        Returns:
            PlanDiffResult with the changed courier ids
        """
        if not _is_sequence(current) or not _is_sequence(original):
            return PlanDiffResult()

        original_by_id = _index_by_courier_id(original)

        changed = set()
        for courier_id, pricing in _index_by_courier_id(current).items():
            if courier_id not in original_by_id:
                continue
            if self.courier_changed(
                pricing, original_by_id[courier_id], label=courier_id
            ):
                changed.add(courier_id)

        return PlanDiffResult(has_changes=bool(changed), changed_couriers=changed)

    def diff_plans(
        self,
        current_plan: ShippingPlan,
        original_plan: ShippingPlan,
        keyed_by_courier_id: bool = False,
    ) -> PlanDiffResult:
        if keyed_by_courier_id:
            return self.diff_by_courier_id(
                current_plan.courierPricing, original_plan.courierPricing
            )
        return self.diff(current_plan.courierPricing, original_plan.courierPricing)

    def courier_changed(self, current: Any, original: Any, label: Any = None) -> bool:
        try:
            current_zones = _zone_pricing_map(current)
            original_zones = _zone_pricing_map(original)

            for zone in ALL_ZONES:
                current_zone = current_zones.get(zone) or {}
                original_zone = original_zones.get(zone) or {}

                for price_field in ZONE_PRICE_FIELDS:
                    difference = _amount(current_zone, price_field) - _amount(
                        original_zone, price_field
                    )
                    if abs(difference) > self._tolerance:
                        return True

        except (
            TypeError,
            ValueError,
            AttributeError,
            InvalidOperation,
            UnsupportedZoneError,
        ) as e:
            logger.warning(
                extra=context_user_data.get(),
                msg="Skipping courier {} in plan diff: {}".format(label, str(e)),
            )
            return False

        return False

    # ============================================
    # PRICE CHANGE HELPERS
    # ============================================

    def calculate_price_difference(
        self, original_price: float, new_price: float
    ) -> Dict[str, Any]:
        difference = new_price - original_price
        percentage_change = (
            (difference / original_price) * 100 if original_price > 0 else 0
        )
        return {
            "difference": difference,
            "percentageChange": percentage_change,
            "hasChanged": abs(_to_decimal(new_price) - _to_decimal(original_price))
            > self._tolerance,
        }

    def format_price_change(
        self, original_price: float, new_price: float
    ) -> Optional[Dict[str, Any]]:
        price_difference = self.calculate_price_difference(original_price, new_price)

        if not price_difference["hasChanged"]:
            return None

        return {
            "original": original_price,
            "current": new_price,
            "difference": price_difference["difference"],
            "percentageChange": round(price_difference["percentageChange"], 2),
            "isIncrease": price_difference["difference"] > 0,
        }


def apply_bulk_price_adjustment(
    courier_pricing: List[CourierPricing],
    selected_indices: Iterable[int],
    adjustment_percent: float,
) -> List[CourierPricing]:
    """
    Scale every zone price of the selected couriers by adjustment_percent.
    Returns new rate cards, the input is left untouched.

    Raises:
        pydantic.ValidationError: the adjustment drives a price below 0
    """
    selected = set(selected_indices)
    factor = 1 + adjustment_percent / 100

    adjusted = []
    for index, pricing in enumerate(courier_pricing):
        if index not in selected:
            adjusted.append(pricing)
            continue

        zone_pricing = {}
        for zone, prices in pricing.zonePricing.items():
            # prices stay >= 0, a cut below -100% fails validation
            zone_pricing[zone] = ZonePricing.model_validate(
                {
                    **prices.model_dump(),
                    **{
                        price_field: round(getattr(prices, price_field) * factor, 2)
                        for price_field in ZONE_PRICE_FIELDS
                    },
                }
            )

        adjusted.append(pricing.model_copy(update={"zonePricing": zone_pricing}))

    return adjusted


def _is_sequence(value: Any) -> bool:
    return isinstance(value, (list, tuple))


def _get(value: Any, key: str) -> Any:
    if isinstance(value, dict):
        return value.get(key)
    return getattr(value, key, None)


def _zone_pricing_map(courier: Any) -> Dict[Zone, Any]:
    zone_pricing = _get(courier, "zonePricing")
    if zone_pricing is None:
        raise ValueError("zonePricing missing")

    if isinstance(zone_pricing, list):
        return {Zone.parse(_get(entry, "zone")): entry for entry in zone_pricing}

    return {Zone.parse(zone): prices for zone, prices in zone_pricing.items()}


RTO_MIRRORED_FIELDS = {
    "rto_base_price": "base_price",
    "rto_increment_price": "increment_price",
}


def _amount(zone_pricing: Any, price_field: str) -> Decimal:
    # RTO mirrors forward pricing unless the zone opts out, as in ZonePricing
    same_as_fw = _get(zone_pricing, "is_rto_same_as_fw")
    if price_field in RTO_MIRRORED_FIELDS and same_as_fw is not False:
        price_field = RTO_MIRRORED_FIELDS[price_field]

    return _to_decimal(_get(zone_pricing, price_field))


def _to_decimal(value: Any) -> Decimal:
    # compared in currency units without float noise
    if value is None:
        return Decimal("0")
    if isinstance(value, bool):
        raise TypeError("price must be numeric, got a boolean")
    return Decimal(str(float(value)))


def _index_by_courier_id(pricing_list: Sequence[Any]) -> Dict[Any, Any]:
    indexed = {}
    for pricing in pricing_list:
        courier_id = _get(pricing, "courierId")
        if courier_id is None:
            continue
        try:
            hash(courier_id)
        except TypeError:
            logger.warning(
                extra=context_user_data.get(),
                msg="Skipping courier with invalid id {!r} in plan diff".format(
                    courier_id
                ),
            )
            continue
        indexed[courier_id] = pricing
    return indexed
