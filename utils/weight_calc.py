"""
Weight Resolution

Derives volumetric and chargeable weight of a package and rounds it up to the
billable weight of a rate card (weight slab + whole increments).

All weight arithmetic is done on Decimal so that weights sitting exactly on a
slab or increment boundary never pick up an extra increment from float noise.

Calculation:
1. volumetric_weight = (L x B x H) / 5000 (reported to 3 dp, billed unrounded)
2. chargeable_weight = max(dead_weight, volumetric_weight)
3. chargeable <= weight_slab  -> final_weight = weight_slab
   chargeable >  weight_slab  -> increments = ceil((chargeable - slab) / increment)
                                 final_weight = slab + increments x increment
"""

from typing import Any, Dict
from dataclasses import dataclass
from decimal import Decimal, InvalidOperation, ROUND_CEILING, ROUND_HALF_UP

from settings import VOLUMETRIC_DIVISOR
from utils.exceptions import InvalidWeightError


@dataclass
class WeightResolution:
    """Result of weight resolution (all weights in kg)"""

    actual: float
    volumetric: float
    chargeable: float
    final_weight: float

    # number of increments billed beyond the weight slab
    increments: int

    def to_dict(self) -> Dict[str, Any]:
        return {
            "actual": self.actual,
            "volumetric": self.volumetric,
            "chargeable": self.chargeable,
            "final_weight": self.final_weight,
            "increments": self.increments,
        }


class WeightResolver:
    """
    Resolves the billable weight of a package against a rate card.

    Usage:
        resolver = WeightResolver()
        result = resolver.resolve(package, weight_slab=0.5, increment_weight=0.5)
    """

    VOLUMETRIC_DIVISOR = VOLUMETRIC_DIVISOR

    # ============================================
    # MAIN RESOLUTION METHOD
    # ============================================

    def resolve(
        self,
        package,
        weight_slab: float,
        increment_weight: float,
    ) -> WeightResolution:
        """
        Resolve actual, volumetric, chargeable and final billable weight.

        Args:
            package: PackageDetails (length, breadth, height in cm, deadWeight in kg)
            weight_slab: Minimum billable weight of the rate card
            increment_weight: Weight step billed beyond the slab

        Returns:
            WeightResolution

        Raises:
            InvalidWeightError: when any dimension, weight, slab or increment is <= 0
        """
        dead_weight = self._to_positive_decimal(package.deadWeight, "deadWeight")
        slab = self._to_positive_decimal(weight_slab, "weight_slab")
        increment = self._to_positive_decimal(increment_weight, "increment_weight")

        volumetric = self._volumetric(package.length, package.breadth, package.height)
        chargeable = max(dead_weight, volumetric)

        increments = self._increments(chargeable, slab, increment)
        final_weight = slab + increment * increments

        return WeightResolution(
            actual=float(dead_weight),
            volumetric=float(self._round_weight(volumetric)),
            chargeable=float(chargeable),
            final_weight=float(final_weight),
            increments=increments,
        )

    def validate_package(self, package) -> None:
        """
        Raises:
            InvalidWeightError: when any dimension or the dead weight is <= 0
        """
        self._to_positive_decimal(package.deadWeight, "deadWeight")
        self._volumetric(package.length, package.breadth, package.height)

    # ============================================
    # WEIGHT CALCULATIONS
    # ============================================

    def calculate_volumetric_weight(
        self,
        length: float,
        breadth: float,
        height: float,
    ) -> float:
        """
        Calculate volumetric weight.

        Formula: (L x B x H) / 5000, rounded to 3 decimal places
        """
        return float(self._round_weight(self._volumetric(length, breadth, height)))

    def calculate_chargeable_weight(
        self, dead_weight: float, volumetric_weight: float
    ) -> float:
        """Formula: max(dead_weight, volumetric_weight)"""
        dead = self._to_positive_decimal(dead_weight, "deadWeight")
        volumetric = self._to_positive_decimal(volumetric_weight, "volumetricWeight")
        return float(max(dead, volumetric))

    def calculate_increments(
        self,
        chargeable_weight: float,
        weight_slab: float,
        increment_weight: float,
    ) -> int:
        """Number of increments billed beyond the slab (0 at or below the slab)"""
        return self._increments(
            self._to_positive_decimal(chargeable_weight, "chargeable_weight"),
            self._to_positive_decimal(weight_slab, "weight_slab"),
            self._to_positive_decimal(increment_weight, "increment_weight"),
        )

    def calculate_excess_increments(
        self, weight_difference: float, increment_weight: float
    ) -> int:
        """
        Increments for a weight discrepancy (courier-measured minus declared
        weight). A non-positive difference has no excess.
        """
        increment = self._to_positive_decimal(increment_weight, "increment_weight")
        try:
            difference = Decimal(str(weight_difference or 0))
        except InvalidOperation:
            raise InvalidWeightError("weight difference must be numeric")

        if difference <= 0:
            return 0
        return int((difference / increment).to_integral_value(rounding=ROUND_CEILING))

    # ============================================
    # UNIT CONVERSIONS
    # ============================================

    @staticmethod
    def normalize_weight(weight: float, unit: str = "kg") -> float:
        """Convert weight to kilograms"""
        if unit.lower() in ("g", "gm", "gram", "grams"):
            return float(Decimal(str(weight)) / Decimal("1000"))
        return float(weight)

    @staticmethod
    def normalize_dimension(value: float, unit: str = "cm") -> float:
        """Convert a box dimension to centimetres"""
        if unit.lower() in ("inch", "in", "inches"):
            return float(Decimal(str(value)) * Decimal("2.54"))
        return float(value)

    # ============================================
    # UTILITY METHODS
    # ============================================

    def _volumetric(self, length, breadth, height) -> Decimal:
        l = self._to_positive_decimal(length, "length")
        b = self._to_positive_decimal(breadth, "breadth")
        h = self._to_positive_decimal(height, "height")

        return (l * b * h) / Decimal(str(self.VOLUMETRIC_DIVISOR))

    @staticmethod
    def _round_weight(weight: Decimal) -> Decimal:
        # reporting only, billing uses the unrounded weight
        return weight.quantize(Decimal("0.001"), rounding=ROUND_HALF_UP)

    @staticmethod
    def _increments(chargeable: Decimal, slab: Decimal, increment: Decimal) -> int:
        if chargeable <= slab:
            return 0
        steps = (chargeable - slab) / increment
        return int(steps.to_integral_value(rounding=ROUND_CEILING))

    @staticmethod
    def _to_positive_decimal(value: Any, field: str) -> Decimal:
        if value is None or isinstance(value, bool):
            raise InvalidWeightError(f"{field} must be greater than 0")
        try:
            number = Decimal(str(value))
        except InvalidOperation:
            raise InvalidWeightError(f"{field} must be numeric")

        if not number.is_finite() or number <= 0:
            raise InvalidWeightError(f"{field} must be greater than 0")
        return number
