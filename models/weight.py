"""
Weight measurement data model.
"""
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Dict, Optional

# Withings measure type and category identifiers
WEIGHT_MEASURE_TYPE = 1
REAL_MEASURE_CATEGORY = 1


@dataclass
class WeightMeasurement:
    """A single body-weight measurement taken from a Withings measurement group."""

    grams: float
    taken_at: Optional[datetime] = None
    group_id: Optional[int] = None

    def __post_init__(self):
        """Validate measurement data after initialization."""
        if not isinstance(self.grams, (int, float)) or isinstance(self.grams, bool):
            raise ValueError("Weight must be a number (grams)")
        if self.grams <= 0:
            raise ValueError(f"Weight must be positive, got: {self.grams}")

    @property
    def kilograms(self) -> float:
        """Weight converted to kilograms."""
        return self.grams / 1000.0

    def format_kilograms(self) -> str:
        """
        Format the weight in kilograms without trailing zeros.

        Returns:
            String such as ``"72.5"`` or ``"80"``
        """
        return f"{round(self.kilograms, 3):.3f}".rstrip('0').rstrip('.')

    @classmethod
    def from_measure_group(cls, group: Dict[str, Any]) -> Optional['WeightMeasurement']:
        """
        Extract the weight measure from a Withings measurement group.

        Withings encodes values as ``value * 10**unit`` kilograms, so grams
        are ``value * 10**(unit + 3)``.

        Args:
            group: One entry of ``body.measuregrps``

        Returns:
            WeightMeasurement, or None if the group holds no weight measure
        """
        for measure in group.get('measures') or []:
            if measure.get('type') != WEIGHT_MEASURE_TYPE:
                continue
            value = measure.get('value')
            if value is None:
                continue
            unit = measure.get('unit', -3)
            grams = value * (10 ** (unit + 3))

            taken_at = None
            if group.get('date') is not None:
                taken_at = datetime.fromtimestamp(group['date'], tz=timezone.utc)

            return cls(grams=float(grams), taken_at=taken_at, group_id=group.get('grpid'))
        return None
