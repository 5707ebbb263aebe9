"""
Fare Calculator
===============

Formula
-------
Total = round_half_up(Base_Price[ride_class] + Distance x Per_Km_Rate[ride_class])

* Each ride class has its own rate card (base price + per-km rate).
* The total is rounded to a whole currency unit; the base and distance
  components are returned unrounded so clients can show the breakdown.

Deterministic and side-effect free.  Complexity: O(1) per quote.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal
from typing import Mapping, Union

from .entities import FareQuote
from .enums import RideClass
from .errors import InvalidInput, InvalidRideClass


@dataclass(frozen=True)
class RateCard:
    base_price: float
    per_km_rate: float

    def distance_price(self, distance_km: float) -> float:
        return distance_km * self.per_km_rate


DEFAULT_RATE_CARDS: dict[RideClass, RateCard] = {
    RideClass.BIKE: RateCard(base_price=50, per_km_rate=15),
    RideClass.CAR: RateCard(base_price=100, per_km_rate=25),
    RideClass.RICKSHA: RateCard(base_price=40, per_km_rate=12),
}


def parse_ride_class(value: Union[str, RideClass]) -> RideClass:
    try:
        return RideClass(value)
    except ValueError:
        raise InvalidRideClass(f"Invalid ride type: {value!r}") from None


def _round_half_up(value: float) -> int:
    return int(Decimal(str(value)).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


class FareCalculator:
    """Maps (distance, ride class) to a ``FareQuote``."""

    def __init__(self, rate_cards: Mapping[RideClass, RateCard] | None = None):
        self.rate_cards = dict(rate_cards or DEFAULT_RATE_CARDS)

    @classmethod
    def from_prices(
        cls,
        base_prices: Mapping[str, float],
        per_km_rates: Mapping[str, float],
    ) -> "FareCalculator":
        """Build from two ``{ride_class: amount}`` tables (e.g. settings)."""
        cards = {}
        for name, base in base_prices.items():
            ride_class = parse_ride_class(name)
            if name not in per_km_rates:
                raise ValueError(f"No per-km rate configured for {name!r}")
            cards[ride_class] = RateCard(float(base), float(per_km_rates[name]))
        return cls(cards)

    def compute_fare(
        self, distance_km: float, ride_class: Union[str, RideClass]
    ) -> FareQuote:
        if (
            isinstance(distance_km, bool)
            or not isinstance(distance_km, (int, float))
            or not math.isfinite(distance_km)
            or distance_km <= 0
        ):
            raise InvalidInput("Distance must be a positive number")

        ride_class = parse_ride_class(ride_class)
        card = self.rate_cards.get(ride_class)
        if card is None:
            raise InvalidRideClass(f"No rate card for ride type {ride_class.value!r}")

        distance_price = card.distance_price(distance_km)
        return FareQuote(
            distance_km=float(distance_km),
            ride_class=ride_class,
            base_price=card.base_price,
            distance_price=distance_price,
            total_price=_round_half_up(card.base_price + distance_price),
        )
