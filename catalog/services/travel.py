"""
Travel (displacement) pricing for home services.

    travel = rate_per_km * distance + fixed_fee   (provider charges travel and has a rate)
    travel = fixed_fee                             (otherwise)
    travel = max(travel, minimum_fee)              (when minimum_fee > 0)

Distances come from the Distance Matrix API; haversine is used whenever
that lookup fails, and the result is flagged with ``used_fallback``.
"""

import logging
from dataclasses import dataclass, field, asdict
from decimal import Decimal, ROUND_HALF_UP
from typing import Optional

from .geo import haversine_km, is_valid_coordinate
from . import maps

logger = logging.getLogger(__name__)

TWO_PLACES = Decimal('0.01')


def _money(value) -> Decimal:
    return Decimal(str(value)).quantize(TWO_PLACES, rounding=ROUND_HALF_UP)


@dataclass
class TravelSettings:
    charges_travel: bool = False
    rate_per_km: Optional[Decimal] = None
    minimum_fee: Optional[Decimal] = None
    fixed_fee: Optional[Decimal] = None
    waives_travel_on_hire: bool = False

    @classmethod
    def from_provider(cls, provider):
        return cls(
            charges_travel=provider.charges_travel,
            rate_per_km=provider.travel_rate_per_km,
            minimum_fee=provider.travel_minimum_fee,
            fixed_fee=provider.travel_fixed_fee,
            waives_travel_on_hire=provider.waives_travel_on_hire,
        )


@dataclass
class Location:
    lat: Optional[float] = None
    lng: Optional[float] = None
    address: str = ''


@dataclass
class TravelBreakdown:
    per_km_portion: Decimal
    fixed_fee: Decimal
    minimum_fee: Decimal
    applied_minimum: bool
    rate_per_km: Optional[Decimal]
    waives_travel_on_hire: bool


@dataclass
class TravelQuote:
    success: bool
    travel_cost: Decimal
    breakdown: TravelBreakdown
    used_fallback: bool
    provider_location: Optional[tuple] = None
    client_location: Optional[tuple] = None
    distance_km: Optional[float] = None
    duration_minutes: Optional[float] = None
    distance_text: str = ''
    duration_text: str = ''
    estimated_total: Optional[Decimal] = None
    warnings: list = field(default_factory=list)

    def as_dict(self):
        return asdict(self)


def resolve_location(location: Location):
    """Returns ``(coords, warnings)``; coords is ``None`` when unresolved."""
    if is_valid_coordinate(location.lat, location.lng):
        return (float(location.lat), float(location.lng)), []

    if location.address:
        coords = maps.geocode_address(location.address)
        if coords:
            return coords, []
        return None, ["Não foi possível geocodificar o endereço informado."]

    return None, ["Localização não informada."]


def calculate_travel_pricing(provider_location: Location, travel: TravelSettings,
                             client_location: Location, base_price=None) -> TravelQuote:
    warnings = []

    provider_coords, provider_warnings = resolve_location(provider_location)
    client_coords, client_warnings = resolve_location(client_location)
    warnings.extend(provider_warnings)
    warnings.extend(client_warnings)

    fixed_fee = _money(travel.fixed_fee or 0)
    minimum_fee = _money(travel.minimum_fee or 0)

    if provider_coords is None or client_coords is None:
        return TravelQuote(
            success=False,
            travel_cost=_money(0),
            breakdown=TravelBreakdown(
                per_km_portion=_money(0),
                fixed_fee=fixed_fee,
                minimum_fee=minimum_fee,
                applied_minimum=False,
                rate_per_km=travel.rate_per_km,
                waives_travel_on_hire=travel.waives_travel_on_hire,
            ),
            used_fallback=True,
            provider_location=provider_coords,
            client_location=client_coords,
            estimated_total=_money(base_price) if base_price is not None else None,
            warnings=warnings,
        )

    used_fallback = False
    distance_km = None
    duration_minutes = None
    distance_text = duration_text = ''

    matrix = maps.distance_matrix(provider_coords, client_coords)
    if matrix is not None:
        distance_km = matrix.distance_km
        duration_minutes = matrix.duration_minutes
        distance_text = matrix.distance_text
        duration_text = matrix.duration_text
    else:
        used_fallback = True
        distance_km = haversine_km(*provider_coords, *client_coords)
        logger.debug(f"Distance matrix unavailable, haversine distance {distance_km:.2f} km")

    per_km_portion = Decimal('0')
    if travel.charges_travel and travel.rate_per_km is not None:
        per_km_portion = Decimal(str(travel.rate_per_km)) * Decimal(str(distance_km))
        total = per_km_portion + fixed_fee
    else:
        total = fixed_fee

    applied_minimum = False
    if minimum_fee > 0 and total < minimum_fee:
        total = minimum_fee
        applied_minimum = True

    travel_cost = _money(total)

    return TravelQuote(
        success=True,
        travel_cost=travel_cost,
        breakdown=TravelBreakdown(
            per_km_portion=_money(per_km_portion),
            fixed_fee=fixed_fee,
            minimum_fee=minimum_fee,
            applied_minimum=applied_minimum,
            rate_per_km=travel.rate_per_km,
            waives_travel_on_hire=travel.waives_travel_on_hire,
        ),
        used_fallback=used_fallback,
        provider_location=provider_coords,
        client_location=client_coords,
        distance_km=round(distance_km, 2),
        duration_minutes=round(duration_minutes, 1) if duration_minutes is not None else None,
        distance_text=distance_text,
        duration_text=duration_text,
        estimated_total=_money(Decimal(str(base_price)) + travel_cost) if base_price is not None else None,
        warnings=warnings,
    )
