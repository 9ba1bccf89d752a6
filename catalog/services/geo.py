"""
Great-circle distance helpers.

``haversine_km`` works on plain floats; ``distance_expression`` builds the
same formula as an ORM expression so querysets can be annotated and ordered
by distance without a spatial database.
"""
import math

from django.db.models import F, FloatField, Value
from django.db.models.functions import ASin, Cast, Cos, Least, Power, Radians, Sin, Sqrt

EARTH_RADIUS_KM = 6371.0


def is_valid_coordinate(lat, lng):
    try:
        lat, lng = float(lat), float(lng)
    except (TypeError, ValueError):
        return False
    return math.isfinite(lat) and math.isfinite(lng) and -90 <= lat <= 90 and -180 <= lng <= 180


def haversine_km(lat1, lng1, lat2, lng2):
    lat1, lng1, lat2, lng2 = map(float, (lat1, lng1, lat2, lng2))
    d_lat = math.radians(lat2 - lat1)
    d_lng = math.radians(lng2 - lng1)

    a = (
        math.sin(d_lat / 2) ** 2
        + math.cos(math.radians(lat1)) * math.cos(math.radians(lat2)) * math.sin(d_lng / 2) ** 2
    )
    c = 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))
    return max(EARTH_RADIUS_KM * c, 0.0)


def distance_expression(lat, lng, lat_field, lng_field):
    """
    Haversine distance in km between (lat, lng) and the row's coordinate fields.
    Rows without coordinates get NULL.
    """
    row_lat = Radians(Cast(F(lat_field), FloatField()))
    row_lng = Radians(Cast(F(lng_field), FloatField()))
    origin_lat = Radians(Value(float(lat), output_field=FloatField()))
    origin_lng = Radians(Value(float(lng), output_field=FloatField()))

    a = (
        Power(Sin((row_lat - origin_lat) / 2), 2)
        + Cos(origin_lat) * Cos(row_lat) * Power(Sin((row_lng - origin_lng) / 2), 2)
    )
    # Rounding can push ``a`` slightly above 1
    a = Least(a, Value(1.0, output_field=FloatField()))
    return Value(2 * EARTH_RADIUS_KM, output_field=FloatField()) * ASin(Sqrt(a))
