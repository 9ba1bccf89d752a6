"""
Google Maps server-side client (Geocoding and Distance Matrix).

Every call degrades to ``None`` when the key is missing or the request
fails; callers fall back to haversine distances.
"""

import hashlib
import logging
from dataclasses import dataclass
from typing import Optional

import requests
from django.conf import settings
from django.core.cache import cache

logger = logging.getLogger(__name__)

GOOGLE_MAPS_BASE_URL = 'https://maps.googleapis.com/maps/api'


@dataclass(frozen=True)
class DistanceResult:
    distance_km: float
    duration_minutes: float
    distance_text: str = ''
    duration_text: str = ''


def _fetch(path: str, params: dict) -> Optional[dict]:
    api_key = settings.GOOGLE_MAPS_SERVER_KEY
    if not api_key:
        logger.debug("Google Maps server key not configured")
        return None

    try:
        response = requests.get(
            f"{GOOGLE_MAPS_BASE_URL}/{path}",
            params={**params, 'key': api_key, 'language': 'pt-BR'},
            timeout=settings.GOOGLE_MAPS_TIMEOUT,
        )
        response.raise_for_status()
        return response.json()
    except requests.Timeout:
        logger.warning(f"Google Maps timeout on {path}")
        return None
    except (requests.RequestException, ValueError) as e:
        logger.error(f"Google Maps error on {path}: {e}", exc_info=True)
        return None


def geocode_address(address: str) -> Optional[tuple]:
    """
    Returns ``(lat, lng)`` for a free-form address, cached for a week.
    """
    if not address or not address.strip():
        return None

    cache_key = 'geocode:' + hashlib.md5(address.strip().lower().encode('utf-8')).hexdigest()
    cached = cache.get(cache_key)
    if cached is not None:
        return tuple(cached)

    data = _fetch('geocode/json', {'address': address})
    if not data or data.get('status') != 'OK' or not data.get('results'):
        return None

    location = data['results'][0].get('geometry', {}).get('location') or {}
    if 'lat' not in location or 'lng' not in location:
        return None

    coords = (float(location['lat']), float(location['lng']))
    cache.set(cache_key, coords, settings.GEOCODE_CACHE_TIMEOUT)
    return coords


def distance_matrix(origin: tuple, destination: tuple) -> Optional[DistanceResult]:
    """Driving distance between two ``(lat, lng)`` points."""
    data = _fetch('distancematrix/json', {
        'origins': f"{origin[0]},{origin[1]}",
        'destinations': f"{destination[0]},{destination[1]}",
        'units': 'metric',
        'mode': 'driving',
    })
    if not data or data.get('status') != 'OK':
        return None

    try:
        element = data['rows'][0]['elements'][0]
    except (KeyError, IndexError, TypeError):
        return None

    if element.get('status') != 'OK':
        return None

    return DistanceResult(
        distance_km=element['distance']['value'] / 1000,
        duration_minutes=element['duration']['value'] / 60,
        distance_text=element['distance'].get('text', ''),
        duration_text=element['duration'].get('text', ''),
    )
