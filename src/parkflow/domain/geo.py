import math
from typing import Iterable, List, Optional, Tuple

from parkflow.domain.entities import ParkingLot

EARTH_RADIUS_KM = 6371.0

Position = Tuple[float, float]


class RankedLot:
    def __init__(self, lot: ParkingLot, distance_km: float):
        self.lot = lot
        self.distance_km = distance_km


class SearchResult:
    def __init__(self, lots: List[ParkingLot], focus: Optional[ParkingLot] = None):
        self.lots = lots
        self.focus = focus


def haversine_km(origin: Position, destination: Position) -> float:
    """Great-circle distance in kilometres between two (lat, lng) points."""
    lat1, lng1 = origin
    lat2, lng2 = destination
    d_lat = math.radians(lat2 - lat1)
    d_lng = math.radians(lng2 - lng1)
    a = (
        math.sin(d_lat / 2) ** 2
        + math.cos(math.radians(lat1)) * math.cos(math.radians(lat2)) * math.sin(d_lng / 2) ** 2
    )
    # Rounding can push a just past 1 for antipodal points
    a = min(1.0, max(0.0, a))
    return 2 * EARTH_RADIUS_KM * math.atan2(math.sqrt(a), math.sqrt(1 - a))


def rank_by_distance(user_position: Position, lots: Iterable[ParkingLot]) -> List[RankedLot]:
    """Annotate lots with their distance from the user, nearest first.

    Lots without coordinates are left out rather than treated as distance 0.
    Equal distances keep their input order.
    """
    ranked = [
        RankedLot(lot, haversine_km(user_position, (lot.latitude, lot.longitude)))
        for lot in lots
        if lot.has_position
    ]
    return sorted(ranked, key=lambda r: r.distance_km)


def _matches(lot: ParkingLot, query: str) -> bool:
    return query in lot.name.lower() or bool(lot.address and query in lot.address.lower())


def _is_exact(lot: ParkingLot, query: str) -> bool:
    return lot.name.lower() == query or bool(lot.address and lot.address.lower() == query)


def rank_by_query(lots: Iterable[ParkingLot], query: Optional[str]) -> SearchResult:
    """Move lots whose name or address contains ``query`` to the front.

    The focus target is an exact name/address match when there is one,
    otherwise the first partial match.
    """
    lots = list(lots)
    query = (query or "").strip().lower()
    if not query:
        return SearchResult(lots)

    matches = [lot for lot in lots if _matches(lot, query)]
    others = [lot for lot in lots if not _matches(lot, query)]

    focus = next((lot for lot in matches if _is_exact(lot, query)), None)
    if focus is None and matches:
        focus = matches[0]
    return SearchResult(matches + others, focus)


def suggest_addresses(lots: Iterable[ParkingLot], query: Optional[str] = None, limit: int = 5) -> List[str]:
    seen = []
    for lot in lots:
        if lot.address and lot.address not in seen:
            seen.append(lot.address)

    query = (query or "").strip().lower()
    if query:
        seen = [address for address in seen if query in address.lower()]
    return seen[:limit]


def shorten_address(display_name: Optional[str]) -> Optional[str]:
    """Reduce a geocoder display name to ``"area, city"``."""
    if not display_name:
        return None
    parts = display_name.split(", ")
    area = parts[0]
    city = parts[1] if len(parts) > 1 else ""
    return f"{area}, {city}" if city else area
