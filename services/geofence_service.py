import logging

from pydantic import BaseModel

from core.errors import StoreNotFound
from db.directory import Directory
from utils.geofence import haversine_dist, round_meters

logger = logging.getLogger(__name__)

DEFAULT_RADIUS_METERS = 50.0


class GeofenceResult(BaseModel):
    valid: bool
    distance_meters: int
    store_id: str
    store_name: str
    allowed_radius: float
    reason: str


class GeofenceValidator:
    def __init__(self, directory: Directory, default_radius_meters: float = DEFAULT_RADIUS_METERS):
        self.directory = directory
        self.default_radius_meters = default_radius_meters

    def validate(self, store_id: str, latitude: float, longitude: float) -> GeofenceResult:
        store = self.directory.get_store(store_id)
        if store is None:
            raise StoreNotFound(store_id)

        # Radius is read once so a concurrent directory update can't change it mid-check
        radius = store.radius_meters if store.radius_meters is not None else self.default_radius_meters

        distance = haversine_dist(store.latitude, store.longitude, latitude, longitude)
        rounded = round_meters(distance)

        # Compare against the unrounded distance; rounding is for reporting only
        valid = distance <= radius

        if valid:
            reason = "Location verified."
        else:
            reason = (
                f"{rounded}m from store {store.name}, exceeds the {radius:g}m limit."
            )
            logger.info(f"Geofence miss for store {store_id}: {rounded}m > {radius:g}m")

        return GeofenceResult(
            valid=valid,
            distance_meters=rounded,
            store_id=store.id,
            store_name=store.name,
            allowed_radius=radius,
            reason=reason,
        )
