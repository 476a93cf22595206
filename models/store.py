from sqlmodel import SQLModel, Field
from typing import Optional

# Reference Data Owned by the Store Directory; Read-Only to the Engine

# Store w/ Circular Geofence
class Store(SQLModel, table=True):
    __tablename__ = "store"

    id: str = Field(primary_key=True, description="Unique store identifier")
    name: str = Field(..., description="Human-friendly store name")
    latitude: float = Field(..., description="Latitude of store center")
    longitude: float = Field(..., description="Longitude of store center")
    # None Falls Back to the Engine-Wide Default Radius
    radius_meters: Optional[float] = Field(default=None, description="Allowed check-in radius in meters")
    address: Optional[str] = Field(default=None)
