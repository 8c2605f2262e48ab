"""
Coordinate Models

GPS point used for route endpoints, congestion samples and waypoints.
"""

from pydantic import BaseModel, Field


class GeoPoint(BaseModel):
    """GPS coordinate (latitude, longitude)"""
    lat: float = Field(..., ge=-90, le=90)      # Latitude (-90 to 90)
    lng: float = Field(..., ge=-180, le=180)    # Longitude (-180 to 180)

    class Config:
        frozen = True
        json_schema_extra = {
            "example": {"lat": 23.2156, "lng": 72.6369}
        }

    def to_dict(self) -> dict:
        return {'lat': self.lat, 'lng': self.lng}
