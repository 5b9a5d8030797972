"""
Station data model.

Represents a fuel station row from the gasStations sheet.
"""

from dataclasses import dataclass


@dataclass(frozen=True)
class Location:
    """Geographic position of a station."""
    latitude: float
    longitude: float


@dataclass(frozen=True)
class Station:
    """
    A fuel station.
    Immutable once mapped; identity is `id`.
    """
    id: str  # Stable identifier (e.g., "gs_01")
    name: str
    location: Location
    address: str
    
    def to_dict(self) -> dict:
        """Convert to JSON-serializable dict."""
        return {
            "id": self.id,
            "name": self.name,
            "location": {
                "latitude": self.location.latitude,
                "longitude": self.location.longitude
            },
            "address": self.address
        }
