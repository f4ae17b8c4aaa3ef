from enum import Enum
from pydantic import BaseModel, ConfigDict, Field, model_validator
from typing import List, Optional, Tuple, Literal

# (latitude, longitude) in decimal degrees
LatLng = Tuple[float, float]


class ResolutionMethod(str, Enum):
    """How an area assignment was reached."""
    COORDINATE = "coordinate"
    ADDRESS = "address"
    NONE = "none"


class ConfidenceTier(str, Enum):
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


class AreaGeometry(BaseModel):
    type: Literal["Polygon"] = "Polygon"
    coordinates: List[List[LatLng]] = Field(default=[], description="Rings of (lat, lng) pairs; the first ring is the outer boundary.")


class Area(BaseModel):
    id: str = Field(..., description="Opaque unique identifier of the area.")
    name: str = Field(..., description="Display name, e.g., 'Salaya North'.")
    color: str = Field(default="#3388ff", description="Display color used when drawing the area.")
    geometry: Optional[AreaGeometry] = None
    created_by: Optional[str] = None
    created_at: Optional[str] = None
    updated_at: Optional[str] = None

    def outer_ring(self) -> List[LatLng]:
        """Returns the outer boundary ring, or an empty list when the area has no geometry."""
        if not self.geometry or not self.geometry.coordinates:
            return []
        return self.geometry.coordinates[0]


class GeocodeResult(BaseModel):
    # Shared by every reader of the geocode cache
    model_config = ConfigDict(frozen=True)

    latitude: float
    longitude: float
    display_name: str = ""
    confidence: float = Field(..., ge=0.0, le=1.0)


class ResolutionResult(BaseModel):
    area: Optional[Area] = None
    method: ResolutionMethod = ResolutionMethod.NONE
    confidence: ConfidenceTier = ConfidenceTier.LOW
    geocoded_lat: Optional[float] = None
    geocoded_lng: Optional[float] = None
    geocoded_display_name: Optional[str] = None

    @model_validator(mode="after")
    def check_method_invariants(self) -> "ResolutionResult":
        if self.method == ResolutionMethod.NONE and self.area is not None:
            raise ValueError("A result with method 'none' cannot carry an area.")
        if self.method != ResolutionMethod.NONE and self.area is None:
            raise ValueError(f"A result with method '{self.method.value}' must carry an area.")
        if self.method == ResolutionMethod.COORDINATE and self.confidence != ConfidenceTier.HIGH:
            raise ValueError("Coordinate matches are always high confidence.")
        if (self.geocoded_lat is None) != (self.geocoded_lng is None):
            raise ValueError("geocoded_lat and geocoded_lng must be set together.")
        return self

    @property
    def area_id(self) -> Optional[str]:
        return self.area.id if self.area else None

    @property
    def area_name(self) -> Optional[str]:
        return self.area.name if self.area else None

    @property
    def geocoded_point(self) -> Optional[LatLng]:
        if self.geocoded_lat is None or self.geocoded_lng is None:
            return None
        return (self.geocoded_lat, self.geocoded_lng)


# --- API request/response schemas ---

class ResolveRequest(BaseModel):
    lat: Optional[float] = Field(default=None, ge=-90.0, le=90.0)
    lng: Optional[float] = Field(default=None, ge=-180.0, le=180.0)
    address: str = ""


class StructuredResolveRequest(BaseModel):
    lat: Optional[float] = Field(default=None, ge=-90.0, le=90.0)
    lng: Optional[float] = Field(default=None, ge=-180.0, le=180.0)
    address_line: str = ""
    subdistrict: str = ""
    district: str = ""
    province: str = ""


class GeocodeRequest(BaseModel):
    address: str


class PointRequest(BaseModel):
    lat: float = Field(..., ge=-90.0, le=90.0)
    lng: float = Field(..., ge=-180.0, le=180.0)


class ReverseGeocodeResponse(BaseModel):
    display_name: str


class CentroidResponse(BaseModel):
    area_id: str
    lat: float
    lng: float
