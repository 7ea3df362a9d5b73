from __future__ import annotations

from pydantic import model_validator

from ..search.models import CamelModel, Coordinates
from .geocoding import GeolocationErrorKind


class LocationResolveRequest(CamelModel):
    """What the browser's geolocation call produced: a position or an error."""

    coordinates: Coordinates | None = None
    error: GeolocationErrorKind | None = None
    supported: bool = True

    @model_validator(mode="after")
    def _one_outcome(self) -> "LocationResolveRequest":
        if self.supported and self.coordinates is None and self.error is None:
            raise ValueError("either coordinates or error is required")
        return self


class LocationResolveResponse(CamelModel):
    resolved: bool
    address: str | None = None
    coordinates: Coordinates | None = None
    message: str | None = None
