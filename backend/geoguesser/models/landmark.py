from enum import Enum
from typing import Optional, Tuple

from pydantic import BaseModel, Field


class Difficulty(str, Enum):
    """Difficulty tier of a landmark, also used to size a game."""
    EASY = "easy"
    MEDIUM = "medium"
    HARD = "hard"


class StreetViewParams(BaseModel):
    """Camera placement used by the image provider."""
    lat: float
    lon: float
    heading: float = 0
    pitch: float = 0

    class Config:
        frozen = True


class Landmark(BaseModel):
    """A named, geolocated point of interest used as a round's target."""
    id: str
    name: str
    description: str = ""
    lat: float = Field(ge=-90, le=90)
    lon: float = Field(ge=-180, le=180)
    street_view: Optional[StreetViewParams] = None
    hints: Tuple[str, ...] = ()
    difficulty: Difficulty
    category: Optional[str] = None

    class Config:
        frozen = True

    @property
    def camera(self) -> StreetViewParams:
        """Street View parameters, defaulting to the landmark position."""
        if self.street_view is not None:
            return self.street_view
        return StreetViewParams(lat=self.lat, lon=self.lon)


class LandmarkPublic(BaseModel):
    """What the player may see about the current target before guessing."""
    difficulty: Difficulty
    category: Optional[str] = None
    hint_count: int

    @classmethod
    def from_landmark(cls, landmark: Landmark) -> "LandmarkPublic":
        return cls(
            difficulty=landmark.difficulty,
            category=landmark.category,
            hint_count=len(landmark.hints),
        )


class LandmarkReveal(BaseModel):
    """Landmark details shown once a round is resolved."""
    id: str
    name: str
    description: str
    latitude: float
    longitude: float
    category: Optional[str] = None

    @classmethod
    def from_landmark(cls, landmark: Landmark) -> "LandmarkReveal":
        return cls(
            id=landmark.id,
            name=landmark.name,
            description=landmark.description,
            latitude=landmark.lat,
            longitude=landmark.lon,
            category=landmark.category,
        )
