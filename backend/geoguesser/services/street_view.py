import base64
import logging
from html import escape
from typing import Optional, Protocol
from urllib.parse import urlencode

import httpx

from ..models.landmark import Landmark

logger = logging.getLogger(__name__)

IMAGE_SIZE = "800x600"
FIELD_OF_VIEW = 90


class ImageProvider(Protocol):
    """Turns a landmark into something the client can display."""

    async def load_image(self, landmark: Landmark) -> str:
        """Return an image URL; must not raise."""


def placeholder_image(landmark: Landmark) -> str:
    """
    Build a deterministic SVG placeholder for a landmark.

    Args:
        landmark: The landmark to describe

    Returns:
        A base64 data URL
    """
    is_campus = landmark.category == "campus"
    color = "#c8102e" if is_campus else "#0064c8"
    category_text = "Queen's Campus" if is_campus else "Downtown Kingston"

    svg = (
        '<svg width="800" height="600" xmlns="http://www.w3.org/2000/svg">'
        '<rect width="100%" height="100%" fill="#1a2332"/>'
        f'<rect x="200" y="150" width="400" height="300" fill="{color}" opacity="0.2"/>'
        f'<rect x="300" y="50" width="200" height="400" fill="{color}" opacity="0.1"/>'
        '<text x="400" y="280" text-anchor="middle" fill="#ffffff" '
        f'font-family="Arial, sans-serif" font-size="28" font-weight="bold">{escape(landmark.name)}</text>'
        '<text x="400" y="320" text-anchor="middle" fill="#8a9ab0" '
        f'font-family="Arial, sans-serif" font-size="18">{escape(category_text)}</text>'
        '<text x="400" y="350" text-anchor="middle" fill="#ffffff" '
        f'font-family="Arial, sans-serif" font-size="14" opacity="0.8">{escape(landmark.description)}</text>'
        '<text x="400" y="500" text-anchor="middle" fill="#8a9ab0" '
        'font-family="Arial, sans-serif" font-size="16">Click on the map below to guess the location</text>'
        '</svg>'
    )
    encoded = base64.b64encode(svg.encode("utf-8")).decode("ascii")
    return f"data:image/svg+xml;base64,{encoded}"


class StreetViewClient:
    """Client for the Street View Static API."""

    def __init__(
        self,
        api_key: Optional[str],
        api_url: str = "https://maps.googleapis.com/maps/api/streetview",
        timeout: float = 10.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.api_url = api_url.rstrip('/')
        self.api_key = api_key
        self.timeout = timeout
        self._transport = transport

        if not self.enabled:
            logger.warning("No Street View API key provided, using placeholder images")

    @property
    def enabled(self) -> bool:
        return bool(self.api_key)

    def image_url(self, landmark: Landmark) -> str:
        """Static image URL for the landmark's camera placement."""
        camera = landmark.camera
        params = {
            "size": IMAGE_SIZE,
            "location": f"{camera.lat},{camera.lon}",
            "heading": f"{camera.heading:g}",
            "pitch": f"{camera.pitch:g}",
            "fov": FIELD_OF_VIEW,
            "key": self.api_key,
        }
        return f"{self.api_url}?{urlencode(params)}"

    async def load_image(self, landmark: Landmark) -> str:
        """
        Get a displayable image for a landmark.

        Falls back to a placeholder when Street View is disabled or the
        request fails.

        Args:
            landmark: The landmark to photograph

        Returns:
            Image URL (Street View or data URL)
        """
        if not self.enabled:
            return placeholder_image(landmark)

        url = self.image_url(landmark)
        async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
            try:
                response = await client.get(url)
                response.raise_for_status()
            except httpx.HTTPError as e:
                logger.warning("Failed to load Street View image for %s: %s", landmark.name, e)
                return placeholder_image(landmark)

        logger.debug("Street View loaded for %s", landmark.name)
        return url
