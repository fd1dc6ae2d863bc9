from math import radians, sin, cos, sqrt, atan2, floor, isfinite, isnan


# Mean Earth radius in meters
EARTH_RADIUS_M = 6371000.0

MAX_POINTS = 5000


def haversine_distance(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """
    Calculate the great circle distance between two points on Earth.

    Args:
        lat1, lon1: Coordinates of the first point (degrees)
        lat2, lon2: Coordinates of the second point (degrees)

    Returns:
        Distance in meters

    Raises:
        ValueError: If a coordinate is NaN or infinite
    """
    if not all(isfinite(value) for value in (lat1, lon1, lat2, lon2)):
        raise ValueError("Coordinates must be finite numbers")

    lat1_rad = radians(lat1)
    lat2_rad = radians(lat2)
    dlat = radians(lat2 - lat1)
    dlon = radians(lon2 - lon1)

    a = sin(dlat / 2)**2 + cos(lat1_rad) * cos(lat2_rad) * sin(dlon / 2)**2
    # Rounding can push a just outside [0, 1] near antipodal points
    a = min(1.0, max(0.0, a))
    c = 2 * atan2(sqrt(a), sqrt(1 - a))

    return EARTH_RADIUS_M * c


def calculate_score(distance_m: float) -> int:
    """
    Calculate score based on distance from the actual location.

    Scoring system:
    - Perfect guess (<= 10m): 5000 points
    - <= 50m: 4900-4500 points
    - <= 100m: 3750-3500 points
    - <= 200m: 2750-2500 points
    - <= 500m: 1800-1500 points
    - > 500m: 750 points down to a floor of 100

    Args:
        distance_m: Distance in meters

    Returns:
        Score (100 to 5000)
    """
    if isnan(distance_m):
        raise ValueError("Distance must be a number")
    d = max(0.0, distance_m)

    if d <= 10:  # Perfect
        points = MAX_POINTS
    elif d <= 50:  # Excellent
        points = max(4000, 5000 - d * 10)
    elif d <= 100:  # Good
        points = max(3000, 4000 - d * 5)
    elif d <= 200:  # Fair
        points = max(2000, 3000 - d * 2.5)
    elif d <= 500:  # Poor
        points = max(1000, 2000 - d)
    else:  # Very poor
        points = max(100, 1000 - d * 0.5)

    return int(floor(points))


def round_score(distance_m: float, hint_penalty: int = 0) -> int:
    """Score for a round after hint deductions, never below zero."""
    return max(0, calculate_score(distance_m) - hint_penalty)
