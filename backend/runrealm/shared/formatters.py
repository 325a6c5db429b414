"""
Formatting utilities for territory names and descriptions.
"""


def format_distance_km(meters: float) -> str:
    """
    Format distance in kilometers with one decimal.

    Args:
        meters: Distance in meters

    Returns:
        Formatted string (e.g., '1.2km')
    """
    return f"{meters / 1000:.1f}km"


def format_duration_minutes(duration_ms: float) -> str:
    """
    Format duration as whole minutes.

    Args:
        duration_ms: Duration in milliseconds

    Returns:
        Formatted string (e.g., '25 minutes')
    """
    if duration_ms < 0:
        return "—"
    minutes = round(duration_ms / 60_000)
    return f"{minutes} minutes"


def format_coordinate(lat: float, lng: float, precision: int = 3) -> str:
    """
    Format a coordinate pair with hemisphere letters.

    Args:
        lat: Latitude in degrees
        lng: Longitude in degrees
        precision: Decimal places

    Returns:
        Formatted string (e.g., '40.713°N 74.006°W')
    """
    lat_hemi = "N" if lat >= 0 else "S"
    lng_hemi = "E" if lng >= 0 else "W"
    return f"{abs(lat):.{precision}f}°{lat_hemi} {abs(lng):.{precision}f}°{lng_hemi}"
