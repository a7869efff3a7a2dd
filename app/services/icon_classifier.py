"""
Weather icon classification.

Maps a free-text weather description onto one of three icon categories.
Anything that is neither clear nor cloudy (snow, mist, thunderstorm, ...)
is shown with the rain icon.
"""

from app.schemas.weather import IconCategory


def classify(description: str) -> IconCategory:
    """Return the icon category for a weather description (first match wins)."""
    text = (description or "").lower()
    if "clear" in text:
        return IconCategory.CLEAR
    if "cloud" in text:
        return IconCategory.CLOUDY
    return IconCategory.RAIN
