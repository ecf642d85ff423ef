"""Weather categories and the canonical integer code table."""

from enum import StrEnum


class WeatherCategory(StrEnum):
    CLEAR = "clear"
    RAIN = "rain"
    SNOW = "snow"
    CLOUDY = "cloudy"
    PARTLY_CLOUDY_SUN = "partly_cloudy_sun"
    MOSTLY_CLOUDY_SUN = "mostly_cloudy_sun"
    FOG = "fog"
    UNKNOWN = "unknown"


# Single table used when writing to storage or reading source-provided codes.
WEATHER_CODES: dict[WeatherCategory, int] = {
    WeatherCategory.CLEAR: 1,
    WeatherCategory.CLOUDY: 3,
    WeatherCategory.RAIN: 4,
    WeatherCategory.SNOW: 5,
    WeatherCategory.PARTLY_CLOUDY_SUN: 9,
    WeatherCategory.MOSTLY_CLOUDY_SUN: 10,
    WeatherCategory.FOG: 14,
    WeatherCategory.UNKNOWN: 999,
}

NO_DATA_CODE = WEATHER_CODES[WeatherCategory.UNKNOWN]

_CODE_TO_CATEGORY: dict[int, WeatherCategory] = {v: k for k, v in WEATHER_CODES.items()}
_CODE_TO_CATEGORY[13] = WeatherCategory.FOG  # legacy fog code

ICON_NAMES: dict[WeatherCategory, str] = {
    WeatherCategory.CLEAR: "sun",
    WeatherCategory.RAIN: "rain",
    WeatherCategory.SNOW: "snow",
    WeatherCategory.CLOUDY: "cloudy",
    WeatherCategory.PARTLY_CLOUDY_SUN: "cloudLittleSun",
    WeatherCategory.MOSTLY_CLOUDY_SUN: "cloudMuchSun",
    WeatherCategory.FOG: "fog",
    WeatherCategory.UNKNOWN: "cloudLittleMoon",
}


def to_code(category: WeatherCategory) -> int:
    return WEATHER_CODES[category]


def from_code(code: int | None) -> WeatherCategory | None:
    """Decode a stored or source-provided code. Unmapped codes return None."""
    if code is None:
        return None
    return _CODE_TO_CATEGORY.get(code)


def icon_name(category: WeatherCategory) -> str:
    return ICON_NAMES[category]
