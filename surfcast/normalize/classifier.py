"""Sky/precipitation code classification into a single weather category."""

import math

from surfcast.models.weather import WeatherCategory, from_code

FOG_MIN_HUMIDITY = 95.0
FOG_MAX_WIND_SPEED = 2.0
MOSTLY_CLOUDY_MIN_PROBABILITY = 30.0
MOSTLY_CLOUDY_MIN_HUMIDITY = 85.0

PRECIPITATION_TYPES: dict[int, WeatherCategory] = {
    1: WeatherCategory.RAIN,
    2: WeatherCategory.SNOW,  # rain/snow mix
    3: WeatherCategory.SNOW,
    4: WeatherCategory.RAIN,  # shower
}

SKY_CLEAR = 1
SKY_PARTLY_CLOUDY = 3
SKY_OVERCAST = 4


def classify(
    sky_condition: int,
    precipitation_type: int,
    humidity: float | None = None,
    wind_speed: float | None = None,
    precipitation_probability: float | None = None,
    explicit_code: int | None = None,
) -> WeatherCategory:
    """Classify one reading. First matching rule wins.

    A source-provided weather code that decodes to a known category overrides
    everything else. Otherwise precipitation beats fog, and fog beats sky cover.
    """
    explicit = from_code(explicit_code)
    if explicit is not None:
        return explicit

    if precipitation_type != 0:
        return PRECIPITATION_TYPES.get(precipitation_type, WeatherCategory.UNKNOWN)

    h = humidity if humidity is not None else -1.0
    w = wind_speed if wind_speed is not None else math.inf
    if h >= FOG_MIN_HUMIDITY and w <= FOG_MAX_WIND_SPEED:
        return WeatherCategory.FOG

    if sky_condition == SKY_CLEAR:
        return WeatherCategory.CLEAR
    if sky_condition == SKY_PARTLY_CLOUDY:
        p = precipitation_probability if precipitation_probability is not None else 0.0
        if p >= MOSTLY_CLOUDY_MIN_PROBABILITY or h >= MOSTLY_CLOUDY_MIN_HUMIDITY:
            return WeatherCategory.MOSTLY_CLOUDY_SUN
        return WeatherCategory.PARTLY_CLOUDY_SUN
    if sky_condition == SKY_OVERCAST:
        return WeatherCategory.CLOUDY
    return WeatherCategory.UNKNOWN
