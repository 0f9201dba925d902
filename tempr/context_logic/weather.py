"""
Weather signal for Tempr.

Classifies OpenWeatherMap condition codes into WeatherTags and fetches
current conditions over HTTP.

Condition code reference: https://openweathermap.org/weather-conditions
"""

import logging
from typing import Any, Dict, Optional

import httpx

from tempr.context_logic.context_types import UNKNOWN_WEATHER, WeatherReading, WeatherTag

logger = logging.getLogger(__name__)

DEFAULT_OPENWEATHER_URL = "https://api.openweathermap.org/data/2.5/weather"

# Clear-sky temperature thresholds (Celsius)
HOT_THRESHOLD_C: int = 32
COLD_THRESHOLD_C: int = 5


class WeatherUnavailable(Exception):
    """Raised when the weather service cannot be reached or answers badly."""


def weather_tag_for(condition_id: int, temperature_c: float) -> WeatherTag:
    """
    Map an OpenWeatherMap condition id to a WeatherTag.
    
    Clear sky (800) is split by temperature into hot / cold / clear.
    
    Args:
        condition_id: OpenWeatherMap condition id
        temperature_c: Current temperature in Celsius
        
    Returns:
        WeatherTag (UNKNOWN for ids outside the documented ranges)
    """
    if 200 <= condition_id < 300:
        return WeatherTag.STORM
    if 300 <= condition_id < 400:
        return WeatherTag.DRIZZLE
    if 500 <= condition_id < 600:
        return WeatherTag.RAIN
    if 600 <= condition_id < 700:
        return WeatherTag.SNOW
    if 700 <= condition_id < 800:
        if condition_id == 781:  # tornado
            return WeatherTag.STORM
        if condition_id == 771:  # squalls
            return WeatherTag.WINDY
        return WeatherTag.FOGGY
    if condition_id == 800:
        if temperature_c > HOT_THRESHOLD_C:
            return WeatherTag.HOT
        if temperature_c < COLD_THRESHOLD_C:
            return WeatherTag.COLD
        return WeatherTag.CLEAR
    if condition_id > 800:
        return WeatherTag.CLOUDY
    return WeatherTag.UNKNOWN


def parse_weather_response(data: Dict[str, Any]) -> WeatherReading:
    """
    Build a WeatherReading from an OpenWeatherMap current-weather payload.
    
    Raises:
        WeatherUnavailable: If the payload lacks the condition or temperature
    """
    try:
        condition = data["weather"][0]
        temperature = round(float(data["main"]["temp"]))
        condition_id = int(condition["id"])
    except (KeyError, IndexError, TypeError, ValueError) as e:
        raise WeatherUnavailable(f"Malformed weather payload: {e}") from e
    
    return WeatherReading(
        tag=weather_tag_for(condition_id, temperature),
        description=str(condition.get("description", "")),
        temperature_c=temperature,
    )


class OpenWeatherClient:
    """
    Client for the OpenWeatherMap current-weather API.
    
    A missing API key is "no data" and yields an UNKNOWN reading. Transport
    and HTTP errors raise WeatherUnavailable; the snapshot builder degrades
    those to UNKNOWN. No retries are attempted here.
    """
    
    def __init__(
        self,
        api_key: Optional[str],
        base_url: str = DEFAULT_OPENWEATHER_URL,
        timeout: float = 5.0,
        client: Optional[httpx.Client] = None,
    ):
        """
        Initialize the weather client.
        
        Args:
            api_key: OpenWeatherMap API key (None or "" disables lookups)
            base_url: Current-weather endpoint
            timeout: Per-request timeout in seconds
            client: Optional preconfigured httpx.Client (e.g. with a mock transport)
        """
        self.api_key = api_key or None
        self.base_url = base_url
        self.timeout = timeout
        self._client = client or httpx.Client(timeout=timeout)
        
        # Suppress httpx INFO level logging (one request line per cycle is noise)
        logging.getLogger("httpx").setLevel(logging.WARNING)
    
    def current(self, lat: float, lon: float) -> WeatherReading:
        """
        Fetch current weather at a coordinate.
        
        Args:
            lat: Latitude
            lon: Longitude
            
        Returns:
            WeatherReading for the location
            
        Raises:
            WeatherUnavailable: On transport, HTTP or payload errors
        """
        if not self.api_key:
            logger.debug("[WEATHER] No API key configured, weather unknown")
            return UNKNOWN_WEATHER
        
        params = {"lat": lat, "lon": lon, "units": "metric", "appid": self.api_key}
        try:
            response = self._client.get(self.base_url, params=params, timeout=self.timeout)
            response.raise_for_status()
            data = response.json()
        except httpx.HTTPError as e:
            raise WeatherUnavailable(f"Weather request failed: {e}") from e
        except ValueError as e:
            raise WeatherUnavailable(f"Weather response was not JSON: {e}") from e
        
        reading = parse_weather_response(data)
        logger.debug(f"[WEATHER] {reading.tag.value} ({reading.description}, {reading.temperature_c}C)")
        return reading
    
    def source_for(self, lat: float, lon: float):
        """Return a zero-argument weather source bound to one coordinate."""
        return lambda: self.current(lat, lon)
    
    def close(self) -> None:
        self._client.close()
