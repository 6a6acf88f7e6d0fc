import logging
from typing import Any, Dict, Optional

import httpx

from farmhand.core.config import Settings, settings as default_settings
from farmhand.core.errors import WeatherServiceError
from farmhand.models.plan import WEATHER_UNAVAILABLE

logger = logging.getLogger(__name__)


class WeatherService:
    def __init__(self, api_key: Optional[str], base_url: str = "https://api.weatherapi.com/v1",
                 forecast_days: int = 7, timeout: float = 15.0, retries: int = 2,
                 transport: Optional[httpx.AsyncBaseTransport] = None):
        self.api_key = api_key
        self.base_url = base_url.rstrip("/")
        self.forecast_days = forecast_days
        self.timeout = timeout
        self.retries = retries
        self.transport = transport

    async def get_weather(self, lat: float, lon: float) -> Dict[str, Any]:
        """Current conditions plus a short forecast for a point."""
        if not self.api_key:
            raise WeatherServiceError("Weather API key is missing. Set WEATHER_API_KEY.")
        params = {
            "key": self.api_key,
            "q": f"{lat},{lon}",
            "days": self.forecast_days,
            "aqi": "no",
        }
        try:
            # connect-level retries only; anything else surfaces as WeatherServiceError
            transport = self.transport or httpx.AsyncHTTPTransport(retries=self.retries)
            async with httpx.AsyncClient(transport=transport, timeout=self.timeout) as client:
                response = await client.get(f"{self.base_url}/forecast.json", params=params)
        except httpx.HTTPError as e:
            raise WeatherServiceError(f"Failed to fetch weather data: {e}") from e

        try:
            payload = response.json()
        except ValueError:
            payload = None

        if response.status_code != 200:
            message = "Failed to fetch weather data"
            error = payload.get("error") if isinstance(payload, dict) else None
            if isinstance(error, dict) and error.get("message"):
                message = str(error["message"])
            raise WeatherServiceError(f"{message} (HTTP {response.status_code})")
        if not isinstance(payload, dict):
            raise WeatherServiceError("Weather service returned an unreadable response")
        return payload

    async def get_weather_summary(self, lat: float, lon: float) -> str:
        """Formatted summary, or the unavailable sentinel when the lookup fails."""
        try:
            return format_weather_summary(await self.get_weather(lat, lon))
        except WeatherServiceError as e:
            logger.warning("Weather lookup failed for %.4f,%.4f: %s", lat, lon, e)
            return WEATHER_UNAVAILABLE


def format_weather_summary(weather: Optional[Dict[str, Any]]) -> str:
    current = weather.get("current") if isinstance(weather, dict) else None
    if not isinstance(current, dict) or not current:
        return WEATHER_UNAVAILABLE
    condition = current.get("condition")
    if isinstance(condition, dict):
        condition = condition.get("text")
    condition = condition if isinstance(condition, str) and condition else "Unknown"
    return (
        f"{current.get('temp_c')}°C, {condition}, "
        f"Humidity: {current.get('humidity')}%, Wind: {current.get('wind_kph')} km/h"
    )


def get_weather_service(settings: Settings = default_settings):
    return WeatherService(
        api_key=settings.WEATHER_API_KEY,
        base_url=settings.WEATHER_API_BASE,
        forecast_days=settings.WEATHER_FORECAST_DAYS,
        timeout=settings.WEATHER_TIMEOUT_SECONDS,
        retries=settings.WEATHER_RETRIES,
    )
