import logging
from dotenv import load_dotenv

from farmhand.core.config import Settings, settings as default_settings
from farmhand.core.database import init_db
from farmhand.flows.planting_flow import PlantingFlow
from farmhand.services.ai_service import get_ai_service
from farmhand.services.plant_service import get_plant_service
from farmhand.services.weather_service import get_weather_service

load_dotenv()

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def configure_logging(settings: Settings = default_settings) -> None:
    logging.basicConfig(level=settings.LOG_LEVEL.upper(), format=LOG_FORMAT)


async def startup(settings: Settings = default_settings):
    """Application start: logging and the document database."""
    configure_logging(settings)
    return await init_db(settings)


def create_planting_flow(settings: Settings = default_settings) -> PlantingFlow:
    return PlantingFlow(
        ai_service=get_ai_service(settings),
        weather_service=get_weather_service(settings),
        plant_service=get_plant_service(),
        settings=settings,
    )
