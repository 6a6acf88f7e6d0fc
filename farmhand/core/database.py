import logging
import motor.motor_asyncio
import beanie
from farmhand.core.config import Settings, settings as default_settings
import certifi

logger = logging.getLogger(__name__)


def document_models():
    # Import all the models here so Beanie can find them
    from farmhand.models.planting_plan import PlantingPlan
    from farmhand.models.job import Job
    from farmhand.models.market import Listing, UnitSale, Order, InventoryItem

    return [
        PlantingPlan,
        Job,
        Listing,
        UnitSale,
        Order,
        InventoryItem,
    ]


async def init_models(db):
    """Binds every document model to the given Motor (or Motor-compatible) database."""
    await beanie.init_beanie(database=db, document_models=document_models())


async def init_db(settings: Settings = default_settings):
    """
    Initializes the MongoDB database and Beanie ODM.
    Includes SSL certificate handling for cloud deployment.
    """
    client_kwargs = {}
    if settings.MONGODB_TLS:
        client_kwargs = {"tls": True, "tlsCAFile": certifi.where()}
    client = motor.motor_asyncio.AsyncIOMotorClient(settings.MONGODB_URL, **client_kwargs)
    await init_models(client[settings.MONGODB_DB_NAME])
    logger.info("Document database ready (%s)", settings.MONGODB_DB_NAME)
    return client
