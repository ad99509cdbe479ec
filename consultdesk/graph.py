import logging
from typing import Optional

from neo4j import AsyncDriver, AsyncGraphDatabase

from .config import Settings

logger = logging.getLogger(__name__)

CONSTRAINTS = (
    "CREATE CONSTRAINT IF NOT EXISTS FOR (v:Visitor) REQUIRE v.sessionId IS UNIQUE",
    "CREATE CONSTRAINT IF NOT EXISTS FOR (e:Event) REQUIRE e.id IS UNIQUE",
)


def create_graph_driver(settings: Settings) -> Optional[AsyncDriver]:
    """Create the Neo4j driver, or None when storage is not configured"""
    if not settings.neo4j_configured:
        return None

    driver = AsyncGraphDatabase.driver(
        settings.neo4j_uri,
        auth=(settings.neo4j_user, settings.neo4j_password),
    )
    logger.info("✅ Neo4j driver created")
    return driver


async def ensure_graph_setup(driver: Optional[AsyncDriver], database: Optional[str]) -> None:
    """Create uniqueness constraints for visitors and events"""
    if driver is None:
        logger.warning("Neo4j configuration missing - analytics endpoints disabled.")
        return

    try:
        for statement in CONSTRAINTS:
            await driver.execute_query(statement, {}, database_=database)
        logger.info("Neo4j analytics constraints ensured.")
    except Exception as e:
        logger.error(f"Failed to prepare Neo4j constraints: {e}")
