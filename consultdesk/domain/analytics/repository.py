"""Analytics repository - Graph queries for visitors and events"""

import asyncio
import json
from typing import Any, Optional

from neo4j import AsyncDriver

RECORD_EVENT_QUERY = """
MERGE (v:Visitor {sessionId: $sessionId})
ON CREATE SET v.firstSeen = datetime($timestamp)
SET v.lastSeen = datetime($timestamp)
CREATE (e:Event {
  id: $eventId,
  type: $eventType,
  page: $page,
  timestamp: datetime($timestamp),
  properties: $properties
})
MERGE (v)-[:PERFORMED]->(e)
"""

COUNT_VISITORS_QUERY = "MATCH (v:Visitor) RETURN count(v) AS visitors"
COUNT_CONVERSIONS_QUERY = (
    "MATCH (:Visitor)-[:PERFORMED]->(e:Event {type: 'conversion'}) "
    "RETURN count(e) AS conversions"
)
COUNT_EVENTS_QUERY = "MATCH (:Visitor)-[:PERFORMED]->(e:Event) RETURN count(e) AS totalEvents"


def _first_value(result: Any, key: str) -> int:
    records = getattr(result, "records", None) or []
    if not records:
        return 0
    return records[0].get(key) or 0


class AnalyticsRepository:
    """Repository for analytics graph operations"""

    def __init__(self, driver: AsyncDriver, database: Optional[str] = None):
        self.driver = driver
        self.database = database

    async def _execute(self, query: str, parameters: Optional[dict] = None) -> Any:
        return await self.driver.execute_query(query, parameters or {}, database_=self.database)

    async def record_event(
        self,
        session_id: str,
        event_id: str,
        event_type: str,
        page: Optional[str],
        properties: dict,
        timestamp: str,
    ) -> None:
        """Upsert the visitor, create the event and link them in one write"""
        await self._execute(
            RECORD_EVENT_QUERY,
            {
                "sessionId": session_id,
                "eventId": event_id,
                "eventType": event_type,
                "page": page,
                "timestamp": timestamp,
                # Node properties cannot hold maps
                "properties": json.dumps(properties, default=str),
            },
        )

    async def get_counts(self) -> dict[str, int]:
        """Run the three aggregate counts concurrently"""
        results = await asyncio.gather(
            self._execute(COUNT_VISITORS_QUERY),
            self._execute(COUNT_CONVERSIONS_QUERY),
            self._execute(COUNT_EVENTS_QUERY),
            return_exceptions=True,
        )
        # Every query has settled; surface the first failure
        for result in results:
            if isinstance(result, BaseException):
                raise result
        visitors_result, conversions_result, events_result = results
        return {
            "visitors": _first_value(visitors_result, "visitors"),
            "conversions": _first_value(conversions_result, "conversions"),
            "total_events": _first_value(events_result, "totalEvents"),
        }
