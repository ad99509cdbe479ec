"""Analytics router - Visitor event tracking and metrics"""

from fastapi import APIRouter, Depends, Request

from ...context import AppContext, get_context
from ...shared.request_utils import read_json_object
from .repository import AnalyticsRepository
from .service import AnalyticsService

router = APIRouter(prefix="/analytics", tags=["Analytics"])


def get_analytics_service(context: AppContext = Depends(get_context)) -> AnalyticsService:
    """Dependency injection for AnalyticsService; storage is optional"""
    repository = None
    if context.graph_driver is not None:
        repository = AnalyticsRepository(context.graph_driver, context.settings.neo4j_database)
    return AnalyticsService(repository)


@router.post("/events")
async def record_event(request: Request, service: AnalyticsService = Depends(get_analytics_service)):
    """Record a visitor event"""
    payload = await read_json_object(request)
    return await service.record_event(payload)


@router.get("/metrics")
async def get_metrics(service: AnalyticsService = Depends(get_analytics_service)):
    """Visitors, conversions, total events and conversion rate"""
    snapshot = await service.get_metrics()
    return snapshot.model_dump(by_alias=True)
