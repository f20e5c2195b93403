"""
Metrics endpoint for performance monitoring.
"""
from fastapi import APIRouter
from chartadvisor.core.performance import PerformanceMonitor

router = APIRouter()


@router.get("/metrics")
async def get_metrics():
    """
    Get performance metrics.

    Returns count, min, max, mean and percentiles for every tracked route
    handler and for overall request duration.
    """
    return {
        'performance': PerformanceMonitor.get_all_metrics()
    }
