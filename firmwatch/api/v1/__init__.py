"""API v1 routes."""

from fastapi import APIRouter

from firmwatch.api.v1 import assessments, health, issues, scan, stats

router = APIRouter()
router.include_router(health.router, prefix="/health", tags=["health"])
router.include_router(scan.router, prefix="/scan", tags=["scan"])
router.include_router(assessments.router, prefix="/assessments", tags=["assessments"])
router.include_router(issues.router, prefix="/issues", tags=["issues"])
router.include_router(stats.router, prefix="/stats", tags=["stats"])
