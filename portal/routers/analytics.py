from fastapi import APIRouter, Depends

from portal.dependencies import get_analytics, get_identity
from portal.schemas.analytics import (
    AnalyticsResponse,
    StatusCountResponse,
    StudentCountResponse,
    SubjectCountResponse,
)
from portal.services.analytics_service import AnalyticsAggregator

router = APIRouter(
    prefix="/analytics",
    tags=["analytics"],
    dependencies=[Depends(get_identity)],
)


@router.get("", response_model=AnalyticsResponse)
async def get_analytics_summary(aggregator: AnalyticsAggregator = Depends(get_analytics)):
    result = aggregator.compute()
    return AnalyticsResponse(
        total_uploads=result.total_uploads,
        subject_wise=[SubjectCountResponse(subject=s.subject, count=s.count) for s in result.subject_wise],
        student_wise=[
            StudentCountResponse(student_id=s.student_id, student_name=s.student_name, count=s.count)
            for s in result.student_wise
        ],
        status_wise=[StatusCountResponse(status=s.status.value, count=s.count) for s in result.status_wise],
        recent_uploads=result.recent_uploads,
    )
