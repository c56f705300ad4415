from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from speechcoach.api.deps import get_analysis_service, get_current_user_id
from speechcoach.db.session import get_db
from speechcoach.schemas.analysis import AnalyzeResponse
from speechcoach.services.analysis_service import AnalysisService

router = APIRouter()


@router.get("/{project_id}/{upload_id}", response_model=AnalyzeResponse)
def analyze_upload(
    project_id: str,
    upload_id: str,
    retry: bool = Query(False, description="Skip the cached analysis and ask the model again"),
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db),
    service: AnalysisService = Depends(get_analysis_service),
):
    outcome = service.analyze(db, user_id, project_id, upload_id, retry=retry)
    return outcome.to_response()
