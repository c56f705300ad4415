from functools import lru_cache

from fastapi import Depends, Header

from speechcoach.core.errors import Unauthorized
from speechcoach.services.analysis_oracle import AnalysisOracle, OpenAIAnalysisOracle
from speechcoach.services.analysis_service import AnalysisService


def get_current_user_id(x_user_id: str | None = Header(default=None)) -> str:
    # identity is established upstream, we only read the forwarded user id
    user_id = (x_user_id or "").strip()
    if not user_id:
        raise Unauthorized()
    return user_id


@lru_cache
def get_oracle() -> AnalysisOracle:
    return OpenAIAnalysisOracle()


def get_analysis_service(oracle: AnalysisOracle = Depends(get_oracle)) -> AnalysisService:
    return AnalysisService(oracle)
