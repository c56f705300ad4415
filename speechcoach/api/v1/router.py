from fastapi import APIRouter

from speechcoach.api.v1.endpoints import analyze, projects, uploads

router = APIRouter()

router.include_router(projects.router, prefix="/projects", tags=["projects"])
router.include_router(uploads.router, prefix="/uploads", tags=["uploads"])
router.include_router(analyze.router, prefix="/analyze", tags=["analyze"])
