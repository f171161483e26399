from fastapi import APIRouter

from study_assistant.api.v1.routers.activities import router as activities_router
from study_assistant.api.v1.routers.assistant import router as assistant_router
from study_assistant.api.v1.routers.syllabus import router as syllabus_router

v1_router = APIRouter(prefix="/api/v1")

v1_router.include_router(syllabus_router)
v1_router.include_router(assistant_router)
v1_router.include_router(activities_router)
