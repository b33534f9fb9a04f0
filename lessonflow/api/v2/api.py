from fastapi import APIRouter
from .endpoints import (
    learner_dashboard_router,
    learner_lesson_router,
)

api_router = APIRouter()

api_router.include_router(learner_lesson_router.router, prefix="/learner/lessons", tags=["Learner Lessons"])
api_router.include_router(learner_dashboard_router.router, prefix="/learner/dashboard", tags=["Learner Dashboard"])
api_router.include_router(learner_dashboard_router.profile_router, prefix="/learner/profile", tags=["Learner Dashboard"])
