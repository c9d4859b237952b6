from fastapi import APIRouter

from app.api.v1.execute import router as execute_router
from app.api.v1.keywords import router as keywords_router
from app.api.v1.prompts import router as prompts_router
from app.api.v1.results import router as results_router
from app.api.v1.users import router as users_router

api_v1_router = APIRouter(prefix="/api/v1")
api_v1_router.include_router(execute_router)
api_v1_router.include_router(results_router)
api_v1_router.include_router(keywords_router)
api_v1_router.include_router(prompts_router)
api_v1_router.include_router(users_router)
