from fastapi import APIRouter
from backend.app.api.v1.endpoints import plugin_reviews, review_settings

api_v1_router = APIRouter()

api_v1_router.include_router(plugin_reviews.router, tags=["WordPress.org Reviews"])
api_v1_router.include_router(review_settings.router, tags=["Settings"])
