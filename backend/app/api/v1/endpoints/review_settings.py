# backend/app/api/v1/endpoints/review_settings.py
from fastapi import APIRouter, HTTPException, Depends
from loguru import logger

from backend.app.core.options import OptionsStore
from backend.app.core.tiered_cache import TieredCache
from backend.app.services.data_manager import (
    ReviewDataManager,
    get_options_store,
    get_review_data_manager,
    get_tiered_cache,
)
from backend.app.api.v1.schemas import ReviewSettingsResponse, ReviewSettingsUpdate

router = APIRouter()

CACHE_CLEARED_MESSAGE = "All WordPress.org plugin review caches have been cleared successfully."


@router.get("/settings", response_model=ReviewSettingsResponse, summary="Get review settings")
def read_review_settings(options_store: OptionsStore = Depends(get_options_store)):
    return ReviewSettingsResponse(**options_store.load().model_dump())


@router.put("/settings", response_model=ReviewSettingsResponse, summary="Update review settings")
def update_review_settings(
    settings_in: ReviewSettingsUpdate,
    options_store: OptionsStore = Depends(get_options_store),
    cache: TieredCache = Depends(get_tiered_cache),
    data_manager: ReviewDataManager = Depends(get_review_data_manager),
):
    options = options_store.load()
    if settings_in.cache_duration_hours is not None:
        options.cache_duration_hours = settings_in.cache_duration_hours
    options.clear_cache = settings_in.clear_cache

    if not options_store.save(options):
        raise HTTPException(status_code=500, detail="Could not store review settings.")
    logger.info(f"Review settings updated: cache_duration_hours={options.cache_duration_hours}")

    cache_cleared = False
    if options.clear_cache:
        data_manager.clear_all_cache()
        cache.clear()

        options.clear_cache = False
        options_store.save(options)
        cache_cleared = True
        logger.info("All WordPress.org review caches cleared on request.")

    return ReviewSettingsResponse(
        **options.model_dump(),
        cache_cleared=cache_cleared,
        message=CACHE_CLEARED_MESSAGE if cache_cleared else None,
    )
