"""
Store and Brand Contest API Routes

Stores:
- GET /api/stores, POST /api/stores
- POST /api/stores/seed - Upsert stores from the YAML seed file

Brand contests:
- GET /api/brands, POST /api/brands
- PUT /api/brands/{brand_id} - Rename, change payout, set eligible stores
- DELETE /api/brands/{brand_id}
"""

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session
from typing import List
import logging

from execution_tracker.config import Settings, get_settings
from execution_tracker.database import get_db
from execution_tracker.errors import ConflictError, NotFoundError
from execution_tracker.models.api_responses import (
    BrandResponse,
    BrandUpsert,
    SeedStoresResponse,
    StoreCreate,
    StoreResponse,
)
from execution_tracker.services.reference_data import ReferenceDataService

logger = logging.getLogger(__name__)

# Mounted at /api/stores and /api/brands respectively
stores_router = APIRouter()
brands_router = APIRouter()


def _error(status_code: int, e: Exception) -> HTTPException:
    return HTTPException(status_code=status_code, detail={"success": False, "message": str(e)})


@stores_router.get("", response_model=List[StoreResponse])
async def list_stores(db: Session = Depends(get_db)):
    return ReferenceDataService(db).list_stores()


@stores_router.post("", response_model=StoreResponse, status_code=201)
async def create_store(request: StoreCreate, db: Session = Depends(get_db)):
    try:
        return ReferenceDataService(db).create_store(request.name, request.eligible_brands)
    except ConflictError as e:
        raise _error(409, e)


@stores_router.post("/seed", response_model=SeedStoresResponse)
async def seed_stores(db: Session = Depends(get_db), settings: Settings = Depends(get_settings)):
    """
    Upsert stores from settings.stores_seed_file.

    Existing stores are left untouched, so the call can be repeated.
    """
    try:
        created = ReferenceDataService(db).seed_stores(settings.stores_seed_file)
        return SeedStoresResponse(
            success=True,
            message=f"Seeded stores from {settings.stores_seed_file}: {created} new",
            created=created,
        )
    except (FileNotFoundError, ValueError) as e:
        logger.error(f"Store seeding failed: {e}")
        raise HTTPException(
            status_code=500,
            detail={"success": False, "message": f"Upload failed: {str(e)}"},
        )


@brands_router.get("", response_model=List[BrandResponse])
async def list_brands(db: Session = Depends(get_db)):
    return ReferenceDataService(db).list_brands()


@brands_router.post("", response_model=BrandResponse, status_code=201)
async def create_brand(request: BrandUpsert, db: Session = Depends(get_db)):
    try:
        return ReferenceDataService(db).create_brand(request)
    except ConflictError as e:
        raise _error(409, e)
    except NotFoundError as e:
        raise _error(404, e)


@brands_router.put("/{brand_id}", response_model=BrandResponse)
async def update_brand(brand_id: str, request: BrandUpsert, db: Session = Depends(get_db)):
    try:
        return ReferenceDataService(db).update_brand(brand_id, request)
    except ConflictError as e:
        raise _error(409, e)
    except NotFoundError as e:
        raise _error(404, e)


@brands_router.delete("/{brand_id}")
async def delete_brand(brand_id: str, db: Session = Depends(get_db)):
    try:
        ReferenceDataService(db).delete_brand(brand_id)
        return {"success": True, "deleted": brand_id}
    except NotFoundError as e:
        raise _error(404, e)
