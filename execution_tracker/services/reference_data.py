"""
Store and Contest Reference Data

Stores are seeded from a YAML list and edited rarely. Brand contests carry a
weekly payout and the set of stores taking part; eligibility is stored on the
store row (eligible_brands), so renaming or deleting a brand rewrites those
lists.
"""

import logging
from pathlib import Path
from typing import List, Optional

import yaml
from sqlalchemy.orm import Session

from execution_tracker.errors import ConflictError, NotFoundError
from execution_tracker.models.api_responses import BrandUpsert
from execution_tracker.models.store import Brand, Store
from execution_tracker.repositories import BrandRepository, StoreRepository

logger = logging.getLogger(__name__)


def load_store_names(path: str) -> List[str]:
    """
    Read store names from a YAML seed file.

    Accepts either a plain list of names or a list of mappings with a
    ``name`` key, optionally nested under a top-level ``stores`` key.

    Raises:
        FileNotFoundError: If the seed file does not exist
        ValueError: If the file does not contain a list of stores
    """
    seed_path = Path(path)
    if not seed_path.exists():
        raise FileNotFoundError(f"Store seed file not found: {seed_path}")

    with seed_path.open("r", encoding="utf-8") as f:
        data = yaml.safe_load(f) or []

    if isinstance(data, dict):
        data = data.get("stores", [])
    if not isinstance(data, list):
        raise ValueError(f"Expected a list of stores in {seed_path}")

    names = []
    for entry in data:
        name = entry.get("name") if isinstance(entry, dict) else entry
        name = str(name or "").strip()
        if name and name not in names:
            names.append(name)
    return names


class ReferenceDataService:
    def __init__(self, db: Session):
        self.db = db
        self.stores = StoreRepository(db)
        self.brands = BrandRepository(db)

    # Stores

    def list_stores(self) -> List[Store]:
        return self.stores.list_all()

    def create_store(self, name: str, eligible_brands: Optional[List[str]] = None) -> Store:
        name = name.strip()
        if self.stores.get_by_name(name):
            raise ConflictError(f"Store '{name}' already exists")
        return self.stores.create(name, eligible_brands)

    def seed_stores(self, path: str) -> int:
        """Insert every store from the seed file that is not stored yet."""
        names = load_store_names(path)
        created = self.stores.upsert_names(names)
        logger.info(f"Seeded stores from {path}: {created} new of {len(names)}")
        return created

    # Brand contests

    def list_brands(self) -> List[Brand]:
        return self.brands.list_all()

    def get_brand(self, brand_id: str) -> Brand:
        brand = self.brands.get_by_id(brand_id)
        if not brand:
            raise NotFoundError(f"Brand {brand_id} not found")
        return brand

    def create_brand(self, payload: BrandUpsert) -> Brand:
        name = payload.name.strip()
        if self.brands.get_by_name(name):
            raise ConflictError(f"Brand '{name}' already exists")
        self._check_store_ids(payload.store_ids)

        brand = self.brands.create(name, payload.payout_amount)
        if payload.store_ids is not None:
            self._assign_stores(name, payload.store_ids)

        self.db.commit()
        self.db.refresh(brand)
        logger.info(f"Created brand contest {brand.name} (payout {brand.payout_amount})")
        return brand

    def update_brand(self, brand_id: str, payload: BrandUpsert) -> Brand:
        brand = self.get_brand(brand_id)
        new_name = payload.name.strip()
        old_name = brand.name

        if new_name != old_name:
            clash = self.brands.get_by_name(new_name)
            if clash and clash.id != brand.id:
                raise ConflictError(f"Brand '{new_name}' already exists")
        self._check_store_ids(payload.store_ids)

        if new_name != old_name:
            for store in self.stores.list_eligible_for(old_name):
                self.stores.set_eligible_brands(
                    store,
                    [new_name if b == old_name else b for b in store.eligible_brands],
                )
            brand.name = new_name

        brand.payout_amount = payload.payout_amount

        if payload.store_ids is not None:
            self._assign_stores(new_name, payload.store_ids)

        self.db.commit()
        self.db.refresh(brand)
        logger.info(f"Updated brand contest {old_name} -> {brand.name}")
        return brand

    def delete_brand(self, brand_id: str) -> None:
        brand = self.get_brand(brand_id)
        name = brand.name
        for store in self.stores.list_eligible_for(name):
            self.stores.set_eligible_brands(
                store, [b for b in store.eligible_brands if b != name]
            )
        self.brands.delete(brand)
        self.db.commit()
        logger.info(f"Deleted brand contest {name}")

    def _check_store_ids(self, store_ids: Optional[List[str]]) -> None:
        if not store_ids:
            return
        known = {store.id for store in self.stores.list_all()}
        unknown = set(store_ids) - known
        if unknown:
            raise NotFoundError(f"Unknown store ids: {', '.join(sorted(unknown))}")

    def _assign_stores(self, brand_name: str, store_ids: List[str]) -> None:
        """Make exactly the given stores eligible for the brand."""
        wanted = set(store_ids)
        for store in self.stores.list_all():
            current = list(store.eligible_brands or [])
            if store.id in wanted and brand_name not in current:
                self.stores.set_eligible_brands(store, current + [brand_name])
            elif store.id not in wanted and brand_name in current:
                self.stores.set_eligible_brands(store, [b for b in current if b != brand_name])
