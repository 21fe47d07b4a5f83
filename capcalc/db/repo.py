"""Repository abstraction over in-memory or Supabase storage."""

from __future__ import annotations

import itertools
import os
import threading
import uuid
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

import pandas as pd

from ..utils.io import load_csv
from ..utils.logging import get_logger
from .mappers import map_property_row, map_shared_report_row
from .supabase_client import create_supabase_client

LOGGER = get_logger("db.repo")

DB_MODE = os.getenv("DB_MODE", "memory").lower()
SEED_PROPERTIES_CSV = os.getenv("SEED_PROPERTIES_CSV", "properties.csv")

TBL_PROPERTIES = "properties"
TBL_SHARED_REPORTS = "shared_reports"


def _newest_first(rows: List[Dict]) -> List[Dict]:
    return sorted(rows, key=lambda row: (row["created_at"], row["id"]), reverse=True)


class MemoryStore:
    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._ids = itertools.count(1)
        self._properties: Dict[int, Dict] = {}
        self._reports: Dict[str, Dict] = {}

    def insert_property(self, row: Dict) -> Dict:
        with self._lock:
            row = dict(row, id=next(self._ids))
            self._properties[row["id"]] = row
        return dict(row)

    def select_properties(self, postcode: Optional[str] = None) -> List[Dict]:
        with self._lock:
            rows = [dict(row) for row in self._properties.values()]
        if postcode is not None:
            rows = [row for row in rows if row["postcode"] == postcode]
        return _newest_first(rows)

    def select_property(self, property_id: int) -> Optional[Dict]:
        with self._lock:
            row = self._properties.get(property_id)
        return dict(row) if row else None

    def insert_report(self, row: Dict) -> Dict:
        with self._lock:
            self._reports[row["share_id"]] = dict(row)
        return dict(row)

    def select_report(self, share_id: str) -> Optional[Dict]:
        with self._lock:
            row = self._reports.get(share_id)
        return dict(row) if row else None


class SupabaseStore:  # pragma: no cover - needs live credentials
    def __init__(self) -> None:
        self._client = create_supabase_client()

    def insert_property(self, row: Dict) -> Dict:
        payload = {k: v for k, v in row.items() if k != "created_at"}
        resp = self._client.table(TBL_PROPERTIES).insert(payload).execute()
        return map_property_row(resp.data[0])

    def select_properties(self, postcode: Optional[str] = None) -> List[Dict]:
        query = self._client.table(TBL_PROPERTIES).select("*")
        if postcode is not None:
            query = query.eq("postcode", postcode)
        resp = query.order("created_at", desc=True).execute()
        return [map_property_row(row) for row in resp.data]

    def select_property(self, property_id: int) -> Optional[Dict]:
        resp = self._client.table(TBL_PROPERTIES).select("*").eq("id", property_id).limit(1).execute()
        return map_property_row(resp.data[0]) if resp.data else None

    def insert_report(self, row: Dict) -> Dict:
        payload = dict(row, created_at=row["created_at"].isoformat(), expires_at=row["expires_at"].isoformat())
        self._client.table(TBL_SHARED_REPORTS).insert(payload).execute()
        return row

    def select_report(self, share_id: str) -> Optional[Dict]:
        resp = self._client.table(TBL_SHARED_REPORTS).select("*").eq("share_id", share_id).limit(1).execute()
        return map_shared_report_row(resp.data[0]) if resp.data else None


class Repo:
    def __init__(self, mode: Optional[str] = None, seed: bool = True) -> None:
        self.mode = (mode or DB_MODE).lower()
        self._store: Any = None
        if self.mode == "supabase":
            try:
                self._store = SupabaseStore()
                LOGGER.info("Repository running in Supabase mode")
            except Exception as exc:
                LOGGER.warning("Failed to initialise Supabase client (%s); falling back to memory", exc)
                self.mode = "memory"
        if self.mode != "supabase":
            self.mode = "memory"
            self._store = MemoryStore()
            LOGGER.info("Repository running in memory mode")
            if seed:
                self.seed_from_csv(SEED_PROPERTIES_CSV)

    # ------------------------------------------------------------------
    # Properties
    def create_property(self, data: Dict[str, Any]) -> Dict:
        row = map_property_row(data)
        row.pop("id", None)
        row["created_at"] = datetime.now(timezone.utc)
        created = self._store.insert_property(row)
        LOGGER.info("property_created id=%s postcode=%s", created["id"], created["postcode"])
        return created

    def list_properties(self) -> List[Dict]:
        return self._store.select_properties()

    def get_properties_by_postcode(self, postcode: str) -> List[Dict]:
        return self._store.select_properties(postcode=str(postcode).strip())

    def get_property(self, property_id: int) -> Optional[Dict]:
        return self._store.select_property(property_id)

    def seed_from_csv(self, name: str) -> int:
        try:
            df = load_csv(name)
        except FileNotFoundError:
            LOGGER.debug("seed_skipped file=%s", name)
            return 0
        df = df.where(pd.notnull(df), None)
        records = df.to_dict("records")
        for record in records:
            self.create_property(record)
        LOGGER.info("seeded_properties count=%d file=%s", len(records), name)
        return len(records)

    # ------------------------------------------------------------------
    # Shared reports
    def create_shared_report(self, property_data: Dict[str, Any], expires_at: datetime) -> Dict:
        row = {
            "share_id": uuid.uuid4().hex[:12],
            "property_data": property_data,
            "created_at": datetime.now(timezone.utc),
            "expires_at": expires_at,
        }
        created = self._store.insert_report(row)
        LOGGER.info("shared_report_created share_id=%s expires_at=%s", created["share_id"], expires_at.isoformat())
        return created

    def get_shared_report(self, share_id: str) -> Optional[Dict]:
        return self._store.select_report(share_id)


_repo_singleton: Repo | None = None


def get_repository() -> Repo:
    global _repo_singleton
    if _repo_singleton is None:
        _repo_singleton = Repo()
    return _repo_singleton


def reset_repository() -> None:
    global _repo_singleton
    _repo_singleton = None
