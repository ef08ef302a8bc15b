"""Document repository for systems and profiles.

Reads are equality lookups by id. Writes are shallow, last-write-wins patches
of top-level fields, applied with a single ``json_set`` statement so that two
concurrent patches touching disjoint fields never clobber each other.
"""

from __future__ import annotations

import json
import uuid
from typing import Any

import aiosqlite

from launchpath.errors import PersistenceError, SystemNotFoundError
from launchpath.log import get_logger
from launchpath.storage.database import Database
from launchpath.storage.models import PROFILE_FIELDS, SYSTEM_FIELDS, ProfileRecord, SystemRecord

logger = get_logger(__name__)

_NOW = "strftime('%Y-%m-%dT%H:%M:%f','now')"


def _json_set_clause(keys: list[str]) -> str:
    pairs = ", ".join("?, json(?)" for _ in keys)
    return f"json_set(data_json, {pairs})"


def _json_set_params(fields: dict[str, Any]) -> list[Any]:
    params: list[Any] = []
    for key, value in fields.items():
        params.append(f"$.{key}")
        params.append(json.dumps(value))
    return params


class SystemRepository:
    """CRUD over the ``systems`` and ``profiles`` documents."""

    def __init__(self, db: Database):
        self._db = db

    # -- systems ---------------------------------------------------------

    async def get(self, system_id: str) -> SystemRecord | None:
        try:
            cursor = await self._db.conn.execute(
                "SELECT id, profile_id, data_json, created_at, updated_at FROM systems WHERE id = ?",
                (system_id,),
            )
            row = await cursor.fetchone()
        except aiosqlite.Error as e:
            logger.error("system_read_failed", system_id=system_id, error=str(e))
            raise PersistenceError(f"Failed to read system {system_id}") from e
        if row is None:
            return None
        return SystemRecord.from_document(
            row["id"],
            row["profile_id"],
            json.loads(row["data_json"]),
            created_at=row["created_at"],
            updated_at=row["updated_at"],
        )

    async def require(self, system_id: str) -> SystemRecord:
        record = await self.get(system_id)
        if record is None:
            raise SystemNotFoundError(system_id)
        return record

    async def patch(self, system_id: str, fields: dict[str, Any]) -> None:
        """Replace the given top-level fields atomically."""
        if not fields:
            return
        unknown = set(fields) - SYSTEM_FIELDS
        if unknown:
            raise ValueError(f"Unknown system fields: {', '.join(sorted(unknown))}")

        sql = (
            f"UPDATE systems SET data_json = {_json_set_clause(list(fields))}, "
            f"updated_at = {_NOW} WHERE id = ?"
        )
        params = [*_json_set_params(fields), system_id]
        try:
            cursor = await self._db.conn.execute(sql, params)
            await self._db.conn.commit()
        except aiosqlite.Error as e:
            logger.error("system_patch_failed", system_id=system_id, fields=sorted(fields), error=str(e))
            raise PersistenceError(f"Failed to save system {system_id}") from e

        if cursor.rowcount == 0:
            raise SystemNotFoundError(system_id)
        logger.debug("system_patched", system_id=system_id, fields=sorted(fields))

    async def merge_offer(self, system_id: str, updates: dict[str, Any]) -> None:
        """Merge keys into the nested ``offer`` object in one statement."""
        if not updates:
            return
        sql = (
            "UPDATE systems SET data_json = json_set(data_json, '$.offer', "
            "json_patch(coalesce(json_extract(data_json, '$.offer'), '{}'), json(?))), "
            f"updated_at = {_NOW} WHERE id = ?"
        )
        try:
            cursor = await self._db.conn.execute(sql, (json.dumps(updates), system_id))
            await self._db.conn.commit()
        except aiosqlite.Error as e:
            logger.error("offer_merge_failed", system_id=system_id, error=str(e))
            raise PersistenceError(f"Failed to save offer for {system_id}") from e
        if cursor.rowcount == 0:
            raise SystemNotFoundError(system_id)

    async def claim_turn(self, system_id: str) -> int:
        """Bump the turn counter and return the index of the claimed turn.

        Every call returns a fresh index, including retries of a failed turn.
        """
        sql = (
            "UPDATE systems SET data_json = json_set(data_json, '$.turn_count', "
            "coalesce(json_extract(data_json, '$.turn_count'), 0) + 1), "
            f"updated_at = {_NOW} WHERE id = ? "
            "RETURNING json_extract(data_json, '$.turn_count') AS turn_count"
        )
        try:
            cursor = await self._db.conn.execute(sql, (system_id,))
            rows = await cursor.fetchall()
            await self._db.conn.commit()
        except aiosqlite.Error as e:
            logger.error("turn_claim_failed", system_id=system_id, error=str(e))
            raise PersistenceError(f"Failed to start a turn for {system_id}") from e
        if not rows:
            raise SystemNotFoundError(system_id)
        return rows[0]["turn_count"] - 1

    async def create_system(self, profile_id: str, fields: dict[str, Any] | None = None) -> SystemRecord:
        system_id = uuid.uuid4().hex
        doc = {"status": "in_progress", "conversation_history": [], **(fields or {})}
        unknown = set(doc) - SYSTEM_FIELDS
        if unknown:
            raise ValueError(f"Unknown system fields: {', '.join(sorted(unknown))}")
        try:
            await self._db.conn.execute(
                "INSERT INTO systems (id, profile_id, data_json) VALUES (?, ?, ?)",
                (system_id, profile_id, json.dumps(doc)),
            )
            await self._db.conn.commit()
        except aiosqlite.Error as e:
            logger.error("system_create_failed", profile_id=profile_id, error=str(e))
            raise PersistenceError("Failed to create system") from e
        logger.info("system_created", system_id=system_id, profile_id=profile_id)
        return await self.require(system_id)

    # -- profiles --------------------------------------------------------

    async def get_profile(self, profile_id: str) -> ProfileRecord | None:
        try:
            cursor = await self._db.conn.execute(
                "SELECT id, data_json FROM profiles WHERE id = ?",
                (profile_id,),
            )
            row = await cursor.fetchone()
        except aiosqlite.Error as e:
            logger.error("profile_read_failed", profile_id=profile_id, error=str(e))
            raise PersistenceError(f"Failed to read profile {profile_id}") from e
        if row is None:
            return None
        return ProfileRecord.from_document(row["id"], json.loads(row["data_json"]))

    async def upsert_profile(self, profile: ProfileRecord) -> ProfileRecord:
        doc = {k: v for k, v in profile.to_document().items() if k in PROFILE_FIELDS}
        try:
            await self._db.conn.execute(
                f"""INSERT INTO profiles (id, data_json) VALUES (?, ?)
                   ON CONFLICT(id) DO UPDATE SET
                       data_json = excluded.data_json,
                       updated_at = {_NOW}""",
                (profile.id, json.dumps(doc)),
            )
            await self._db.conn.commit()
        except aiosqlite.Error as e:
            logger.error("profile_upsert_failed", profile_id=profile.id, error=str(e))
            raise PersistenceError(f"Failed to save profile {profile.id}") from e
        return profile

    async def create_profile(self, **fields: Any) -> ProfileRecord:
        profile = ProfileRecord(id=uuid.uuid4().hex, **fields)
        return await self.upsert_profile(profile)
