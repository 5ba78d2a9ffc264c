"""Warehouse loader backed by Weaviate collections.

Rows are plain dicts keyed like the pipeline models; ``to_properties``
maps them onto collection properties (Weaviate reserves ``id``, and the
analysis record's nested sections are flattened plus kept as raw JSON).
"""

from __future__ import annotations

import asyncio
import json
import logging
import threading
from typing import Any

import weaviate
from weaviate.classes.data import DataObject
from weaviate.classes.query import Filter
from weaviate.util import generate_uuid5

from .config import ServerConfig, get_config
from .errors import InvalidInputError, PipelineError, TransportError
from .weaviate_client import connect, ensure_collections
from .weaviate_schema import COLLECTIONS_BY_TABLE, CollectionDef

logger = logging.getLogger(__name__)


def _analysis_properties(row: dict[str, Any]) -> dict[str, Any]:
    audience = row.get("audience_analysis", {})
    return {
        "tracking_id": row.get("tracking_id", ""),
        "run_date": row.get("run_date", ""),
        "executive_summary": row.get("executive_summary", ""),
        "sentiment_label": audience.get("sentiment_label", ""),
        "positive_comments": audience.get("positive_comments", 0),
        "negative_comments": audience.get("negative_comments", 0),
        "neutral_comments": audience.get("neutral_comments", 0),
        "key_themes": [t.get("theme_title", "") for t in row.get("key_themes", [])],
        "raw_result": json.dumps(row),
    }


def to_properties(col_def: CollectionDef, row: dict[str, Any]) -> dict[str, Any]:
    """Map one pipeline row onto the properties of *col_def*."""
    if col_def.table == "analyzed":
        return _analysis_properties(row)
    props = dict(row)
    if "id" in props:
        props["video_id" if col_def.table == "videos" else "comment_id"] = props.pop("id")
    return {k: v for k, v in props.items() if k in col_def.property_names}


def _row_uuid(col_def: CollectionDef, props: dict[str, Any]) -> str:
    """Deterministic object UUID so a replayed insert targets the same object."""
    key = props.get("comment_id") or props.get("video_id") or ""
    return str(generate_uuid5(f"{col_def.table}:{props.get('tracking_id', '')}:{key}"))


class WeaviateWarehouse:
    """Idempotency check and bulk insert for the ``videos``, ``comments``
    and ``analyzed`` tables.

    Connects lazily; the connection is shared by every call on this
    instance and guarded by a lock for concurrent ``to_thread`` use.
    """

    def __init__(self, url: str, api_key: str = "") -> None:
        if not url:
            raise InvalidInputError("WEAVIATE_URL not configured")
        self.url = url
        self.api_key = api_key
        self._client: weaviate.WeaviateClient | None = None
        self._lock = threading.Lock()

    @classmethod
    def from_config(cls, cfg: ServerConfig | None = None) -> WeaviateWarehouse:
        cfg = cfg or get_config()
        return cls(cfg.weaviate_url, cfg.weaviate_api_key)

    def _get_client(self) -> weaviate.WeaviateClient:
        with self._lock:
            if self._client is None:
                client = connect(self.url, self.api_key)
                ensure_collections(client)
                self._client = client
                logger.info("Connected to Weaviate warehouse at %s", self.url)
            return self._client

    def _collection(self, table: str):
        col_def = COLLECTIONS_BY_TABLE.get(table)
        if col_def is None:
            raise InvalidInputError(f"Unknown warehouse table: {table}")
        return col_def, self._get_client().collections.get(col_def.name)

    async def record_exists(self, table: str, tracking_id: str) -> bool:
        """Return True if *table* already holds a row for *tracking_id*."""

        def _query() -> bool:
            _, collection = self._collection(table)
            result = collection.query.fetch_objects(
                filters=Filter.by_property("tracking_id").equal(tracking_id),
                limit=1,
            )
            return bool(result.objects)

        try:
            return await asyncio.to_thread(_query)
        except PipelineError:
            raise
        except Exception as exc:
            raise TransportError(f"warehouse query on {table} failed: {exc}") from exc

    async def insert(self, table: str, rows: list[dict[str, Any]]) -> None:
        """Insert *rows* into *table* in one batch."""
        if not rows:
            return

        def _insert() -> None:
            col_def, collection = self._collection(table)
            objects = []
            for row in rows:
                props = to_properties(col_def, row)
                objects.append(DataObject(properties=props, uuid=_row_uuid(col_def, props)))
            result = collection.data.insert_many(objects)
            if result.has_errors:
                first = next(iter(result.errors.values()))
                raise TransportError(
                    f"warehouse insert into {table} failed for {len(result.errors)} row(s): {first.message}"
                )

        try:
            await asyncio.to_thread(_insert)
        except PipelineError:
            raise
        except Exception as exc:
            raise TransportError(f"warehouse insert into {table} failed: {exc}") from exc
        logger.info("Inserted %d row(s) into %s", len(rows), table)

    def close(self) -> None:
        """Close the connection, if one was opened."""
        with self._lock:
            if self._client is not None:
                try:
                    self._client.close()
                finally:
                    self._client = None
                logger.info("Closed Weaviate warehouse client")

    async def aclose(self) -> None:
        await asyncio.to_thread(self.close)
