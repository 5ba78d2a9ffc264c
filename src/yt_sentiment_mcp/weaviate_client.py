"""Weaviate connection and schema helpers for the warehouse.

``connect()`` picks the right connection method for a URL and
``ensure_collections()`` idempotently creates the warehouse collections
from ``weaviate_schema.ALL_COLLECTIONS``.
"""

from __future__ import annotations

import logging
from urllib.parse import urlparse

import weaviate
from weaviate.classes.config import Configure, DataType, Property
from weaviate.classes.init import AdditionalConfig, Auth, Timeout

from .weaviate_schema import ALL_COLLECTIONS, CollectionDef, PropertyDef

logger = logging.getLogger(__name__)

_DATA_TYPE_MAP: dict[str, DataType] = {
    "text": DataType.TEXT,
    "text[]": DataType.TEXT_ARRAY,
    "int": DataType.INT,
    "number": DataType.NUMBER,
    "boolean": DataType.BOOL,
}

_ADDITIONAL_CONFIG = AdditionalConfig(timeout=Timeout(init=30, query=60, insert=120))


def _to_property(prop_def: PropertyDef) -> Property:
    """Convert a PropertyDef to a v4 Property object."""
    data_type = _DATA_TYPE_MAP.get(prop_def.data_type)
    if data_type is None:
        raise ValueError(f"Unknown data type: {prop_def.data_type!r}")
    kwargs: dict = {
        "name": prop_def.name,
        "data_type": data_type,
        "description": prop_def.description or None,
        "index_filterable": prop_def.index_filterable,
        "index_range_filters": prop_def.index_range_filters,
    }
    if prop_def.index_searchable is not None:
        kwargs["index_searchable"] = prop_def.index_searchable
    return Property(**kwargs)


def connect(url: str, api_key: str = "") -> weaviate.WeaviateClient:
    """Connect to a local, cloud, or custom Weaviate deployment.

    Local hosts use the HTTP port + 1 for gRPC by convention.
    """
    parsed = urlparse(url)
    host = parsed.hostname or ""
    auth = Auth.api_key(api_key) if api_key else None

    if host in ("localhost", "127.0.0.1", "::1"):
        port = parsed.port or 8080
        return weaviate.connect_to_local(
            host=host, port=port, grpc_port=port + 1, additional_config=_ADDITIONAL_CONFIG,
        )
    if parsed.scheme == "https" and not parsed.port:
        return weaviate.connect_to_weaviate_cloud(
            cluster_url=url, auth_credentials=auth, additional_config=_ADDITIONAL_CONFIG,
        )

    secure = parsed.scheme == "https"
    port = parsed.port or (443 if secure else 8080)
    return weaviate.connect_to_custom(
        http_host=host,
        http_port=port,
        http_secure=secure,
        grpc_host=host,
        grpc_port=port + 1,
        grpc_secure=secure,
        auth_credentials=auth,
        additional_config=_ADDITIONAL_CONFIG,
    )


def ensure_collections(
    client: weaviate.WeaviateClient, collections: list[CollectionDef] | None = None,
) -> None:
    """Create missing collections and add missing properties (additive only)."""
    collections = ALL_COLLECTIONS if collections is None else collections
    existing = set(client.collections.list_all().keys())
    for col_def in collections:
        if col_def.name not in existing:
            client.collections.create(
                name=col_def.name,
                description=col_def.description,
                properties=[_to_property(p) for p in col_def.properties],
                vector_config=Configure.Vectors.self_provided(),
            )
            logger.info("Created Weaviate collection: %s", col_def.name)
            continue

        col = client.collections.get(col_def.name)
        present = {p.name for p in col.config.get().properties}
        for prop_def in col_def.properties:
            if prop_def.name not in present:
                col.config.add_property(_to_property(prop_def))
                logger.info("Added property %s.%s", col_def.name, prop_def.name)
