"""Optional MLflow tracing for pipeline runs.

Each MCP tool call becomes a ``TOOL`` root span. With Gemini autologging
on, the per-chunk map calls and every reduce attempt show up beneath it as
``CHAT_MODEL`` spans, and ``tag_run()`` stamps the trace with the run's
tracking id so one video's fetch, analyze and ingest traces can be joined.

Requires the ``tracing`` extra (``mlflow-tracing``); without it every
helper here is a no-op. Turned on by ``MLFLOW_TRACKING_URI`` and turned
off again by ``YT_SENTIMENT_TRACING_ENABLED=false``.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Any

logger = logging.getLogger(__name__)

try:
    import mlflow
    import mlflow.gemini

    _HAS_MLFLOW = True
except ImportError:
    _HAS_MLFLOW = False


def is_enabled() -> bool:
    if not _HAS_MLFLOW:
        return False
    from .config import get_config

    return get_config().tracing_enabled


def trace(
    func: Callable | None = None,
    *,
    name: str | None = None,
    span_type: str | None = None,
    attributes: dict[str, Any] | None = None,
) -> Callable:
    """Wrap a tool in ``mlflow.trace`` or leave it untouched.

    The choice is made once, when the decorated module is imported.
    """
    if is_enabled():
        return mlflow.trace(func, name=name, span_type=span_type, attributes=attributes)
    if func is None:
        return lambda f: f
    return func


def tag_run(tracking_id: str, **tags: str) -> None:
    """Attach the pipeline tracking id (plus any extra tags) to the active trace."""
    if not is_enabled():
        return
    try:
        mlflow.update_current_trace(tags={"tracking_id": tracking_id, **tags})
    except Exception:
        logger.debug("[%s] Could not tag trace", tracking_id, exc_info=True)


def setup() -> None:
    """Connect to the tracking server and turn on Gemini autologging.

    Errors are logged as warnings and the server starts untraced.
    """
    if not is_enabled():
        return

    from .config import get_config

    cfg = get_config()
    try:
        mlflow.set_tracking_uri(cfg.mlflow_tracking_uri)
        mlflow.set_experiment(cfg.mlflow_experiment_name)
        mlflow.gemini.autolog()
    except Exception:
        logger.warning("Tracing disabled: MLflow at %s unavailable", cfg.mlflow_tracking_uri, exc_info=True)
        return
    logger.info(
        "Tracing pipeline runs to %s (experiment %s)",
        cfg.mlflow_tracking_uri, cfg.mlflow_experiment_name,
    )


def shutdown() -> None:
    """Flush traces still queued for async logging."""
    if not is_enabled():
        return
    try:
        mlflow.flush_trace_async_logging()
    except Exception:
        logger.warning("MLflow trace flush failed", exc_info=True)
