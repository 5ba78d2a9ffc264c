"""Main FastMCP server — mounts the pipeline sub-server."""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from fastmcp import FastMCP

from . import tracing
from .tools.pipeline import close_services, pipeline_server

logger = logging.getLogger(__name__)


@asynccontextmanager
async def _lifespan(server: FastMCP):
    """Startup/shutdown hook — sets up tracing, closes shared clients."""
    tracing.setup()
    yield {}
    closed = await close_services()
    tracing.shutdown()
    logger.info("Lifespan shutdown: services %s", "closed" if closed else "never opened")


app = FastMCP(
    "yt-sentiment",
    instructions=(
        "YouTube comment sentiment pipeline — fetch a video's comments, "
        "analyze them with Gemini into a marketing report, and load the "
        "results into a Weaviate warehouse. Use pipeline_run for one-shot "
        "runs or youtube_fetch → comments_analyze → warehouse_ingest to "
        "drive the steps by tracking id."
    ),
    lifespan=_lifespan,
)

app.mount(pipeline_server)


def main() -> None:
    """Entry-point for ``yt-sentiment-mcp`` console script."""
    app.run()


if __name__ == "__main__":
    main()
