"""Main FastMCP server — mounts the dream and infra sub-servers."""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from fastmcp import FastMCP

from . import tracing
from .client import GeminiClient
from .session import dream_session
from .tools.dream import dream_server
from .tools.infra import infra_server

logger = logging.getLogger(__name__)


@asynccontextmanager
async def _lifespan(server: FastMCP):
    """Startup/shutdown hook — releases dream media and shared Gemini clients."""
    tracing.setup()
    try:
        yield {}
    finally:
        released = await dream_session.reset()
        closed = await GeminiClient.close_all()
        tracing.shutdown()
        logger.info(
            "Lifespan shutdown: released %d media file(s), closed %d client(s)",
            released,
            closed,
        )


app = FastMCP(
    "dream-sequence",
    instructions=(
        "Dream sequence generator — describe a theme and scenes as "
        "'Theme ; Scene 1 ; Scene 2', and Veo turns each scene into a video "
        "that plays back as a continuous loop."
    ),
    lifespan=_lifespan,
)

app.mount(dream_server)
app.mount(infra_server)


def main() -> None:
    """Entry-point for ``dream-sequence-mcp`` console script."""
    app.run()


if __name__ == "__main__":
    main()
