"""FastMCP server exposing financial context retrieval and ingestion to agents."""

import logging
import os
from typing import Any

from dotenv import load_dotenv
from fastmcp import FastMCP

from finchat.constants import DEFAULT_TOP_K
from finchat.exceptions import AuthorizationError, ConfigurationError, ValidationError
from finchat.service.registry import ServiceRegistry, build_registry

# Configure logging
log_level = os.getenv("LOG_LEVEL", "INFO")
logging.basicConfig(
    level=getattr(logging, log_level),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)

# Load environment variables
load_dotenv()

mcp = FastMCP("finchat Financial Knowledge Base")

_registry: ServiceRegistry | None = None


def get_registry() -> ServiceRegistry:
    """Build the service registry on first use."""
    global _registry
    if _registry is None:
        _registry = build_registry()
    return _registry


async def retrieve_financial_context_impl(query: str, top_k: int = DEFAULT_TOP_K) -> str:
    """Return the context block for a query ("" when nothing relevant is stored)."""
    logger.debug(f"MCP Tool: retrieve query='{query[:100]}', top_k={top_k}")
    context = await get_registry().retriever().retrieve(query, top_k)
    logger.info(f"✅ MCP Tool: Returning {len(context)} characters of context")
    return context


async def ingest_financial_text_impl(
    text: str, password: str, source: str | None = None
) -> dict[str, Any]:
    """Ingest text and report counts in the same shape as the HTTP endpoint."""
    logger.info(f"📥 MCP Tool ingest: {len(text)} characters from {source or 'mcp'}")
    pipeline = get_registry().ingestion_pipeline()
    try:
        result = await pipeline.ingest(text, credential=password, source=source or "mcp")
    except (AuthorizationError, ValidationError, ConfigurationError) as e:
        logger.error(f"❌ MCP Tool: {e}")
        return {"success": False, "chunks_stored": 0, "chunks_failed": 0, "message": str(e)}

    return {
        "success": result.succeeded,
        "chunks_stored": result.stored,
        "chunks_failed": result.failed,
        "message": result.message,
    }


@mcp.tool()
async def retrieve_financial_context(query: str, top_k: int = DEFAULT_TOP_K) -> str:
    """
    Searches the Myanmar financial knowledge base (central bank policy,
    exchange rates, banking limits, market reports) for passages relevant to
    the query and returns them joined by blank lines. Returns an empty string
    when nothing relevant is stored.

    Args:
        query: The search query text
        top_k: Number of passages to return (default: 3)
    """
    return await retrieve_financial_context_impl(query, top_k)


@mcp.tool()
async def ingest_financial_text(
    text: str, password: str, source: str | None = None
) -> dict[str, Any]:
    """
    Adds a financial document to the knowledge base. The text is split into
    overlapping chunks, embedded and stored one chunk at a time.

    Args:
        text: Raw document text
        password: Ingestion secret
        source: Optional label recorded with each chunk

    Returns:
        dict with success, chunks_stored, chunks_failed and message
    """
    return await ingest_financial_text_impl(text, password, source)


def main() -> None:
    """Entry point for the MCP server command-line interface."""
    host = os.getenv("MCP_HOST", "0.0.0.0")
    port = int(os.getenv("MCP_PORT", "8001"))
    logger.info(f"🚀 Starting finchat MCP Server on {host}:{port}...")
    mcp.run(transport="sse", host=host, port=port)


if __name__ == "__main__":
    main()
