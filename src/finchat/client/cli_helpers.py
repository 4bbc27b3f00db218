"""Helper functions for CLI commands."""

import base64
import mimetypes
from pathlib import Path

import click

from finchat.constants import CONTENT_PREVIEW_LENGTH, DEFAULT_IMAGE_MIME_TYPE
from finchat.service.database import (
    RavenDBConfig,
    RetrievedChunk,
    count_documents,
    create_database,
    database_exists,
)


def ensure_database_exists(create_if_missing: bool = False, path: str | None = None) -> bool:
    """Check if database exists, optionally create it.

    Args:
        create_if_missing: If True, attempt to create the database
        path: Document path for error message context

    Returns:
        True if database exists (or was created)

    Raises:
        click.Abort: If database doesn't exist and can't be created
    """
    if database_exists():
        return True

    if create_if_missing:
        click.echo("Database does not exist. Creating database...")
        try:
            create_database()
            click.echo("✓ Database created successfully!")
            return True
        except Exception as e:
            click.echo(f"✗ Failed to create database: {e}", err=True)
            click.echo("\nPlease ensure RavenDB is running and accessible.", err=True)
            raise click.Abort()

    click.echo("✗ Error: Database does not exist!", err=True)
    click.echo("\nPlease create the database first using:", err=True)
    click.echo(f"  finchat-ingest {path or '<file>'} --create-database", err=True)
    raise click.Abort()


def format_search_result(
    index: int, result: RetrievedChunk, max_length: int = CONTENT_PREVIEW_LENGTH
) -> str:
    """Format a search result for display.

    Args:
        index: Result number (1-based)
        result: Retrieved chunk with score and metadata
        max_length: Maximum content length before truncation

    Returns:
        Formatted string for display
    """
    source = result.metadata.get("source") or "unknown"
    chunk_idx = result.metadata.get("chunk_index", "?")
    content = result.text
    display_content = content[:max_length] + "..." if len(content) > max_length else content

    lines = [
        f"{index}. [{source} - chunk #{chunk_idx}] (score: {result.score:.4f})",
        f"   {display_content}",
        "",
    ]
    return "\n".join(lines)


def get_database_info() -> tuple[str | None, str, int | None]:
    """Get database connection info and chunk count.

    Returns:
        Tuple of (url, database_name, chunk count or None if unavailable)
    """
    url = RavenDBConfig.get_url()
    db_name = RavenDBConfig.get_database_name()

    doc_count = None
    if url:
        try:
            doc_count = count_documents()
        except Exception:
            doc_count = None

    return url, db_name, doc_count


def encode_image_file(path: Path) -> str:
    """Read an image file as a base64 data URL."""
    mime_type = mimetypes.guess_type(path.name)[0] or DEFAULT_IMAGE_MIME_TYPE
    data = base64.b64encode(path.read_bytes()).decode("ascii")
    return f"data:{mime_type};base64,{data}"
