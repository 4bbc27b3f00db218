"""Command-line interface for finchat using Click."""

import asyncio
import logging
import os
from pathlib import Path

import click
from dotenv import load_dotenv

from finchat.client.cli_helpers import (
    encode_image_file,
    ensure_database_exists,
    format_search_result,
    get_database_info,
)
from finchat.client.loaders import load_document_text
from finchat.constants import (
    DEFAULT_CHUNK_OVERLAP,
    DEFAULT_CHUNK_SIZE,
    DEFAULT_CLI_INGEST_DELAY_SECONDS,
    DEFAULT_TOP_K,
)
from finchat.exceptions import FinChatError, PartialIngestionFailure, RetrievalFailure
from finchat.service.database import RavenDBConfig, database_exists, delete_database
from finchat.service.registry import build_registry
from finchat.service.session import ChatSession

# Load environment variables
load_dotenv()

logging.basicConfig(
    level=getattr(logging, os.getenv("LOG_LEVEL", "WARNING")),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)


def _require_store_url() -> None:
    if not RavenDBConfig.get_url():
        click.echo("✗ Missing environment variable: set RAVENDB_URL", err=True)
        raise click.Abort()


@click.command()
@click.argument(
    "path",
    type=click.Path(exists=True, file_okay=True, dir_okay=False, path_type=Path),
)
@click.option("--chunk-size", type=int, default=DEFAULT_CHUNK_SIZE, show_default=True,
              help="Characters per chunk")
@click.option("--overlap", type=int, default=DEFAULT_CHUNK_OVERLAP, show_default=True,
              help="Characters shared by neighbouring chunks")
@click.option("--delay", type=float, default=DEFAULT_CLI_INGEST_DELAY_SECONDS, show_default=True,
              help="Seconds to wait between chunk uploads")
@click.option(
    "--create-database",
    "create_database_flag",
    is_flag=True,
    default=False,
    help="Create the RavenDB database if it doesn't exist",
)
def ingest(
    path: Path,
    chunk_size: int,
    overlap: int,
    delay: float,
    create_database_flag: bool,
) -> None:
    """Ingest a text or PDF file at PATH into the financial knowledge base.

    Example:
        finchat-ingest data/finance_data.txt
        finchat-ingest reports/cbm_q3.pdf --create-database
        finchat-ingest data/finance_data.txt --chunk-size 500 --overlap 100
    """
    _require_store_url()
    ensure_database_exists(create_if_missing=create_database_flag, path=str(path))

    try:
        text = load_document_text(path)
    except Exception as e:
        click.echo(f"✗ Error reading {path.name}: {e}", err=True)
        raise click.Abort()

    click.echo(f"📂 Loaded {len(text)} characters from {path.name}")
    pipeline = build_registry().ingestion_pipeline(
        delay_seconds=delay,
        require_password=False,
        chunk_size=chunk_size,
        chunk_overlap=overlap,
    )

    try:
        result = asyncio.run(pipeline.ingest(text, source=path.name))
        result.raise_for_failures()
    except PartialIngestionFailure as e:
        click.echo(f"✗ {e}", err=True)
        for failure in e.result.failures:
            click.echo(f"  ✗ chunk {failure.chunk_index}: {failure.error}", err=True)
        raise click.Abort()
    except FinChatError as e:
        click.echo(f"✗ Error: {e}", err=True)
        raise click.Abort()

    click.echo(f"✅ Ingestion complete! {result.message}")


@click.command()
@click.argument("query", type=str)
@click.option("--top-k", type=int, default=DEFAULT_TOP_K, show_default=True,
              help="Number of results to return")
def search(query: str, top_k: int) -> None:
    """Search the knowledge base for chunks similar to QUERY.

    Example:
        finchat-search "CBM reference rate"
        finchat-search "mobile banking limits" --top-k 5
    """
    click.echo(f"🔍 Searching for: '{query}'")
    click.echo(f"   Returning top {top_k} results...\n")

    retriever = build_registry().retriever()
    try:
        results = asyncio.run(retriever.search(query, top_k))
    except RetrievalFailure as e:
        click.echo(f"✗ Search failed: {e}", err=True)
        click.echo("\nPlease ensure the embedding service and RavenDB are reachable.", err=True)
        raise click.Abort()
    except FinChatError as e:
        click.echo(f"✗ Error: {e}", err=True)
        raise click.Abort()

    if not results:
        click.echo("No results found.")
        return

    click.echo(f"✅ Found {len(results)} result(s):\n")
    for i, result in enumerate(results, 1):
        click.echo(format_search_result(i, result))


@click.command()
@click.argument("question", type=str)
@click.option("--deep", is_flag=True, default=False,
              help="Use the high-capability provider (deep analysis)")
@click.option(
    "--image",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    default=None,
    help="Attach an image (routes to the high-capability provider)",
)
def ask(question: str, deep: bool, image: Path | None) -> None:
    """Ask a single QUESTION with retrieval-augmented context.

    Example:
        finchat-ask "What is the MMK exchange policy?"
        finchat-ask "Summarise this chart" --image chart.png
    """
    encoded_image = encode_image_file(image) if image else None
    chat_service = build_registry().chat_service()
    session = ChatSession()

    try:
        result = asyncio.run(chat_service.handle_turn(session, question, deep, encoded_image))
    except FinChatError as e:
        click.echo(f"✗ Error: {e}", err=True)
        raise click.Abort()

    if not result.ok:
        click.echo(f"✗ {result.error}", err=True)
        raise click.Abort()

    click.echo(f"🤖 {result.provider}\n")
    click.echo(result.text)


@click.command()
def count() -> None:
    """Show the number of chunks in the knowledge base.

    Example:
        finchat-count
    """
    _require_store_url()
    ensure_database_exists()
    _, _, doc_count = get_database_info()
    if doc_count is not None:
        click.echo(f"📊 Knowledge base contains {doc_count} chunk(s)")
    else:
        click.echo("✗ Error counting documents", err=True)
        raise click.Abort()


@click.command()
@click.option("--yes", "-y", is_flag=True, default=False, help="Skip confirmation prompt")
def delete_db(yes: bool) -> None:
    """Delete the RavenDB database and every stored chunk.

    WARNING: This is irreversible.

    Example:
        finchat-delete-db
        finchat-delete-db --yes
    """
    _require_store_url()
    url, db_name, doc_count = get_database_info()

    if not database_exists():
        click.echo(f"✓ Database '{db_name}' does not exist at {url}")
        return

    if not yes:
        click.echo(f"⚠️  WARNING: You are about to delete the database '{db_name}'")
        click.echo(f"   Location: {url}\n")
        if doc_count is not None:
            click.echo(f"📊 Current database contains: {doc_count} chunk(s)\n")
        if not click.confirm("Are you sure you want to proceed?", default=False):
            click.echo("Deletion cancelled.")
            return

    click.echo(f"🗑️  Deleting database '{db_name}'...")
    try:
        delete_database()
        click.echo(f"✓ Database '{db_name}' successfully deleted!")
    except Exception as e:
        click.echo(f"✗ Error deleting database: {e}", err=True)
        raise click.Abort()


if __name__ == "__main__":
    ingest()
