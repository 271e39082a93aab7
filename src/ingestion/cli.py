"""Command-line interface for ingesting a single YouTube video."""

import argparse
import asyncio

from pydantic import ValidationError

from src.utils.logging import get_logger

from .config import get_config
from .pipeline import IngestionPipeline

logger = get_logger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="YouTube ingestion - store a video transcript in the vector database",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Ingest a video (using .env config)
  python -m src.ingestion.cli https://www.youtube.com/watch?v=dQw4w9WgXcQ

  # Tag the stored chunks with a document ID
  python -m src.ingestion.cli https://youtu.be/dQw4w9WgXcQ --document-id doc-42

  # Use smaller chunks
  python -m src.ingestion.cli dQw4w9WgXcQ --chunk-size 500 --chunk-overlap 100
        """,
    )

    parser.add_argument("url", help="YouTube URL or 11-character video ID")
    parser.add_argument(
        "--document-id",
        type=str,
        help="Document identifier stored in every chunk's metadata",
    )
    parser.add_argument(
        "--chunk-size",
        type=int,
        help="Override chunk size in characters",
    )
    parser.add_argument(
        "--chunk-overlap",
        type=int,
        help="Override overlap between consecutive chunks in characters",
    )
    return parser


async def main(argv: list[str] | None = None) -> int:
    """CLI entry point for single-video ingestion.

    Returns:
        Process exit code: 0 on success, 1 on failure.
    """
    parser = build_parser()
    args = parser.parse_args(argv)

    overrides = {}
    if args.chunk_size is not None:
        overrides["chunk_size"] = args.chunk_size
    if args.chunk_overlap is not None:
        overrides["chunk_overlap"] = args.chunk_overlap

    config = get_config()
    if overrides:
        try:
            config = config.model_validate({**config.model_dump(), **overrides})
        except ValidationError as e:
            parser.error(f"invalid chunk window: {e.errors()[0]['msg']}")

    logger.info(
        "cli_started",
        url=args.url,
        document_id=args.document_id,
        chunk_size=config.chunk_size,
        chunk_overlap=config.chunk_overlap,
    )

    print("\n" + "=" * 60)
    print("YouTube Ingestion")
    print("=" * 60)
    print(f"URL: {args.url}")
    print(f"Embedding provider: {config.embedding_provider}")
    print(f"Embedding model: {config.embedding_model}")
    print(f"Chunk size: {config.chunk_size} chars, overlap {config.chunk_overlap}")
    print("=" * 60 + "\n")

    pipeline = IngestionPipeline(config)
    try:
        result = await pipeline.store_document(
            {"url": args.url, "documentId": args.document_id}
        )
    finally:
        await pipeline.youtube_service.aclose()

    if result.ok:
        print(f"✅ {result.message}")
    else:
        print(f"❌ {result.error}")
        if result.suggestion:
            print(f"   {result.suggestion}")

    logger.info("cli_completed", ok=result.ok, chunks_created=result.chunks_created)
    return 0 if result.ok else 1


def run() -> None:
    raise SystemExit(asyncio.run(main()))


if __name__ == "__main__":
    run()
