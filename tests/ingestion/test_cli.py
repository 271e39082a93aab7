"""Unit tests for the ingestion CLI."""

from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from src.ingestion.cli import build_parser, main
from src.ingestion.config import IngestionConfig
from src.ingestion.schemas import IngestResult


@pytest.mark.unit
class TestCli:
    """Test suite for the CLI entry point."""

    def test_parser_arguments(self) -> None:
        """Test URL and options are parsed."""
        args = build_parser().parse_args(
            ["dQw4w9WgXcQ", "--document-id", "doc-1", "--chunk-size", "500"]
        )

        assert args.url == "dQw4w9WgXcQ"
        assert args.document_id == "doc-1"
        assert args.chunk_size == 500
        assert args.chunk_overlap is None

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "result,exit_code",
        [
            (IngestResult.success("Title", 2), 0),
            (IngestResult.failure("Invalid YouTube URL. Could not extract video ID."), 1),
        ],
    )
    async def test_main_exit_code(
        self, result: IngestResult, exit_code: int, capsys: pytest.CaptureFixture[str]
    ) -> None:
        """Test the exit code follows the ingestion outcome."""
        with (
            patch("src.ingestion.cli.get_config", return_value=IngestionConfig()),
            patch("src.ingestion.cli.IngestionPipeline") as mock_pipeline_cls,
        ):
            mock_pipeline = MagicMock()
            mock_pipeline.store_document = AsyncMock(return_value=result)
            mock_pipeline.youtube_service.aclose = AsyncMock()
            mock_pipeline_cls.return_value = mock_pipeline

            code = await main(["https://youtu.be/dQw4w9WgXcQ", "--document-id", "doc-1"])

        assert code == exit_code
        mock_pipeline.store_document.assert_awaited_once_with(
            {"url": "https://youtu.be/dQw4w9WgXcQ", "documentId": "doc-1"}
        )
        mock_pipeline.youtube_service.aclose.assert_awaited_once()
        assert (result.message or result.error) in capsys.readouterr().out

    @pytest.mark.asyncio
    async def test_chunk_overrides(self) -> None:
        """Test chunk window options override the loaded config."""
        with (
            patch("src.ingestion.cli.get_config", return_value=IngestionConfig()),
            patch("src.ingestion.cli.IngestionPipeline") as mock_pipeline_cls,
        ):
            mock_pipeline = MagicMock()
            mock_pipeline.store_document = AsyncMock(return_value=IngestResult.success("T", 1))
            mock_pipeline.youtube_service.aclose = AsyncMock()
            mock_pipeline_cls.return_value = mock_pipeline

            await main(["dQw4w9WgXcQ", "--chunk-size", "400", "--chunk-overlap", "40"])

        config = mock_pipeline_cls.call_args.args[0]
        assert config.chunk_size == 400
        assert config.chunk_overlap == 40

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "options",
        [
            ["--chunk-size", "0"],
            ["--chunk-size", "100", "--chunk-overlap", "100"],
        ],
    )
    async def test_invalid_chunk_window_rejected(
        self, options: list[str], capsys: pytest.CaptureFixture[str]
    ) -> None:
        """Test an invalid chunk window is a usage error, not a silent default."""
        with (
            patch("src.ingestion.cli.get_config", return_value=IngestionConfig()),
            patch("src.ingestion.cli.IngestionPipeline") as mock_pipeline_cls,
        ):
            with pytest.raises(SystemExit) as exc_info:
                await main(["dQw4w9WgXcQ", *options])

        assert exc_info.value.code == 2
        assert "invalid chunk window" in capsys.readouterr().err
        mock_pipeline_cls.assert_not_called()
