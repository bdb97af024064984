"""
Unit tests for data types, settings and small helpers.
"""

import pytest
from pydantic import ValidationError

from convert_proxy.config import DEFAULT_BASE_URL, Settings
from convert_proxy.models import (
    ConversionOutcome,
    ConversionRequest,
    ConvertedFile,
    FileInput,
    replace_extension,
)
from convert_proxy.utils.error_handling import UpstreamSubmissionError, describe_error
from convert_proxy.utils.logging_config import LogLevel, format_file_size


class TestReplaceExtension:

    @pytest.mark.parametrize("name,extension,expected", [
        ("report.pdf", ".txt", "report.txt"),
        ("archive.tar.gz", ".pdf", "archive.tar.pdf"),
        ("notes", ".pdf", "notes.pdf"),
        ("dir.v2/scan", ".png", "dir.v2/scan.png"),
        (".profile", ".pdf", ".pdf"),
    ])
    def test_rewrites_final_extension(self, name, extension, expected):
        assert replace_extension(name, extension) == expected


class TestFileInput:

    def test_data_uri(self):
        file = FileInput(name="a.png", data="aGVsbG8=", type="image/png")
        assert file.data_uri() == "data:image/png;base64,aGVsbG8="


class TestConversionOutcome:

    def test_success_iff_any_file_converted(self):
        outcome = ConversionOutcome(last_error="boom", file_errors={(1, "b.pdf"): "boom"})
        assert outcome.success is False

        outcome.succeeded_files.append(ConvertedFile(name="a.txt", url="https://files.test/a.txt", size=3))
        assert outcome.success is True


class TestConversionRequest:

    def test_quality_defaults_to_medium(self):
        request = ConversionRequest(files=[], outputFormat="pdf")
        assert request.quality == "medium"

    def test_unknown_quality_is_accepted(self):
        request = ConversionRequest(files=[], outputFormat="pdf", quality="ultra")
        assert request.quality == "ultra"

    def test_missing_output_format_is_rejected(self):
        with pytest.raises(ValidationError):
            ConversionRequest(files=[])

    def test_unknown_output_format_is_accepted_for_per_file_handling(self):
        request = ConversionRequest(files=[], outputFormat="odt")
        assert request.outputFormat == "odt"

    def test_file_inputs(self):
        request = ConversionRequest(
            files=[{"name": "a.txt", "data": "aGk=", "type": "text/plain"}],
            outputFormat="pdf",
            quality="high",
        )
        assert request.file_inputs() == [FileInput(name="a.txt", data="aGk=", type="text/plain")]


class TestSettings:

    def test_defaults_without_environment(self, monkeypatch):
        for name in ("PDF_CO_API_KEY", "PDF_CO_BASE_URL", "CONVERT_PROXY_HTTP_TIMEOUT",
                     "CONVERT_PROXY_CONNECT_TIMEOUT", "CONVERT_PROXY_MAX_CONCURRENCY"):
            monkeypatch.delenv(name, raising=False)

        settings = Settings.from_env()

        assert settings.api_key == "demo"
        assert settings.uses_demo_key is True
        assert settings.base_url == DEFAULT_BASE_URL
        assert settings.read_timeout == 60.0
        assert settings.max_concurrency == 4

    def test_reads_environment(self, monkeypatch):
        monkeypatch.setenv("PDF_CO_API_KEY", "secret")
        monkeypatch.setenv("PDF_CO_BASE_URL", "https://eu.api.test/v1/")
        monkeypatch.setenv("CONVERT_PROXY_HTTP_TIMEOUT", "12.5")
        monkeypatch.setenv("CONVERT_PROXY_MAX_CONCURRENCY", "0")

        settings = Settings.from_env()

        assert settings.api_key == "secret"
        assert settings.uses_demo_key is False
        assert settings.base_url == "https://eu.api.test/v1"
        assert settings.read_timeout == 12.5
        assert settings.max_concurrency == 1


class TestHelpers:

    @pytest.mark.parametrize("size,expected", [
        (0, "0 Bytes"),
        (512, "512 Bytes"),
        (1024, "1 KB"),
        (1536, "1.5 KB"),
        (5 * 1024 * 1024, "5 MB"),
    ])
    def test_format_file_size(self, size, expected):
        assert format_file_size(size) == expected

    def test_log_level_from_string(self):
        assert LogLevel.from_string("warn") == 30
        assert LogLevel.from_string("nonsense") == 20

    def test_describe_error(self):
        assert describe_error(UpstreamSubmissionError(None, None)) == "Conversion failed"
        assert describe_error(RuntimeError()) == "RuntimeError"
