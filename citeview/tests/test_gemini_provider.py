"""Tests for the Gemini file search provider with a mocked SDK client."""

from unittest.mock import MagicMock, patch

import pytest
from google.genai import errors

from citeview.config import Config
from citeview.exceptions import ConfigurationError, OracleError, RateLimitError
from citeview.providers.file_search import ChunkingConfig, GeminiFileSearchProvider
from citeview.providers.file_search.gemini import metadata_entries
from citeview.utils.rate_limiter import reset_rate_limits


def finished_operation(name="operations/op-1", document_name="fileSearchStores/s/documents/d"):
    operation = MagicMock()
    operation.name = name
    operation.done = True
    operation.error = None
    operation.response.document_name = document_name
    return operation


def sdk_store(name="fileSearchStores/s", display_name="Docs"):
    store = MagicMock()
    store.name = name
    store.display_name = display_name
    store.create_time = None
    store.active_documents_count = 2
    store.size_bytes = "1024"
    return store


@pytest.fixture
def client():
    return MagicMock()


@pytest.fixture
def provider(config, client):
    return GeminiFileSearchProvider(config, client=client)


class TestConstruction:
    """Test provider setup."""

    def test_missing_api_key(self):
        with pytest.raises(ConfigurationError):
            GeminiFileSearchProvider(Config(gemini_api_key=None))

    def test_injected_client_used(self, config, client):
        assert GeminiFileSearchProvider(config, client=client).client is client


class TestStores:
    """Test store operations."""

    def test_create_store(self, provider, client):
        client.file_search_stores.create.return_value = sdk_store()
        store = provider.create_store("Docs")
        client.file_search_stores.create.assert_called_once_with(config={"display_name": "Docs"})
        assert store.name == "fileSearchStores/s"
        assert store.to_dict()["sizeBytes"] == 1024

    def test_list_stores(self, provider, client):
        client.file_search_stores.list.return_value = [sdk_store("a"), sdk_store("b")]
        assert [s.name for s in provider.list_stores()] == ["a", "b"]

    def test_delete_store_forces_by_default(self, provider, client):
        provider.delete_store("fileSearchStores/s")
        client.file_search_stores.delete.assert_called_once_with(
            name="fileSearchStores/s", config={"force": True}
        )

    def test_sdk_error_wrapped(self, provider, client):
        client.file_search_stores.get.side_effect = RuntimeError("boom")
        with pytest.raises(OracleError, match="get store"):
            provider.get_store("fileSearchStores/missing")

    def test_quota_error_is_rate_limit(self, provider, client):
        client.file_search_stores.list.side_effect = errors.ClientError(
            429, {"error": {"code": 429, "message": "quota", "status": "RESOURCE_EXHAUSTED"}}
        )
        with pytest.raises(RateLimitError):
            provider.list_stores()


class TestDocuments:
    """Test uploads, imports and document listing."""

    def test_upload_waits_for_operation(self, provider, client, tmp_path):
        path = tmp_path / "notes.txt"
        path.write_text("hello")
        client.file_search_stores.upload_to_file_search_store.return_value = finished_operation()

        summary = provider.upload_file(
            str(path),
            "fileSearchStores/s",
            chunking=ChunkingConfig(200, 20),
            custom_metadata={"year": 2024, "author": "Kim"},
        )

        kwargs = client.file_search_stores.upload_to_file_search_store.call_args.kwargs
        assert kwargs["file"] == str(path)
        assert kwargs["file_search_store_name"] == "fileSearchStores/s"
        assert kwargs["config"]["display_name"] == "notes.txt"
        assert kwargs["config"]["chunking_config"] == {
            "white_space_config": {"max_tokens_per_chunk": 200, "max_overlap_tokens": 20}
        }
        assert {"key": "year", "numeric_value": 2024} in kwargs["config"]["custom_metadata"]
        assert summary == {
            "operationName": "operations/op-1",
            "documentName": "fileSearchStores/s/documents/d",
        }

    def test_upload_missing_file(self, provider):
        with pytest.raises(FileNotFoundError):
            provider.upload_file("/nonexistent/file.pdf", "fileSearchStores/s")

    @patch("citeview.providers.file_search.gemini.time.sleep")
    def test_operation_polled_until_done(self, mock_sleep, provider, client, tmp_path):
        path = tmp_path / "notes.txt"
        path.write_text("hello")
        pending = MagicMock()
        pending.done = False
        client.file_search_stores.upload_to_file_search_store.return_value = pending
        client.operations.get.side_effect = [pending, finished_operation()]

        provider.upload_file(str(path), "fileSearchStores/s")

        assert client.operations.get.call_count == 2
        assert mock_sleep.call_count == 2

    def test_operation_timeout(self, client, tmp_path):
        path = tmp_path / "notes.txt"
        path.write_text("hello")
        pending = MagicMock()
        pending.done = False
        client.file_search_stores.upload_to_file_search_store.return_value = pending
        provider = GeminiFileSearchProvider(
            Config(gemini_api_key="k", operation_timeout=-1), client=client
        )

        with pytest.raises(OracleError, match="did not finish"):
            provider.upload_file(str(path), "fileSearchStores/s")

    def test_failed_operation(self, provider, client):
        operation = finished_operation()
        operation.error = {"message": "unsupported file"}
        client.file_search_stores.import_file.return_value = operation

        with pytest.raises(OracleError, match="unsupported file"):
            provider.import_file("files/abc", "fileSearchStores/s")

    def test_import_file(self, provider, client):
        client.file_search_stores.import_file.return_value = finished_operation()
        provider.import_file("files/abc", "fileSearchStores/s")
        client.file_search_stores.import_file.assert_called_once_with(
            file_search_store_name="fileSearchStores/s",
            file_name="files/abc",
            config=None,
        )

    def test_list_documents(self, provider, client):
        document = MagicMock()
        document.name = "fileSearchStores/s/documents/d"
        document.display_name = "notes.txt"
        document.state.value = "STATE_ACTIVE"
        document.size_bytes = 5
        document.create_time = None
        document.mime_type = "text/plain"
        client.file_search_stores.documents.list.return_value = [document]

        documents = provider.list_documents("fileSearchStores/s")

        assert documents[0].state == "STATE_ACTIVE"
        assert documents[0].to_dict()["displayName"] == "notes.txt"
        assert client.file_search_stores.documents.list.call_args.kwargs["parent"] == "fileSearchStores/s"


class TestSearch:
    """Test grounded search."""

    def setup_method(self):
        reset_rate_limits()

    def test_search_returns_grounded_result(self, provider, client):
        response = MagicMock()
        response.text = "The quick fox jumps."
        response.candidates[0].grounding_metadata.model_dump.return_value = {
            "grounding_chunks": [{"retrieved_context": {"title": "a.pdf", "text": "fox"}}],
            "grounding_supports": [
                {"segment": {"text": "quick fox", "start_index": 4}, "grounding_chunk_indices": [0]},
            ],
        }
        client.models.generate_content.return_value = response

        result = provider.search("What jumps?", ["fileSearchStores/s"], metadata_filter="year=2024")

        kwargs = client.models.generate_content.call_args.kwargs
        assert kwargs["model"] == "gemini-2.5-flash"
        assert kwargs["contents"] == "What jumps?"
        file_search = kwargs["config"].tools[0].file_search
        assert file_search.file_search_store_names == ["fileSearchStores/s"]
        assert file_search.metadata_filter == "year=2024"

        assert result.text == "The quick fox jumps."
        assert result.grounding_metadata.chunks[0].title == "a.pdf"
        assert result.grounding_metadata.supports[0].chunk_indices == (0,)
        assert result.grounding_metadata.supports[0].segment.start_index == 4

    def test_search_without_candidates(self, provider, client):
        response = MagicMock()
        response.text = None
        response.candidates = []
        client.models.generate_content.return_value = response

        result = provider.search("q", ["fileSearchStores/s"], model="gemini-2.5-pro")

        assert not result.has_text
        assert result.grounding_metadata is None
        assert client.models.generate_content.call_args.kwargs["model"] == "gemini-2.5-pro"

    def test_search_error(self, provider, client):
        client.models.generate_content.side_effect = RuntimeError("unavailable")
        with pytest.raises(OracleError):
            provider.search("q", ["fileSearchStores/s"])

    @patch("citeview.providers.file_search.gemini.rate_limit_api")
    def test_rate_limited_when_enabled(self, mock_rate_limit, client):
        provider = GeminiFileSearchProvider(
            Config(gemini_api_key="k", search_calls_per_minute=5), client=client
        )
        client.models.generate_content.return_value.candidates = []
        client.models.generate_content.return_value.text = ""
        provider.search("q", ["fileSearchStores/s"])
        mock_rate_limit.assert_called_once_with("gemini-search", 5, 60)


class TestMetadataEntries:
    """Test custom metadata conversion."""

    def test_value_types(self):
        assert metadata_entries({"n": 3, "s": "x", "l": ["a", 1], "b": True}) == [
            {"key": "n", "numeric_value": 3},
            {"key": "s", "string_value": "x"},
            {"key": "l", "string_list_value": {"values": ["a", "1"]}},
            {"key": "b", "string_value": "true"},
        ]
