"""Tests for result models and configuration."""

import pytest

from citeview.config import Config
from citeview.core.models import Chunk, SearchResult, SidebarEntry


class TestSearchResult:
    """Test parsing the service payload."""

    def test_from_camel_case(self, payload):
        result = SearchResult.from_dict(payload)
        assert result.has_text
        assert result.has_citations
        assert len(result.grounding_metadata.chunks) == 5
        assert result.grounding_metadata.supports[1].chunk_indices == (3, 0)

    def test_from_snake_case(self):
        result = SearchResult.from_dict({
            "text": "a",
            "grounding_metadata": {
                "grounding_chunks": [{"retrieved_context": {"title": "t", "text": "x"}}],
                "grounding_supports": [{"segment": {"text": "a"}, "grounding_chunk_indices": [0]}],
            },
        })
        assert result.grounding_metadata.chunks[0].title == "t"
        assert result.has_citations

    def test_chunk_kinds(self, payload):
        chunks = SearchResult.from_dict(payload).grounding_metadata.chunks
        assert not chunks[0].is_web
        assert chunks[4].is_web
        assert chunks[4].uri == "https://birds.example.com/dawn"
        assert [c.original_index for c in chunks] == [0, 1, 2, 3, 4]

    @pytest.mark.parametrize("data", [None, [], "text", {}, {"text": None}])
    def test_malformed_input_gives_empty_result(self, data):
        result = SearchResult.from_dict(data)
        assert not result.has_text
        assert result.grounding_metadata is None

    def test_missing_supports(self):
        result = SearchResult.from_dict({"text": "a", "groundingMetadata": {}})
        assert result.grounding_metadata.supports == ()
        assert not result.has_citations

    def test_to_dict_round_trips(self, payload):
        result = SearchResult.from_dict(payload)
        assert SearchResult.from_dict(result.to_dict()) == result


class TestSidebarEntry:
    """Test sidebar entry presentation."""

    def test_label_is_one_based(self):
        assert SidebarEntry(display_index=0, original_index=4, title="t").label == "1"

    def test_short_excerpt_not_truncated(self):
        entry = SidebarEntry(display_index=0, original_index=0, title="t", excerpt="short")
        assert not entry.is_truncated
        assert entry.preview == "short"

    def test_long_excerpt_truncated(self):
        entry = SidebarEntry(
            display_index=0, original_index=0, title="t", excerpt="x" * 250, preview_length=200
        )
        assert entry.preview == "x" * 200 + "..."

    def test_to_dict(self):
        data = SidebarEntry(display_index=1, original_index=3, title="t", uri="https://a").to_dict()
        assert data["label"] == "2"
        assert data["originalIndex"] == 3
        assert data["excerpt"] is None

    def test_chunk_display_title(self):
        assert Chunk(original_index=0, title="Doc").display_title == "Doc"
        assert Chunk(original_index=0).display_title == "Document chunk"


class TestConfig:
    """Test configuration loading."""

    def test_defaults(self):
        config = Config()
        assert config.default_model == "gemini-2.5-flash"
        assert config.excerpt_preview_length == 200
        assert config.port == 3000

    def test_from_env(self, monkeypatch, tmp_path):
        monkeypatch.delenv("GEMINI_API_KEY", raising=False)
        monkeypatch.setenv("GOOGLE_API_KEY", "google-key")
        monkeypatch.setenv("CITEVIEW_EXCERPT_PREVIEW_LENGTH", "50")
        monkeypatch.setenv("CITEVIEW_ENABLE_RATE_LIMITING", "false")
        monkeypatch.setenv("CITEVIEW_ENV", "production")

        config = Config.from_env(str(tmp_path / "missing.env"))

        assert config.gemini_api_key == "google-key"
        assert config.excerpt_preview_length == 50
        assert config.enable_rate_limiting is False
        assert config.production is True

    def test_from_env_file(self, monkeypatch, tmp_path):
        # setenv first so teardown removes what load_dotenv writes
        for name in ("GEMINI_API_KEY", "CITEVIEW_MODEL"):
            monkeypatch.setenv(name, "")
            monkeypatch.delenv(name)
        env_file = tmp_path / ".env"
        env_file.write_text("GEMINI_API_KEY=file-key\nCITEVIEW_MODEL=gemini-2.5-pro\n")

        config = Config.from_env(str(env_file))

        assert config.gemini_api_key == "file-key"
        assert config.default_model == "gemini-2.5-pro"

    def test_from_dict_ignores_unknown_keys(self):
        config = Config.from_dict({"port": 8080, "unknown": True})
        assert config.port == 8080
