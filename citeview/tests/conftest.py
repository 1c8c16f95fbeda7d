"""Shared fixtures for CiteView tests."""

import pytest

from citeview.config import Config
from citeview.core.models import SearchResult

ANSWER_TEXT = (
    "The quick fox jumps over the lazy dog. "
    "Cats sleep most of the day. "
    "Birds sing at dawn."
)


def document_chunk(title, text):
    return {"retrievedContext": {"title": title, "text": text}}


def web_chunk(title, uri):
    return {"web": {"title": title, "uri": uri}}


def support(text, *chunk_indices):
    return {"segment": {"text": text}, "groundingChunkIndices": list(chunk_indices)}


@pytest.fixture
def config():
    return Config(gemini_api_key="test-key", enable_rate_limiting=False)


@pytest.fixture
def payload():
    """Five chunks of which only 0, 3 and 4 are cited."""
    return {
        "text": ANSWER_TEXT,
        "groundingMetadata": {
            "groundingChunks": [
                document_chunk("animals.pdf", "Foxes are quick and jump over dogs."),
                document_chunk("unused.pdf", "Never cited."),
                web_chunk("Unused site", "https://unused.example.com"),
                document_chunk("cats.pdf", "Cats sleep for most of the day."),
                web_chunk("Bird facts", "https://birds.example.com/dawn"),
            ],
            "groundingSupports": [
                support("The quick fox jumps", 0),
                support("Cats sleep most of the day", 3, 0),
                support("Birds sing at dawn", 4),
            ],
        },
    }


@pytest.fixture
def result(payload):
    return SearchResult.from_dict(payload)
