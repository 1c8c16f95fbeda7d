"""REST API over file search stores, documents and grounded search.

Every response uses the envelope ``{"success": bool, ...}``; failures carry
an ``error`` message. Store and document names are resource paths such as
``fileSearchStores/abc123`` and are matched with ``<path:...>``.
"""
import json
import logging
import os
import uuid
from typing import Any, Dict, Optional

from flask import Blueprint, current_app, jsonify, request
from werkzeug.utils import secure_filename

from ..citeview import CiteView
from ..core.models import SearchResult
from ..exceptions import ValidationError
from ..providers.file_search import ChunkingConfig

logger = logging.getLogger(__name__)

api_bp = Blueprint("api", __name__)


def _service() -> CiteView:
    return current_app.config["CITEVIEW"]


def _json_body() -> Dict[str, Any]:
    return request.get_json(silent=True) or {}


def _optional_int(value: Any, field: str) -> Optional[int]:
    if value in (None, ""):
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        raise ValidationError(f"{field} must be an integer")


def _chunking(data: Dict[str, Any]) -> Optional[ChunkingConfig]:
    max_tokens = _optional_int(data.get("maxTokensPerChunk"), "maxTokensPerChunk")
    if max_tokens is None:
        return None
    return ChunkingConfig(
        max_tokens_per_chunk=max_tokens,
        max_overlap_tokens=_optional_int(data.get("maxOverlapTokens"), "maxOverlapTokens"),
    )


def _custom_metadata(value: Any) -> Optional[Dict[str, Any]]:
    if not value:
        return None
    if isinstance(value, str):
        try:
            value = json.loads(value)
        except json.JSONDecodeError:
            raise ValidationError("customMetadata must be a JSON object")
    if not isinstance(value, dict):
        raise ValidationError("customMetadata must be a JSON object")
    return value


# ---- stores ----

@api_bp.get("/stores")
def list_stores():
    stores = _service().list_stores()
    return jsonify({"success": True, "stores": [s.to_dict() for s in stores]})


@api_bp.post("/stores")
def create_store():
    display_name = _json_body().get("displayName")
    if not display_name:
        return jsonify({"success": False, "error": "displayName is required"}), 400
    store = _service().create_store(display_name)
    return jsonify({"success": True, "store": store.to_dict()})


@api_bp.get("/stores/<path:name>")
def get_store(name):
    store = _service().get_store(name)
    return jsonify({"success": True, "store": store.to_dict()})


@api_bp.delete("/stores/<path:name>")
def delete_store(name):
    _service().delete_store(name)
    return jsonify({"success": True})


# ---- documents ----

@api_bp.get("/stores/<path:name>/documents")
def list_documents(name):
    documents = _service().list_documents(name)
    return jsonify({"success": True, "documents": [d.to_dict() for d in documents]})


@api_bp.post("/stores/<path:name>/upload")
def upload_document(name):
    """Multipart upload handler.

    Form fields:
      - ``file``: the binary file (required)
      - ``displayName``: defaults to the uploaded filename
      - ``maxTokensPerChunk`` / ``maxOverlapTokens``: optional chunking
      - ``customMetadata``: optional JSON object

    The temporary copy is always deleted, whether indexing succeeds or not.
    """
    file = request.files.get("file")
    if file is None or not file.filename:
        return jsonify({"success": False, "error": "No file uploaded"}), 400

    chunking = _chunking(request.form)
    custom_metadata = _custom_metadata(request.form.get("customMetadata"))
    display_name = request.form.get("displayName") or file.filename

    upload_dir = current_app.config["CITEVIEW_SETTINGS"].upload_dir
    os.makedirs(upload_dir, exist_ok=True)
    safe_name = secure_filename(file.filename) or "upload"
    temp_path = os.path.join(upload_dir, f"{uuid.uuid4().hex}__{safe_name}")
    file.save(temp_path)

    try:
        result = _service().upload_file(
            temp_path,
            name,
            display_name=display_name,
            chunking=chunking,
            custom_metadata=custom_metadata,
        )
    finally:
        try:
            os.remove(temp_path)
        except OSError as e:
            logger.warning(f"Failed to remove temporary upload {temp_path}: {e}")

    return jsonify({"success": True, "result": result})


@api_bp.post("/stores/<path:name>/import")
def import_document(name):
    data = _json_body()
    if not data.get("fileName"):
        return jsonify({"success": False, "error": "fileName is required"}), 400
    if data.get("displayName"):
        # imports keep the display name set when the file was uploaded
        logger.warning(f"Ignoring displayName for import of {data['fileName']}")
    result = _service().import_file(
        data["fileName"],
        name,
        chunking=_chunking(data),
        custom_metadata=_custom_metadata(data.get("customMetadata")),
    )
    return jsonify({"success": True, "result": result})


@api_bp.delete("/documents/<path:name>")
def delete_document(name):
    _service().delete_document(name)
    return jsonify({"success": True})


# ---- search ----

@api_bp.post("/search")
def search():
    """Grounded search; returns the raw result and its rendered form."""
    data = _json_body()
    query = data.get("query")
    store_names = data.get("storeNames")

    if not query:
        return jsonify({"success": False, "error": "query is required"}), 400
    if not store_names or not isinstance(store_names, list):
        return jsonify({"success": False, "error": "storeNames array is required"}), 400

    result, rendered = _service().search_and_render(
        query,
        store_names,
        model=data.get("model"),
        metadata_filter=data.get("metadataFilter"),
    )
    return jsonify({"success": True, "result": result.to_dict(), "rendered": rendered.to_dict()})


@api_bp.post("/render")
def render():
    """Render a previously fetched result without calling the service."""
    result = SearchResult.from_dict(_json_body().get("result"))
    rendered = _service().render(result)
    return jsonify({"success": True, "rendered": rendered.to_dict()})
