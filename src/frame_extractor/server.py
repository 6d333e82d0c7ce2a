"""HTTP sidecar server for frame-extractor.

Runs as a lightweight stdlib HTTP server on localhost so a front end can
call the extractor without spawning a process per request.

Endpoints:
    GET  /health               — Health check
    GET  /delimiters           — Delimiter presets
    GET  /methods              — Extraction methods
    GET  /control-characters   — ASCII control characters
    POST /extract              — Extract from hex/base64 data
    POST /filter               — Ban/repetition verdict for text
    POST /repetition-score     — Repetition score for text
    POST /batch-extract        — Extract several payloads at once

All endpoints expect/return JSON.
Extract body: {"data": "...", "encoding": "hex", "config": {...}, "methods": [...]}
"""

from __future__ import annotations
import json
import logging
import os
from http.server import HTTPServer, BaseHTTPRequestHandler
from typing import Any

from .codec import decode
from .config import build_search_config, load_config
from .delimiters import CONTROL_CHARACTERS, STANDARD_DELIMITERS
from .extractor import Extractor
from .filter_engine import FilterEngine
from .types import ExtractionError, ExtractionMethod, SearchConfig

logger = logging.getLogger(__name__)

DEFAULT_PORT = int(os.environ.get("FRAME_EXTRACTOR_PORT", "18792"))

# Shared state (stateless apart from the worker pool size)
_extractor = Extractor()


def _search_config(body: dict[str, Any]) -> SearchConfig:
    """SearchConfig from a request's optional camelCase "config" object."""
    raw = body.get("config") or {}
    return build_search_config(load_config({"search": {
        "delimiter": raw.get("delimiter"),
        "custom_start": raw.get("customStart"),
        "custom_end": raw.get("customEnd"),
        "min_length": raw.get("minSequenceLength", 1),
        "max_length": raw.get("maxSequenceLength", 10000),
        "ascii_only": raw.get("asciiOnly", False),
    }}))


def handle_extract(body: dict[str, Any]) -> dict[str, Any]:
    data = decode(body.get("data", ""), body.get("encoding", "hex"))
    result = _extractor.run(data, _search_config(body), body.get("methods"))
    return result.to_dict()


def handle_filter(body: dict[str, Any]) -> dict[str, Any]:
    cfg = load_config({"filter": {"threshold": body.get("repetitionThreshold")}})
    engine = FilterEngine(body.get("banList"))
    result = engine.filter(
        body.get("text", ""),
        ban_enabled=body.get("banEnabled", True),
        repetition_enabled=body.get("repetitionEnabled", True),
        threshold=cfg["threshold"],
    )
    return result.to_dict()


def handle_repetition_score(body: dict[str, Any]) -> dict[str, Any]:
    score = FilterEngine().score(body.get("text", ""))
    return {"score": score, "percentage": int(score * 100)}


def handle_batch_extract(body: dict[str, Any]) -> list[dict[str, Any]]:
    """Default config for every item; undecodable items are skipped."""
    config = SearchConfig()
    out: list[dict[str, Any]] = []
    for item in body.get("items", []):
        try:
            data = decode(item.get("data", ""), item.get("encoding", "hex"))
        except ExtractionError as e:
            logger.info("batch item %s skipped: %s", item.get("id"), e)
            continue
        result = _extractor.run(data, config)
        out.append({
            "id": item.get("id"),
            "count": result.total_count,
            "uniqueCount": result.unique_count,
        })
    return out


_GET_ROUTES = {
    "/health": lambda: {"status": "ok"},
    "/delimiters": lambda: {"delimiters": [d.to_dict() for d in STANDARD_DELIMITERS]},
    "/methods": lambda: {"methods": [
        {"id": m.value, "displayName": m.display_name, "description": m.description}
        for m in ExtractionMethod
    ]},
    "/control-characters": lambda: {"characters": [
        {"code": c.code, "abbreviation": c.abbreviation, "fullName": c.full_name,
         "description": c.description, "display": c.display}
        for c in CONTROL_CHARACTERS
    ]},
}

_POST_ROUTES = {
    "/extract": handle_extract,
    "/filter": handle_filter,
    "/repetition-score": handle_repetition_score,
    "/batch-extract": handle_batch_extract,
}


class ExtractionHandler(BaseHTTPRequestHandler):
    """HTTP request handler for the extraction sidecar."""

    def _read_json(self) -> dict[str, Any]:
        length = int(self.headers.get("Content-Length", 0))
        body = self.rfile.read(length).decode("utf-8")
        return json.loads(body) if body else {}

    def _respond(self, status: int, data: Any) -> None:
        body = json.dumps(data, ensure_ascii=False).encode("utf-8")
        self.send_response(status)
        self.send_header("Content-Type", "application/json")
        self.send_header("Content-Length", str(len(body)))
        self.end_headers()
        self.wfile.write(body)

    def log_message(self, format: str, *args: Any) -> None:
        logger.debug("%s - " + format, self.address_string(), *args)

    def do_GET(self) -> None:
        route = _GET_ROUTES.get(self.path)
        if route is None:
            self._respond(404, {"error": "not found"})
        else:
            self._respond(200, route())

    def do_POST(self) -> None:
        handler = _POST_ROUTES.get(self.path)
        if handler is None:
            self._respond(404, {"error": "not found"})
            return
        try:
            self._respond(200, handler(self._read_json()))
        except (ExtractionError, ValueError) as e:
            # bad input: malformed JSON, encoding, delimiter, bounds or method
            self._respond(400, {"error": str(e)})
        except Exception as e:
            logger.exception("unhandled error on %s", self.path)
            self._respond(500, {"error": str(e)})


def serve(port: int = DEFAULT_PORT) -> None:
    """Start the extraction HTTP sidecar."""
    server = HTTPServer(("127.0.0.1", port), ExtractionHandler)
    logger.info("frame-extractor sidecar listening on http://127.0.0.1:%d", port)
    try:
        server.serve_forever()
    except KeyboardInterrupt:
        logger.info("shutting down")
        server.shutdown()


if __name__ == "__main__":
    import argparse
    parser = argparse.ArgumentParser(description="frame-extractor HTTP sidecar")
    parser.add_argument("--port", type=int, default=DEFAULT_PORT)
    parser.add_argument("--verbose", "-v", action="store_true")
    args = parser.parse_args()
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    serve(port=args.port)
