"""
Utility script to generate and write the OpenAPI schema for the FastAPI app.

The schema is built from an application created with default settings, so
no environment (API keys, users) is needed, and written as pretty JSON so
API clients and documentation tools can consume it without running the
server.

Usage:
    python -m taskboard.generate_openapi [output-path]

The default output path is interfaces/openapi.json at the repository root.
"""
from __future__ import annotations

import json
import os
import sys
from typing import Any, Dict, List, Optional

from .main import create_app, openapi_tags
from .settings import Settings


def _default_path() -> str:
    package_dir = os.path.dirname(os.path.abspath(__file__))
    repo_root = os.path.dirname(os.path.dirname(package_dir))
    return os.path.join(repo_root, "interfaces", "openapi.json")


def _ensure_tags(schema: Dict[str, Any]) -> None:
    """
    Ensure the schema lists every tag from openapi_tags, without overriding
    tags that are already present.
    """
    existing_tags: List[Dict[str, Any]] = schema.get("tags", []) or []
    existing_names = {t.get("name") for t in existing_tags if isinstance(t, dict)}
    for tag in openapi_tags:
        if tag.get("name") not in existing_names:
            existing_tags.append(tag)
    if existing_tags:
        schema["tags"] = existing_tags


# PUBLIC_INTERFACE
def generate_openapi(out_path: Optional[str] = None) -> str:
    """Write the OpenAPI schema file and return the path written."""
    app = create_app(settings=Settings())
    schema = app.openapi()
    app.state.weather.close()
    _ensure_tags(schema)

    out_path = out_path or _default_path()
    os.makedirs(os.path.dirname(os.path.abspath(out_path)), exist_ok=True)
    with open(out_path, "w", encoding="utf-8") as f:
        json.dump(schema, f, indent=2, ensure_ascii=False)
    return out_path


def main(argv: Optional[List[str]] = None) -> None:
    args = sys.argv[1:] if argv is None else argv
    path = generate_openapi(args[0] if args else None)
    print(f"Wrote OpenAPI schema to: {path}")


if __name__ == "__main__":
    main()
