"""Service entry point for the Wayfinder API.

Run locally:
    uvicorn wayfinder.main:app --reload --host 0.0.0.0 --port 8000
or through the installed console script:
    wayfinder-api
"""

from __future__ import annotations

import os
from pathlib import Path

import uvicorn

from wayfinder.api import create_app
from wayfinder.logging_config import setup_logging

ENV_FILES = (Path("wayfinder/.env"), Path(".env"))


def parse_env_line(raw: str) -> tuple[str, str] | None:
    """Split one KEY=value line; comments and blank lines yield None."""
    line = raw.strip()
    if not line or line.startswith("#") or "=" not in line:
        return None
    key, value = line.split("=", 1)
    key = key.removeprefix("export ").strip()
    if not key:
        return None
    return key, value.strip().strip("'").strip('"')


def load_env_files(paths: tuple[Path, ...] = ENV_FILES) -> dict[str, str]:
    """Export settings from local env files without overriding the process env.

    Earlier files win over later ones for the same key.
    """
    applied: dict[str, str] = {}
    for env_path in paths:
        if not env_path.is_file():
            continue
        for raw in env_path.read_text(encoding="utf-8").splitlines():
            parsed = parse_env_line(raw)
            if parsed is None:
                continue
            key, value = parsed
            if key in os.environ:
                continue
            os.environ[key] = value
            applied[key] = value
    return applied


load_env_files()
setup_logging(log_dir=Path(os.getenv("WAYFINDER_LOG_DIR", "logs")))
app = create_app()


def run() -> None:
    """Serve the API with uvicorn using WAYFINDER_HOST/PORT/RELOAD."""
    uvicorn.run(
        "wayfinder.main:app",
        host=os.getenv("WAYFINDER_HOST", "0.0.0.0"),
        port=int(os.getenv("WAYFINDER_PORT", "8000")),
        reload=os.getenv("WAYFINDER_RELOAD", "false").lower() == "true",
    )


if __name__ == "__main__":
    run()
