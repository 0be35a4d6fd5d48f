"""
Environment + project-root helpers.

`GOOGLE_MAPS_API_KEY` and `GOOGLE_CLIENT_ID` usually live in a `.env` next to the sources, and
the sqlite path in settings is relative. Both must resolve the same way whether the app is
started by uvicorn, the `foodmood` CLI or pytest, from any working directory.

- `load_dotenv_if_present()`: load `.env` once, never overriding the process environment
- `get_project_root()`: `FOODMOOD_PROJECT_ROOT`, else the parent of `FOODMOOD_ENV_FILE`,
  else the nearest directory with a `.env`, `.git` or `pyproject.toml` + `src/`
- `resolve_project_path()`: anchor relative paths at that root
"""

from __future__ import annotations

import os
from functools import lru_cache
from pathlib import Path
from typing import Iterator

from dotenv import load_dotenv

ROOT_ENV = "FOODMOOD_PROJECT_ROOT"
ENV_FILE_ENV = "FOODMOOD_ENV_FILE"


def _explicit_env_file() -> Path | None:
    value = os.getenv(ENV_FILE_ENV)
    return Path(value).expanduser().resolve() if value else None


def _is_root(path: Path) -> bool:
    if (path / ".env").is_file() or (path / ".git").exists():
        return True
    return (path / "pyproject.toml").is_file() and (path / "src").is_dir()


def _search_starts() -> Iterator[Path]:
    # Working directory first, then this module's own location (installed or editable runs).
    yield Path.cwd().resolve()
    yield Path(__file__).resolve().parent


@lru_cache
def get_project_root() -> Path:
    """Return the best-guess project root directory (cached)."""
    override = os.getenv(ROOT_ENV)
    if override:
        return Path(override).expanduser().resolve()

    env_file = _explicit_env_file()
    if env_file is not None:
        return env_file.parent

    for start in _search_starts():
        for candidate in (start, *start.parents):
            if _is_root(candidate):
                return candidate
    return Path.cwd().resolve()


@lru_cache
def load_dotenv_if_present() -> Path | None:
    """Load the project's `.env` once; returns the file that was loaded, if any."""
    env_path = _explicit_env_file() or get_project_root() / ".env"
    if not env_path.is_file():
        return None
    load_dotenv(dotenv_path=env_path, override=False)
    return env_path


def resolve_project_path(path: str | Path) -> Path:
    """Resolve a possibly-relative path against the project root."""
    p = Path(path).expanduser()
    if p.is_absolute() or str(path) == ":memory:":
        return p
    return (get_project_root() / p).resolve()
