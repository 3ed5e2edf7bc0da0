from __future__ import annotations

import logging
import os
import tomllib
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv
from rich.logging import RichHandler

from ragstore.profiles import RetrievalProfile, parse_profile


@dataclass(frozen=True)
class EmbeddingsSettings:
    provider: str  # "dummy" | "openai" | "huggingface"
    model: str
    dimension: Optional[int] = None
    batch_size: int = 64
    cache_path: Optional[Path] = None


@dataclass(frozen=True)
class BackendSettings:
    kind: str  # "memory" | "jsonl" | "chroma"
    path: Optional[Path] = None
    collection: str = "ragstore"
    metric: str = "cosine"
    ready_timeout: float = 120.0  # seconds; chroma only
    ready_interval: float = 5.0


@dataclass(frozen=True)
class Settings:
    embeddings: EmbeddingsSettings
    backend: BackendSettings
    retrieval: RetrievalProfile


def _expand(p: str) -> Path:
    return Path(os.path.expandvars(os.path.expanduser(p))).resolve()


def load_settings(path: str | Path = "settings.toml") -> Settings:
    """
    Read settings.toml. Environment variables (including a .env file) are expanded in paths.

    Raises:
        FileNotFoundError: if the file does not exist.
        KeyError: if a required key is missing.
        InvalidArgument: if [retrieval] fails validation.
    """
    load_dotenv()
    path = Path(path)

    if not path.exists():
        raise FileNotFoundError(f"Missing config file: {path}")

    with path.open("rb") as f:
        raw = tomllib.load(f)

    try:
        emb = raw["embeddings"]
        backend = raw["backend"]
        embeddings = EmbeddingsSettings(
            provider=emb["provider"],
            model=emb["model"],
            dimension=int(emb["dimension"]) if "dimension" in emb else None,
            batch_size=int(emb.get("batch_size", 64)),
            cache_path=_expand(emb["cache_path"]) if emb.get("cache_path") else None,
        )
        backend_settings = BackendSettings(
            kind=backend["kind"],
            path=_expand(backend["path"]) if backend.get("path") else None,
            collection=backend.get("collection", "ragstore"),
            metric=backend.get("metric", "cosine"),
            ready_timeout=float(backend.get("ready_timeout", 120.0)),
            ready_interval=float(backend.get("ready_interval", 5.0)),
        )
    except KeyError as e:
        raise KeyError(f"Missing config key: {e}") from e

    return Settings(
        embeddings=embeddings,
        backend=backend_settings,
        retrieval=parse_profile(raw.get("retrieval", {})),
    )


def setup_logging(level: str | int = logging.INFO) -> logging.Logger:
    """
    Configure root logging for the CLI. Library modules only create loggers.
    """
    logging.basicConfig(
        level=level,
        format="%(name)s - %(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(rich_tracebacks=True, show_path=False)],
    )
    return logging.getLogger("ragstore")
