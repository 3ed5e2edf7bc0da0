from __future__ import annotations

import json
from pathlib import Path
from typing import Annotated, Any, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator, model_validator

from ragstore.domain.errors import InvalidArgument
from ragstore.domain.models import SearchOptions, SearchType

DEFAULT_PROFILES_DIR = Path("profiles")


class RetrievalProfile(BaseModel):
    """
    Retrieval knobs shared by settings.toml [retrieval], profiles/<name>.json and CLI flags.
    """
    model_config = ConfigDict(extra="ignore", frozen=True)

    search_type: SearchType = SearchType.SIMILARITY
    k: Annotated[int, Field(ge=1)] = 4
    fetch_k: Annotated[int, Field(ge=1)] = 20
    lambda_mult: Annotated[float, Field(ge=0.0, le=1.0)] = 0.5
    score_threshold: Optional[Annotated[float, Field(ge=0.0, le=1.0)]] = None
    namespace: Optional[str] = None

    @field_validator("search_type", mode="before")
    @classmethod
    def _parse_search_type(cls, v: Any) -> SearchType:
        return SearchType.parse(v)

    @model_validator(mode="after")
    def _fetch_k_covers_k(self) -> RetrievalProfile:
        if self.fetch_k < self.k:
            raise ValueError(f"fetch_k ({self.fetch_k}) must be >= k ({self.k})")
        return self

    def search_options(self) -> SearchOptions:
        return SearchOptions(namespace=self.namespace, score_threshold=self.score_threshold)


def parse_profile(raw: dict[str, Any]) -> RetrievalProfile:
    """Validate a raw mapping; pydantic errors surface as InvalidArgument."""
    try:
        return RetrievalProfile.model_validate(raw)
    except ValidationError as e:
        raise InvalidArgument(f"Invalid retrieval profile: {e}") from e


def load_profile(name: str, profiles_dir: Path = DEFAULT_PROFILES_DIR) -> RetrievalProfile:
    """
    Load profiles/<name>.json into a RetrievalProfile.
    """
    path = Path(profiles_dir) / f"{name}.json"
    if not path.exists():
        raise FileNotFoundError(f"Profile not found: {path}")

    return parse_profile(json.loads(path.read_text(encoding="utf-8")))


def override_profile(profile: RetrievalProfile, overrides: dict[str, Any]) -> RetrievalProfile:
    """
    Apply CLI overrides on top of a profile; None means "not given".
    """
    merged = profile.model_dump()
    for k, v in overrides.items():
        if v is None:
            continue
        if k in RetrievalProfile.model_fields:
            merged[k] = v
    return parse_profile(merged)
