"""Application configuration defaults."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import List

from pdfinspect.ingestion.pdf_loader import DEFAULT_FETCH_TIMEOUT, DEFAULT_MAX_FETCH_BYTES
from pdfinspect.utils.paths import PathConfinement


@dataclass(slots=True)
class AppConfig:
    roots: List[Path] = field(default_factory=list)
    fetch_timeout: float = DEFAULT_FETCH_TIMEOUT
    max_fetch_bytes: int = DEFAULT_MAX_FETCH_BYTES
    host: str = "127.0.0.1"
    port: int = 8000

    def resolve_roots(self, base_dir: Path | None = None) -> List[Path]:
        """Return roots as absolute paths, anchoring relative ones at ``base_dir``."""
        base = base_dir if base_dir is not None else Path.cwd()
        return [Path(root) if Path(root).is_absolute() else base / root for root in self.roots]

    def build_confinement(self, base_dir: Path | None = None) -> PathConfinement:
        return PathConfinement(self.resolve_roots(base_dir))
