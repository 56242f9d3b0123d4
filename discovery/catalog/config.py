from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

# Load .env from project root
load_dotenv(Path(__file__).resolve().parent.parent.parent / ".env")

_PACKAGED_DATA_DIR = Path(__file__).resolve().parent.parent / "data"


@dataclass(frozen=True)
class CatalogConfig:
    """
    Location of the venue and item catalog files.
    """

    data_dir: Path = Path(os.getenv("DISCOVERY_CATALOG_DIR", str(_PACKAGED_DATA_DIR)))
    venues_filename: str = "venues.csv"
    items_filename: str = "items.csv"

    @property
    def venues_path(self) -> Path:
        return self.data_dir / self.venues_filename

    @property
    def items_path(self) -> Path:
        return self.data_dir / self.items_filename


DEFAULT_CATALOG_CONFIG = CatalogConfig()
