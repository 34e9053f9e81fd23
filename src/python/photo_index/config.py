"""
Configuration management for photo-index.

Example config.yaml:

    originals_path: /photos/originals
    thumbnails_path: /photos/thumbnails
    database:
      uri: sqlite:////photos/photo_index.db
    indexer:
      staleness_minutes: 10
      label_threshold_divisor: 3
      classifier_workers: 1
      classifier: my_models.vision:ResNetClassifier
      geocoder:
        enabled: true
        user_agent: photo-index (me@example.com)
"""

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

from photo_index.geo import NOMINATIM_URL

logger = logging.getLogger(__name__)

# Default locations to search for config.yaml
CONFIG_SEARCH_PATHS = [
    Path("config.yaml"),
    Path("src/python/config.yaml"),
    Path.home() / ".photo_index" / "config.yaml",
]

DATABASE_URI_ENV = "PHOTO_INDEX_DB_URI"
DEFAULT_DATABASE_URI = "sqlite:///photo_index.db"


@dataclass
class GeocoderSettings:
    enabled: bool = False
    url: str = NOMINATIM_URL
    user_agent: str = "photo-index"
    timeout: float = 10.0


@dataclass
class IndexerSettings:
    staleness_minutes: float = 10
    label_threshold_divisor: float = 3
    classifier_workers: int = 1
    classifier: str = ""
    geocoder: GeocoderSettings = field(default_factory=GeocoderSettings)


def load_config(config_path: Optional[Path] = None) -> Dict[str, Any]:
    """
    Load configuration from a YAML file.

    Args:
        config_path: Specific path to config file. If None, searches default locations.

    Returns:
        Dictionary containing configuration.

    Raises:
        FileNotFoundError: If no config file is found.
    """
    path_to_load = None

    if config_path:
        config_path = Path(config_path)
        if config_path.exists():
            path_to_load = config_path
        else:
            raise FileNotFoundError(f"Config file not found: {config_path}")
    else:
        for path in CONFIG_SEARCH_PATHS:
            if path.exists():
                path_to_load = path
                break

    if not path_to_load:
        raise FileNotFoundError(
            "No config file found. Please create config.yaml or provide a path."
        )

    logger.info("Loading config from %s", path_to_load)

    with open(path_to_load, "r", encoding="utf-8") as f:
        config = yaml.safe_load(f)

    return config or {}


def get_originals_root(config: Dict[str, Any]) -> Path:
    """
    Get the originals root directory from config.

    Raises:
        ValueError: If 'originals_path' is not set.
    """
    root_str = config.get("originals_path")
    if not root_str:
        raise ValueError("Config missing 'originals_path' setting.")

    return Path(root_str).expanduser()


def get_thumbnails_root(config: Dict[str, Any]) -> Path:
    """Thumbnail cache directory; defaults to a 'thumbnails' sibling of the originals."""
    root_str = config.get("thumbnails_path")
    if root_str:
        return Path(root_str).expanduser()

    return get_originals_root(config).parent / "thumbnails"


def get_database_uri(config: Dict[str, Any]) -> str:
    """SQLAlchemy URI of the catalog. The PHOTO_INDEX_DB_URI environment variable wins."""
    env_uri = os.environ.get(DATABASE_URI_ENV)
    if env_uri:
        return env_uri

    db_config = config.get("database") or {}
    return db_config.get("uri") or DEFAULT_DATABASE_URI


def get_indexer_settings(config: Dict[str, Any]) -> IndexerSettings:
    indexer_config = config.get("indexer") or {}
    geocoder_config = indexer_config.get("geocoder") or {}

    defaults = IndexerSettings()
    geocoder_defaults = GeocoderSettings()

    return IndexerSettings(
        staleness_minutes=float(indexer_config.get("staleness_minutes", defaults.staleness_minutes)),
        label_threshold_divisor=float(
            indexer_config.get("label_threshold_divisor", defaults.label_threshold_divisor)
        ),
        classifier_workers=int(indexer_config.get("classifier_workers", defaults.classifier_workers)),
        classifier=indexer_config.get("classifier") or defaults.classifier,
        geocoder=GeocoderSettings(
            enabled=bool(geocoder_config.get("enabled", geocoder_defaults.enabled)),
            url=geocoder_config.get("url", geocoder_defaults.url),
            user_agent=geocoder_config.get("user_agent", geocoder_defaults.user_agent),
            timeout=float(geocoder_config.get("timeout", geocoder_defaults.timeout)),
        ),
    )
