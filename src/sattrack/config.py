"""Simple config persistence for SatTrack."""
import json
import logging
import os
from typing import Dict, Optional

logger = logging.getLogger(__name__)

_CONFIG_PATH = os.path.expanduser("~/.sattrack_config.json")

DEFAULTS: Dict = {
    "observer_lat": 0.0,
    "observer_lng": 0.0,
    "observer_alt": 0.0,  # metres
    "n2yo_api_key": "",
    "distance_units": "km",  # "km" or "miles"
    "min_elevation": 10,
    "prediction_days": 3,
    "norad_id": 25544,
}


def load_config(path: Optional[str] = None) -> Dict:
    """Persisted settings merged over DEFAULTS. A missing or unreadable file yields the defaults."""
    path = path or _CONFIG_PATH
    cfg = dict(DEFAULTS)
    if os.path.exists(path):
        try:
            with open(path, "r") as f:
                stored = json.load(f)
            if isinstance(stored, dict):
                cfg.update(stored)
        except (OSError, ValueError) as e:
            logger.warning("Ignoring unreadable config %s: %s", path, e)
    return cfg


def save_config(cfg: Dict, path: Optional[str] = None) -> None:
    path = path or _CONFIG_PATH
    d = os.path.dirname(path)
    if d and not os.path.exists(d):
        os.makedirs(d, exist_ok=True)
    with open(path, "w") as f:
        json.dump(cfg, f, indent=2)
