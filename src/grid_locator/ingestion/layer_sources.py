"""Layer source loading: files or URLs -> validated Layers.

Each configured role (grid, grid_oot, substation, feeder, hut) names a
GeoJSON source, either a local path or an ``http(s)`` URL. Sources are read,
parsed and validated independently; a failing source is logged and its role
left absent so the remaining layers stay usable.
"""
from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Dict, List, Mapping, Optional, Sequence, Tuple

import requests

from grid_locator.services.assignment import FEEDER_CODE_KEY, FEEDER_SUBSTATION_KEY, LayerSet
from grid_locator.spatial.geometry_set import LINE, POINT, POLYGON, Layer, LayerLoadError, load_layer

logger = logging.getLogger(__name__)

REQUEST_TIMEOUT_S = 30


class LayerSourceError(RuntimeError):
    """Raised when a layer source cannot be read or is not valid JSON."""


def _is_url(source: str) -> bool:
    return source.startswith(("http://", "https://"))


def read_feature_collection(source: str) -> dict:
    """Read and parse a GeoJSON document from a path or URL."""
    if _is_url(source):
        try:
            response = requests.get(source, timeout=REQUEST_TIMEOUT_S, headers={"Cache-Control": "no-store"})
            response.raise_for_status()
        except requests.exceptions.RequestException as e:
            raise LayerSourceError(f"{source} -> {e}") from e
        try:
            return response.json()
        except ValueError as e:
            raise LayerSourceError(f"{source} is not valid JSON") from e
    try:
        with open(source, "r", encoding="utf-8") as f:
            return json.load(f)
    except OSError as e:
        raise LayerSourceError(f"{source} -> {e}") from e
    except json.JSONDecodeError as e:
        raise LayerSourceError(f"{source} is not valid JSON") from e


def feeder_aliases(settings) -> Dict[str, List[str]]:
    """Candidate property keys for the canonical feeder code/substation keys."""
    return {
        FEEDER_CODE_KEY: [settings.FEEDER_CODE_FIELD, *settings.FEEDER_CODE_ALIASES],
        FEEDER_SUBSTATION_KEY: [settings.FEEDER_SUBSTATION_FIELD, *settings.FEEDER_SUBSTATION_ALIASES],
    }


def role_sources(settings) -> Dict[str, Tuple[Optional[str], Optional[str], Optional[Mapping[str, Sequence[str]]]]]:
    """Role -> (source, expected geometry family, property aliases)."""
    substation_family = POINT if settings.SUBSTATION_GEOMETRY == "point" else POLYGON
    feeder_family = LINE if settings.FEEDER_GEOMETRY == "line" else POLYGON
    return {
        "grid": (settings.GRIDS_SOURCE, POLYGON, None),
        "grid_oot": (settings.GRID_OOT_SOURCE, POLYGON, None),
        "substation": (settings.SUBSTATIONS_SOURCE, substation_family, None),
        "feeder": (settings.FEEDERS_SOURCE, feeder_family, feeder_aliases(settings)),
        "hut": (settings.HUTS_SOURCE, POINT, None),
    }


def load_layer_source(
    source: str,
    role: str,
    family: Optional[str] = None,
    aliases: Optional[Mapping[str, Sequence[str]]] = None,
) -> Layer:
    raw = read_feature_collection(source)
    layer = load_layer(raw, name=Path(source).name or source, role=role, family=family, aliases=aliases)
    logger.info(f"Loaded {role} from {source} ({len(layer)} features)")
    return layer


def load_configured_layers(settings, overrides: Optional[Mapping[str, Optional[str]]] = None) -> Tuple[LayerSet, Dict[str, str]]:
    """Load every configured layer.

    Parameters
    ----------
    settings : Settings
        Application settings naming the sources.
    overrides : mapping, optional
        Role -> source replacing the configured one (``None`` keeps it).

    Returns
    -------
    (LayerSet, dict)
        The loaded snapshot and a role -> error message mapping for failures.
    """
    layers = LayerSet()
    errors: Dict[str, str] = {}
    for role, (source, family, aliases) in role_sources(settings).items():
        source = (overrides or {}).get(role) or source
        if not source:
            logger.debug(f"No source configured for {role}; layer absent")
            continue
        try:
            layers = layers.with_layer(role, load_layer_source(source, role, family, aliases))
        except (LayerSourceError, LayerLoadError) as e:
            logger.error(f"Failed to load {role} from {source}: {e}")
            errors[role] = str(e)
    return layers, errors


__all__ = [
    "LayerSourceError", "read_feature_collection", "feeder_aliases", "role_sources",
    "load_layer_source", "load_configured_layers",
]
