"""Process-wide holder of the current layer snapshot.

Readers call :meth:`LayerCatalog.snapshot` once per query and resolve
against that value. Reloads build a complete new :class:`LayerSet` first and
then swap the reference, so a query never sees a half-replaced set.
"""
from __future__ import annotations

import logging
import threading
from typing import Dict, List, Mapping, Optional

from grid_locator.ingestion.layer_sources import load_configured_layers
from grid_locator.services.assignment import LayerSet, ResolverOptions
from grid_locator.spatial.geometry_set import Layer

logger = logging.getLogger(__name__)


class LayerCatalog:
    """Atomically swappable layer snapshot plus the resolver options."""

    def __init__(self, layers: Optional[LayerSet] = None, options: Optional[ResolverOptions] = None, settings=None):
        self._layers = layers or LayerSet()
        self._lock = threading.Lock()
        self.settings = settings
        self.options = options or (ResolverOptions.from_settings(settings) if settings is not None else ResolverOptions())
        self.last_errors: Dict[str, str] = {}

    @classmethod
    def from_settings(cls, settings, overrides: Optional[Mapping[str, Optional[str]]] = None) -> "LayerCatalog":
        catalog = cls(settings=settings)
        catalog.reload(overrides)
        return catalog

    def snapshot(self) -> LayerSet:
        return self._layers

    def replace(self, role: str, layer: Optional[Layer]) -> LayerSet:
        """Swap in a single role's layer (``None`` removes it)."""
        with self._lock:
            self._layers = self._layers.with_layer(role, layer)
            logger.info(f"Replaced {role} layer ({len(layer) if layer is not None else 0} features)")
            return self._layers

    def reload(self, overrides: Optional[Mapping[str, Optional[str]]] = None) -> Dict[str, str]:
        """Reload every layer from the configured sources.

        A role whose source fails keeps the layer from the previous snapshot.
        Roles that fail with nothing to keep are reported by
        :meth:`unavailable_roles`. Returns a role -> error message mapping.
        """
        if self.settings is None:
            raise RuntimeError("LayerCatalog.reload requires settings")

        fresh, errors = load_configured_layers(self.settings, overrides)
        with self._lock:
            layers = fresh
            for role in errors:
                previous = self._layers.get(role)
                if previous is not None:
                    layers = layers.with_layer(role, previous)
                    logger.warning(f"Keeping previous {role} layer ({len(previous)} features)")
            self._layers = layers
            self.last_errors = errors
        loaded = sum(1 for _, layer in layers.items() if layer is not None)
        logger.info(f"Layer catalog reloaded: {loaded} layers, {len(errors)} failures")
        return errors

    def unavailable_roles(self) -> List[str]:
        """Roles that failed to load and have no earlier layer to fall back on."""
        layers = self._layers
        return sorted(role for role in self.last_errors if layers.get(role) is None)


__all__ = ["LayerCatalog"]
