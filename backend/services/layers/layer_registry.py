from __future__ import annotations

import json
import logging
import os
import re
from pathlib import Path
from typing import Any, Iterable, List, Optional, Tuple
from urllib.parse import quote

from pipelines.layers.errors import Forbidden, InvalidFilename, NotFound, StorageFailure

from .models import Layer

logger = logging.getLogger(__name__)

LAYER_EXTENSIONS = (".json", ".geojson")
META_SUFFIX = ".meta"
LEGACY_META_SUFFIX = ".meta.json"
DEFAULT_SYSTEM_LAYERS = ("Lotes Nacional", "Yacimientos Lote X")

_UNSAFE_CHARS = re.compile(r"[^A-Za-z0-9_\s-]")
_WHITESPACE_RUN = re.compile(r"\s+")
_WORD_START = re.compile(r"\b\w")


def sanitize_layer_name(raw_name: Optional[str]) -> str:
    """'Mi Capa!' -> 'mi_capa'. May return an empty string."""
    name = _UNSAFE_CHARS.sub("", (raw_name or "").strip())
    return _WHITESPACE_RUN.sub("_", name).lower()


def display_name_for(layer_id: str) -> str:
    """'mi_capa_1' -> 'Mi Capa 1'"""
    return _WORD_START.sub(lambda m: m.group(0).upper(), layer_id.replace("_", " "))


def is_metadata_file(filename: str) -> bool:
    return filename.endswith(META_SUFFIX) or f"{META_SUFFIX}." in filename


class LayerRegistry:
    """
    Flat, file-backed registry of map layers.
    Files live directly under the storage root:
      <root>/<layer_id>.json        layer payload (GeoJSON, pretty-printed)
      <root>/<layer_id>.meta        optional {"legendField": ...}
    Pre-installed system layers may use the .geojson extension and cannot be deleted.
    """

    def __init__(
        self,
        storage_root: Path,
        system_layers: Iterable[str] = DEFAULT_SYSTEM_LAYERS,
        public_prefix: str = "/geojson",
    ) -> None:
        self._root = Path(storage_root)
        self._system_layers = frozenset(system_layers)
        self._public_prefix = public_prefix.rstrip("/")

    @property
    def root(self) -> Path:
        return self._root

    def is_system_layer(self, layer_id: str) -> bool:
        return layer_id in self._system_layers

    def _url_for(self, filename: str) -> str:
        return f"{self._public_prefix}/{quote(filename)}"

    def _layer(self, layer_id: str, filename: str, legend_field: Optional[str]) -> Layer:
        return Layer(
            id=layer_id,
            display_name=display_name_for(layer_id),
            filename=filename,
            url=self._url_for(filename),
            legend_field=legend_field,
            is_system_layer=self.is_system_layer(layer_id),
        )

    # -----------
    # Listing
    # -----------
    def read_legend_field(self, layer_id: str) -> Optional[str]:
        """Legend field from the sidecar; a missing or corrupt sidecar yields None"""
        meta_path = self._root / f"{layer_id}{META_SUFFIX}"
        if not meta_path.exists():
            return None
        try:
            with open(meta_path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, ValueError) as e:
            logger.warning(f"⚠️ Could not read metadata for {layer_id}: {e}")
            return None
        if not isinstance(data, dict):
            return None
        return data.get("legendField") or None

    def list_layers(self) -> List[Layer]:
        if not self._root.is_dir():
            logger.info(f"📁 Layer directory not found: {self._root}")
            return []
        try:
            filenames = sorted(os.listdir(self._root))
        except OSError as e:
            raise StorageFailure(f"Could not list layers: {e}")

        layers: List[Layer] = []
        for filename in filenames:
            if is_metadata_file(filename):
                continue
            ext = next((e for e in LAYER_EXTENSIONS if filename.endswith(e)), None)
            if ext is None or not (self._root / filename).is_file():
                continue
            layer_id = filename[: -len(ext)]
            layers.append(self._layer(layer_id, filename, self.read_legend_field(layer_id)))

        logger.info(f"🗺️ {len(layers)} layer(s) found: {[layer.display_name for layer in layers]}")
        return layers

    # -----------
    # Persist
    # -----------
    def _is_taken(self, layer_id: str) -> bool:
        return any((self._root / f"{layer_id}{ext}").exists() for ext in LAYER_EXTENSIONS)

    def _write_exclusive(self, base_id: str, text: str) -> Tuple[str, Path]:
        """
        Claim the first free <base_id>[_N].json with an exclusive create, so two
        uploads racing for the same name can never end up on the same file.
        """
        counter = 0
        while True:
            layer_id = base_id if counter == 0 else f"{base_id}_{counter}"
            counter += 1
            if self._is_taken(layer_id):
                continue
            path = self._root / f"{layer_id}.json"
            try:
                f = open(path, "x", encoding="utf-8")
            except FileExistsError:
                continue
            except OSError as e:
                raise StorageFailure(f"Could not create {path.name}: {e}")
            try:
                with f:
                    f.write(text)
            except OSError as e:
                self._discard(path)
                raise StorageFailure(f"Could not write {path.name}: {e}")
            return layer_id, path

    def persist(self, raw_name: str, payload: Any, legend_field: Optional[str] = None) -> Layer:
        """
        Store a layer payload under a sanitized, collision-free name

        Args:
            raw_name: User supplied layer name
            payload: JSON-serializable GeoJSON document
            legend_field: Optional attribute name for the map legend

        Returns:
            Layer: The created registry entry

        Raises:
            InvalidFilename: name is empty after sanitization
            StorageFailure: the layer or its metadata could not be written
        """
        base_id = sanitize_layer_name(raw_name)
        if not base_id:
            raise InvalidFilename("Invalid file name after sanitization")

        text = json.dumps(payload, ensure_ascii=False, indent=2)
        try:
            self._root.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise StorageFailure(f"Could not create layer directory: {e}")

        layer_id, path = self._write_exclusive(base_id, text)
        logger.info(f"✅ Layer saved: {path.name} ({len(text.encode('utf-8')) / 1024:.1f} KB)", extra={"layer": layer_id})

        meta_path = self._root / f"{layer_id}{META_SUFFIX}"
        try:
            if legend_field:
                with open(meta_path, "w", encoding="utf-8") as f:
                    json.dump({"legendField": legend_field}, f, ensure_ascii=False, indent=2)
                logger.info(f"ℹ️ Legend field for {layer_id}: {legend_field}", extra={"layer": layer_id})
            elif meta_path.is_file():
                # orphaned sidecar from an earlier layer with this name
                meta_path.unlink()
                logger.info(f"🗑️ Removed stale metadata: {meta_path.name}", extra={"layer": layer_id})
        except OSError as e:
            self._discard(path)
            raise StorageFailure(f"Could not write metadata for {layer_id}: {e}")

        return self._layer(layer_id, path.name, legend_field or None)

    def _discard(self, path: Path) -> None:
        """Remove a just-written layer file so a failed upload leaves nothing listed"""
        try:
            path.unlink()
        except OSError as e:
            logger.error(f"❌ Could not remove {path.name} after a failed upload: {e}")

    # -----------
    # Delete
    # -----------
    def delete(self, layer_id: str) -> str:
        """
        Remove a user layer and its metadata sidecar

        Raises:
            InvalidFilename: blank id or an id that escapes the storage root
            Forbidden: system layer
            NotFound: no <layer_id>.json or <layer_id>.geojson
            StorageFailure: a file could not be removed
        """
        if not layer_id or not layer_id.strip():
            raise InvalidFilename("Layer id is required")
        if "/" in layer_id or "\\" in layer_id or ".." in layer_id:
            raise InvalidFilename(f"Invalid layer id: {layer_id}")
        if self.is_system_layer(layer_id):
            raise Forbidden("System layers cannot be deleted")

        main_path = next(
            (p for p in (self._root / f"{layer_id}{ext}" for ext in LAYER_EXTENSIONS) if p.is_file()),
            None,
        )
        if main_path is None:
            raise NotFound("Layer not found")

        try:
            main_path.unlink()
        except FileNotFoundError:
            raise NotFound("Layer not found")
        except OSError as e:
            raise StorageFailure(f"Could not delete {main_path.name}: {e}")
        logger.info(f"🗑️ Layer file deleted: {main_path.name}", extra={"layer": layer_id})

        meta_path = self._root / f"{layer_id}{META_SUFFIX}"
        if meta_path.exists():
            try:
                meta_path.unlink()
            except OSError as e:
                raise StorageFailure(f"Could not delete metadata for {layer_id}: {e}")
            logger.info(f"🗑️ Metadata deleted: {meta_path.name}", extra={"layer": layer_id})

        return layer_id

    # -----------
    # Maintenance
    # -----------
    def migrate_legacy_metadata(self) -> List[str]:
        """Rename old <name>.meta.json sidecars to <name>.meta. Best-effort per file."""
        if not self._root.is_dir():
            return []
        migrated: List[str] = []
        for filename in sorted(os.listdir(self._root)):
            if not filename.endswith(LEGACY_META_SUFFIX):
                continue
            layer_id = filename[: -len(LEGACY_META_SUFFIX)]
            try:
                (self._root / filename).replace(self._root / f"{layer_id}{META_SUFFIX}")
            except OSError as e:
                logger.error(f"❌ Could not migrate {filename}: {e}")
                continue
            logger.info(f"✅ Migrated {filename} → {layer_id}{META_SUFFIX}")
            migrated.append(layer_id)
        return migrated
