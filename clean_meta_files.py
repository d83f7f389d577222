#!/usr/bin/env python3
"""
Rename legacy <layer>.meta.json sidecars to <layer>.meta in the layer directory
"""
import sys
from pathlib import Path

sys.path.append(str(Path(__file__).resolve().parent / "backend"))

from config import settings
from config.paths import layers_root
from services.layers import LayerRegistry


def main():
    root = layers_root()
    print("🧹 Cleaning up old metadata files...")
    print(f"📁 Directory: {root}")

    if not root.is_dir():
        print("❌ Directory not found")
        return 1

    registry = LayerRegistry(root, system_layers=settings.LAYERS_SYSTEM_LAYERS)
    migrated = registry.migrate_legacy_metadata()
    for layer_id in migrated:
        print(f"   ✅ {layer_id}.meta.json → {layer_id}.meta")

    print(f"\n🎉 Cleanup complete: {len(migrated)} file(s) migrated")
    return 0


if __name__ == "__main__":
    sys.exit(main())
