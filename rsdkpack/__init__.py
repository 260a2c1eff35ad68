"""Readers for RSDK v4 data packs, stage layouts, tiles, and the stage camera."""

__version__ = "0.1.0"
__all__ = ["cipher", "datapack", "reader", "layout", "tiles", "camera"]