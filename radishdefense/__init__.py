"""Headless game model for a tile-map tower defense game."""

__version__ = "0.1.0"

__all__ = [
    "animation",
    "arms",
    "buffs",
    "bullets",
    "cards",
    "data",
    "gamemap",
    "hud",
    "levels",
    "monster",
    "radish",
    "scene",
]