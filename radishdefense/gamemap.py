"""Tile map geometry: pixel and tile coordinates, layers, paths and properties."""

from __future__ import annotations

import base64
import gzip
import math
import struct
import xml.etree.ElementTree as ET
import zlib
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

_TOLERANCE = 2e-37
_EPSILON = 1.1920929e-07
_FLIP_MASK = 0x1FFFFFFF


@dataclass(frozen=True)
class Vec2:
    """A 2D vector or point."""

    x: float = 0.0
    y: float = 0.0

    def __add__(self, other: Vec2) -> Vec2:
        return Vec2(self.x + other.x, self.y + other.y)

    def __sub__(self, other: Vec2) -> Vec2:
        return Vec2(self.x - other.x, self.y - other.y)

    def __mul__(self, scale: float) -> Vec2:
        return Vec2(self.x * scale, self.y * scale)

    __rmul__ = __mul__

    def __neg__(self) -> Vec2:
        return Vec2(-self.x, -self.y)

    def length(self) -> float:
        return math.hypot(self.x, self.y)

    def normalized(self) -> Vec2:
        """Unit vector in the same direction; a zero vector is returned unchanged."""
        n = self.length()
        if n < _TOLERANCE:
            return self
        return Vec2(self.x / n, self.y / n)

    def angle_to(self, other: Vec2) -> float:
        """Signed angle in radians from this vector to ``other``."""
        a = self.normalized()
        b = other.normalized()
        angle = math.atan2(a.x * b.y - a.y * b.x, a.x * b.x + a.y * b.y)
        return 0.0 if abs(angle) < _EPSILON else angle


@dataclass(frozen=True)
class Size:
    width: float = 0.0
    height: float = 0.0


@dataclass
class GameMap:
    """An orthogonal tile map.

    Tile row 0 is the top row; pixel coordinates grow upwards from the
    bottom-left corner. Object coordinates are stored in pixel space.
    """

    map_size: Size
    tile_size: Size
    layers: dict[str, list[list[int]]] = field(default_factory=dict)
    object_groups: dict[str, list[dict[str, Any]]] = field(default_factory=dict)
    gid_properties: dict[int, dict[str, Any]] = field(default_factory=dict)

    def tile_at(self, pixel: Vec2) -> Vec2:
        x = int(pixel.x / self.tile_size.width)
        row = pixel.y / self.tile_size.height
        if row < 0:
            row -= 1
        y = int(self.map_size.height) - int(row) - 1
        return Vec2(x, y)

    def pixel_at(self, tile: Vec2) -> Vec2:
        """Centre of a tile, in pixels."""
        tw, th = self.tile_size.width, self.tile_size.height
        return Vec2(
            tile.x * tw + tw / 2,
            (self.map_size.height - tile.y - 1) * th + th / 2,
        )

    def path_points(self) -> list[Vec2]:
        """Tile centres of the objects in the ``pathObject`` group, in order."""
        return [
            self.pixel_at(self.tile_at(Vec2(obj["x"], obj["y"])))
            for obj in self.object_groups["pathObject"]
        ]

    def _gid(self, name: str, tile: Vec2) -> int:
        layer = self.layers[name]
        x, y = int(tile.x), int(tile.y)
        if not (0 <= y < len(layer) and 0 <= x < len(layer[y])):
            raise IndexError(f"tile ({tile.x}, {tile.y}) is outside layer {name!r}")
        return layer[y][x]

    def in_layer(self, name: str, tile: Vec2) -> bool:
        return self._gid(name, tile) != 0

    def is_out_of_map(self, tile: Vec2) -> bool:
        return (
            tile.x < 0
            or tile.y < 0
            or tile.x > self.map_size.width - 1
            or tile.y > self.map_size.height - 1
        )

    def tile_properties(self, name: str, tile: Vec2) -> dict[str, Any]:
        """Properties of the tile used at ``tile`` in a layer; empty if none."""
        return dict(self.gid_properties.get(self._gid(name, tile), {}))

    def first_path_pixel(self) -> Vec2:
        return self.pixel_at(self.tile_at(self.path_points()[0]))

    def last_path_pixel(self) -> Vec2:
        return self.pixel_at(self.tile_at(self.path_points()[-1]))


def _attr_int(elem: ET.Element, name: str, default: int | None = None) -> int:
    value = elem.get(name)
    if value is None:
        if default is None:
            raise ValueError(f"<{elem.tag}> lacks attribute {name!r}")
        return default
    try:
        return int(value)
    except ValueError as exc:
        raise ValueError(f"attribute {name!r} of <{elem.tag}> is not an integer") from exc


def _convert(value: str, kind: str | None) -> Any:
    if kind == "bool":
        return value == "true"
    if kind == "int":
        return int(value)
    if kind == "float":
        return float(value)
    return value


def _properties(elem: ET.Element) -> dict[str, Any]:
    holder = elem.find("properties")
    if holder is None:
        return {}
    return {
        prop.get("name", ""): _convert(prop.get("value", prop.text or ""), prop.get("type"))
        for prop in holder.findall("property")
    }


def _layer_gids(data: ET.Element) -> list[int]:
    encoding = data.get("encoding")
    if encoding is None:
        return [_attr_int(tile, "gid", 0) for tile in data.findall("tile")]
    text = data.text or ""
    if encoding == "csv":
        return [int(v) for v in text.replace("\n", "").split(",") if v.strip()]
    if encoding == "base64":
        raw = base64.b64decode(text.strip())
        compression = data.get("compression")
        if compression == "zlib":
            raw = zlib.decompress(raw)
        elif compression == "gzip":
            raw = gzip.decompress(raw)
        elif compression is not None:
            raise ValueError(f"unsupported layer compression {compression!r}")
        if len(raw) % 4:
            raise ValueError("base64 layer data has a truncated tile")
        return list(struct.unpack(f"<{len(raw) // 4}I", raw))
    raise ValueError(f"unsupported layer encoding {encoding!r}")


def _parse(text: str, base_dir: Path | None) -> GameMap:
    try:
        root = ET.fromstring(text)
    except ET.ParseError as exc:
        raise ValueError(f"malformed map document: {exc}") from exc
    if root.tag != "map":
        raise ValueError(f"expected <map> root, got <{root.tag}>")

    width, height = _attr_int(root, "width"), _attr_int(root, "height")
    tile_w, tile_h = _attr_int(root, "tilewidth"), _attr_int(root, "tileheight")
    game_map = GameMap(map_size=Size(width, height), tile_size=Size(tile_w, tile_h))

    for tileset in root.findall("tileset"):
        first_gid = _attr_int(tileset, "firstgid", 1)
        source = tileset.get("source")
        if source is not None:
            if base_dir is None:
                raise ValueError(f"external tileset {source!r} needs the map's directory")
            tileset = ET.parse(base_dir / source).getroot()
        for tile in tileset.findall("tile"):
            props = _properties(tile)
            if props:
                game_map.gid_properties[first_gid + _attr_int(tile, "id")] = props

    for layer in root.findall("layer"):
        layer_w = _attr_int(layer, "width", width)
        layer_h = _attr_int(layer, "height", height)
        data = layer.find("data")
        if data is None:
            raise ValueError(f"layer {layer.get('name')!r} has no data")
        gids = [gid & _FLIP_MASK for gid in _layer_gids(data)]
        if len(gids) != layer_w * layer_h:
            raise ValueError(
                f"layer {layer.get('name')!r} holds {len(gids)} tiles, "
                f"expected {layer_w * layer_h}"
            )
        game_map.layers[layer.get("name", "")] = [
            gids[row * layer_w:(row + 1) * layer_w] for row in range(layer_h)
        ]

    map_pixel_height = height * tile_h
    for group in root.findall("objectgroup"):
        objects = []
        for obj in group.findall("object"):
            obj_height = float(obj.get("height", 0))
            entry: dict[str, Any] = {
                "name": obj.get("name", ""),
                "type": obj.get("type", ""),
                "x": float(obj.get("x", 0)),
                "y": map_pixel_height - float(obj.get("y", 0)) - obj_height,
                "width": float(obj.get("width", 0)),
                "height": obj_height,
            }
            entry.update(_properties(obj))
            objects.append(entry)
        game_map.object_groups[group.get("name", "")] = objects

    return game_map


def parse_tmx(text: str) -> GameMap:
    """Build a map from TMX text; external tilesets are not allowed."""
    return _parse(text, None)


def load_tmx(path: str | Path) -> GameMap:
    """Load a TMX file, resolving external tilesets beside it."""
    path = Path(path)
    return _parse(path.read_text(encoding="utf-8"), path.parent)