"""The level picker: page through levels and start an unlocked one."""

from __future__ import annotations

import random
from collections.abc import Callable

from .data import DataRegistry, LevelData, LevelTable
from .gamemap import GameMap
from .scene import GameScene

FIRST_LEVEL_ID = 1001


class LevelSelect:
    """Pages of levels with left/right buttons and a start button."""

    def __init__(
        self,
        registry: DataRegistry,
        map_loader: Callable[[str], GameMap],
        *,
        rng: random.Random | None = None,
    ) -> None:
        levels = registry.get("LevelMgr")
        if not isinstance(levels, LevelTable):
            raise KeyError("registry has no level table")
        self.registry = registry
        self.levels = levels
        self.map_loader = map_loader
        self.rng = rng
        self.pages: list[tuple[str, str]] = []
        for i in range(len(levels)):
            record = levels.get(FIRST_LEVEL_ID + i)
            if not isinstance(record, LevelData):
                raise KeyError(f"no level with id {FIRST_LEVEL_ID + i}")
            self.pages.append((record.view_img, record.card_view))
        self.page = 0
        self.left_visible = False
        self.right_visible = True
        self.start_enabled = True

    def _go(self, index: int) -> None:
        if 0 <= index < len(self.pages):
            self.page = index

    def previous(self) -> None:
        if not self.left_visible:
            return
        self.right_visible = True
        self._go(self.page - 1)
        if self.page <= 0:
            self.left_visible = False
        if self.page < self.levels.lock_level:
            self.start_enabled = True

    def next(self) -> None:
        if not self.right_visible:
            return
        self.left_visible = True
        self._go(self.page + 1)
        if self.page >= len(self.pages) - 1:
            self.right_visible = False
        if self.page >= self.levels.lock_level:
            self.start_enabled = False

    def can_start(self) -> bool:
        return self.start_enabled

    def start(self) -> GameScene:
        """Select the shown level and build its scene."""
        if not self.start_enabled:
            raise RuntimeError(f"level {self.page + 1} is locked")
        self.levels.select(self.page)
        level = self.levels.current()
        return GameScene(self.registry, self.map_loader(level.map_img), rng=self.rng)