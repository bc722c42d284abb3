"""A level in play: map, monsters, towers, bullets, buffs, radish and overlay."""

from __future__ import annotations

import random
from typing import TypeVar

from .animation import AnimationPlayer, Sprite
from .arms import Tower
from .bullets import STATIONARY_TAG, BulletLayer
from .buffs import BuffLayer
from .cards import CardLayer, UpgradeMenu
from .data import (
    AnimationTable,
    ArmsData,
    ArmsTable,
    BuffTable,
    BulletTable,
    CardTable,
    DataRegistry,
    LevelTable,
    MonsterTable,
    RecordTable,
)
from .gamemap import GameMap, Size, Vec2
from .hud import Hud
from .monster import MonsterSpawner
from .radish import Radish

MONSTER_SIZE = Size(80, 80)
RADISH_SIZE = Size(80, 80)
COLLISION_RADIUS = 10.0
START_MARKER_FRAME = "Map/Radish01_01.png"

_T = TypeVar("_T", bound=RecordTable)


def _table(registry: DataRegistry, name: str, kind: type[_T]) -> _T:
    table = registry.get(name)
    if not isinstance(table, kind):
        raise KeyError(f"registry has no {kind.__name__} named {name!r}")
    return table


def _rect_intersects_circle(origin: Vec2, size: Size, center: Vec2, radius: float) -> bool:
    w, h = size.width / 2, size.height / 2
    dx = abs(center.x - (origin.x + w))
    dy = abs(center.y - (origin.y + h))
    if dx > radius + w or dy > radius + h:
        return False
    if dx <= w or dy <= h:
        return True
    return (dx - w) ** 2 + (dy - h) ** 2 <= radius**2


class GameScene:
    """Everything that runs while one level is being played."""

    def __init__(
        self,
        registry: DataRegistry,
        game_map: GameMap,
        *,
        rng: random.Random | None = None,
        monster_size: Size = MONSTER_SIZE,
    ) -> None:
        self.registry = registry
        self.game_map = game_map
        self.monster_size = monster_size
        self.levels = _table(registry, "LevelMgr", LevelTable)
        self.arms_table = _table(registry, "ArmsMgr", ArmsTable)
        level = self.levels.current()

        self.animations = AnimationPlayer(_table(registry, "AnimateMgr", AnimationTable))
        self.hud = Hud(self.levels, on_start=self._start_monsters)
        self.buffs = BuffLayer(_table(registry, "BuffMgr", BuffTable), self.animations)
        self.radish = Radish(
            game_map.last_path_pixel(),
            RADISH_SIZE,
            self.animations,
            on_game_over=self._game_over,
        )
        self.monsters = MonsterSpawner(
            level,
            _table(registry, "MonsterMgr", MonsterTable),
            game_map,
            animations=self.animations,
            rng=rng,
            on_money=self.hud.add_money,
            on_escape=self._escape,
            on_monster_removed=self.buffs.remove_buff,
            on_wave=self.hud.set_current_wave,
            on_finish=self.hud.finish,
        )
        self.bullets = BulletLayer(
            _table(registry, "BulletMgr", BulletTable),
            self.monsters,
            self.animations,
            self.buffs,
        )
        self.towers: list[Tower] = []
        self.cards = CardLayer(
            level,
            _table(registry, "CardMgr", CardTable),
            self.arms_table,
            game_map,
            get_money=lambda: self.hud.money,
            create_tower=self.add_tower,
        )
        self.upgrade_menu = UpgradeMenu(
            game_map,
            get_money=lambda: self.hud.money,
            add_money=self.hud.add_money,
        )
        self.start_marker = Sprite(
            frame=START_MARKER_FRAME, position=game_map.first_path_pixel()
        )

    def _start_monsters(self) -> None:
        self.monsters.start()

    def _game_over(self) -> None:
        self.monsters.game_over()

    def _escape(self) -> None:
        self.radish.damage()

    def update(self, delta: float) -> None:
        """Advance the level by ``delta`` real seconds; nothing moves while paused."""
        if self.hud.paused:
            return
        step = delta * self.hud.time_scale
        self.hud.update(step)
        self.monsters.update(step)
        for tower in list(self.towers):
            tower.update(step)
        self.bullets.update(step)
        self.buffs.update(step)
        self.animations.update(step)
        self.radish.update(step)
        self.check_collisions()
        self.towers = [t for t in self.towers if not t.removed]

    def check_collisions(self) -> None:
        """Let each flying bullet hit the first monster it touches."""
        w, h = self.monster_size.width, self.monster_size.height
        for bullet in list(self.bullets.bullets):
            if bullet.removed or bullet.tag == STATIONARY_TAG:
                continue
            for monster in list(self.monsters.monsters):
                if monster.removed:
                    continue
                origin = Vec2(monster.position.x - w / 2, monster.position.y - h / 2)
                if _rect_intersects_circle(
                    origin, self.monster_size, bullet.position, COLLISION_RADIUS
                ):
                    bullet.collide(monster)
                    break

    def add_tower(self, arms_id: int, position: Vec2) -> Tower:
        """Build a tower at ``position`` and pay its first-grade price."""
        data = self.arms_table.get(arms_id)
        if not isinstance(data, ArmsData):
            raise KeyError(f"no tower with id {arms_id}")
        tower = Tower(data, position, self.bullets, self.monsters, self.animations)
        self.hud.add_money(-data.upgrade_costs[0])
        self.towers.append(tower)
        return tower

    def tower_at(self, position: Vec2) -> Tower | None:
        """The tower standing on the tile under ``position``, if any."""
        tile = self.game_map.tile_at(position)
        return next(
            (
                t
                for t in self.towers
                if not t.removed and self.game_map.tile_at(t.position) == tile
            ),
            None,
        )