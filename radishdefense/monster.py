"""Monsters walking the map path, and the spawner that releases them in waves."""

from __future__ import annotations

import random
from collections.abc import Callable

from .animation import AnimationPlayer, Sprite
from .data import LevelData, MonsterData, MonsterTable
from .gamemap import GameMap, Vec2

DEATH_ANIMATION_ID = 3024
ESCAPE_MONEY = 14
SPAWN_INTERVAL = 1.0
_FIRST_MONSTER_ID = 2001


class Role:
    """Something with hit points."""

    def __init__(self, max_hp: int) -> None:
        self.hp = max_hp
        self.max_hp = max_hp

    def damage(self, amount: int) -> bool:
        """Add ``amount`` to hp (negative hurts); True when hp drops to zero."""
        self.hp += amount
        return self.hp <= 0

    def hp_percent(self) -> float:
        if self.hp <= 0:
            return 0.0
        return self.hp / self.max_hp * 100


class Monster(Role):
    """A monster following the spawner's path."""

    def __init__(self, data: MonsterData, spawner: MonsterSpawner) -> None:
        super().__init__(10000)
        self.spawner = spawner
        self.path = spawner.path
        self.index = 0
        self.speed = data.speed
        self.save_speed = data.speed
        self.money = data.money
        self.changed_direction = False
        self.removed = False
        self.direction = Vec2()
        self.model = Sprite(frame=data.img)
        if spawner.animations is not None:
            spawner.animations.change_action(self.model, data.animate_id, True, 0.2)
        self.position = self.path[0]
        self.calculate_direction()

    def update(self, delta: float) -> None:
        if self.removed:
            return
        self.model.update(delta)
        if self.advance_direction():
            self.spawner._escaped()
            self.spawner._effect(self.position)
            self.remove()
            return
        self.position = self.position + self.direction * (delta * self.speed)

    def _turn(self) -> bool:
        self.changed_direction = True
        self.index += 1
        self.calculate_direction()
        return self.index >= len(self.path) - 1

    def advance_direction(self) -> bool:
        """Turn at path corners; True once the monster has reached the end."""
        game_map = self.spawner.game_map
        tile_size = game_map.tile_size
        ahead = Vec2(
            self.position.x + self.direction.x * (tile_size.width / 2 + 3),
            self.position.y + self.direction.y * (tile_size.height / 2 + 3),
        )
        next_tile = game_map.tile_at(ahead)
        tile = game_map.tile_at(self.position)
        if next_tile == tile:
            self.changed_direction = False
        if game_map.is_out_of_map(next_tile):
            return self._turn()
        if game_map.in_layer("path", next_tile):
            if not self.changed_direction:
                props = game_map.tile_properties("path", tile)
                if props and props.get("point") and next_tile != tile:
                    return self._turn()
            return False
        return self._turn()

    def calculate_direction(self) -> None:
        if self.index + 1 < len(self.path):
            self.direction = (self.path[self.index + 1] - self.path[self.index]).normalized()

    def remove(self) -> None:
        if self.removed:
            return
        self.removed = True
        if self.index >= len(self.path) - 1:
            self.money = ESCAPE_MONEY
        self.spawner._discard(self)


class MonsterSpawner:
    """Releases a level's monsters wave by wave and keeps the live ones."""

    def __init__(
        self,
        level: LevelData,
        monsters: MonsterTable,
        game_map: GameMap,
        *,
        path: list[Vec2] | None = None,
        animations: AnimationPlayer | None = None,
        rng: random.Random | None = None,
        on_money: Callable[[int], None] | None = None,
        on_escape: Callable[[], None] | None = None,
        on_monster_removed: Callable[[Monster], None] | None = None,
        on_wave: Callable[[int], None] | None = None,
        on_finish: Callable[[int, int, bool], None] | None = None,
    ) -> None:
        self.table = monsters
        self.game_map = game_map
        self.path = list(path) if path is not None else game_map.path_points()
        self.animations = animations
        self._rng = rng or random.Random()
        self.on_money = on_money
        self.on_escape = on_escape
        self.on_monster_removed = on_monster_removed
        self.on_wave = on_wave
        self.on_finish = on_finish
        self.waves = list(level.waves)
        self.monster_ids = list(level.monster_ids)
        if not self.monster_ids:
            raise ValueError("level has no monsters")
        self.monsters: list[Monster] = []
        self.current_count = 0
        self.current_wave = 0
        self.current_monster_id = self._pick_id()
        self.spawning = False
        self.finished = False
        self._timer = 0.0

    def _pick_id(self) -> int:
        return self._rng.randrange(len(self.monster_ids)) + _FIRST_MONSTER_ID

    def _schedule(self) -> None:
        self.spawning = True
        self._timer = 0.0

    def _effect(self, position: Vec2) -> None:
        if self.animations is not None:
            self.animations.create_effect(position, DEATH_ANIMATION_ID)

    def _escaped(self) -> None:
        if self.on_escape is not None:
            self.on_escape()

    def _finish(self, won: bool) -> None:
        if self.on_finish is not None:
            self.on_finish(self.current_wave, len(self.waves), won)

    def _discard(self, monster: Monster) -> None:
        if self.on_monster_removed is not None:
            self.on_monster_removed(monster)
        if self.on_money is not None:
            self.on_money(monster.money)
        self._effect(monster.position)
        if monster in self.monsters:
            self.monsters.remove(monster)

    def create_monster(self) -> Monster:
        data = self.table.get(self.current_monster_id)
        if not isinstance(data, MonsterData):
            raise KeyError(f"no monster with id {self.current_monster_id}")
        monster = Monster(data, self)
        self.monsters.append(monster)
        self.current_count += 1
        if self.current_count >= self.waves[self.current_wave]:
            self.spawning = False
            self.current_count = 0
            self.current_wave += 1
            self.current_monster_id = self._pick_id()
        return monster

    def start(self) -> None:
        self.create_monster()
        self.current_count += 1
        self._schedule()

    def update(self, delta: float) -> None:
        if self.spawning:
            self._timer += delta
            while self.spawning and self._timer >= SPAWN_INTERVAL:
                self._timer -= SPAWN_INTERVAL
                self.create_monster()
        for monster in list(self.monsters):
            monster.update(delta)
        if (
            not self.monsters
            and self.current_wave < len(self.waves)
            and not self.spawning
            and self.current_wave != 0
        ):
            if self.on_wave is not None:
                self.on_wave(self.current_wave + 1)
            self._schedule()
        if not self.monsters and self.current_wave >= len(self.waves) and not self.finished:
            self.finished = True
            self._finish(True)

    def game_over(self) -> None:
        self.finished = True
        self._finish(False)

    def nearest_in_range(self, attack_range: float, position: Vec2) -> Monster | None:
        """First live monster strictly closer than ``attack_range``."""
        return next(
            (m for m in self.monsters if (m.position - position).length() < attack_range),
            None,
        )

    def in_range(self, attack_range: float, position: Vec2) -> list[Monster]:
        return [m for m in self.monsters if (m.position - position).length() <= attack_range]