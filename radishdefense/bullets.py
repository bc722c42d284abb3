"""Projectiles fired by towers, and the layer that keeps them moving."""

from __future__ import annotations

import math
from typing import Any

from .animation import ACTION_TAG, AnimationPlayer, Sprite
from .buffs import BuffLayer
from .data import BulletData, BulletTable
from .gamemap import Vec2
from .monster import MonsterSpawner

STATIONARY_TAG = 1
UP = Vec2(0, 1)
_STATIC_FIRST_STEP = 0.1
_MOVE_DELAY = 0.2
_BEAM_DELAY = 0.5


def _frame_name(pattern: str, number: int) -> str:
    try:
        return pattern % number
    except TypeError:
        return pattern


def _heading(offset: Vec2) -> float:
    """Clockwise rotation in degrees from straight up to ``offset``."""
    return math.degrees(offset.angle_to(UP))


class Bullet:
    """A projectile flying in a fixed direction."""

    tag = 0
    scheduled = True

    def __init__(self, data: BulletData, grade: int, layer: BulletLayer) -> None:
        self.data = data
        self.grade = grade
        self.layer = layer
        self.die_id = data.die_id
        self.speed = data.speed
        self.buff_id = data.buff_id
        self.attack = data.attack
        self.position = Vec2()
        self.direction = Vec2()
        self.rotation = 0.0
        self.attack_range = 0.0
        self.owner: Any = None
        self.removed = False
        self.sprite = Sprite(frame=_frame_name(data.img, grade))

    def update(self, delta: float) -> None:
        self.position = self.position + self.direction * (self.speed * delta)
        self.sprite.position = self.position

    def collide(self, target: Any) -> None:
        """React to touching a monster; plain bullets do nothing."""

    def remove(self) -> None:
        if self.removed:
            return
        self.removed = True
        self.sprite.stop_all()
        self.layer._discard(self)


class CommonBullet(Bullet):
    """Hits the first monster it touches and disappears."""

    def collide(self, target: Any) -> None:
        if target.damage(-self.attack):
            target.remove()
        self.layer._effect(self.position, self.die_id)
        self.remove()


class ThroughBullet(Bullet):
    """Passes through monsters, hurting each one once in a row."""

    def __init__(self, data: BulletData, grade: int, layer: BulletLayer) -> None:
        super().__init__(data, grade, layer)
        self.attack_target: Any = None

    def collide(self, target: Any) -> None:
        if self.attack_target is target:
            return
        self.attack_target = target
        self.layer._effect(self.position, self.die_id)
        if target.damage(-self.attack):
            target.remove()


class RadialBullet(Bullet):
    """A beam that stays on the tower and burns the nearest monster each frame."""

    tag = STATIONARY_TAG

    def __init__(self, data: BulletData, grade: int, layer: BulletLayer) -> None:
        super().__init__(data, grade, layer)
        self.beam = Sprite(visible=False)
        self.beam_length = 0.0

    def update(self, delta: float) -> None:
        self.beam.update(delta)
        monster = self.layer.monsters.nearest_in_range(self.attack_range, self.position)
        if monster is None:
            if self.owner is not None and self.owner.last_bullet is self:
                self.owner.last_bullet = None
            self.remove()
            return
        if not self.beam.visible:
            self.beam.visible = True
            if self.layer.animations is not None:
                self.layer.animations.change_action(self.beam, self.die_id, True, _BEAM_DELAY)
        self.beam.position = monster.position
        if monster.damage(-self.attack):
            monster.remove()
            return
        offset = monster.position - self.position
        self.rotation = _heading(offset)
        self.beam_length = offset.length()


class StaticBullet(Bullet):
    """Strikes every monster in range once, applying its buff, then fades out."""

    scheduled = False

    def update(self, delta: float) -> None:
        for monster in self.layer.monsters.in_range(self.attack_range, self.position):
            if monster.damage(-self.attack):
                monster.remove()
                break
            if self.layer.buffs is not None:
                self.layer.buffs.add_buff(monster, self.buff_id)


_KINDS: dict[str, type[Bullet]] = {
    "Common": CommonBullet,
    "Through": ThroughBullet,
    "Radial": RadialBullet,
    "Static": StaticBullet,
}


class BulletLayer:
    """Creates bullets from the bullet table and updates the live ones."""

    def __init__(
        self,
        table: BulletTable,
        monsters: MonsterSpawner,
        animations: AnimationPlayer | None = None,
        buffs: BuffLayer | None = None,
    ) -> None:
        self.table = table
        self.monsters = monsters
        self.animations = animations
        self.buffs = buffs
        self.bullets: list[Bullet] = []

    def add_bullet(
        self, bullet_id: int, position: Vec2, target: Any, attack_range: float, grade: int
    ) -> Bullet:
        data = self.table.get(bullet_id)
        if not isinstance(data, BulletData):
            raise KeyError(f"no bullet with id {bullet_id}")
        kind = _KINDS.get(data.type)
        if kind is None:
            raise ValueError(f"unknown bullet type {data.type!r}")
        bullet = kind(data, grade, self)
        bullet.position = position
        bullet.sprite.position = position
        bullet.attack_range = attack_range
        bullet.direction = (target.position - position).normalized()
        bullet.rotation = _heading(bullet.direction)
        animation_id = data.move_animate_id + grade - 1
        if isinstance(bullet, StaticBullet):
            bullet.update(_STATIC_FIRST_STEP)
            if self.animations is not None:
                bullet.sprite.run(self.animations.get_animation(animation_id), ACTION_TAG)
        elif self.animations is not None:
            self.animations.change_action(bullet.sprite, animation_id, True, _MOVE_DELAY)
        self.bullets.append(bullet)
        return bullet

    def update(self, delta: float) -> None:
        for bullet in list(self.bullets):
            if bullet.removed:
                continue
            bullet.sprite.update(delta)
            if bullet.scheduled:
                bullet.update(delta)
            elif not bullet.sprite.running:
                bullet.remove()

    def _discard(self, bullet: Bullet) -> None:
        if bullet in self.bullets:
            self.bullets.remove(bullet)

    def _effect(self, position: Vec2, animation_id: int) -> None:
        if self.animations is not None:
            self.animations.create_effect(position, animation_id)