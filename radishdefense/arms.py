"""Towers that aim at monsters in range and fire bullets."""

from __future__ import annotations

import math
from typing import Any

from .animation import AnimationPlayer, Sprite
from .bullets import STATIONARY_TAG, UP, Bullet, BulletLayer
from .data import ArmsData
from .gamemap import Vec2
from .monster import MonsterSpawner

RANGE_SCALE = 1.8
_BEAM_BULLET_ID = 6100
_ATTACK_DELAY = 0.1


def _frame_name(pattern: str, number: int) -> str:
    try:
        return pattern % number
    except TypeError:
        return pattern


class Tower:
    """A tower on a tile; its grade picks range, interval and look."""

    def __init__(
        self,
        data: ArmsData,
        position: Vec2,
        bullets: BulletLayer,
        monsters: MonsterSpawner,
        animations: AnimationPlayer | None = None,
    ) -> None:
        self.data = data
        self.position = position
        self.bullets = bullets
        self.monsters = monsters
        self.animations = animations
        self.grade = 1
        self.attacking = False
        self.last_bullet: Bullet | None = None
        self.rotation = 0.0
        self.removed = False
        self.base = Sprite(frame=_frame_name(data.base_img, self.grade), position=position)
        self.sprite = Sprite(frame=_frame_name(data.img, self.grade), position=position)
        self._fire_timer: float | None = None
        self._fire_interval = 0.0

    def attack_range(self) -> float:
        return self.data.ranges[self.grade - 1] * RANGE_SCALE

    def fire(self, target: Any) -> Bullet:
        if self.animations is not None:
            self.animations.change_action(
                self.sprite,
                self.data.attack_id + self.grade - 1,
                self.data.bullet_id > _BEAM_BULLET_ID,
                _ATTACK_DELAY,
            )
        bullet = self.bullets.add_bullet(
            self.data.bullet_id, self.position, target, self.attack_range(), self.grade
        )
        bullet.owner = self
        self.last_bullet = bullet
        self.attacking = False
        return bullet

    def _schedule_reload(self, interval: float) -> None:
        self._fire_interval = interval
        if self._fire_timer is None:
            self._fire_timer = 0.0

    def _tick_reload(self, delta: float) -> None:
        if self._fire_timer is None:
            return
        if self._fire_interval <= 0:
            self.attacking = False
            return
        self._fire_timer += delta
        while self._fire_timer >= self._fire_interval:
            self._fire_timer -= self._fire_interval
            self.attacking = False

    def update(self, delta: float) -> None:
        if self.removed:
            return
        self.sprite.update(delta)
        self.base.update(delta)
        reloading = self._fire_timer is not None
        monster = self.monsters.nearest_in_range(self.attack_range(), self.position)
        if monster is None:
            self.sprite.stop_all()
            self.attacking = False
            self._fire_timer = None
            return
        if self.data.rotates:
            offset = monster.position - self.position
            self.rotation = math.degrees(offset.angle_to(UP))
        if not self.attacking:
            self.fire(monster)
            self.attacking = True
            if self.data.bullet_id < _BEAM_BULLET_ID:
                self._schedule_reload(self.data.intervals[self.grade - 1])
        if reloading:
            self._tick_reload(delta)

    def upgrade(self) -> None:
        """Raise the grade by one; a running beam is dropped so it refires."""
        if self.grade >= len(self.data.upgrade_costs):
            raise ValueError("tower is already at its top grade")
        self.sprite.stop_all()
        self.grade += 1
        self.sprite.frame = _frame_name(self.data.img, self.grade)
        self.base.frame = _frame_name(self.data.base_img, self.grade)
        if self.last_bullet is not None and self.last_bullet.tag == STATIONARY_TAG:
            self.last_bullet.remove()
            self.attacking = False

    def remove(self) -> None:
        if self.removed:
            return
        self.removed = True
        self.sprite.stop_all()
        self._fire_timer = None
        if self.last_bullet is not None and self.last_bullet.tag == STATIONARY_TAG:
            self.last_bullet.remove()