"""Timed effects on monsters: slowing and damage over time."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from .animation import AnimationPlayer, Sprite
from .data import BuffData, BuffTable

SPEED_BUFF_ID = 7001
HURT_BUFF_ID = 7002


@dataclass
class ActiveBuff:
    time: float
    value: int
    sprite: Sprite


class BuffEffect:
    """Buffs of one kind, one per target."""

    def __init__(self, animations: AnimationPlayer | None = None) -> None:
        self.animations = animations
        self.active: dict[Any, ActiveBuff] = {}

    def add(self, target: Any, buff: BuffData) -> None:
        """Apply the buff, or restart its timer if the target already has it."""
        existing = self.active.get(target)
        if existing is not None:
            existing.time = buff.time
            return
        sprite = Sprite()
        if self.animations is not None:
            self.animations.change_action(sprite, buff.animate_id, True, 0.1)
        self.active[target] = ActiveBuff(buff.time, buff.value, sprite)

    def remove(self, target: Any) -> None:
        entry = self.active.pop(target, None)
        if entry is not None:
            entry.sprite.stop_all()

    def update(self, delta: float) -> None:
        for entry in self.active.values():
            entry.time -= delta
            entry.sprite.update(delta)


class SpeedBuff(BuffEffect):
    """Sets the target's speed while active and restores it afterwards."""

    def update(self, delta: float) -> None:
        for target, entry in list(self.active.items()):
            entry.time -= delta
            entry.sprite.update(delta)
            target.speed = entry.value
            if entry.time <= 0:
                target.speed = target.save_speed
                self.remove(target)


class HurtBuff(BuffEffect):
    """Damages the target by its value on every update while active."""

    def update(self, delta: float) -> None:
        for target, entry in list(self.active.items()):
            entry.time -= delta
            entry.sprite.update(delta)
            if target.damage(-entry.value):
                target.remove()
                self.remove(target)
                break
            if entry.time <= 0:
                self.remove(target)


class BuffLayer:
    """Routes buff ids to their effects."""

    def __init__(self, table: BuffTable, animations: AnimationPlayer | None = None) -> None:
        self.table = table
        self.effects: dict[int, BuffEffect] = {
            SPEED_BUFF_ID: SpeedBuff(animations),
            HURT_BUFF_ID: HurtBuff(animations),
        }

    def add_buff(self, target: Any, buff_id: int) -> None:
        """Apply a buff by id; id 0 means none."""
        if buff_id == 0:
            return
        data = self.table.get(buff_id)
        if not isinstance(data, BuffData):
            raise KeyError(f"no buff with id {buff_id}")
        self.effects[buff_id].add(target, data)

    def remove_buff(self, target: Any) -> None:
        for effect in self.effects.values():
            effect.remove(target)

    def update(self, delta: float) -> None:
        for effect in self.effects.values():
            effect.update(delta)