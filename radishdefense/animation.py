"""Frame animations built from the animation table, and sprites that play them."""

from __future__ import annotations

from dataclasses import dataclass, field

from .data import AnimationData, AnimationTable
from .gamemap import Vec2

ACTION_TAG = 1
_MIN_ANIMATION_ID = 3000


@dataclass
class Animation:
    """A sequence of frame names shown ``delay`` seconds apart."""

    frames: list[str]
    delay: float = 0.1
    forever: bool = False
    restore_original: bool = False

    @property
    def duration(self) -> float:
        return self.delay * len(self.frames)

    def frame_at(self, elapsed: float) -> str | None:
        """Frame shown after ``elapsed`` seconds, or None once a single run is over."""
        if not self.frames or self.delay <= 0:
            return None
        index = int(elapsed / self.delay)
        if self.forever:
            return self.frames[index % len(self.frames)]
        if index >= len(self.frames):
            return None
        return self.frames[index]


@dataclass
class _Running:
    animation: Animation
    tag: int | None
    original_frame: str | None
    elapsed: float = 0.0


@dataclass(eq=False)
class Sprite:
    """A drawable with a current frame and running animations."""

    frame: str | None = None
    position: Vec2 = field(default_factory=Vec2)
    visible: bool = True
    _actions: list[_Running] = field(default_factory=list, repr=False)

    @property
    def running(self) -> bool:
        return bool(self._actions)

    def run(self, animation: Animation, tag: int | None = None) -> None:
        self._actions.append(_Running(animation, tag, self.frame))
        first = animation.frame_at(0.0)
        if first is not None:
            self.frame = first

    def stop_all(self) -> None:
        self._actions.clear()

    def stop_by_tag(self, tag: int) -> None:
        self._actions = [a for a in self._actions if a.tag != tag]

    def update(self, delta: float) -> None:
        still_running = []
        for action in self._actions:
            action.elapsed += delta
            frame = action.animation.frame_at(action.elapsed)
            if frame is None:
                if action.animation.restore_original:
                    self.frame = action.original_frame
            else:
                self.frame = frame
                still_running.append(action)
        self._actions = still_running


class AnimationPlayer:
    """Builds animations from table records and plays one-shot effects."""

    def __init__(self, table: AnimationTable) -> None:
        self._table = table
        self.effects: list[Sprite] = []

    def _frames(self, animation_id: int) -> list[str]:
        record = self._table.get(animation_id)
        if not isinstance(record, AnimationData):
            raise KeyError(f"no animation with id {animation_id}")
        return [record.name % j for j in range(1, record.count + 1)]

    def change_action(
        self, sprite: Sprite, animation_id: int, forever: bool, delay: float
    ) -> None:
        """Replace the sprite's tagged animation; ids below 3000 are ignored."""
        if animation_id < _MIN_ANIMATION_ID:
            return
        sprite.stop_by_tag(ACTION_TAG)
        animation = Animation(self._frames(animation_id), delay=delay, forever=forever)
        sprite.run(animation, None if forever else ACTION_TAG)

    def get_animation(self, animation_id: int) -> Animation:
        return Animation(self._frames(animation_id), delay=0.1, restore_original=True)

    def create_effect(self, position: Vec2, animation_id: int) -> Sprite:
        """Play an animation once at ``position``; it is dropped when done."""
        sprite = Sprite(position=position)
        sprite.run(Animation(self._frames(animation_id), delay=0.1), ACTION_TAG)
        self.effects.append(sprite)
        return sprite

    def update(self, delta: float) -> None:
        for sprite in self.effects:
            sprite.update(delta)
        self.effects = [s for s in self.effects if s.running]