"""The radish the player defends."""

from __future__ import annotations

from collections.abc import Callable

from .animation import AnimationPlayer, Sprite
from .gamemap import Size, Vec2

MAX_HP = 10
IDLE_ANIMATION_ID = 3023
CLICK_ANIMATION_ID = 3022
IDLE_INTERVAL = 3.0


class Radish:
    """Loses one hit point per escaped monster; the game ends at zero."""

    def __init__(
        self,
        position: Vec2 = Vec2(),
        size: Size = Size(),
        animations: AnimationPlayer | None = None,
        on_game_over: Callable[[], None] | None = None,
    ) -> None:
        self.position = position
        self.size = size
        self.animations = animations
        self.on_game_over = on_game_over
        self.hp = MAX_HP
        self.hp_bar = Sprite(frame="BossHP%02d.png" % self.hp)
        self.model = Sprite(frame="hlb%d.png" % self.hp, position=position)
        self.idling = True
        self._idle_timer = 0.0

    def _play(self, animation_id: int) -> None:
        self.model.stop_all()
        self.model.frame = "hlb10.png"
        if self.animations is not None:
            self.model.run(self.animations.get_animation(animation_id), 1)

    def damage(self) -> bool:
        """Lose a hit point; True when the radish is eaten."""
        self.hp -= 1
        if self.hp <= 0:
            if self.on_game_over is not None:
                self.on_game_over()
            return True
        self.model.stop_all()
        self.hp_bar.frame = "BossHP%02d.png" % self.hp
        shown = self.hp + 1 if self.hp in (7, 5) else self.hp
        self.model.frame = "hlb%d.png" % shown
        return False

    def click(self, position: Vec2) -> bool:
        """Play the poke animation if unhurt and the click hits; True if played."""
        if self.hp < MAX_HP:
            return False
        dx = abs(position.x - self.position.x)
        dy = abs(position.y - self.position.y)
        if dx > self.size.width / 2 or dy > self.size.height / 2:
            return False
        self._play(CLICK_ANIMATION_ID)
        return True

    def update(self, delta: float) -> None:
        self.model.update(delta)
        if not self.idling:
            return
        self._idle_timer += delta
        while self.idling and self._idle_timer >= IDLE_INTERVAL:
            self._idle_timer -= IDLE_INTERVAL
            if self.hp < MAX_HP:
                self.idling = False
                return
            self._play(IDLE_ANIMATION_ID)