"""The in-game overlay: money, wave counter, pause and speed controls, countdown."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass

from .data import LevelTable

NORMAL_SPEED = 1.0
DOUBLE_SPEED = 2.0
COUNTDOWN_STEPS = 3
COUNTDOWN_GO_TIME = 2.0
GO_FRAME = "countdown_13.png"


@dataclass(frozen=True)
class GameResult:
    """How a level ended."""

    won: bool
    current_wave: int
    max_wave: int
    level: int

    @property
    def background(self) -> str:
        return "win_bg.png" if self.won else "lose_bg.png"


class Hud:
    """Money and wave display, pause/speed toggles, menu and start countdown."""

    def __init__(
        self, levels: LevelTable, on_start: Callable[[], None] | None = None
    ) -> None:
        level = levels.current()
        self.levels = levels
        self.on_start = on_start
        self.money = level.start_money
        self.max_wave = len(level.waves)
        self.wave_low = "1"
        self.wave_high = "0"
        self.paused = False
        self.pause_selected = 0
        self.pause_enabled = True
        self.pause_label_visible = False
        self.wave_visible = True
        self.menu_visible = False
        self.speed_selected = 0
        self.time_scale = NORMAL_SPEED
        self.counting = True
        self.countdown_elapsed = 0.0
        self.countdown_frame: str | None = "countdown_01.png"
        self.result: GameResult | None = None

    @property
    def money_text(self) -> str:
        return str(self.money)

    def add_money(self, amount: int) -> None:
        self.money += amount

    def set_current_wave(self, wave: int) -> None:
        self.wave_low = str(wave % 10)
        self.wave_high = str(wave // 10)

    def finish(self, current_wave: int, max_wave: int, won: bool) -> GameResult:
        """Show the end of the level and pause; a win unlocks the next level."""
        if won:
            self.levels.unlock_next()
        self.result = GameResult(
            won=won,
            current_wave=current_wave,
            max_wave=max_wave,
            level=self.levels.current_index + 1,
        )
        self.paused = True
        return self.result

    def toggle_pause(self) -> None:
        """Flip between paused and running; ignored while the menu is open."""
        if not self.pause_enabled:
            return
        self.pause_selected = 1 - self.pause_selected
        running = self.pause_selected == 0
        self.pause_label_visible = not running
        self.wave_visible = running
        self.paused = not running

    def toggle_speed(self) -> None:
        self.speed_selected = 1 - self.speed_selected
        self.time_scale = DOUBLE_SPEED if self.speed_selected else NORMAL_SPEED

    def open_menu(self) -> None:
        self.pause_selected = 1
        self.pause_enabled = False
        self.menu_visible = True
        self.paused = True

    def resume(self) -> None:
        """Close the menu and carry on playing."""
        self.pause_selected = 0
        self.pause_enabled = True
        self.paused = False
        self.menu_visible = False

    def update(self, delta: float) -> None:
        """Advance the start countdown by ``delta`` seconds of game time."""
        if self.paused or not self.counting:
            return
        self.countdown_elapsed += delta
        elapsed = self.countdown_elapsed
        if elapsed >= COUNTDOWN_STEPS + COUNTDOWN_GO_TIME:
            self.counting = False
            self.countdown_frame = None
            if self.on_start is not None:
                self.on_start()
        elif elapsed >= COUNTDOWN_STEPS:
            self.countdown_frame = GO_FRAME
        else:
            number = min(1 + int(elapsed), COUNTDOWN_STEPS)
            self.countdown_frame = "countdown_%02d.png" % number