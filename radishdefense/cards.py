"""Tower cards for building on empty tiles, and the upgrade/sell menu."""

from __future__ import annotations

from collections.abc import Callable
from typing import Any

from .arms import Tower
from .data import ArmsData, ArmsTable, CardData, CardTable, LevelData
from .gamemap import GameMap, Size, Vec2

SCREEN_SIZE = Size(960, 640)
CARD_SIZE = Size(80, 80)
BUTTON_SIZE = Size(80, 80)
SELL_RATE = 0.8
TOP_GRADE_FRAME = "upgrade_0_CN.png"
_PATH_LAYER = "path"


def _frame_name(pattern: str, number: int) -> str:
    try:
        return pattern % number
    except TypeError:
        return pattern


def upgrade_cost(tower: Tower) -> int | None:
    """Money needed for the tower's next grade, or None at the top grade."""
    costs = tower.data.upgrade_costs
    if tower.grade >= len(costs):
        return None
    return costs[tower.grade]


def sell_value(tower: Tower) -> int:
    """Money returned for selling: a share of everything spent on the tower."""
    spent = sum(tower.data.upgrade_costs[: tower.grade])
    return int(spent * SELL_RATE)


def _contains(origin: Vec2, size: Size, point: Vec2) -> bool:
    return (
        origin.x <= point.x <= origin.x + size.width
        and origin.y <= point.y <= origin.y + size.height
    )


class Card:
    """A card that builds one kind of tower for its first-grade price."""

    def __init__(
        self,
        data: CardData,
        arms: ArmsTable,
        position: Vec2 = Vec2(),
        size: Size = CARD_SIZE,
    ) -> None:
        arms_data = arms.get(data.arms_id)
        if not isinstance(arms_data, ArmsData):
            raise KeyError(f"no tower with id {data.arms_id}")
        if not arms_data.upgrade_costs:
            raise ValueError(f"tower {data.arms_id} has no price")
        self.data = data
        self.img = data.img
        self.arms_id = data.arms_id
        self.money = arms_data.upgrade_costs[0]
        self.position = position
        self.size = size
        self.frame = _frame_name(self.img, 1)

    def frame_name(self, money: int) -> str:
        """Bright frame when ``money`` buys the card, grey frame otherwise."""
        return _frame_name(self.img, 1 if money >= self.money else 0)

    def contains(self, point: Vec2) -> bool:
        """Whether ``point``, in the card row's space, lies on the card."""
        return _contains(self.position, self.size, point)


class CardLayer:
    """The row of cards shown over an empty tile to build a tower there."""

    def __init__(
        self,
        level: LevelData,
        cards: CardTable,
        arms: ArmsTable,
        game_map: GameMap,
        *,
        get_money: Callable[[], int],
        create_tower: Callable[[int, Vec2], Any],
        card_size: Size = CARD_SIZE,
        screen_size: Size = SCREEN_SIZE,
    ) -> None:
        self.game_map = game_map
        self.get_money = get_money
        self.create_tower = create_tower
        self.screen_size = screen_size
        self.cards: list[Card] = []
        for i, card_id in enumerate(level.card_ids):
            data = cards.get(card_id)
            if not isinstance(data, CardData):
                raise KeyError(f"no card with id {card_id}")
            self.cards.append(
                Card(data, arms, Vec2(i * card_size.width, 0), card_size)
            )
        if not self.cards:
            raise ValueError("level has no cards")
        self.card_size = card_size
        self.row_size = Size(card_size.width * len(self.cards), card_size.height)
        self.anchor = Vec2(0, 0)
        self.position = Vec2()
        self.visible = False

    def _row_origin(self) -> Vec2:
        return Vec2(
            self.position.x - self.anchor.x * self.row_size.width,
            self.position.y - self.anchor.y * self.row_size.height,
        )

    def refresh(self, money: int) -> None:
        for card in self.cards:
            card.frame = card.frame_name(money)

    def click_event(self, click_pos: Vec2) -> Any:
        """Open the cards on an empty tile, or buy the clicked card.

        Returns whatever ``create_tower`` returned when a tower was bought.
        """
        tile = self.game_map.tile_at(click_pos)
        if not self.visible and not self.game_map.in_layer(_PATH_LAYER, tile):
            self.refresh(self.get_money())
            self.position = self.game_map.pixel_at(tile)
            self.visible = True
            if click_pos.y > self.screen_size.height - self.card_size.height:
                self.anchor = Vec2(0, 1)
            if click_pos.x > self.screen_size.width - self.row_size.width:
                self.anchor = self.anchor + Vec2(1, 0)
            return None
        if not self.visible:
            return None
        result = None
        card = self.click_card(click_pos)
        if card is not None and self.get_money() >= card.money:
            result = self.create_tower(card.arms_id, self.position)
        self.visible = False
        self.anchor = Vec2(0, 0)
        return result

    def click_card(self, click_pos: Vec2) -> Card | None:
        origin = self._row_origin()
        local = click_pos - origin
        return next((card for card in self.cards if card.contains(local)), None)


class UpgradeMenu:
    """Upgrade and sell buttons shown over a tower."""

    def __init__(
        self,
        game_map: GameMap,
        *,
        get_money: Callable[[], int],
        add_money: Callable[[int], None],
        button_size: Size = BUTTON_SIZE,
    ) -> None:
        self.game_map = game_map
        self.get_money = get_money
        self.add_money = add_money
        self.button_size = button_size
        self.position = Vec2()
        self.visible = False
        self.selected: Tower | None = None
        self.upgrade_frame: str | None = None
        self.sell_frame: str | None = None
        self.range_frame: str | None = None

    def _on_upgrade(self, local: Vec2) -> bool:
        w, h = self.button_size.width, self.button_size.height
        return _contains(Vec2(-w / 2, h / 2), self.button_size, local)

    def _on_sell(self, local: Vec2) -> bool:
        w, h = self.button_size.width, self.button_size.height
        return _contains(Vec2(-w / 2, -1.5 * h), self.button_size, local)

    def click_event(self, click_pos: Vec2, tower: Tower | None) -> None:
        """Act on a click: press a button when open, else open over ``tower``."""
        if self.visible:
            local = click_pos - self.position
            selected = self.selected
            if selected is not None and self._on_upgrade(local):
                cost = upgrade_cost(selected)
                if cost is not None and self.get_money() >= cost:
                    self.add_money(-cost)
                    selected.upgrade()
            if selected is not None and self._on_sell(local):
                self.add_money(sell_value(selected))
                selected.remove()
            self.visible = False
            return
        if tower is None:
            return
        self.position = self.game_map.pixel_at(self.game_map.tile_at(click_pos))
        self.show(tower)
        self.selected = tower
        self.visible = True

    def show(self, tower: Tower) -> None:
        """Pick the button and range frames for ``tower``."""
        cost = upgrade_cost(tower)
        if cost is None:
            self.upgrade_frame = TOP_GRADE_FRAME
        else:
            shown = cost if self.get_money() >= cost else -cost
            self.upgrade_frame = "upgrade_%d.png" % shown
        self.sell_frame = "sell_%d.png" % sell_value(tower)
        self.range_frame = "range_%d.png" % tower.data.ranges[tower.grade - 1]