"""Game data tables loaded from JSON arrays, and the registry that holds them."""

from __future__ import annotations

import json
from collections.abc import Iterable, Iterator
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any


def _int(raw: dict[str, Any], key: str) -> int:
    value = raw[key]
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValueError(f"field {key!r} must be an integer, got {value!r}")
    return value


def _float(raw: dict[str, Any], key: str) -> float:
    value = raw[key]
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ValueError(f"field {key!r} must be a number, got {value!r}")
    return float(value)


def _str(raw: dict[str, Any], key: str) -> str:
    value = raw[key]
    if not isinstance(value, str):
        raise ValueError(f"field {key!r} must be a string, got {value!r}")
    return value


def _list(raw: dict[str, Any], key: str) -> list[Any]:
    value = raw[key]
    if not isinstance(value, list):
        raise ValueError(f"field {key!r} must be an array, got {value!r}")
    return value


def _int_list(raw: dict[str, Any], key: str) -> list[int]:
    items = _list(raw, key)
    return [_int({key: item}, key) for item in items]


def _float_list(raw: dict[str, Any], key: str) -> list[float]:
    items = _list(raw, key)
    return [_float({key: item}, key) for item in items]


@dataclass
class Record:
    """A row of a data table, identified by its id."""

    id: int = 0


class RecordTable:
    """An ordered collection of records read from a JSON array."""

    def __init__(self, records: Iterable[Record] = ()) -> None:
        self._records: list[Record] = list(records)

    @property
    def records(self) -> tuple[Record, ...]:
        return tuple(self._records)

    def __len__(self) -> int:
        return len(self._records)

    def __iter__(self) -> Iterator[Record]:
        return iter(self._records)

    def load(self, path: str | Path) -> None:
        """Append the records of the JSON file at ``path``."""
        self.loads(Path(path).read_text(encoding="utf-8"))

    def loads(self, text: str) -> None:
        """Append the records of a JSON array given as text."""
        document = json.loads(text)
        if not isinstance(document, list):
            raise ValueError("data file must hold a JSON array")
        for raw in document:
            if not isinstance(raw, dict):
                raise ValueError(f"record must be a JSON object, got {raw!r}")
            self._records.append(self.parse_record(raw))

    def get(self, record_id: int) -> Record | None:
        """Return the first record with the given id, or None."""
        return next((r for r in self._records if r.id == record_id), None)

    def parse_record(self, raw: dict[str, Any]) -> Record:
        return Record(id=_int(raw, "id"))


@dataclass
class LevelData(Record):
    view_img: str = ""
    map_img: str = ""
    card_view: str = ""
    start_money: int = 0
    monster_ids: list[int] = field(default_factory=list)
    card_ids: list[int] = field(default_factory=list)
    waves: list[int] = field(default_factory=list)


class LevelTable(RecordTable):
    """Levels, with the selected level and how many levels are unlocked."""

    def __init__(self, records: Iterable[Record] = ()) -> None:
        super().__init__(records)
        self.current_index = 0
        self.lock_level = 1

    def parse_record(self, raw: dict[str, Any]) -> LevelData:
        return LevelData(
            id=_int(raw, "id"),
            view_img=_str(raw, "viewimg"),
            map_img=_str(raw, "mapimg"),
            card_view=_str(raw, "CardView"),
            start_money=_int(raw, "startMoney"),
            monster_ids=_int_list(raw, "MonsterID"),
            card_ids=_int_list(raw, "CardID"),
            waves=_int_list(raw, "wave"),
        )

    def current(self) -> LevelData:
        """Return the selected level."""
        if not 0 <= self.current_index < len(self._records):
            raise IndexError(f"level index {self.current_index} out of range")
        return self._records[self.current_index]  # type: ignore[return-value]

    def select(self, index: int) -> None:
        if not 0 <= index < len(self._records):
            raise IndexError(f"level index {index} out of range")
        self.current_index = index

    def advance(self) -> None:
        """Move to the next level unless the selected one is the last."""
        if self.current_index < len(self._records) - 1:
            self.current_index += 1

    def unlock_next(self) -> None:
        """Unlock the level after the selected one."""
        if self.lock_level < len(self._records):
            self.lock_level = self.current_index + 2


@dataclass
class AnimationData(Record):
    count: int = 0
    name: str = ""


class AnimationTable(RecordTable):
    def parse_record(self, raw: dict[str, Any]) -> AnimationData:
        return AnimationData(
            id=_int(raw, "id"), count=_int(raw, "count"), name=_str(raw, "name")
        )


@dataclass
class MonsterData(Record):
    img: str = ""
    speed: float = 0.0
    animate_id: int = 0
    money: int = 0


class MonsterTable(RecordTable):
    def parse_record(self, raw: dict[str, Any]) -> MonsterData:
        return MonsterData(
            id=_int(raw, "id"),
            img=_str(raw, "img"),
            speed=_float(raw, "speed"),
            animate_id=_int(raw, "animateID"),
            money=_int(raw, "Money"),
        )


@dataclass
class CardData(Record):
    img: str = ""
    arms_id: int = 0


class CardTable(RecordTable):
    def parse_record(self, raw: dict[str, Any]) -> CardData:
        return CardData(
            id=_int(raw, "id"), img=_str(raw, "img"), arms_id=_int(raw, "ArmsID")
        )


@dataclass
class ArmsData(Record):
    img: str = ""
    base_img: str = ""
    attack_id: int = 0
    bullet_id: int = 0
    rotates: bool = False
    upgrade_costs: list[int] = field(default_factory=list)
    ranges: list[int] = field(default_factory=list)
    intervals: list[float] = field(default_factory=list)


class ArmsTable(RecordTable):
    def parse_record(self, raw: dict[str, Any]) -> ArmsData:
        return ArmsData(
            id=_int(raw, "id"),
            img=_str(raw, "Img"),
            attack_id=_int(raw, "AttackID"),
            base_img=_str(raw, "BaseImg"),
            bullet_id=_int(raw, "BulletID"),
            rotates=bool(_int(raw, "Rota")),
            upgrade_costs=_int_list(raw, "upgrade"),
            ranges=_int_list(raw, "range"),
            intervals=_float_list(raw, "Interval"),
        )


@dataclass
class BulletData(Record):
    img: str = ""
    type: str = ""
    die_id: int = 0
    buff_id: int = 0
    move_animate_id: int = 0
    speed: float = 0.0
    attack: int = 0


class BulletTable(RecordTable):
    def parse_record(self, raw: dict[str, Any]) -> BulletData:
        return BulletData(
            id=_int(raw, "id"),
            img=_str(raw, "Img"),
            type=_str(raw, "Type"),
            die_id=_int(raw, "die"),
            buff_id=_int(raw, "buffID"),
            move_animate_id=_int(raw, "moveAnimateID"),
            speed=_float(raw, "speed"),
            attack=_int(raw, "ack"),
        )


@dataclass
class BuffData(Record):
    value: int = 0
    time: float = 0.0
    animate_id: int = 0


class BuffTable(RecordTable):
    def parse_record(self, raw: dict[str, Any]) -> BuffData:
        return BuffData(
            id=_int(raw, "id"),
            value=_int(raw, "value"),
            time=_float(raw, "time"),
            animate_id=int(_float(raw, "animateID")),
        )


class DataRegistry:
    """Named data tables. The first table added under a name is kept."""

    def __init__(self) -> None:
        self._tables: dict[str, RecordTable] = {}

    def __contains__(self, name: object) -> bool:
        return name in self._tables

    def add(self, name: str, table: RecordTable | None) -> None:
        if not name or table is None:
            return
        self._tables.setdefault(name, table)

    def get(self, name: str) -> RecordTable | None:
        if not name:
            return None
        return self._tables.get(name)


GAME_TABLES: tuple[tuple[str, str, type[RecordTable]], ...] = (
    ("LevelMgr", "LevelDt.json", LevelTable),
    ("MonsterMgr", "MonsterDt.json", MonsterTable),
    ("CardMgr", "CardDt.json", CardTable),
    ("ArmsMgr", "ArmsDt.json", ArmsTable),
    ("BulletMgr", "BulletDt.json", BulletTable),
    ("BuffMgr", "BuffDt.json", BuffTable),
    ("AnimateMgr", "AnimateDt.json", AnimationTable),
)


def load_game_data(data_dir: str | Path) -> DataRegistry:
    """Load every game table from the JSON files in ``data_dir``."""
    directory = Path(data_dir)
    registry = DataRegistry()
    for name, filename, table_type in GAME_TABLES:
        table = table_type()
        table.load(directory / filename)
        registry.add(name, table)
    return registry