import json

import pytest

from radishdefense.data import (
    AnimationTable,
    ArmsTable,
    BuffTable,
    BulletTable,
    CardTable,
    DataRegistry,
    LevelTable,
    MonsterTable,
)
from radishdefense.gamemap import GameMap, Size
from radishdefense.levels import LevelSelect
from radishdefense.scene import GameScene


def _load(table, rows):
    table.loads(json.dumps(rows))
    return table


def _registry(level_count=3):
    registry = DataRegistry()
    registry.add("LevelMgr", _load(LevelTable(), [
        {
            "id": 1001 + i, "viewimg": f"view{i}.png", "mapimg": f"map{i}.tmx",
            "CardView": f"cards{i}.png", "startMoney": 450, "MonsterID": [1],
            "CardID": [5001], "wave": [2, 3],
        }
        for i in range(level_count)
    ]))
    registry.add("MonsterMgr", _load(MonsterTable(), [{
        "id": 2001, "img": "monster.png", "speed": 20, "animateID": 3001, "Money": 14,
    }]))
    registry.add("CardMgr", _load(CardTable(), [
        {"id": 5001, "img": "card%d.png", "ArmsID": 4001},
    ]))
    registry.add("ArmsMgr", _load(ArmsTable(), [{
        "id": 4001, "Img": "tower%d.png", "AttackID": 3100, "BaseImg": "base%d.png",
        "BulletID": 6001, "Rota": 1, "upgrade": [100, 180, 260],
        "range": [50, 60, 70], "Interval": [0.5, 0.4, 0.3],
    }]))
    registry.add("BulletMgr", _load(BulletTable(), [{
        "id": 6001, "Img": "bullet%d.png", "Type": "Common", "die": 3300,
        "buffID": 0, "moveAnimateID": 3200, "speed": 300, "ack": 50,
    }]))
    registry.add("BuffMgr", _load(BuffTable(), [
        {"id": 7001, "value": 5, "time": 2.0, "animateID": 3400},
        {"id": 7002, "value": 5, "time": 2.0, "animateID": 3400},
    ]))
    registry.add("AnimateMgr", _load(AnimationTable(), [
        {"id": i, "count": 2, "name": f"anim{i}_%d.png"}
        for i in (3001, 3022, 3023, 3024, 3100, 3200, 3300, 3400)
    ]))
    return registry


def _map():
    return GameMap(
        map_size=Size(5, 3),
        tile_size=Size(10, 10),
        layers={"path": [[0] * 5, [1] * 5, [0] * 5]},
        object_groups={"pathObject": [{"x": 5.0, "y": 15.0}, {"x": 45.0, "y": 15.0}]},
    )


def _select(registry=None, calls=None):
    registry = registry or _registry()
    calls = calls if calls is not None else []

    def loader(name):
        calls.append(name)
        return _map()

    return LevelSelect(registry, loader)


def test_pages_follow_level_table():
    select = _select()
    assert select.pages[0] == ("view0.png", "cards0.png")
    assert len(select.pages) == 3


def test_initial_buttons():
    select = _select()
    assert select.page == 0
    assert select.left_visible is False
    assert select.right_visible is True
    assert select.can_start() is True


def test_next_onto_locked_level_disables_start():
    select = _select()
    select.next()
    assert select.page == 1
    assert select.left_visible is True
    assert select.can_start() is False


def test_next_stops_at_last_page():
    select = _select()
    select.next()
    select.next()
    assert select.page == 2
    assert select.right_visible is False
    select.next()
    assert select.page == 2


def test_previous_back_to_first_page_enables_start():
    select = _select()
    select.next()
    select.next()
    select.previous()
    assert select.page == 1
    assert select.right_visible is True
    select.previous()
    assert select.page == 0
    assert select.left_visible is False
    assert select.can_start() is True
    select.previous()
    assert select.page == 0


def test_unlocked_level_stays_startable():
    registry = _registry()
    registry.get("LevelMgr").lock_level = 2
    select = _select(registry)
    select.next()
    assert select.can_start() is True


def test_start_locked_level_raises():
    select = _select()
    select.next()
    with pytest.raises(RuntimeError):
        select.start()


def test_start_builds_scene_for_selected_level():
    registry = _registry()
    registry.get("LevelMgr").lock_level = 2
    calls = []
    select = _select(registry, calls)
    select.next()
    scene = select.start()
    assert isinstance(scene, GameScene)
    assert scene.levels.current_index == 1
    assert calls == ["map1.tmx"]


def test_missing_level_id_raises():
    registry = DataRegistry()
    table = LevelTable()
    table.loads(json.dumps([{
        "id": 42, "viewimg": "v.png", "mapimg": "m.tmx", "CardView": "c.png",
        "startMoney": 0, "MonsterID": [1], "CardID": [], "wave": [],
    }]))
    registry.add("LevelMgr", table)
    with pytest.raises(KeyError):
        LevelSelect(registry, lambda name: _map())