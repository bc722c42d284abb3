import random

import pytest

from radishdefense.data import LevelData, MonsterData, MonsterTable
from radishdefense.gamemap import GameMap, Size, Vec2
from radishdefense.monster import MonsterSpawner, Role


def make_spawner(waves=(2,), speed=1.0, **kw):
    game_map = GameMap(
        map_size=Size(5, 1), tile_size=Size(10, 10), layers={"path": [[1, 1, 1, 1, 1]]}
    )
    table = MonsterTable([MonsterData(id=2001, img="m.png", speed=speed, money=7)])
    level = LevelData(id=1001, waves=list(waves), monster_ids=[2001])
    return MonsterSpawner(
        level, table, game_map, path=[Vec2(5, 5), Vec2(45, 5)], rng=random.Random(0), **kw
    )


def test_role_damage():
    role = Role(10)
    assert role.damage(-4) is False
    assert role.hp_percent() == pytest.approx(60.0)
    assert role.damage(-6) is True
    assert role.hp_percent() == 0.0


def test_monster_starts_on_path():
    spawner = make_spawner()
    monster = spawner.create_monster()
    assert monster.position == Vec2(5, 5)
    assert monster.direction == Vec2(1, 0)
    assert monster.max_hp == 10000


def test_monster_moves():
    spawner = make_spawner(speed=10.0)
    monster = spawner.create_monster()
    monster.update(1.0)
    assert monster.position.x == pytest.approx(15.0)


def test_escape_reaches_radish():
    escapes, money = [], []
    spawner = make_spawner(
        speed=100.0, on_escape=lambda: escapes.append(1), on_money=money.append
    )
    monster = spawner.create_monster()
    for _ in range(20):
        monster.update(0.1)
    assert monster.removed
    assert escapes == [1]
    assert money == [14]
    assert spawner.monsters == []


def test_waves_and_win():
    results = []
    spawner = make_spawner(speed=1.0, on_finish=lambda *a: results.append(a))
    spawner.start()
    spawner.update(1.0)
    assert len(spawner.monsters) == 2
    assert spawner.current_wave == 1
    assert not spawner.spawning
    for m in list(spawner.monsters):
        m.remove()
    spawner.update(0.1)
    assert results == [(1, 1, True)]


def test_range_queries():
    spawner = make_spawner()
    monster = spawner.create_monster()
    assert spawner.nearest_in_range(5, Vec2(10, 5)) is None
    assert spawner.in_range(5, Vec2(10, 5)) == [monster]
    assert spawner.nearest_in_range(6, Vec2(10, 5)) is monster


def test_game_over_reports_loss():
    results = []
    spawner = make_spawner(on_finish=lambda *a: results.append(a))
    spawner.game_over()
    assert results == [(0, 1, False)]