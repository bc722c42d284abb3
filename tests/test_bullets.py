import json
import random
from types import SimpleNamespace

import pytest

from radishdefense.animation import AnimationPlayer
from radishdefense.buffs import BuffLayer
from radishdefense.bullets import BulletLayer, RadialBullet, StaticBullet
from radishdefense.data import AnimationTable, BuffTable, BulletTable, LevelData, MonsterTable
from radishdefense.gamemap import GameMap, Size, Vec2
from radishdefense.monster import MonsterSpawner

BULLETS = [
    {"id": 6001, "Img": "common%d.png", "Type": "Common", "die": 3001, "buffID": 0,
     "moveAnimateID": 3010, "speed": 100, "ack": 40},
    {"id": 6002, "Img": "through%d.png", "Type": "Through", "die": 3001, "buffID": 0,
     "moveAnimateID": 3010, "speed": 100, "ack": 40},
    {"id": 6101, "Img": "ray%d.png", "Type": "Radial", "die": 3001, "buffID": 0,
     "moveAnimateID": 3010, "speed": 0, "ack": 40},
    {"id": 6051, "Img": "snow%d.png", "Type": "Static", "die": 3001, "buffID": 7001,
     "moveAnimateID": 3040, "speed": 0, "ack": 40},
    {"id": 6099, "Img": "odd%d.png", "Type": "Laser", "die": 3001, "buffID": 0,
     "moveAnimateID": 3010, "speed": 0, "ack": 1},
]
ANIMATIONS = [
    {"id": 3001, "count": 2, "name": "die%d.png"},
    {"id": 3010, "count": 2, "name": "move%d.png"},
    {"id": 3040, "count": 2, "name": "snow_anim%d.png"},
    {"id": 3030, "count": 1, "name": "slow%d.png"},
]
MONSTERS = [{"id": 2001, "img": "m.png", "speed": 0, "animateID": 0, "Money": 7}]
BUFFS = [{"id": 7001, "value": 5, "time": 2, "animateID": 3030}]


def _table(kind, rows):
    table = kind()
    table.loads(json.dumps(rows))
    return table


def _world(with_animations=False):
    game_map = GameMap(
        map_size=Size(10, 10),
        tile_size=Size(10, 10),
        layers={"path": [[1] * 10 for _ in range(10)]},
    )
    money = []
    spawner = MonsterSpawner(
        LevelData(id=1001, monster_ids=[2001], waves=[10]),
        _table(MonsterTable, MONSTERS),
        game_map,
        path=[Vec2(5, 5), Vec2(95, 5)],
        rng=random.Random(0),
        on_money=money.append,
    )
    animations = AnimationPlayer(_table(AnimationTable, ANIMATIONS)) if with_animations else None
    buffs = BuffLayer(_table(BuffTable, BUFFS))
    layer = BulletLayer(_table(BulletTable, BULLETS), spawner, animations, buffs)
    return SimpleNamespace(layer=layer, spawner=spawner, money=money,
                           animations=animations, buffs=buffs)


def _monster(world, position):
    monster = world.spawner.create_monster()
    monster.position = position
    return monster


def test_common_bullet_flies_to_target():
    world = _world()
    target = _monster(world, Vec2(0, 50))
    bullet = world.layer.add_bullet(6001, Vec2(0, 0), target, 100.0, 1)
    assert bullet.rotation == pytest.approx(0.0)
    world.layer.update(0.5)
    assert bullet.position.x == pytest.approx(target.position.x)
    assert bullet.position.y == pytest.approx(target.position.y)


def test_bullet_rotation_points_at_target():
    world = _world()
    target = _monster(world, Vec2(30, 0))
    bullet = world.layer.add_bullet(6001, Vec2(0, 0), target, 100.0, 1)
    assert bullet.rotation == pytest.approx(90.0)


def test_bullet_frame_uses_grade():
    world = _world()
    target = _monster(world, Vec2(0, 50))
    assert world.layer.add_bullet(6001, Vec2(0, 0), target, 100.0, 1).sprite.frame == "common1.png"
    assert world.layer.add_bullet(6001, Vec2(0, 0), target, 100.0, 2).sprite.frame == "common2.png"


def test_common_collide_damages_and_disappears():
    world = _world()
    target = _monster(world, Vec2(0, 50))
    bullet = world.layer.add_bullet(6001, Vec2(0, 0), target, 100.0, 1)
    bullet.collide(target)
    assert target.hp == target.max_hp - bullet.attack
    assert bullet not in world.layer.bullets
    assert bullet.removed


def test_common_collide_kills_monster():
    world = _world()
    target = _monster(world, Vec2(0, 50))
    bullet = world.layer.add_bullet(6001, Vec2(0, 0), target, 100.0, 1)
    target.hp = bullet.attack
    bullet.collide(target)
    assert target.removed
    assert world.spawner.monsters == []
    assert world.money == [7]


def test_through_bullet_hits_each_target_once_in_a_row():
    world = _world()
    first = _monster(world, Vec2(0, 50))
    second = _monster(world, Vec2(0, 60))
    bullet = world.layer.add_bullet(6002, Vec2(0, 0), first, 100.0, 1)
    bullet.collide(first)
    bullet.collide(first)
    assert first.hp == first.max_hp - bullet.attack
    bullet.collide(second)
    assert second.hp == second.max_hp - bullet.attack
    assert bullet in world.layer.bullets


def test_radial_bullet_burns_nearest_monster():
    world = _world()
    target = _monster(world, Vec2(0, 30))
    bullet = world.layer.add_bullet(6101, Vec2(0, 0), target, 100.0, 1)
    assert isinstance(bullet, RadialBullet)
    assert bullet.tag == 1
    world.layer.update(0.1)
    assert target.hp == target.max_hp - bullet.attack
    assert bullet.beam.visible
    assert bullet.beam.position == target.position
    assert bullet.beam_length == pytest.approx(30.0)


def test_radial_bullet_vanishes_without_target_and_clears_owner():
    world = _world()
    target = _monster(world, Vec2(0, 30))
    bullet = world.layer.add_bullet(6101, Vec2(0, 0), target, 100.0, 1)
    owner = SimpleNamespace(last_bullet=bullet)
    bullet.owner = owner
    target.position = Vec2(0, 500)
    world.layer.update(0.1)
    assert owner.last_bullet is None
    assert bullet not in world.layer.bullets


def test_radial_bullet_stays_after_kill():
    world = _world()
    target = _monster(world, Vec2(0, 30))
    bullet = world.layer.add_bullet(6101, Vec2(0, 0), target, 100.0, 1)
    target.hp = bullet.attack
    world.layer.update(0.1)
    assert target.removed
    assert bullet in world.layer.bullets


def test_static_bullet_strikes_all_in_range_once_and_applies_buff():
    world = _world(with_animations=True)
    near = _monster(world, Vec2(0, 20))
    other = _monster(world, Vec2(20, 0))
    far = _monster(world, Vec2(0, 300))
    bullet = world.layer.add_bullet(6051, Vec2(0, 0), near, 50.0, 1)
    assert isinstance(bullet, StaticBullet)
    assert near.hp == near.max_hp - bullet.attack
    assert other.hp == other.max_hp - bullet.attack
    assert far.hp == far.max_hp
    active = world.buffs.effects[7001].active
    assert near in active and other in active and far not in active
    world.layer.update(0.1)
    assert near.hp == near.max_hp - bullet.attack
    assert bullet in world.layer.bullets
    world.layer.update(0.15)
    assert bullet not in world.layer.bullets


def test_static_bullet_without_animation_is_dropped_on_update():
    world = _world()
    near = _monster(world, Vec2(0, 20))
    bullet = world.layer.add_bullet(6051, Vec2(0, 0), near, 50.0, 1)
    world.layer.update(0.01)
    assert bullet not in world.layer.bullets


def test_moving_bullet_plays_move_animation_and_hit_effect():
    world = _world(with_animations=True)
    target = _monster(world, Vec2(0, 50))
    bullet = world.layer.add_bullet(6001, Vec2(0, 0), target, 100.0, 1)
    assert bullet.sprite.frame == "move1.png"
    bullet.collide(target)
    assert [effect.position for effect in world.animations.effects] == [bullet.position]


def test_unknown_bullet_id_raises():
    world = _world()
    target = _monster(world, Vec2(0, 50))
    with pytest.raises(KeyError):
        world.layer.add_bullet(9999, Vec2(0, 0), target, 100.0, 1)


def test_unknown_bullet_type_raises():
    world = _world()
    target = _monster(world, Vec2(0, 50))
    with pytest.raises(ValueError):
        world.layer.add_bullet(6099, Vec2(0, 0), target, 100.0, 1)