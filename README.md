# radishdefense

A headless game model for a tile-map tower defense game. Monsters walk a
path drawn on a TMX map towards a radish; towers built beside the path
fire bullets at them, area bullets can leave slowing or burning buffs on
the monsters they strike, and each monster removed earns money for
building and upgrading more towers. The radish starts with ten hit points
and loses one for every monster that reaches the end of the path; when it
reaches zero the level is lost. Clearing every wave wins the level and
unlocks the next one.

The package has no dependencies beyond the standard library.

## Modules

- `radishdefense.data`: the JSON record tables (`LevelTable`,
  `MonsterTable`, `CardTable`, `ArmsTable`, `BulletTable`, `BuffTable`,
  `AnimationTable`) and their record dataclasses, `DataRegistry`, and
  `load_game_data`, which reads every table from a data directory.
  `LevelTable` also tracks the selected level (`current`, `select`,
  `advance`) and how many levels are unlocked (`lock_level`,
  `unlock_next`).
- `radishdefense.gamemap`: `Vec2`, `Size` and `GameMap`, with conversion
  between pixel and tile coordinates (`tile_at`, `pixel_at`), path points,
  layer and tile-property queries; `load_tmx` and `parse_tmx` read TMX maps
  (XML, CSV or base64 layer data, optionally zlib or gzip compressed).
- `radishdefense.animation`: `Animation`, `Sprite` and the
  `AnimationPlayer`, which builds frame-name animations from the
  animation table and plays one-shot effects.
- `radishdefense.monster`: `Role`, `Monster` and the wave-driven
  `MonsterSpawner`, which releases one monster a second and reports money,
  escapes, new waves and the end of the level through callbacks.
- `radishdefense.buffs`: `SpeedBuff` and `HurtBuff` and the `BuffLayer`
  that applies buffs 7001 and 7002 by id.
- `radishdefense.radish`: the `Radish` the player defends.
- `radishdefense.bullets`: `CommonBullet`, `ThroughBullet` (piercing),
  `RadialBullet` (beam) and `StaticBullet` (area), created by the
  `BulletLayer` from the bullet table's `Type` field.
- `radishdefense.arms`: the `Tower`, with targeting, firing, reloading,
  upgrading and removal.
- `radishdefense.cards`: the build menu (`CardLayer`), the
  `UpgradeMenu`, `upgrade_cost` and `sell_value` (80% of what was spent).
- `radishdefense.hud`: `Hud`, holding money, the wave counter, pause and
  double-speed toggles, the in-game menu and the start countdown, and the
  `GameResult` produced at the end of a level.
- `radishdefense.scene`: `GameScene`, which ties one level together and
  checks bullet hits.
- `radishdefense.levels`: `LevelSelect`, the paged level chooser that
  builds a `GameScene` for an unlocked level.

## Data files

`load_game_data` expects a directory holding `LevelDt.json`,
`MonsterDt.json`, `CardDt.json`, `ArmsDt.json`, `BulletDt.json`,
`BuffDt.json` and `AnimateDt.json`, each a JSON array of objects with an
integer `id` field. They are registered as `LevelMgr`, `MonsterMgr`,
`CardMgr`, `ArmsMgr`, `BulletMgr`, `BuffMgr` and `AnimateMgr`. A record
with a field of the wrong type raises `ValueError`.

Level ids are expected to run from 1001 upwards and monster ids from 2001
upwards; the spawner picks each wave's monster id at random from that
range.

## Example

```python
from radishdefense.data import load_game_data
from radishdefense.gamemap import Vec2, load_tmx
from radishdefense.levels import LevelSelect

registry = load_game_data("data")

game_map = load_tmx("Map/level1.tmx")
tile = game_map.tile_at(Vec2(100, 200))
print(tile, game_map.pixel_at(tile), game_map.in_layer("path", tile))

picker = LevelSelect(registry, load_tmx)
scene = picker.start()

# Drive the level from your own loop, once per frame.
for _ in range(600):
    scene.update(1 / 60)
print(scene.hud.money, len(scene.monsters.monsters), scene.radish.hp)
```

`GameScene.update` takes real seconds, scales them by the HUD's speed
setting and does nothing while the game is paused. Monsters start coming
once the five-second countdown has run out. When the level ends,
`scene.hud.result` holds the `GameResult`.

Clicks are handled by the pieces themselves: pass a click to
`scene.cards.click_event` to open the build menu on an empty tile or buy a
card, to `scene.upgrade_menu.click_event` together with
`scene.tower_at(position)` to upgrade or sell a tower, and to
`scene.radish.click` to poke the radish.

## What the package does not do

It keeps game rules and state only. It opens no window, draws nothing,
plays no sound and reads no input: sprites hold frame names and
positions, and it is up to a front end to render them and to forward
clicks. There is no command to run, no main menu screen and no saving of
progress; unlocked levels live only in the `LevelTable` in memory.

## Running the tests

Install the `test` extra and run `pytest` from the project root.