# spacetrader

Game models and diagnostic tools for a space trading simulation. It covers items
and cargo inventories, crafting blueprints, factions and storylines, and player
accounts. It also has a small toolkit for logging, error tracking and network
diagnostics.

## Installation

```
pip install .
```

To run the test suite:

```
pip install ".[test]"
pytest
```

## Modules

- `spacetrader.item` holds `ResourceType`, `ItemCategory`, `ItemType`, `Item` and
  `Inventory`. `ItemType.of_resource(...)` builds the type for a raw resource.
  An inventory refuses any addition that would take it over its weight capacity.
  `remove_item` returns `None` when too few of the item are held.
- `spacetrader.blueprint` holds `Blueprint`, `BlueprintLibrary`,
  `BlueprintCategory`, `BlueprintType` and `BlueprintIngredient`.
  - `Blueprint.create(...)` makes an unresearched blueprint that needs 100
    research points per unit of complexity.
  - Research advances with elapsed time and a skill's efficiency bonus.
  - `improve_quality` raises the quality level up to 5.
  - `create_copy` makes a limited-use copy.
  - `get_crafting_time` returns a `timedelta`.
  - A skill is any object with `get_efficiency_bonus()` and
    `get_time_reduction()`.
- `spacetrader.faction` holds `FactionType`, `Storyline` and
  `get_storylines_for_faction`. The last returns three fresh storylines for each
  faction.
- `spacetrader.account` holds `AccountManager` and `UserAccount`.
  - Passwords are hashed with bcrypt.
  - Accounts are saved as JSON to the manager's file after every change.
  - Failures raise subclasses of `AccountError`: `UsernameExistsError`,
    `InvalidCredentialsError`, `AccountNotFoundError` and `HashingFailedError`.
- `spacetrader.debuglog` is a levelled logger (`LogLevel`). It supports levels
  per module, optional output to a file, and coloured console output. Other
  parts:
  - `timed()`, a context manager that records timing statistics.
  - `get_log_level_from_env()`, which reads `DEBUG_LEVEL`.
  - An exception hook installed by `init()`.
- `spacetrader.errors` is an in-memory error log that keeps up to 1000 records.
  It has filters, `generate_error_report()` and `analyze_error_patterns()`.
- `spacetrader.netdiag` has `NetworkDiagnostics` and `system_info()`.
  `NetworkDiagnostics` lists interfaces, checks ports, runs TCP pings, measures
  bandwidth, resolves DNS names and writes environment reports.
  `check_port` accepts IP literals only.
- `spacetrader.connection` has `ConnectionHealth`, `NetworkSimulator`,
  `format_duration`, and the `test_connection` and `test_bandwidth` report
  functions.

## Examples

```python
from spacetrader.item import Inventory, Item, ItemType, ResourceType

hold = Inventory(capacity=100)
ore = Item("Iron", value=50, weight=2, item_type=ItemType.of_resource(ResourceType.MINERAL))
hold.add_item(ore, 10)
print(hold.get_item_quantity("Iron"), hold.remaining_capacity())  # 10 80
```

```python
from spacetrader.account import AccountManager, InvalidCredentialsError

password = "password"
accounts = AccountManager.load("accounts.json")
accounts.register_account("pilot", password, "pilot@example.com")
try:
    accounts.authenticate("pilot", "secret")
except InvalidCredentialsError:
    print("login refused")
```

```python
from spacetrader import debuglog

debuglog.init("logs/game.log", True, debuglog.get_log_level_from_env())
debuglog.info("Starting up")
with debuglog.timed("load_universe") as operation:
    ...
print(debuglog.get_timing_stats(operation))  # (min, average, max) in seconds
```

`timed` records each run under its own name. That name is the operation name
followed by a running number, and it is the value the `with` statement yields.

## What this package does not do

This package has no playable game. There is no terminal interface, no game
loop, no universe, market, navigation, mining or crafting-job systems, and no
saving or loading of a game. It has no network client or server and no command
to start one. The network helpers only diagnose connections and do not carry
game traffic. `NetworkSimulator` decides whether a message is dropped and how
long it is delayed. It does not send anything.