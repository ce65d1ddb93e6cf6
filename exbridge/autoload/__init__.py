"""
Autoload extensions shipped with exbridge.

Each submodule customizes one command family through an `autoload(commands, name)`
hook, called by Commands the first time a command of that family is accessed.

`aliases` maps command names to the submodule handling them, for families whose
members do not share a module name (the map commands all live in `map`).
"""

MAP_MODES = ("", "n", "v", "x", "s", "o", "i", "l", "c", "t")

MAP_COMMANDS = tuple(
    mode + kind
    for kind in ("map", "noremap", "unmap", "mapclear")
    for mode in MAP_MODES
)

aliases = dict.fromkeys(MAP_COMMANDS, "map")
