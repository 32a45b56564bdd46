"""Raise the first MPRIS2 player found on the bus and print its identity."""

import logging
import sys

import mpris_config
from mpris_prober import find_players, open_bus
from mpris_player import MprisPlayer

logging.basicConfig(level=mpris_config.MPRIS_LOG_LEVEL)
log = logging.getLogger("raise_player")


def main():
    bus = open_bus()
    names = find_players(bus)
    if not names:
        log.error("No media player found.")
        return 1

    log.info("Found media player: %s", names[0])
    player = MprisPlayer(bus, names[0])
    print(f"Media player identity: {player.identity}")
    player.raise_player()
    return 0


if __name__ == '__main__':
    sys.exit(main())
