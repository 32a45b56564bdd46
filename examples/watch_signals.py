"""Print PropertiesChanged notifications of the first MPRIS2 player until Ctrl+C."""

import logging
import queue
import sys

from dbus.mainloop.glib import DBusGMainLoop
from gi.repository import GLib

import mpris_config
from mpris_prober import find_players, open_bus
from mpris_player import MprisPlayer

logging.basicConfig(level=mpris_config.MPRIS_LOG_LEVEL)
log = logging.getLogger("watch_signals")


def main():
    # Must be installed before the bus connection is created
    DBusGMainLoop(set_as_default=True)
    bus = open_bus()
    names = find_players(bus)
    if not names:
        log.error("No player found")
        return 1

    player = MprisPlayer(bus, names[0])
    signals = queue.Queue()
    match = player.on_signal(signals)

    def drain():
        while not signals.empty():
            sig = signals.get_nowait()
            print(sig.name, sig.body)
        return True

    loop = GLib.MainLoop()
    GLib.timeout_add(100, drain)
    try:
        loop.run()
    except KeyboardInterrupt:
        pass
    finally:
        match.remove()
    return 0


if __name__ == '__main__':
    sys.exit(main())
