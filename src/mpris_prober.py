import logging

import dbus

import mpris_config
from mpris_errors import AbsentValueError, RemoteCallError, TransportError
from mpris_player import MPRIS_ROOT_IFACE, MprisPlayer, PlaybackStatus

logger = logging.getLogger(__name__)


def open_bus(kind=None):
    """
    Opens the bus named by `kind` ("session" or "system"), defaulting to MPRIS_BUS.
    The caller owns the returned connection.
    """
    kind = (kind or mpris_config.MPRIS_BUS).lower()
    if kind not in ('session', 'system'):
        raise ValueError(f"Unknown bus type: {kind!r}")
    try:
        return dbus.SystemBus() if kind == 'system' else dbus.SessionBus()
    except dbus.exceptions.DBusException as e:
        raise TransportError(None, f"{kind} bus", e.get_dbus_name(), e.get_dbus_message()) from e


def find_players(bus):
    """
    Finds all running media players that implement the MPRIS2 interface.

    Names are returned in the order the bus lists them. An empty list means
    no player is running.
    """
    try:
        names = bus.list_names()
    except dbus.exceptions.DBusException as e:
        raise TransportError('org.freedesktop.DBus', 'ListNames',
                             e.get_dbus_name(), e.get_dbus_message()) from e
    playernames = [str(s) for s in names if s.startswith(MPRIS_ROOT_IFACE)]
    logger.debug("Found %d MPRIS player(s): %s", len(playernames), playernames)
    return playernames


def find_playing_players(bus):
    '''
    Finds all running media players that implement the MPRIS2 interface, and current playing something.

    Notice:
    The ordering of players is that of `find_players()`, so earlier-registered players
    come first. A player that disappears or refuses the status query between listing
    and querying is skipped.
    '''
    playing_playernames = []
    for playername in find_players(bus):
        try:
            playback_status = MprisPlayer(bus, playername).playback_status
        except (RemoteCallError, AbsentValueError) as e:
            logger.debug("Skipping %s: %s", playername, e)
            continue
        # Some players report the status in lower case
        if playback_status.lower() == PlaybackStatus.PLAYING.value.lower():
            playing_playernames.append(playername)
    return playing_playernames
