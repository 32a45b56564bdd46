import collections

import dbus
import pytest

from mpris_player import DBUS_PROPERTIES_IFACE, MPRIS_PLAYER_IFACE, MPRIS_ROOT_IFACE

PLAYER_NAME = 'org.mpris.MediaPlayer2.vlc'
TRACK_ID = '/org/videolan/vlc/playlist/7'

Call = collections.namedtuple('Call', 'bus_name object_path interface method signature args')


def dbus_error(name, message='failed'):
    return dbus.exceptions.DBusException(message, name=name)


class FakeMatch:
    def __init__(self, bus, handler, kwargs):
        self.bus = bus
        self.handler = handler
        self.kwargs = kwargs

    def remove(self):
        self.bus.receivers.remove(self)


class FakeBus:
    """
    Stands in for a dbus-python bus connection.

    `players` maps a bus name to its properties, keyed by (interface, property).
    A property stored as None models a Get reply carrying no value; a missing
    key answers with UnknownProperty like a real player does.
    """
    def __init__(self, players=None, names=None):
        self.players = players if players is not None else {}
        self.names = names
        self.calls = []
        self.errors = {}
        self.list_names_error = None
        self.signal_error = None
        self.receivers = []

    def list_names(self):
        if self.list_names_error:
            raise self.list_names_error
        names = self.names if self.names is not None else ['org.freedesktop.DBus', ':1.3', *self.players]
        return dbus.Array(names, signature='s')

    def call_blocking(self, bus_name, object_path, dbus_interface, method, signature, args, timeout=-1.0):
        args = tuple(args)
        self.calls.append(Call(bus_name, object_path, dbus_interface, method, signature, args))
        if bus_name not in self.players:
            raise dbus_error('org.freedesktop.DBus.Error.ServiceUnknown', f'{bus_name} was not provided')
        props = self.players[bus_name]

        if dbus_interface == DBUS_PROPERTIES_IFACE and method in ('Get', 'Set'):
            key = (args[0], args[1])
        elif dbus_interface == DBUS_PROPERTIES_IFACE and method == 'GetAll':
            key = (args[0], 'GetAll')
        else:
            key = (dbus_interface, method)
        if key in self.errors:
            raise self.errors[key]

        if dbus_interface != DBUS_PROPERTIES_IFACE:
            return None
        if method == 'Get':
            if key not in props:
                raise dbus_error('org.freedesktop.DBus.Error.UnknownProperty', f'No such property {key[1]}')
            return props[key]
        if method == 'Set':
            props[key] = args[2]
            return None
        return dbus.Dictionary(
            {prop: val for (iface, prop), val in props.items() if iface == args[0]}, signature='sv')

    def add_signal_receiver(self, handler, **kwargs):
        if self.signal_error:
            raise self.signal_error
        match = FakeMatch(self, handler, kwargs)
        self.receivers.append(match)
        return match

    def emit(self, *body, sender=':1.42', path='/org/mpris/MediaPlayer2',
             interface=DBUS_PROPERTIES_IFACE, member='PropertiesChanged'):
        for match in list(self.receivers):
            match.handler(*body, sender=sender, path=path, interface=interface, member=member)

    def method_calls(self, method):
        return [c for c in self.calls if c.method == method]


def vlc_properties():
    return {
        (MPRIS_ROOT_IFACE, 'Identity'): dbus.String('VLC media player'),
        (MPRIS_ROOT_IFACE, 'CanQuit'): dbus.Boolean(True),
        (MPRIS_ROOT_IFACE, 'CanRaise'): dbus.Boolean(True),
        (MPRIS_ROOT_IFACE, 'DesktopEntry'): dbus.String('vlc'),
        (MPRIS_ROOT_IFACE, 'SupportedUriSchemes'): dbus.Array(['file', 'http'], signature='s'),
        (MPRIS_PLAYER_IFACE, 'PlaybackStatus'): dbus.String('Playing'),
        (MPRIS_PLAYER_IFACE, 'LoopStatus'): dbus.String('Playlist'),
        (MPRIS_PLAYER_IFACE, 'Shuffle'): dbus.Boolean(False),
        (MPRIS_PLAYER_IFACE, 'Rate'): dbus.Double(1.0),
        (MPRIS_PLAYER_IFACE, 'Volume'): dbus.Double(0.75),
        (MPRIS_PLAYER_IFACE, 'Position'): dbus.Int64(12500000),
        (MPRIS_PLAYER_IFACE, 'CanSeek'): dbus.Boolean(True),
        (MPRIS_PLAYER_IFACE, 'Metadata'): dbus.Dictionary({
            'mpris:trackid': dbus.ObjectPath(TRACK_ID),
            'mpris:length': dbus.Int64(215000000),
            'xesam:title': dbus.String('Teardrop'),
            'xesam:artist': dbus.Array(['Massive Attack'], signature='s'),
            'xesam:album': dbus.String('Mezzanine'),
            'xesam:trackNumber': dbus.Int32(3),
        }, signature='sv'),
    }


@pytest.fixture
def bus():
    return FakeBus({PLAYER_NAME: vlc_properties()})


@pytest.fixture
def props(bus):
    return bus.players[PLAYER_NAME]


@pytest.fixture
def player(bus):
    from mpris_player import MprisPlayer
    return MprisPlayer(bus, PLAYER_NAME)
