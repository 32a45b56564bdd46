import dbus
import pytest

from mpris_errors import MprisError, RemoteCallError, TransportError, map_dbus_error


@pytest.mark.parametrize('name', [
    'org.freedesktop.DBus.Error.Disconnected',
    'org.freedesktop.DBus.Error.NoReply',
    'org.freedesktop.DBus.Error.NoServer',
    None,
])
def test_connection_failures_are_transport_errors(name):
    exc = dbus.exceptions.DBusException('Connection is closed', name=name)
    err = map_dbus_error(exc, 'org.mpris.MediaPlayer2.Player', 'Play')
    assert isinstance(err, TransportError)
    assert err.dbus_name == name
    assert (err.interface, err.member) == ('org.mpris.MediaPlayer2.Player', 'Play')


@pytest.mark.parametrize('name, not_supported', [
    ('org.freedesktop.DBus.Error.UnknownProperty', True),
    ('org.freedesktop.DBus.Error.UnknownMethod', True),
    ('org.freedesktop.DBus.Error.InvalidArgs', True),
    ('org.freedesktop.DBus.Error.ServiceUnknown', False),
    ('org.mpris.MediaPlayer2.Error.Failed', False),
])
def test_remote_failures(name, not_supported):
    exc = dbus.exceptions.DBusException('nope', name=name)
    err = map_dbus_error(exc, 'org.mpris.MediaPlayer2.Player', 'LoopStatus')
    assert isinstance(err, RemoteCallError)
    assert err.not_supported is not_supported
    assert 'org.mpris.MediaPlayer2.Player.LoopStatus' in str(err)
    assert 'nope' in str(err)


def test_all_errors_share_a_base():
    err = map_dbus_error(dbus.exceptions.DBusException('x', name='a.b.C'))
    assert isinstance(err, MprisError)
    assert 'D-Bus' in str(err)
