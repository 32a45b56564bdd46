import logging
from dataclasses import dataclass
from decimal import Decimal
from enum import Enum

import dbus

import mpris_config
from mpris_errors import AbsentValueError, RemoteCallError, TransportError, map_dbus_error
from mpris_variant import Variant, unwrap

logger = logging.getLogger(__name__)

DBUS_PROPERTIES_IFACE = 'org.freedesktop.DBus.Properties'
MPRIS_ROOT_IFACE = 'org.mpris.MediaPlayer2'
MPRIS_PLAYER_IFACE = 'org.mpris.MediaPlayer2.Player'
MPRIS_TRACKLIST_IFACE = 'org.mpris.MediaPlayer2.TrackList'
MPRIS_PLAYLISTS_IFACE = 'org.mpris.MediaPlayer2.Playlists'
MPRIS_OBJECT_PATH = '/org/mpris/MediaPlayer2'

PROPERTIES_CHANGED_SIGNAL = 'PropertiesChanged'

METADATA_LENGTH_KEY = 'mpris:length'
METADATA_TRACK_ID_KEY = 'mpris:trackid'

_MICROSECONDS_PER_SECOND = 1000000


class PlaybackStatus(str, Enum):
    PLAYING = "Playing"
    PAUSED = "Paused"
    STOPPED = "Stopped"


class LoopStatus(str, Enum):
    NONE = "None"
    TRACK = "Track"
    PLAYLIST = "Playlist"


def seconds_to_microseconds(seconds):
    """Seconds (int or float) to integer microseconds, truncating toward zero.

    Goes through the shortest decimal form of the float so that 42.5 gives
    42500000 and 0.000003 gives 3 rather than 2.
    """
    if isinstance(seconds, int):
        return seconds * _MICROSECONDS_PER_SECOND
    return int(Decimal(str(float(seconds))) * _MICROSECONDS_PER_SECOND)


def microseconds_to_seconds(microseconds):
    return microseconds / _MICROSECONDS_PER_SECOND


def _as_enum(enum_cls, raw):
    # Players are allowed to report values newer than this enum; hand those back verbatim.
    try:
        return enum_cls(raw)
    except ValueError:
        return raw


@dataclass(frozen=True)
class Signal:
    """A raw bus notification as delivered by the transport."""
    sender: str
    path: str
    name: str
    body: tuple


class MprisPlayer:
    """
    Wraps a single MPRIS2 media player DBus service.
    Implements org.mpris.MediaPlayer2 and org.mpris.MediaPlayer2.Player interfaces.

    The bus connection is borrowed from the caller, who keeps ownership of it.
    Nothing is sent over the bus until the first call, so constructing a
    player never fails; every read goes to the bus again (no caching).
    """
    def __init__(self, bus, dbus_identifier):
        self._bus = bus
        self._dbus_identifier = dbus_identifier


    def __repr__(self):
        return f"MprisPlayer({self._dbus_identifier!r})"


    @property
    def bus(self):
        return self._bus


    @property
    def dbus_identifier(self):
        return self._dbus_identifier


    def _call(self, iface, method, signature='', args=(), context=None):
        """Blocking method call on the player object; `context` names the
        (interface, member) reported in errors when it differs from the call."""
        err_iface, err_member = context or (iface, method)
        logger.debug("%s: %s.%s%r", self._dbus_identifier, iface, method, tuple(args))
        try:
            return self._bus.call_blocking(
                self._dbus_identifier, MPRIS_OBJECT_PATH, iface, method,
                signature, args, timeout=mpris_config.MPRIS_CALL_TIMEOUT)
        except dbus.exceptions.DBusException as e:
            raise map_dbus_error(e, err_iface, err_member) from e


    def get_property(self, iface, prop_name):
        """Reads `prop_name` of `iface` through org.freedesktop.DBus.Properties.Get.

        Returns a `Variant`; raises `AbsentValueError` when the reply holds no value.
        """
        val = self._call(DBUS_PROPERTIES_IFACE, 'Get', 'ss', (iface, prop_name),
                         context=(iface, prop_name))
        if val is None:
            raise AbsentValueError(iface, prop_name)
        return Variant(val, interface=iface, member=prop_name)


    def set_property(self, iface, prop_name, value):
        """Writes `prop_name` of `iface` through org.freedesktop.DBus.Properties.Set."""
        if isinstance(value, Variant):
            value = value.to_dbus()
        self._call(DBUS_PROPERTIES_IFACE, 'Set', 'ssv', (iface, prop_name, value),
                   context=(iface, prop_name))


    def get_player_property(self, prop_name):
        return self.get_property(MPRIS_PLAYER_IFACE, prop_name)


    def set_player_property(self, prop_name, value):
        self.set_property(MPRIS_PLAYER_IFACE, prop_name, value)


    def get_all_properties(self, iface):
        """All properties of `iface` as plain Python values."""
        val = self._call(DBUS_PROPERTIES_IFACE, 'GetAll', 's', (iface,), context=(iface, 'GetAll'))
        if val is None:
            raise AbsentValueError(iface, 'GetAll')
        return unwrap(val)


    def on_signal(self, channel):
        """
        Forwards every PropertiesChanged notification of this player to `channel`
        (anything with a `put` method, usually a `queue.Queue`) as a `Signal`.

        Notifications arrive in transport order, unfiltered, and only while the
        caller runs a main loop (e.g. GLib with DBusGMainLoop). Returns the match
        object; call its `remove()` to unsubscribe.
        """
        def deliver(*body, sender=None, path=None, interface=None, member=None):
            channel.put(Signal(sender, path, f"{interface}.{member}", body))

        try:
            return self._bus.add_signal_receiver(
                deliver,
                signal_name=PROPERTIES_CHANGED_SIGNAL,
                dbus_interface=DBUS_PROPERTIES_IFACE,
                bus_name=self._dbus_identifier,
                path=MPRIS_OBJECT_PATH,
                sender_keyword='sender',
                path_keyword='path',
                interface_keyword='interface',
                member_keyword='member',
            )
        except dbus.exceptions.DBusException as e:
            raise TransportError(DBUS_PROPERTIES_IFACE, PROPERTIES_CHANGED_SIGNAL,
                                 e.get_dbus_name(), e.get_dbus_message()) from e

    # ==========================================
    # org.mpris.MediaPlayer2 (Root Interface)
    # ==========================================

    def raise_player(self):
        """Brings the media player's user interface to the front."""
        self._call(MPRIS_ROOT_IFACE, 'Raise')


    def quit(self):
        """Causes the media player to stop running."""
        self._call(MPRIS_ROOT_IFACE, 'Quit')


    @property
    def identity(self):
        return self.get_property(MPRIS_ROOT_IFACE, 'Identity').as_str()


    @property
    def can_quit(self):
        return self.get_property(MPRIS_ROOT_IFACE, 'CanQuit').as_bool()


    @property
    def can_raise(self):
        return self.get_property(MPRIS_ROOT_IFACE, 'CanRaise').as_bool()


    @property
    def fullscreen(self):
        return self.get_property(MPRIS_ROOT_IFACE, 'Fullscreen').as_bool()


    @fullscreen.setter
    def fullscreen(self, value):
        self.set_property(MPRIS_ROOT_IFACE, 'Fullscreen', dbus.Boolean(value))


    @property
    def can_set_fullscreen(self):
        return self.get_property(MPRIS_ROOT_IFACE, 'CanSetFullscreen').as_bool()


    @property
    def has_track_list(self):
        return self.get_property(MPRIS_ROOT_IFACE, 'HasTrackList').as_bool()


    @property
    def desktop_entry(self):
        return self.get_property(MPRIS_ROOT_IFACE, 'DesktopEntry').as_str()


    @property
    def supported_uri_schemes(self):
        return self.get_property(MPRIS_ROOT_IFACE, 'SupportedUriSchemes').as_str_list()


    @property
    def supported_mime_types(self):
        return self.get_property(MPRIS_ROOT_IFACE, 'SupportedMimeTypes').as_str_list()

    # ==========================================
    # org.mpris.MediaPlayer2.Player (Player Interface)
    # ==========================================

    # --- Methods ---
    def next(self):
        self._call(MPRIS_PLAYER_IFACE, 'Next')


    def previous(self):
        self._call(MPRIS_PLAYER_IFACE, 'Previous')


    def pause(self):
        self._call(MPRIS_PLAYER_IFACE, 'Pause')


    def play_pause(self):
        self._call(MPRIS_PLAYER_IFACE, 'PlayPause')


    def stop(self):
        self._call(MPRIS_PLAYER_IFACE, 'Stop')


    def play(self):
        self._call(MPRIS_PLAYER_IFACE, 'Play')


    def seek(self, offset):
        """Moves the position by `offset` seconds; negative offsets seek backwards."""
        self._call(MPRIS_PLAYER_IFACE, 'Seek', 'x', (dbus.Int64(seconds_to_microseconds(offset)),))


    def set_track_position(self, track_id, position):
        """Sets the position of track `track_id` to `position` seconds."""
        self._call(MPRIS_PLAYER_IFACE, 'SetPosition', 'ox',
                   (dbus.ObjectPath(track_id), dbus.Int64(seconds_to_microseconds(position))))


    def set_position(self, position):
        """
        Sets the position of the current track to `position` seconds.

        The current track id is read from Metadata first. If the track changes
        between the two calls the player receives a stale id and ignores the request.
        """
        track_id = self.metadata.get(METADATA_TRACK_ID_KEY)
        if track_id is None:
            raise AbsentValueError(MPRIS_PLAYER_IFACE, f"Metadata[{METADATA_TRACK_ID_KEY}]")
        self.set_track_position(track_id.as_object_path(), position)


    def open_uri(self, uri):
        self._call(MPRIS_PLAYER_IFACE, 'OpenUri', 's', (uri,))


    # --- Properties ---
    @property
    def playback_status(self):
        # "Playing", "Paused", "Stopped"
        val = self.get_property(MPRIS_PLAYER_IFACE, 'PlaybackStatus').as_str()
        return _as_enum(PlaybackStatus, val)


    @property
    def has_loop_status(self):
        """False when the player does not expose LoopStatus at all."""
        try:
            self.get_property(MPRIS_PLAYER_IFACE, 'LoopStatus')
        except AbsentValueError:
            return False
        except RemoteCallError as e:
            if e.not_supported:
                return False
            raise
        return True


    @property
    def loop_status(self):
        # "None", "Track", "Playlist"
        val = self.get_property(MPRIS_PLAYER_IFACE, 'LoopStatus').as_str()
        return _as_enum(LoopStatus, val)


    @loop_status.setter
    def loop_status(self, value):
        self.set_property(MPRIS_PLAYER_IFACE, 'LoopStatus', dbus.String(LoopStatus(value).value))


    @property
    def rate(self):
        return self.get_property(MPRIS_PLAYER_IFACE, 'Rate').as_double()


    @rate.setter
    def rate(self, value):
        self.set_property(MPRIS_PLAYER_IFACE, 'Rate', dbus.Double(value))


    @property
    def shuffle(self):
        return self.get_property(MPRIS_PLAYER_IFACE, 'Shuffle').as_bool()


    @shuffle.setter
    def shuffle(self, value):
        self.set_property(MPRIS_PLAYER_IFACE, 'Shuffle', dbus.Boolean(value))


    @property
    def metadata(self):
        """Metadata as a dict of `Variant`s, keyed by the player's own keys."""
        return self.get_property(MPRIS_PLAYER_IFACE, 'Metadata').as_dict()


    @property
    def length(self):
        """Length of the current track in seconds."""
        val = self.metadata.get(METADATA_LENGTH_KEY)
        if val is None:
            raise AbsentValueError(MPRIS_PLAYER_IFACE, f"Metadata[{METADATA_LENGTH_KEY}]")
        return microseconds_to_seconds(val.as_int64())


    @property
    def track_info(self):
        """Extract commonly used track info from metadata.

        Raises `DecodeError` when mpris:length is not a 64-bit integer.
        """
        variants = self.metadata
        meta = {key: val.unwrap() for key, val in variants.items()}
        length = variants.get(METADATA_LENGTH_KEY)
        return {
            'title': meta.get('xesam:title', ''),
            'artist': meta.get('xesam:artist', []),
            'album': meta.get('xesam:album', ''),
            'art_url': meta.get('mpris:artUrl', ''),
            'length': microseconds_to_seconds(length.as_int64()) if length is not None else None,
            'track_id': meta.get(METADATA_TRACK_ID_KEY, ''),
            'genre': meta.get('xesam:genre', []),
            'composer': meta.get('xesam:composer', []),
            'lyricist': meta.get('xesam:lyricist', []),
            'track_number': meta.get('xesam:trackNumber', 0),
            'disc_number': meta.get('xesam:discNumber', 0),
            'lyrics': meta.get('xesam:asText', ''),
        }


    @property
    def volume(self):
        return self.get_property(MPRIS_PLAYER_IFACE, 'Volume').as_double()


    @volume.setter
    def volume(self, value):
        self.set_property(MPRIS_PLAYER_IFACE, 'Volume', dbus.Double(value))


    @property
    def position(self):
        # Position is reported in microseconds
        val = self.get_property(MPRIS_PLAYER_IFACE, 'Position').as_int64()
        return microseconds_to_seconds(val)


    @property
    def min_rate(self):
        return self.get_property(MPRIS_PLAYER_IFACE, 'MinimumRate').as_double()


    @property
    def max_rate(self):
        return self.get_property(MPRIS_PLAYER_IFACE, 'MaximumRate').as_double()


    @property
    def can_go_next(self):
        return self.get_property(MPRIS_PLAYER_IFACE, 'CanGoNext').as_bool()


    @property
    def can_go_previous(self):
        return self.get_property(MPRIS_PLAYER_IFACE, 'CanGoPrevious').as_bool()


    @property
    def can_play(self):
        return self.get_property(MPRIS_PLAYER_IFACE, 'CanPlay').as_bool()


    @property
    def can_pause(self):
        return self.get_property(MPRIS_PLAYER_IFACE, 'CanPause').as_bool()


    @property
    def can_seek(self):
        return self.get_property(MPRIS_PLAYER_IFACE, 'CanSeek').as_bool()


    @property
    def can_control(self):
        return self.get_property(MPRIS_PLAYER_IFACE, 'CanControl').as_bool()


    def get_full_info(self):
        """Retrieves all properties from both MPRIS2 interfaces as a standard Python dictionary."""
        return {
            'root': self.get_all_properties(MPRIS_ROOT_IFACE),
            'player': self.get_all_properties(MPRIS_PLAYER_IFACE),
        }
