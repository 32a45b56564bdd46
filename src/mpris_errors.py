"""Error types raised by the MPRIS2 client.

Every failure carries the D-Bus interface and member (property or method
name) of the bus interaction that failed.
"""

from __future__ import annotations

import logging
from typing import Optional

import dbus.exceptions

logger = logging.getLogger(__name__)

# Connection-level failures: the bus itself is unreachable or went away.
TRANSPORT_ERROR_NAMES = frozenset({
    'org.freedesktop.DBus.Error.Disconnected',
    'org.freedesktop.DBus.Error.NoServer',
    'org.freedesktop.DBus.Error.NoNetwork',
    'org.freedesktop.DBus.Error.NoReply',
    'org.freedesktop.DBus.Error.Timeout',
    'org.freedesktop.DBus.Error.TimedOut',
    'org.freedesktop.DBus.Error.IOError',
    'org.freedesktop.DBus.Error.NoMemory',
    'org.freedesktop.DBus.Error.LimitsExceeded',
    'org.freedesktop.DBus.Error.AuthFailed',
    'org.freedesktop.DBus.Error.BadAddress',
})

# Remote errors that mean "this player does not have that".
NOT_SUPPORTED_ERROR_NAMES = frozenset({
    'org.freedesktop.DBus.Error.UnknownProperty',
    'org.freedesktop.DBus.Error.UnknownInterface',
    'org.freedesktop.DBus.Error.UnknownMethod',
    'org.freedesktop.DBus.Error.InvalidArgs',
    'org.freedesktop.DBus.Error.NotSupported',
    'org.freedesktop.DBus.Error.PropertyReadOnly',
})


class MprisError(Exception):
    """Base class of everything this library raises."""

    def __init__(self, message: str, interface: Optional[str] = None, member: Optional[str] = None):
        super().__init__(message)
        self.interface = interface
        self.member = member


class TransportError(MprisError):
    """The bus connection failed (unreachable, dropped, no reply)."""

    def __init__(self, interface: Optional[str], member: Optional[str],
                 dbus_name: Optional[str] = None, reason: Optional[str] = None):
        self.dbus_name = dbus_name
        self.reason = reason
        msg = f"Transport failure during {_target(interface, member)}"
        if dbus_name:
            msg += f" [{dbus_name}]"
        if reason:
            msg += f": {reason}"
        super().__init__(msg, interface, member)


class RemoteCallError(MprisError):
    """The remote player rejected the call or lacks the target object,
    interface, property or method."""

    def __init__(self, interface: Optional[str], member: Optional[str],
                 dbus_name: Optional[str] = None, reason: Optional[str] = None):
        self.dbus_name = dbus_name
        self.reason = reason
        msg = f"Remote call {_target(interface, member)} failed"
        if dbus_name:
            msg += f" [{dbus_name}]"
        if reason:
            msg += f": {reason}"
        super().__init__(msg, interface, member)

    @property
    def not_supported(self) -> bool:
        """True when the player simply does not implement the target."""
        return self.dbus_name in NOT_SUPPORTED_ERROR_NAMES


class DecodeError(MprisError):
    """A returned value does not have the wire type the accessor expects."""

    def __init__(self, expected: str, actual: Optional[str],
                 interface: Optional[str] = None, member: Optional[str] = None):
        self.expected = expected
        self.actual = actual
        super().__init__(
            f"Cannot decode {_target(interface, member)}: expected '{expected}', got '{actual}'",
            interface,
            member,
        )


class AbsentValueError(MprisError):
    """The call succeeded but carried no value."""

    def __init__(self, interface: Optional[str], member: Optional[str]):
        super().__init__(f"{_target(interface, member)} returned no value", interface, member)


def _target(interface: Optional[str], member: Optional[str]) -> str:
    if interface and member:
        return f"{interface}.{member}"
    return member or interface or "D-Bus"


def map_dbus_error(exc: dbus.exceptions.DBusException,
                   interface: Optional[str] = None,
                   member: Optional[str] = None) -> MprisError:
    """Return the MprisError matching a D-Bus exception.

    Exceptions without an error name come from libdbus itself (no
    connection, connection closed) and count as transport failures.
    """
    name = exc.get_dbus_name()
    reason = exc.get_dbus_message() or None
    if name is None or name in TRANSPORT_ERROR_NAMES:
        error = TransportError(interface, member, name, reason)
    else:
        error = RemoteCallError(interface, member, name, reason)
    logger.debug("%s", error)
    return error
