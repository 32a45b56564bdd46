"""Typed view over values returned by the bus.

dbus-python hands back values as subclasses of the Python builtins
(``dbus.String``, ``dbus.Int64`` ...), so the wire type is still known after
the call. ``Variant`` keeps that type tag next to the value and decodes it
explicitly; a mismatch raises ``DecodeError`` instead of failing somewhere
downstream.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional

import dbus

from mpris_errors import DecodeError

# Order matters: check the specific dbus types before the builtins they derive from.
_DBUS_SIGNATURES = (
    (dbus.Boolean, 'b'),
    (dbus.Byte, 'y'),
    (dbus.Int16, 'n'),
    (dbus.UInt16, 'q'),
    (dbus.Int32, 'i'),
    (dbus.UInt32, 'u'),
    (dbus.Int64, 'x'),
    (dbus.UInt64, 't'),
    (dbus.Double, 'd'),
    (dbus.ObjectPath, 'o'),
    (dbus.Signature, 'g'),
    (dbus.String, 's'),
)


def signature_of(value: Any) -> str:
    """Return the D-Bus type signature of a value as dbus-python delivers it.

    Plain Python values map to the signature dbus-python would marshal them as.
    """
    for dbus_type, signature in _DBUS_SIGNATURES:
        if isinstance(value, dbus_type):
            return signature
    if isinstance(value, dbus.Dictionary):
        return f"a{{{value.signature}}}" if value.signature else 'a{sv}'
    if isinstance(value, dbus.Array):
        return f"a{value.signature}" if value.signature else 'av'
    if isinstance(value, dbus.Struct):
        return f"({value.signature})" if value.signature else '(v)'
    if isinstance(value, bool):
        return 'b'
    if isinstance(value, int):
        return 'x'
    if isinstance(value, float):
        return 'd'
    if isinstance(value, str):
        return 's'
    if isinstance(value, dict):
        return 'a{sv}'
    if isinstance(value, (list, tuple)):
        return 'av'
    raise DecodeError('variant', type(value).__name__)


def unwrap(value: Any) -> Any:
    """Recursively convert dbus-python values into plain Python values."""
    if isinstance(value, Variant):
        return unwrap(value.value)
    if isinstance(value, dbus.Boolean):
        return bool(value)
    if isinstance(value, (dbus.Byte, dbus.Int16, dbus.Int32, dbus.Int64,
                          dbus.UInt16, dbus.UInt32, dbus.UInt64)):
        return int(value)
    if isinstance(value, dbus.Double):
        return float(value)
    if isinstance(value, (dbus.String, dbus.ObjectPath, dbus.Signature)):
        return str(value)
    if isinstance(value, dict):
        return {unwrap(k): unwrap(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [unwrap(x) for x in value]
    return value


class Variant:
    """A bus value with its wire type tag.

    ``interface`` and ``member`` name where the value came from and end up in
    any ``DecodeError`` raised while decoding it.
    """

    __slots__ = ('value', 'signature', 'interface', 'member')

    def __init__(self, value: Any, signature: Optional[str] = None,
                 interface: Optional[str] = None, member: Optional[str] = None):
        self.value = value
        self.signature = signature or signature_of(value)
        self.interface = interface
        self.member = member

    def __repr__(self):
        return f"Variant({self.value!r}, {self.signature!r})"

    def __eq__(self, other):
        if not isinstance(other, Variant):
            return NotImplemented
        return self.signature == other.signature and self.value == other.value

    def __hash__(self):
        # Raises TypeError for container payloads, like a tuple holding a list
        return hash((self.signature, self.value))

    def _fail(self, expected: str):
        raise DecodeError(expected, self.signature, self.interface, self.member)

    def as_str(self) -> str:
        if self.signature != 's':
            self._fail('s')
        return str(self.value)

    def as_bool(self) -> bool:
        if self.signature != 'b':
            self._fail('b')
        return bool(self.value)

    def as_double(self) -> float:
        if self.signature != 'd':
            self._fail('d')
        return float(self.value)

    def as_int64(self) -> int:
        """Accept both signed ('x') and unsigned ('t') 64-bit integers."""
        if self.signature not in ('x', 't'):
            self._fail('x')
        return int(self.value)

    def as_object_path(self) -> str:
        if self.signature != 'o':
            self._fail('o')
        return str(self.value)

    def as_str_list(self) -> List[str]:
        if self.signature != 'as':
            self._fail('as')
        return [str(x) for x in self.value]

    def as_dict(self) -> Dict[str, 'Variant']:
        """Decode a string-keyed dictionary, wrapping every entry."""
        if not self.signature.startswith('a{s'):
            self._fail('a{sv}')
        prefix = self.member or ''
        return {
            str(key): Variant(val, interface=self.interface, member=f"{prefix}[{key}]")
            for key, val in self.value.items()
        }

    def unwrap(self) -> Any:
        return unwrap(self.value)

    def to_dbus(self) -> Any:
        """The payload as the dbus-python type its signature names, so it is
        marshalled with that type rather than the one dbus-python would guess."""
        return to_dbus(self.value, self.signature)


_SIGNATURE_TYPES = {signature: dbus_type for dbus_type, signature in _DBUS_SIGNATURES}


def to_dbus(value: Any, signature: str) -> Any:
    """Convert a Python value into the dbus-python type for `signature`."""
    if isinstance(value, Variant):
        return value.to_dbus()
    if signature in _SIGNATURE_TYPES:
        return _SIGNATURE_TYPES[signature](value)
    if signature.startswith('a{') and signature.endswith('}'):
        entry = signature[2:-1]
        value_signature = entry[1:]
        return dbus.Dictionary(
            {k: _entry_to_dbus(v, value_signature) for k, v in value.items()},
            signature=entry)
    if signature.startswith('a'):
        return dbus.Array([_entry_to_dbus(v, signature[1:]) for v in value], signature=signature[1:])
    if signature.startswith('(') and signature.endswith(')'):
        return dbus.Struct(value, signature=signature[1:-1])
    raise DecodeError('variant', signature)


def _entry_to_dbus(value: Any, signature: str) -> Any:
    # 'v' entries keep their own type: an explicit Variant, or whatever the value already is
    if signature == 'v':
        return value.to_dbus() if isinstance(value, Variant) else value
    return to_dbus(value, signature)
