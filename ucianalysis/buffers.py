"""
Fixed-capacity text cells for short protocol tokens.

Each cell owns a byte block whose size is fixed by the class and an explicit
length. Storing more than fits is not an error: ``set`` silently keeps the
first ``capacity`` bytes, and ``set_trim`` keeps the longest whole-token prefix
that fits.
"""

from __future__ import annotations

# longest UCI move, e.g. "e7e8q"
UCI_MAX_LENGTH = 5
UCI_TYPICAL_LENGTH = 4
MAX_PV_MOVES = 10
PV_BUFF_SIZE = MAX_PV_MOVES * (UCI_TYPICAL_LENGTH + 1)


class BoundedText:
    """Byte storage of ``capacity`` bytes plus a length. Subclasses set the capacity."""

    capacity: int = 0

    __slots__ = ("length", "_buff")

    def __init__(self, value: str | None = None) -> None:
        self.length = 0
        self._buff = bytearray(self.capacity)
        if value:
            self.set(value)

    def set(self, value: str) -> BoundedText:
        data = value.encode("utf-8")[: self.capacity]
        self._store(data)
        return self

    def set_trim(self, value: str, sep: str = " ") -> BoundedText:
        """
        Store ``value`` without splitting a token.

        If the whole text fits it is kept as is. Otherwise the result is the
        longest prefix of at most ``capacity`` bytes that is immediately
        followed by ``sep`` in the input, or empty when there is none.
        """
        data = value.encode("utf-8")
        if len(data) > self.capacity:
            cut = data.rfind(sep.encode("utf-8"), 0, self.capacity + 1)
            data = data[:cut] if cut >= 0 else b""
        self._store(data)
        return self

    def reset(self) -> BoundedText:
        self.length = 0
        return self

    def to_option(self) -> str | None:
        """None until something was stored, the text otherwise."""
        if self.length == 0:
            return None
        return str(self)

    def _store(self, data: bytes) -> None:
        self.length = len(data)
        self._buff[: self.length] = data

    def __str__(self) -> str:
        # a byte cut can land inside a multibyte character
        return bytes(self._buff[: self.length]).decode("utf-8", errors="replace")

    def __repr__(self) -> str:
        return f"[{type(self).__name__}[{self.length}]: '{self}']"

    def __len__(self) -> int:
        return self.length

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, BoundedText):
            return NotImplemented
        return (
            type(self) is type(other)
            and self._buff[: self.length] == other._buff[: other.length]
        )


class MoveText(BoundedText):
    """Holds one UCI move."""

    capacity = UCI_MAX_LENGTH
    __slots__ = ()


class PvText(BoundedText):
    """Holds a space-joined principal variation of a few moves."""

    capacity = PV_BUFF_SIZE
    __slots__ = ()
