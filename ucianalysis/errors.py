"""
Exception types raised by the info parser, the snapshot adapter and the engine driver.

Parser errors are raised at the point of detection. Anything the parser applied
to the record before the failing token stays applied.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from ucianalysis.analysis import ParsingState


class InfoParseError(ValueError):
    """Base class for every failure while decoding an ``info`` line."""


class ParseNumberError(InfoParseError):
    def __init__(self, state: ParsingState, text: str) -> None:
        super().__init__(
            f"could not parse info number for state '{state.name}' from '{text}'"
        )
        self.state = state
        self.text = text


class InvalidKeyError(InfoParseError):
    def __init__(self, key: str) -> None:
        super().__init__(f"invalid info key '{key}'")
        self.key = key


class InvalidScoreSpecifier(InfoParseError):
    def __init__(self, token: str) -> None:
        super().__init__(f"invalid score specifier '{token}'")
        self.token = token


class SnapshotDecodeError(ValueError):
    """Transport text could not be mapped onto an AnalysisInfo."""


class EngineSpawnError(RuntimeError):
    """The engine subprocess could not be started or its pipes are missing."""
