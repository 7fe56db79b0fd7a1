"""
Mapping between AnalysisInfo and its transport snapshot (see schemas.py).

Encoding is total. Decoding is all-or-nothing: either the whole text validates
and a fresh AnalysisInfo comes back, or SnapshotDecodeError is raised and
nothing was built. Text longer than a cell's capacity is truncated on decode,
the same way the cells truncate on ``set``.
"""

from __future__ import annotations

from pydantic import ValidationError

from ucianalysis.analysis import AnalysisInfo, Cp, Mate, ScoreType, Wdl
from ucianalysis.buffers import MoveText, PvText
from ucianalysis.errors import SnapshotDecodeError
from ucianalysis.schemas import DISPOSITION, CpModel, InfoSnapshot, MateModel, WdlModel


def to_snapshot(info: AnalysisInfo) -> InfoSnapshot:
    score = (
        CpModel(Cp=info.score.value)
        if isinstance(info.score, Cp)
        else MateModel(Mate=info.score.value)
    )
    return InfoSnapshot(
        disposition=DISPOSITION,
        done=info.done,
        bestmove=info.bestmove,
        ponder=info.ponder,
        pv=info.pv,
        depth=info.depth,
        seldepth=info.seldepth,
        time=info.time,
        nodes=info.nodes,
        multipv=info.multipv,
        score=score,
        wdl=WdlModel(win=info.wdl.win, draw=info.wdl.draw, loss=info.wdl.loss),
        currmove=info.currmove,
        currmovenumber=info.currmovenumber,
        hashfull=info.hashfull,
        nps=info.nps,
        tbhits=info.tbhits,
        cpuload=info.cpuload,
        scoretype=info.scoretype.value,
    )


def from_snapshot(snapshot: InfoSnapshot) -> AnalysisInfo:
    score = (
        Cp(snapshot.score.Cp)
        if isinstance(snapshot.score, CpModel)
        else Mate(snapshot.score.Mate)
    )
    return AnalysisInfo(
        done=snapshot.done,
        bestmove_text=MoveText(snapshot.bestmove),
        ponder_text=MoveText(snapshot.ponder),
        pv_text=PvText(snapshot.pv),
        depth=snapshot.depth,
        seldepth=snapshot.seldepth,
        time=snapshot.time,
        nodes=snapshot.nodes,
        multipv=snapshot.multipv,
        score=score,
        scoretype=ScoreType(snapshot.scoretype),
        currmove_text=MoveText(snapshot.currmove),
        currmovenumber=snapshot.currmovenumber,
        hashfull=snapshot.hashfull,
        nps=snapshot.nps,
        tbhits=snapshot.tbhits,
        cpuload=snapshot.cpuload,
        wdl=Wdl(win=snapshot.wdl.win, draw=snapshot.wdl.draw, loss=snapshot.wdl.loss),
    )


def to_dict(info: AnalysisInfo) -> dict:
    return to_snapshot(info).model_dump()


def to_json(info: AnalysisInfo) -> str:
    return to_snapshot(info).model_dump_json()


def from_json(text: str | bytes) -> AnalysisInfo:
    """
    Decode transport text.

    Raises:
        SnapshotDecodeError: the text is not valid JSON or does not have the snapshot shape.
    """
    try:
        snapshot = InfoSnapshot.model_validate_json(text)
    except ValidationError as exc:
        raise SnapshotDecodeError(f"invalid analysis snapshot: {exc}") from exc
    return from_snapshot(snapshot)
