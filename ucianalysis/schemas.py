"""
Transport shape of an AnalysisInfo snapshot.

Text cells travel as nullable strings (null = not observed yet), the score as
a one-key object ``{"Cp": n}`` / ``{"Mate": n}`` and the bound kind as a plain tag.
Integers are strict: no floats, no numeric strings, no booleans.
"""

from __future__ import annotations

from typing import Annotated, Literal, Optional

from pydantic import BaseModel, Field

DISPOSITION = "AnalysisInfo"

UInt = Annotated[int, Field(strict=True, ge=0, le=2**64 - 1)]
I32 = Annotated[int, Field(strict=True, ge=-(2**31), le=2**31 - 1)]


class CpModel(BaseModel):
    Cp: I32

    model_config = {"extra": "forbid"}


class MateModel(BaseModel):
    Mate: I32

    model_config = {"extra": "forbid"}


class WdlModel(BaseModel):
    win: UInt
    draw: UInt
    loss: UInt

    model_config = {"extra": "forbid"}


class InfoSnapshot(BaseModel):
    disposition: Literal["AnalysisInfo"]
    done: bool = Field(..., strict=True)
    bestmove: Optional[str] = Field(..., description="best move, null until a pv was seen")
    ponder: Optional[str] = Field(...)
    pv: Optional[str] = Field(...)
    depth: UInt
    seldepth: UInt
    time: UInt
    nodes: UInt
    multipv: UInt
    score: CpModel | MateModel
    wdl: WdlModel
    currmove: Optional[str] = Field(...)
    currmovenumber: UInt
    hashfull: UInt
    nps: UInt
    tbhits: UInt
    cpuload: UInt
    scoretype: Literal["Exact", "Lowerbound", "Upperbound"]

    model_config = {
        "json_schema_extra": {"description": "One analysis snapshot of a UCI engine search."}
    }
