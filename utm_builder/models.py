from __future__ import annotations

from typing import Any, Dict, List, Optional
from pydantic import BaseModel, ConfigDict, Field

from .config import ToolConfig


class BuiltCsv(BaseModel):
    sha256: str
    encoding: str = Field(default="utf-8-sig")
    content_b64: str


class ReportSummary(BaseModel):
    rows: int = 0
    rows_with_errors: int = 0
    parameters: List[str] = Field(default_factory=list)
    warnings: int = 0
    errors: int = 0


class ReportItem(BaseModel):
    row: Optional[int] = None
    column: Optional[str] = None
    issue: str
    value: Optional[str] = None
    action: str


class RowResult(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    row: Optional[int] = None
    utms: Dict[str, str]
    url_ga: str = Field(alias="url ga")
    has_error: bool


class BuildReport(BaseModel):
    summary: ReportSummary
    normalizations: Dict[str, Any] = Field(default_factory=dict)
    rows: List[RowResult] = Field(default_factory=list)
    warnings: List[ReportItem] = Field(default_factory=list)
    errors: List[ReportItem] = Field(default_factory=list)


class BuildResponse(BaseModel):
    built_csv: BuiltCsv
    report: BuildReport


class BuildRowRequest(BaseModel):
    row: Dict[str, str] = Field(..., examples=[{"url": "http://x.com", "source": "google"}])
    config: ToolConfig


class HealthResponse(BaseModel):
    ok: bool = True
