"""Pydantic schemas for the analysis service wire format."""

from __future__ import annotations

from typing import Any, Dict, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field

from cover_client.core.status import AnalysisStatus

Cursor = Union[int, str]


class AnalysisProgress(BaseModel):
    total: int = 0
    completed: int = 0


class ApiErrorResponse(BaseModel):
    """Error object embedded in status payloads."""
    code: str
    message: str


class AnalysisResult(BaseModel):
    """A single generated test, as returned by the results route."""
    model_config = ConfigDict(populate_by_name=True, extra="allow")

    test_id: str = Field(alias="testId")
    test_name: str = Field(alias="testName")
    tested_function: str = Field(alias="testedFunction")
    source_file_path: str = Field(alias="sourceFilePath")
    test_body: str = Field(default="", alias="testBody")
    imports: List[str] = Field(default_factory=list)
    static_imports: List[str] = Field(default_factory=list, alias="staticImports")
    class_annotations: List[str] = Field(default_factory=list, alias="classAnnotations")
    tags: List[str] = Field(default_factory=list)
    phase_generated: Optional[str] = Field(default=None, alias="phaseGenerated")
    created_time: Optional[str] = Field(default=None, alias="createdTime")
    covered_lines: List[str] = Field(default_factory=list, alias="coveredLines")

    def to_wire(self) -> Dict[str, Any]:
        return self.model_dump(by_alias=True, exclude_none=True)


class AnalysisStatusResponse(BaseModel):
    status: AnalysisStatus
    progress: Optional[AnalysisProgress] = None
    message: Optional[ApiErrorResponse] = None


class AnalysisStartResponse(BaseModel):
    id: str = Field(min_length=1)
    phases: Optional[Dict[str, Any]] = None
    settings: Optional[Dict[str, Any]] = None


class AnalysisCancelResponse(BaseModel):
    message: str = ""
    status: AnalysisStatusResponse


class AnalysisResultsResponse(BaseModel):
    cursor: Optional[Cursor] = None
    status: AnalysisStatusResponse
    results: List[AnalysisResult] = Field(default_factory=list)


class ApiVersionResponse(BaseModel):
    version: str
