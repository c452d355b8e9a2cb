# config.py
from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .matching import validate_pattern
from .settings import MAX_PAGES, MAX_PIPELINE_COUNT, PIPELINE_COUNT, UPDATE_INTERVAL
from .sort import NONE_SORTER


class ComponentSpec(BaseModel):
    """One component: a first job and an optional last job."""
    model_config = ConfigDict(frozen=True)

    name: str
    first_job: str
    last_job: Optional[str] = None

    @field_validator("name")
    @classmethod
    def _name_not_blank(cls, v: str) -> str:
        if not v or not v.strip():
            raise ValueError("Please supply a title!")
        return v

    @field_validator("last_job")
    @classmethod
    def _blank_last_job_is_none(cls, v: Optional[str]) -> Optional[str]:
        return v if v and v.strip() else None


class RegexSpec(BaseModel):
    """Components discovered by matching job full names; group 1 names the component."""
    model_config = ConfigDict(frozen=True)

    regexp: str

    @field_validator("regexp")
    @classmethod
    def _one_capture_group(cls, v: str) -> str:
        problem = validate_pattern(v)
        if problem:
            raise ValueError(problem)
        return v


class ViewSettings(BaseModel):
    """Display settings of a timeline view."""

    pipeline_count: int = Field(default=PIPELINE_COUNT, ge=0, le=MAX_PIPELINE_COUNT)
    max_visible_components: int = -1  # <= 0 means unlimited
    paging_enabled: bool = True
    max_pages: int = Field(default=MAX_PAGES, ge=1)
    show_aggregated: bool = False
    sorting: str = NONE_SORTER
    update_interval: int = Field(default=UPDATE_INTERVAL, gt=0)

    show_changes: bool = False
    show_aggregated_changes: bool = False
    show_total_build_time: bool = False
    allow_manual_triggers: bool = True
    allow_rebuild: bool = False
    allow_pipeline_start: bool = True
