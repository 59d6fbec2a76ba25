"""
Recurrence API endpoints
"""
from datetime import date
from typing import Any, Literal

from fastapi import APIRouter, HTTPException
from pydantic import BaseModel, Field, TypeAdapter, ValidationError, field_validator, model_validator

from cadence.application.calendar_grid import build_month_grid
from cadence.application.recurrence_preview import RecurrencePreviewSession, compute_preview
from cadence.application.recurrence_summary import describe_configuration, format_preview
from cadence.config import get_settings
from cadence.domain.recurrence import effective_cap
from cadence.domain.recurrence_rule import (
    VALID_ORDINALS,
    MonthlyPattern,
    RecurrenceConfiguration,
    RecurrenceEditError,
    RecurrenceType,
    WeekDay,
    clamp_interval,
)


router = APIRouter(prefix="/api/v1/recurrence", tags=["recurrence"])


# === Request/Response models ===

class RecurrenceConfigurationModel(BaseModel):
    type: RecurrenceType = RecurrenceType.WEEKLY
    interval: int = 1
    weekly_days: list[WeekDay] = Field(default_factory=list)  # 0=Sunday .. 6=Saturday
    monthly_pattern: MonthlyPattern = MonthlyPattern.BY_DATE
    start_date: date | None = None
    end_date: date | None = None
    max_occurrences: int | None = None
    monthly_ordinal: int | None = None  # 1..5, -1 = last
    monthly_weekday: WeekDay | None = None

    @field_validator("interval")
    @classmethod
    def clamp(cls, v: int) -> int:
        """Out-of-range intervals are clamped to 1..999, not rejected"""
        return clamp_interval(v)

    @field_validator("monthly_ordinal")
    @classmethod
    def validate_ordinal(cls, v: int | None) -> int | None:
        if v is not None and v not in VALID_ORDINALS:
            raise ValueError("monthly_ordinal must be 1..5 or -1 (last)")
        return v

    def to_domain(self) -> RecurrenceConfiguration:
        return RecurrenceConfiguration(
            type=self.type,
            interval=self.interval,
            weekly_days=frozenset(self.weekly_days),
            monthly_pattern=self.monthly_pattern,
            start_date=self.start_date,
            end_date=self.end_date,
            max_occurrences=self.max_occurrences,
            monthly_ordinal=self.monthly_ordinal,
            monthly_weekday=self.monthly_weekday,
        )

    @classmethod
    def from_domain(cls, config: RecurrenceConfiguration) -> "RecurrenceConfigurationModel":
        return cls(
            type=config.type,
            interval=config.interval,
            weekly_days=sorted(config.weekly_days),
            monthly_pattern=config.monthly_pattern,
            start_date=config.start_date,
            end_date=config.end_date,
            max_occurrences=config.max_occurrences,
            monthly_ordinal=config.monthly_ordinal,
            monthly_weekday=config.monthly_weekday,
        )


EDIT_VALUE_TYPES: dict[str, TypeAdapter] = {
    "set_type": TypeAdapter(RecurrenceType),
    "set_interval": TypeAdapter(int),
    "toggle_weekly_day": TypeAdapter(WeekDay),
    "set_monthly_pattern": TypeAdapter(MonthlyPattern),
    "set_monthly_weekday": TypeAdapter(tuple[int, WeekDay | None] | None),
    "set_start_date": TypeAdapter(date | None),
    "set_end_date": TypeAdapter(date | None),
    "set_max_occurrences": TypeAdapter(int | None),
}


class EditModel(BaseModel):
    action: Literal[
        "set_type", "set_interval", "toggle_weekly_day", "set_monthly_pattern",
        "set_monthly_weekday", "set_start_date", "set_end_date", "set_max_occurrences",
    ]
    value: Any = None

    @model_validator(mode="after")
    def coerce_value(self) -> "EditModel":
        """Parse the JSON value into the type the edit expects"""
        try:
            self.value = EDIT_VALUE_TYPES[self.action].validate_python(self.value)
        except ValidationError:
            raise ValueError(f"invalid value for {self.action}: {self.value!r}")
        return self


class EditRequest(BaseModel):
    configuration: RecurrenceConfigurationModel
    edits: list[EditModel] = Field(default_factory=list)


class CalendarRequest(BaseModel):
    configuration: RecurrenceConfigurationModel
    year: int = Field(ge=1, le=9999)
    month: int = Field(ge=1, le=12)


class PreviewResponse(BaseModel):
    dates: list[date]
    summary: str
    preview_text: str
    effective_cap: int
    steps: int
    guard_exhausted: bool


class EditResponse(BaseModel):
    configuration: RecurrenceConfigurationModel
    preview: PreviewResponse


class CalendarCellResponse(BaseModel):
    date: date
    day: int
    in_month: bool
    highlighted: bool


class CalendarGridResponse(BaseModel):
    year: int
    month: int
    month_label: str
    weekday_labels: list[str]
    weeks: list[list[CalendarCellResponse]]
    highlighted_count: int


# === Helper function ===

def _preview_response(config: RecurrenceConfiguration, dates: tuple[date, ...], steps: int, guard_exhausted: bool) -> PreviewResponse:
    settings = get_settings()
    return PreviewResponse(
        dates=list(dates),
        summary=describe_configuration(config),
        preview_text=format_preview(dates),
        effective_cap=effective_cap(config, settings.OCCURRENCE_CEILING),
        steps=steps,
        guard_exhausted=guard_exhausted,
    )


# === Endpoints ===

@router.post("/preview", response_model=PreviewResponse)
def preview(req: RecurrenceConfigurationModel):
    """Compute the occurrence dates of a configuration"""
    config = req.to_domain()
    expansion = compute_preview(config, get_settings())
    return _preview_response(config, expansion.dates, expansion.steps, expansion.guard_exhausted)


@router.post("/edit", response_model=EditResponse)
def edit(req: EditRequest):
    """Apply edits in order and return the new configuration with its preview"""
    session = RecurrencePreviewSession(req.configuration.to_domain(), settings=get_settings())
    try:
        config = session.dispatch_all((e.action, e.value) for e in req.edits)
    except RecurrenceEditError as e:
        raise HTTPException(status_code=422, detail=str(e))

    expansion = session.last_expansion
    return EditResponse(
        configuration=RecurrenceConfigurationModel.from_domain(config),
        preview=_preview_response(config, expansion.dates, expansion.steps, expansion.guard_exhausted),
    )


@router.post("/calendar", response_model=CalendarGridResponse)
def calendar_grid(req: CalendarRequest):
    """Month grid with the configuration's occurrences highlighted"""
    config = req.configuration.to_domain()
    expansion = compute_preview(config, get_settings())
    grid = build_month_grid(req.year, req.month, expansion.dates)
    return CalendarGridResponse(
        year=grid["year"],
        month=grid["month"],
        month_label=grid["month_label"],
        weekday_labels=grid["weekday_labels"],
        weeks=[[CalendarCellResponse(**{k: cell[k] for k in ("date", "day", "in_month", "highlighted")}) for cell in row]
               for row in grid["weeks"]],
        highlighted_count=grid["highlighted_count"],
    )
