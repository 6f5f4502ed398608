from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from pydantic import BaseModel, Field, field_validator, model_validator

from vendor_insights.core.services.hours import DAYS_OF_WEEK, DayHours


class AnalyticsRules(BaseModel):
    timezone: str = "UTC"
    default_days: int = Field(default=7, ge=1)
    max_days: int = Field(default=365, ge=1)
    top_n: int = Field(default=5, ge=0)
    recent_activity_limit: int = Field(default=10, ge=0)
    week_days: int = Field(default=7, ge=1)
    month_days: int = Field(default=30, ge=1)

    @field_validator("timezone")
    @classmethod
    def _known_timezone(cls, value: str) -> str:
        try:
            ZoneInfo(value)
        except (ZoneInfoNotFoundError, ValueError) as e:
            raise ValueError(f"Unknown timezone: {value}") from e
        return value

    @model_validator(mode="after")
    def _default_within_max(self) -> "AnalyticsRules":
        if self.default_days > self.max_days:
            raise ValueError("default_days must not exceed max_days")
        return self


class IngestionRules(BaseModel):
    enabled: bool = True
    allowed_kinds: list[str] = Field(default_factory=lambda: ["scan", "page_view", "contact"])
    forbidden_fields: list[str] = Field(
        default_factory=lambda: [
            "ip",
            "ip_address",
            "user_ip",
            "user_agent",
            "cookie",
            "visitor_id",
            "session_id",
        ]
    )
    max_future_seconds: int = Field(default=300, ge=0)


class DayHoursRule(BaseModel):
    open: str = Field(default="09:00", pattern=r"^\d{2}:\d{2}$")
    close: str = Field(default="17:00", pattern=r"^\d{2}:\d{2}$")
    closed: bool = False

    def to_day_hours(self) -> DayHours:
        return DayHours(open=self.open, close=self.close, closed=self.closed)


class TemplateRule(BaseModel):
    open: str = Field(pattern=r"^\d{2}:\d{2}$")
    close: str = Field(pattern=r"^\d{2}:\d{2}$")
    closed_days: list[str] = Field(default_factory=list)

    @field_validator("closed_days")
    @classmethod
    def _known_days(cls, value: list[str]) -> list[str]:
        unknown = [d for d in value if d not in DAYS_OF_WEEK]
        if unknown:
            raise ValueError(f"Unknown days: {', '.join(unknown)}")
        return value


class HoursRules(BaseModel):
    default_day: DayHoursRule = Field(default_factory=DayHoursRule)
    # Per-day overrides of default_day
    defaults_by_day: dict[str, DayHoursRule] = Field(default_factory=dict)
    templates: dict[str, TemplateRule] = Field(default_factory=dict)

    @field_validator("defaults_by_day")
    @classmethod
    def _known_day_keys(cls, value: dict[str, DayHoursRule]) -> dict[str, DayHoursRule]:
        unknown = [d for d in value if d not in DAYS_OF_WEEK]
        if unknown:
            raise ValueError(f"Unknown days: {', '.join(unknown)}")
        return value

    def default_table(self) -> dict[str, DayHours]:
        base = self.default_day.to_day_hours()
        return {
            day: self.defaults_by_day[day].to_day_hours() if day in self.defaults_by_day else base
            for day in DAYS_OF_WEEK
        }

    def template_table(self) -> dict[str, dict[str, object]]:
        return {name: t.model_dump() for name, t in self.templates.items()}


class ProjectRules(BaseModel):
    slug: str
    rules_version: str


class Rules(BaseModel):
    project: ProjectRules
    analytics: AnalyticsRules = Field(default_factory=AnalyticsRules)
    ingestion: IngestionRules = Field(default_factory=IngestionRules)
    hours: HoursRules = Field(default_factory=HoursRules)
