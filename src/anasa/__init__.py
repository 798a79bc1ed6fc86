"""Greek leave optimizer.

Plan annual leave around Greek public holidays, Orthodox Easter and
weekends to get the longest stretches of time off for the fewest leave
days.
"""

from anasa.days import CalendarStats, DateRange, DayInfo, calendar_stats, generate_calendar
from anasa.easter import calculate_orthodox_easter, julian_gregorian_offset
from anasa.errors import (
    ConflictDetected,
    InvalidRangeError,
    InvalidYearError,
    ParseError,
    PlannerError,
)
from anasa.holidays import (
    ConditionalHoliday,
    Holiday,
    MovableHoliday,
    OneTimeHoliday,
    RecurringHoliday,
    build_holidays,
)
from anasa.optimizer import (
    LeaveOptimizer,
    OptimizationResult,
    create_custom_period,
    find_opportunities,
)
from anasa.plan import AnnualPlan, ConflictWarning, SavedOpportunity, ranges_overlap

__all__ = [
    "AnnualPlan",
    "CalendarStats",
    "ConditionalHoliday",
    "ConflictDetected",
    "ConflictWarning",
    "DateRange",
    "DayInfo",
    "Holiday",
    "InvalidRangeError",
    "InvalidYearError",
    "LeaveOptimizer",
    "MovableHoliday",
    "OneTimeHoliday",
    "OptimizationResult",
    "ParseError",
    "PlannerError",
    "RecurringHoliday",
    "SavedOpportunity",
    "build_holidays",
    "calculate_orthodox_easter",
    "calendar_stats",
    "create_custom_period",
    "find_opportunities",
    "generate_calendar",
    "julian_gregorian_offset",
    "ranges_overlap",
]
