"""Cron field bounds and alias table."""

# Field value ranges, in schedule order
MINUTE_BOUNDS = (0, 59)
HOUR_BOUNDS = (0, 23)
DAY_OF_MONTH_BOUNDS = (1, 31)
MONTH_BOUNDS = (1, 12)
DAY_OF_WEEK_BOUNDS = (0, 6)  # 0 = Sunday

FIELD_NAMES = ("minute", "hour", "day_of_month", "month", "day_of_week")
FIELD_BOUNDS = (
    MINUTE_BOUNDS,
    HOUR_BOUNDS,
    DAY_OF_MONTH_BOUNDS,
    MONTH_BOUNDS,
    DAY_OF_WEEK_BOUNDS,
)

# Canonical fields for the supported @aliases
ALIASES: dict[str, tuple[str, str, str, str, str]] = {
    "@yearly": ("0", "0", "1", "1", "*"),
    "@annually": ("0", "0", "1", "1", "*"),
    "@monthly": ("0", "0", "1", "*", "*"),
    "@weekly": ("0", "0", "*", "*", "0"),
    "@daily": ("0", "0", "*", "*", "*"),
    "@hourly": ("0", "*", "*", "*", "*"),
}
