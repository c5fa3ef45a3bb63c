import polars as pl

from fitbit_usage.errors import MissingDataError

# sample standard deviation (ddof=1) is undefined below this many values
MIN_STD_POINTS = 2

COUNT_COLUMNS = [
    "total_days",
    "activity_days_used",
    "sleep_days_used",
    "weight_days_used",
    "sleep_or_weight_days_used",
]

ACTIVITY_TIERS = [
    "very_active_minutes",
    "fairly_active_minutes",
    "lightly_active_minutes",
    "sedentary_minutes",
]


def std_or_null(expr: pl.Expr) -> pl.Expr:
    return (
        pl.when(expr.count() >= MIN_STD_POINTS)
        .then(expr.std(ddof=1))
        .otherwise(None)
    )


def build_user_usage(daily: pl.DataFrame) -> pl.DataFrame:
    """
    Reduce the joined per-day table to one usage row per user.

    Counts measure presence: a day with 0 steps is not an activity day, a
    day with a 0-minute sleep record is a sleep day. Means and standard
    deviations only look at days where the value is present, so a user
    with no eligible day gets null ("no data") rather than 0.
    """
    sleep_present = pl.col("minutes_asleep").is_not_null()
    weight_present = pl.col("weight_kg").is_not_null()
    sleep_hours = pl.col("minutes_asleep") / 60

    # Activity/usage counts
    counts = [
        pl.len().alias("total_days"),
        (pl.col("total_steps") > 0).sum().alias("activity_days_used"),
        sleep_present.sum().alias("sleep_days_used"),
        weight_present.sum().alias("weight_days_used"),
        (sleep_present | weight_present).sum().alias("sleep_or_weight_days_used"),
    ]

    # Averages over eligible days only
    averages = [
        sleep_hours.mean().alias("avg_sleep_hours"),
        std_or_null(sleep_hours).alias("std_sleep_hours"),
        (pl.col("time_in_bed") / 60).mean().alias("avg_time_in_bed_hours"),
        pl.col("bmi").mean().alias("avg_bmi"),
        pl.col("weight_kg").mean().alias("avg_weight_kg"),
        pl.col("total_steps").mean().alias("avg_daily_steps"),
        *[pl.col(tier).mean().alias(f"avg_{tier}") for tier in ACTIVITY_TIERS],
        pl.col("calories").mean().alias("avg_calories"),
    ]

    summary = (
        daily
        .group_by("user_id")
        .agg(counts + averages)
        .with_columns([pl.col(c).cast(pl.Int64) for c in COUNT_COLUMNS])
        .sort("user_id")
    )

    print(f"[features] {summary.height} users summarized from {daily.height} user-days")
    return summary


def user_stat(summary: pl.DataFrame, user_id: int, column: str):
    """Return one user's statistic, raising MissingDataError when it is "no data"."""
    row = summary.filter(pl.col("user_id") == user_id)
    if row.height == 0:
        raise KeyError(f"unknown user {user_id}")

    value = row[column][0]
    if value is None:
        raise MissingDataError(user_id, column)
    return value
