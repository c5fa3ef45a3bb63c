import polars as pl

from fitbit_usage.loading import KEY


def collapse_weight_logs(weight: pl.DataFrame) -> pl.DataFrame:
    """
    Keep one weight log per user-day.

    The log with the latest timestamp wins; logs with the same timestamp
    fall back to file order (later row wins).
    """
    return (
        weight
        .sort([*KEY, "logged_at"], maintain_order=True)
        .unique(subset=KEY, keep="last", maintain_order=True)
    )


def collapse_sleep_days(sleep: pl.DataFrame) -> pl.DataFrame:
    # exact re-exports are gone already; a differing second row keeps the first
    return sleep.unique(subset=KEY, keep="first", maintain_order=True)


def join_daily(activity: pl.DataFrame, sleep: pl.DataFrame, weight: pl.DataFrame) -> pl.DataFrame:
    """
    Left join sleep and weight onto activity, one row per activity user-day.

    Days without a sleep or weight record get nulls in those columns,
    never zeros.
    """
    sleep_day = collapse_sleep_days(sleep).select([*KEY, "minutes_asleep", "time_in_bed"])
    weight_day = collapse_weight_logs(weight).select([*KEY, "weight_kg", "bmi"])

    daily = (
        activity
        .join(sleep_day, on=KEY, how="left", validate="1:1")
        .join(weight_day, on=KEY, how="left", validate="1:1")
        .sort(KEY)
    )

    print(
        f"[join] {daily.height} user-days "
        f"({daily['minutes_asleep'].is_not_null().sum()} with sleep, "
        f"{daily['weight_kg'].is_not_null().sum()} with weight, "
        f"{weight.height - weight_day.height} same-day weight logs collapsed)"
    )
    return daily
