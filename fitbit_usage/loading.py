import os
import polars as pl

from fitbit_usage.errors import ParseError

# Fitbit export file names inside a data directory
ACTIVITY_FILE = "dailyActivity_merged.csv"
SLEEP_FILE = "sleepDay_merged.csv"
WEIGHT_FILE = "weightLogInfo_merged.csv"

DATE_FORMAT = "%m/%d/%Y"                 # 4/12/2016
DATETIME_FORMAT = "%m/%d/%Y %I:%M:%S %p"  # 4/12/2016 12:00:00 AM

KEY = ["user_id", "date"]

# source header -> (column name, dtype)
ACTIVITY_COLUMNS = {
    "Id": ("user_id", pl.Int64),
    "TotalSteps": ("total_steps", pl.Int64),
    "TotalDistance": ("total_distance", pl.Float64),
    "VeryActiveMinutes": ("very_active_minutes", pl.Int64),
    "FairlyActiveMinutes": ("fairly_active_minutes", pl.Int64),
    "LightlyActiveMinutes": ("lightly_active_minutes", pl.Int64),
    "SedentaryMinutes": ("sedentary_minutes", pl.Int64),
    "Calories": ("calories", pl.Int64),
}

SLEEP_COLUMNS = {
    "Id": ("user_id", pl.Int64),
    "TotalMinutesAsleep": ("minutes_asleep", pl.Int64),
    "TotalTimeInBed": ("time_in_bed", pl.Int64),
}

WEIGHT_COLUMNS = {
    "Id": ("user_id", pl.Int64),
    "WeightKg": ("weight_kg", pl.Float64),
    "BMI": ("bmi", pl.Float64),
    "LogId": ("log_id", pl.Int64),
}


def read_source(path: str, source: str = "source") -> pl.DataFrame:
    # everything as text; each used column is cast and checked afterwards
    try:
        return pl.read_csv(path, infer_schema=False)
    except (pl.exceptions.ComputeError, pl.exceptions.NoDataError) as e:
        raise ParseError(source, None, f"unreadable CSV {path}: {e}") from e


def dedupe_rows(df: pl.DataFrame) -> pl.DataFrame:
    """Drop rows identical across every column, keeping the first in file order."""
    return df.unique(keep="first", maintain_order=True)


def parse_source(
    raw: pl.DataFrame,
    source: str,
    columns: dict,
    date_header: str,
    date_format: str,
) -> pl.DataFrame:
    """
    Cast the used columns of a raw (all-text) source and normalize its date.

    Output has `user_id`, `date` (calendar day, time discarded) and
    `logged_at` first, then the renamed value columns. Empty cells stay
    null. A non-empty cell that does not parse, or a missing id/date,
    raises ParseError.
    """
    missing = [h for h in [*columns, date_header] if h not in raw.columns]
    if missing:
        raise ParseError(source, missing[0], f"missing required column(s): {', '.join(missing)}")

    text = pl.col(date_header).str.strip_chars()
    if "%H" in date_format or "%I" in date_format:
        logged_at = text.str.to_datetime(date_format, strict=False)
    else:
        logged_at = text.str.to_date(date_format, strict=False).cast(pl.Datetime("us"))

    parsed = raw.select(
        [
            pl.col(header).str.strip_chars().cast(dtype, strict=False).alias(name)
            for header, (name, dtype) in columns.items()
        ]
        + [logged_at.alias("logged_at")]
    )

    checks = {header: name for header, (name, _dtype) in columns.items()}
    checks[date_header] = "logged_at"
    for header, name in checks.items():
        bad = raw[header].filter(raw[header].is_not_null() & parsed[name].is_null())
        if bad.len() > 0:
            expected = date_format if name == "logged_at" else str(columns[header][1])
            raise ParseError(
                source,
                header,
                f"{bad.len()} value(s) do not match {expected}, first: {bad[0]!r}",
            )

    for header in ("Id", date_header):
        blanks = raw[header].null_count()
        if blanks:
            raise ParseError(source, header, f"{blanks} row(s) have no value")

    value_names = [name for name, _dtype in columns.values() if name != "user_id"]
    return (
        parsed
        .with_columns(pl.col("logged_at").dt.date().alias("date"))
        .select(["user_id", "date", "logged_at", *value_names])
    )


def load_activity(path: str) -> pl.DataFrame:
    raw = read_source(path, "activity")
    deduped = dedupe_rows(raw)
    activity = parse_source(deduped, "activity", ACTIVITY_COLUMNS, "ActivityDate", DATE_FORMAT).drop("logged_at")

    # one activity row per user-day is what the join is keyed on
    clashes = activity.filter(activity.select(KEY).is_duplicated())
    if clashes.height > 0:
        first = clashes.row(0, named=True)
        raise ParseError(
            "activity",
            "ActivityDate",
            f"{clashes.height} conflicting rows for the same user and date, "
            f"first: user {first['user_id']} on {first['date']}",
        )

    print(f"[load] activity: {activity.height} rows, {activity['user_id'].n_unique()} users")
    return activity


def load_sleep(path: str) -> pl.DataFrame:
    raw = read_source(path, "sleep")
    # the export contains literal re-exports of the same measurement
    deduped = dedupe_rows(raw)
    sleep = parse_source(deduped, "sleep", SLEEP_COLUMNS, "SleepDay", DATETIME_FORMAT)

    print(f"[load] sleep: {sleep.height} rows ({raw.height - deduped.height} exact duplicates dropped)")
    return sleep


def load_weight(path: str) -> pl.DataFrame:
    raw = read_source(path, "weight")
    weight = parse_source(raw, "weight", WEIGHT_COLUMNS, "Date", DATETIME_FORMAT)

    print(f"[load] weight: {weight.height} rows")
    return weight


def load_sources(data_dir: str) -> tuple[pl.DataFrame, pl.DataFrame, pl.DataFrame]:
    activity = load_activity(os.path.join(data_dir, ACTIVITY_FILE))
    sleep = load_sleep(os.path.join(data_dir, SLEEP_FILE))
    weight = load_weight(os.path.join(data_dir, WEIGHT_FILE))
    return activity, sleep, weight
