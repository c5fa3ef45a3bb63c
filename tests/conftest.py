"""
Pytest fixtures for the Fitbit usage analysis tests.

Sources are written as small CSVs in the Fitbit export layout so every
test goes through the same parsing as the real files.
"""
import pytest

from fitbit_usage.features import build_user_usage
from fitbit_usage.joining import join_daily
from fitbit_usage.loading import ACTIVITY_FILE, SLEEP_FILE, WEIGHT_FILE, load_sources

ACTIVITY_HEADER = (
    "Id,ActivityDate,TotalSteps,TotalDistance,TrackerDistance,"
    "VeryActiveMinutes,FairlyActiveMinutes,LightlyActiveMinutes,SedentaryMinutes,Calories"
)
SLEEP_HEADER = "Id,SleepDay,TotalSleepRecords,TotalMinutesAsleep,TotalTimeInBed"
WEIGHT_HEADER = "Id,Date,WeightKg,WeightPounds,Fat,BMI,IsManualReport,LogId"


def activity_row(user, day, steps, very=10, fairly=5, lightly=200, sedentary=1000, calories=2000):
    distance = steps / 1300
    return (
        f"{user},04/{day:02d}/2016,{steps},{distance:.2f},{distance:.2f},"
        f"{very},{fairly},{lightly},{sedentary},{calories}"
    )


def sleep_row(user, day, minutes, in_bed=None, records=1, time="12:00:00 AM"):
    if in_bed is None:
        in_bed = minutes + 30
    return f"{user},04/{day:02d}/2016 {time},{records},{minutes},{in_bed}"


def weight_row(user, day, kg, bmi, time="11:59:59 PM", log_id=None):
    if log_id is None:
        log_id = 1460000000000 + day
    return f"{user},04/{day:02d}/2016 {time},{kg},{kg * 2.20462:.2f},,{bmi},True,{log_id}"


def write_csv(path, header, rows):
    path.write_text("\n".join([header, *rows]) + "\n")
    return str(path)


@pytest.fixture
def write_sources(tmp_path):
    """Write the three Fitbit CSVs into tmp_path and return the directory."""

    def _write(activity=(), sleep=(), weight=()):
        write_csv(tmp_path / ACTIVITY_FILE, ACTIVITY_HEADER, list(activity))
        write_csv(tmp_path / SLEEP_FILE, SLEEP_HEADER, list(sleep))
        write_csv(tmp_path / WEIGHT_FILE, WEIGHT_HEADER, list(weight))
        return str(tmp_path)

    return _write


@pytest.fixture
def summarize(write_sources):
    """Run load -> join -> aggregate over the given rows."""

    def _summarize(activity=(), sleep=(), weight=()):
        data_dir = write_sources(activity, sleep, weight)
        daily = join_daily(*load_sources(data_dir))
        return build_user_usage(daily)

    return _summarize


@pytest.fixture
def tiered_sources(write_sources):
    """
    Nine users over 20 days in three obvious usage groups:
    users 1-3 wear the tracker a few days and never log sleep or weight,
    users 4-6 about half the time with some sleep, users 7-9 every day
    with sleep every night and a few weigh-ins.
    """
    activity, sleep, weight = [], [], []
    plans = {
        1: (2, 0), 2: (3, 0), 3: (4, 0),
        4: (10, 6), 5: (11, 7), 6: (12, 8),
        7: (20, 20), 8: (19, 20), 9: (20, 18),
    }
    for user, (step_days, sleep_days) in plans.items():
        for day in range(1, 21):
            steps = 6000 + user * 100 if day <= step_days else 0
            activity.append(activity_row(user, day, steps))
            if day <= sleep_days:
                sleep.append(sleep_row(user, day, 420 + user))
        if user >= 7:
            weight.append(weight_row(user, 1, 70.0 + user, 24.0))
            weight.append(weight_row(user, 15, 70.5 + user, 24.2))

    return write_sources(activity, sleep, weight)
