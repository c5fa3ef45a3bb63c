import os
import matplotlib
matplotlib.use("Agg")  # headless save
import matplotlib.pyplot as plt
import polars as pl

from fitbit_usage.clustering import FEATURES, USAGE_LABELS, cluster_profile
from fitbit_usage.errors import MissingDataError
from fitbit_usage.features import COUNT_COLUMNS, user_stat

HISTOGRAM_PNG = "usage_days_histograms.png"
CLUSTERS_PNG = "usage_clusters.png"
STEPS_PNG = "steps_by_usage.png"
TABLE_HTML = "usage_summary.html"
SUMMARY_CSV = "user_usage.csv"

NO_DATA = "no data"
USAGE_COLORS = {"Occasional": "tab:blue", "Frequent": "tab:orange", "Heavy": "tab:green"}

TABLE_COLUMNS = [
    "user_id",
    "usage",
    *COUNT_COLUMNS,
    "avg_daily_steps",
    "avg_sleep_hours",
    "std_sleep_hours",
    "avg_bmi",
]


def _save(fig, out_dir: str, name: str) -> str:
    path = os.path.join(out_dir, name)
    fig.tight_layout()
    fig.savefig(path, dpi=120)
    plt.close(fig)
    return path


def plot_usage_histograms(summary: pl.DataFrame, out_dir: str) -> str:
    max_days = int(summary["total_days"].max())
    bins = range(0, max_days + 2)

    fig, axes = plt.subplots(1, 2, figsize=(10, 4), sharey=True)
    titles = ["Days with steps recorded", "Days with sleep or weight logged"]
    for ax, column, title in zip(axes, FEATURES, titles):
        ax.hist(summary[column].to_numpy(), bins=bins, color="tab:blue", edgecolor="white")
        ax.set_title(title)
        ax.set_xlabel("days")
    axes[0].set_ylabel("users")
    return _save(fig, out_dir, HISTOGRAM_PNG)


def plot_usage_clusters(labeled: pl.DataFrame, out_dir: str) -> str:
    fig, ax = plt.subplots(figsize=(6, 5))
    for label in USAGE_LABELS:
        tier = labeled.filter(pl.col("usage") == label)
        if tier.height == 0:
            continue
        ax.scatter(
            tier[FEATURES[0]].to_numpy(),
            tier[FEATURES[1]].to_numpy(),
            label=f"{label} ({tier.height})",
            color=USAGE_COLORS[label],
            alpha=0.8,
        )
    ax.set_xlabel("days with steps recorded")
    ax.set_ylabel("days with sleep or weight logged")
    ax.set_title("Usage tiers (k-means, k=3)")
    ax.legend()
    return _save(fig, out_dir, CLUSTERS_PNG)


def plot_steps_by_usage(labeled: pl.DataFrame, out_dir: str) -> str:
    profile = cluster_profile(labeled)
    names = profile["usage"].cast(pl.String).to_list()
    # a tier without any step data is drawn as a gap, not a zero bar
    steps = profile["mean_daily_steps"].fill_null(float("nan")).to_numpy()

    fig, ax = plt.subplots(figsize=(6, 4))
    ax.bar(names, steps, color=[USAGE_COLORS[n] for n in names])
    ax.set_ylabel("mean daily steps")
    ax.set_title("Daily steps by usage tier")
    return _save(fig, out_dir, STEPS_PNG)


def render_usage_table(labeled: pl.DataFrame) -> str:
    table = labeled.select(TABLE_COLUMNS).to_pandas()
    styler = (
        table.style
        .format(precision=2, na_rep=NO_DATA)
        .hide(axis="index")
        .set_caption("Fitbit usage per user")
    )
    return styler.to_html()


def format_user_stat(summary: pl.DataFrame, user_id: int, column: str, unit: str = "") -> str:
    try:
        value = user_stat(summary, user_id, column)
    except MissingDataError:
        return NO_DATA
    return f"{value:.2f}{unit}"


def print_cluster_profile(profile: pl.DataFrame) -> None:
    print("\n[report] Usage tiers:")
    print(profile)


def print_user_usage(labeled: pl.DataFrame) -> None:
    print("\n[report] Users:")
    for row in labeled.select(["user_id", "usage", *FEATURES]).iter_rows(named=True):
        user_id = row["user_id"]
        sleep = format_user_stat(labeled, user_id, "avg_sleep_hours", " h")
        spread = format_user_stat(labeled, user_id, "std_sleep_hours", " h")
        bmi = format_user_stat(labeled, user_id, "avg_bmi")
        print(
            f"{user_id} [{row['usage']}] steps on {row['activity_days_used']} days, "
            f"sleep/weight on {row['sleep_or_weight_days_used']} days, "
            f"sleep {sleep} (sd {spread}), BMI {bmi}"
        )


def write_report(labeled: pl.DataFrame, out_dir: str) -> list[str]:
    os.makedirs(out_dir, exist_ok=True)

    paths = [
        plot_usage_histograms(labeled, out_dir),
        plot_usage_clusters(labeled, out_dir),
        plot_steps_by_usage(labeled, out_dir),
    ]

    table_path = os.path.join(out_dir, TABLE_HTML)
    with open(table_path, "w") as f:
        f.write(render_usage_table(labeled))
    paths.append(table_path)

    csv_path = os.path.join(out_dir, SUMMARY_CSV)
    labeled.write_csv(csv_path)
    paths.append(csv_path)

    for path in paths:
        print(f"[report] Wrote {path}")
    return paths
