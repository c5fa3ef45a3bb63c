import polars as pl
from sklearn.cluster import KMeans

from fitbit_usage.errors import ConfigurationError

FEATURES = ["activity_days_used", "sleep_or_weight_days_used"]
K = 3
RANDOM_STATE = 42
N_INIT = 10
MAX_ITER = 300

# ascending by mean activity days
USAGE_LABELS = ("Occasional", "Frequent", "Heavy")


def cluster_users(summary: pl.DataFrame, k: int = K, random_state: int = RANDOM_STATE) -> pl.DataFrame:
    """
    Add a `cluster` column from k-means over the two usage-day counts.

    Cluster indices are arbitrary; see label_clusters for the ordering.
    Both features count days, so they are clustered unscaled.
    """
    if k < 1:
        raise ConfigurationError(f"k must be at least 1, got {k}")

    n_users = summary["user_id"].n_unique()
    if n_users < k:
        raise ConfigurationError(f"cannot split {n_users} user(s) into {k} clusters")

    X = summary.select(FEATURES).to_numpy().astype(float)

    km = KMeans(
        n_clusters=k,
        n_init=N_INIT,
        max_iter=MAX_ITER,
        algorithm="lloyd",
        random_state=random_state,
    )
    labels = km.fit_predict(X)

    print(f"[cluster] k={k}, users={n_users}, iterations={km.n_iter_}, inertia={km.inertia_:.2f}")
    return summary.with_columns(pl.Series("cluster", labels).cast(pl.Int32))


def label_clusters(clustered: pl.DataFrame, labels: tuple = USAGE_LABELS) -> pl.DataFrame:
    """
    Name clusters by rank of their mean `activity_days_used`.

    Ties fall back to mean `sleep_or_weight_days_used`, then to the
    cluster index, so the same clustering always gets the same names.
    """
    ranking = (
        clustered
        .group_by("cluster")
        .agg([
            pl.col("activity_days_used").mean().alias("mean_activity_days"),
            pl.col("sleep_or_weight_days_used").mean().alias("mean_sleep_or_weight_days"),
        ])
        .sort(["mean_activity_days", "mean_sleep_or_weight_days", "cluster"])
    )

    if ranking.height > len(labels):
        raise ConfigurationError(f"{ranking.height} clusters but only {len(labels)} labels")

    ranking = ranking.with_columns(
        pl.Series("usage", list(labels[:ranking.height]), dtype=pl.Enum(labels))
    )

    return (
        clustered
        .join(ranking.select(["cluster", "usage"]), on="cluster", how="left")
        .sort("user_id")
    )


def classify_users(summary: pl.DataFrame, k: int = K, random_state: int = RANDOM_STATE) -> pl.DataFrame:
    return label_clusters(cluster_users(summary, k=k, random_state=random_state))


def cluster_profile(labeled: pl.DataFrame) -> pl.DataFrame:
    # one row per usage tier, Occasional first
    return (
        labeled
        .group_by("usage")
        .agg([
            pl.len().alias("users"),
            pl.col("activity_days_used").mean().alias("mean_activity_days"),
            pl.col("sleep_or_weight_days_used").mean().alias("mean_sleep_or_weight_days"),
            pl.col("avg_daily_steps").mean().alias("mean_daily_steps"),
            pl.col("avg_sleep_hours").mean().alias("mean_sleep_hours"),
            pl.col("avg_bmi").mean().alias("mean_bmi"),
        ])
        .sort("usage")
    )
