"""
Tests for the report writer.

Usage:
    pytest tests/test_reporting.py -v
"""
import os

import polars as pl

from fitbit_usage.clustering import classify_users
from fitbit_usage.features import build_user_usage
from fitbit_usage.joining import join_daily
from fitbit_usage.loading import load_sources
from fitbit_usage.reporting import (
    NO_DATA,
    SUMMARY_CSV,
    TABLE_HTML,
    format_user_stat,
    print_user_usage,
    render_usage_table,
    write_report,
)


def _labeled(data_dir):
    return classify_users(build_user_usage(join_daily(*load_sources(data_dir))))


class TestUsageTable:
    def test_missing_values_rendered_as_no_data(self, tiered_sources):
        html = render_usage_table(_labeled(tiered_sources))

        assert "<table" in html
        assert NO_DATA in html
        assert "Occasional" in html

    def test_format_user_stat(self, tiered_sources):
        labeled = _labeled(tiered_sources)

        assert format_user_stat(labeled, 1, "avg_sleep_hours") == NO_DATA
        assert format_user_stat(labeled, 7, "avg_sleep_hours", " h") == "7.12 h"

    def test_print_user_usage(self, tiered_sources, capsys):
        print_user_usage(_labeled(tiered_sources))
        out = capsys.readouterr().out

        assert "[Heavy]" in out
        assert "sleep no data" in out


class TestWriteReport:
    def test_writes_all_outputs(self, tiered_sources, tmp_path):
        out_dir = str(tmp_path / "report")
        paths = write_report(_labeled(tiered_sources), out_dir)

        assert len(paths) == 5
        for path in paths:
            assert os.path.getsize(path) > 0

    def test_csv_round_trips_labels(self, tiered_sources, tmp_path):
        out_dir = str(tmp_path / "report")
        write_report(_labeled(tiered_sources), out_dir)

        written = pl.read_csv(os.path.join(out_dir, SUMMARY_CSV))
        assert written.height == 9
        assert set(written["usage"].to_list()) == {"Occasional", "Frequent", "Heavy"}
        assert os.path.exists(os.path.join(out_dir, TABLE_HTML))
