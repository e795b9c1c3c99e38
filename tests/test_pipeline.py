"""End-to-end tests of the two-pass pipeline."""

import logging

import pytest

from asciimap.bounds import Bounds
from asciimap.errors import IOFailure, NoValidDataFound
from asciimap.map_renderer import EMPTY_MAP_NOTICE
from asciimap.pipeline import plot, resolve_bounds


def test_plot_sample_sequential(sample_points_file, make_config):
    result = plot(make_config(sample_points_file))

    assert result.bounds == Bounds(1.0, 9.0, 1.0, 9.0, 6)
    assert result.grid.total() == 6
    assert result.points_placed == 6
    assert " 1.000 W |     3    | 9.000 E" in result.text
    assert result.text.endswith("Legend (Points per cell): ' ': 0  '1': 1  '3': 2")


def test_plot_parallel_matches_sequential(sample_points_file, make_config):
    sequential = plot(make_config(sample_points_file))
    parallel = plot(make_config(sample_points_file, parallel=True, workers=2))

    assert parallel.bounds == sequential.bounds
    assert parallel.grid == sequential.grid
    assert parallel.text == sequential.text


def test_plot_header_only_file_is_fatal(write_file, make_config):
    path = write_file("header.csv", "lat,lon\n")
    with pytest.raises(NoValidDataFound):
        plot(make_config(path))
    with pytest.raises(NoValidDataFound):
        plot(make_config(path, parallel=True, workers=2))


def test_plot_missing_file(temp_dir, make_config):
    with pytest.raises(IOFailure):
        plot(make_config(str(temp_dir / "missing.csv")))


def test_plot_identical_points(write_file, make_config, caplog):
    path = write_file("same.csv", "lat,lon\n" + "5.0,5.0\n" * 4)
    with caplog.at_level(logging.WARNING, logger="asciimap"):
        result = plot(make_config(path))

    assert any("identical" in r.getMessage() for r in caplog.records)
    assert result.grid[2, 5] == 4
    assert result.grid.total() == 4
    assert "|     3    |" in result.text


def test_fixed_bounds_skip_first_pass(sample_points_file, make_config):
    config = make_config(sample_points_file, use_fixed_bounds=True,
                         fixed_min_lat=0.0, fixed_max_lat=10.0, fixed_min_lon=0.0, fixed_max_lon=10.0)
    assert resolve_bounds(config) == Bounds(0.0, 10.0, 0.0, 10.0, 0)

    result = plot(config)
    assert result.points_placed == 6
    assert result.out_of_bounds == 1
    assert "10.0000 N" in result.text


def test_fixed_bounds_with_no_points_inside(sample_points_file, make_config):
    config = make_config(sample_points_file, use_fixed_bounds=True,
                         fixed_min_lat=-50.0, fixed_max_lat=-40.0, fixed_min_lon=0.0, fixed_max_lon=10.0)
    result = plot(config)
    assert result.points_placed == 0
    assert result.text == EMPTY_MAP_NOTICE
