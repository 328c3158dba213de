"""Shared pytest fixtures and configuration for the test suite."""

import h5py
import numpy as np
import pytest

from runmerge.adapters.hdf5_io_adapter import write_distribution, write_parameter, write_table

EVENT_DTYPE = np.dtype([("event_id", "<i8"), ("energy", "<f8")])


def make_events(first_id, n_rows):
    """Rows with consecutive ids and an energy derived from the id."""
    rows = np.zeros(n_rows, dtype=EVENT_DTYPE)
    rows["event_id"] = np.arange(first_id, first_id + n_rows)
    rows["energy"] = rows["event_id"] * 0.5
    return rows


def filled(shape, value):
    return np.full(shape, value, dtype=np.float64)


@pytest.fixture
def make_h5(tmp_path):
    """Factory writing an HDF5 file populated by a callback."""

    def _make(name, populate):
        path = tmp_path / name
        with h5py.File(path, "w") as f:
            populate(f)
        return path

    return _make


@pytest.fixture
def four_runs(make_h5):
    """
    Four per-run files with overlapping but not identical content.

    run_0 is the reference. Expected merge results:
    - /N: 3 + 5 + 2 = 10 (missing in run_2)
    - /pt: contents 2, 4, 6 (missing in run_3) -> mean 4
    - /events: 10 rows from run_0 then 7 rows from run_2
    - /sub/eta: contents 1, 3, 5 (sub missing in run_2) -> mean 3
    - /sub/weight: 1.5 + 2.5 + 1.0 = 5.0
    - /sub/deeper/count: 7 + 3 = 10
    - /notes: copied from run_0
    - /only_here: only in run_1, never in the output
    """

    def run_0(f):
        f.attrs["generator"] = "PairGen"
        write_parameter(f, "N", 3, dtype="i4")
        write_distribution(f, "pt", filled(5, 2.0), attrs={"x_edges": [0.0, 1.0, 2.0, 3.0], "title": "pT"})
        write_table(f, "events", make_events(0, 10))
        sub = f.create_group("sub")
        sub.attrs["title"] = "Sub analysis"
        write_distribution(sub, "eta", filled((4, 3), 1.0))
        write_parameter(sub, "weight", 1.5)
        deeper = sub.create_group("deeper")
        write_parameter(deeper, "count", 7, dtype="i8")
        f.create_dataset("notes", data=np.array([1, 2, 3]))

    def run_1(f):
        write_parameter(f, "N", 5, dtype="i8")
        write_distribution(f, "pt", filled(5, 4.0))
        sub = f.create_group("sub")
        write_distribution(sub, "eta", filled((4, 3), 3.0))
        write_parameter(sub, "weight", 2.5)
        write_parameter(f, "only_here", 99.0)
        f.create_dataset("notes", data=np.array([9, 9, 9]))

    def run_2(f):
        write_distribution(f, "pt", filled(5, 6.0))
        write_table(f, "events", make_events(100, 7))

    def run_3(f):
        write_parameter(f, "N", 2.0, dtype="f4")
        sub = f.create_group("sub")
        write_distribution(sub, "eta", filled((4, 3), 5.0))
        write_parameter(sub, "weight", 1.0)
        deeper = sub.create_group("deeper")
        write_parameter(deeper, "count", 3, dtype="i2")

    return [
        make_h5("run_0.h5", run_0),
        make_h5("run_1.h5", run_1),
        make_h5("run_2.h5", run_2),
        make_h5("run_3.h5", run_3),
    ]
