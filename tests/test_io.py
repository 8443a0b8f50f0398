"""
Tests for HDF5 event storage.
"""

import h5py
import numpy as np
import pytest

from deexcitation_mc.core.fragment import Fragment
from deexcitation_mc.core.particle import PRODUCT_DTYPE
from deexcitation_mc.io import read_events, write_events


def test_write_and_read_events(tmp_path, handler, nuclear_data):
    events = [handler.break_it_up(Fragment.at_rest(12, 6, 40.0, nuclear_data)) for _ in range(3)]
    events.append([])
    path = tmp_path / "events.h5"

    write_events(path, events)
    loaded = read_events(path)

    assert len(loaded) == 4
    for products, array in zip(events, loaded):
        assert array.dtype == PRODUCT_DTYPE
        assert len(array) == len(products)
        assert array['A'].sum() == sum(p.atomic_mass for p in products)
        assert array['total_energy'] == pytest.approx([p.total_energy for p in products])

    with h5py.File(path, "r") as f:
        assert f.attrs["n_events"] == 4


def test_read_rejects_non_hdf5(tmp_path):
    path = tmp_path / "events.txt"
    path.write_text("not hdf5")
    with pytest.raises(ValueError):
        read_events(path)


def test_read_requires_events_group(tmp_path):
    path = tmp_path / "other.h5"
    with h5py.File(path, "w") as f:
        f.create_dataset("x", data=np.zeros(3))
    with pytest.raises(ValueError):
        read_events(path)
