"""
HDF5 storage of de-excitation events.

Layout:
    /events/<index>   PRODUCT_DTYPE dataset with the products of one event
    attrs             package version and event count
"""

import logging
from importlib.metadata import PackageNotFoundError, version
from pathlib import Path
from typing import List, Sequence, Union

import h5py
import numpy as np

from deexcitation_mc.core.particle import PRODUCT_DTYPE, ReactionProduct, products_to_array

logger = logging.getLogger(__name__)

try:
    PACKAGE_VERSION = version("deexcitation_mc")
except PackageNotFoundError:
    PACKAGE_VERSION = "0.0.0-dev"


def write_events(filepath: Union[str, Path],
                 events: Sequence[Sequence[ReactionProduct]],
                 compression: str = 'gzip') -> None:
    """
    Write events of reaction products to an HDF5 file (overwrites).

    Parameters:
        filepath: Output file
        events: Products per event
        compression: h5py compression filter
    """
    logger.info("Writing %d events to %s", len(events), filepath)
    with h5py.File(filepath, "w") as f:
        f.attrs["version"] = PACKAGE_VERSION
        f.attrs["n_events"] = len(events)
        group = f.create_group("events")
        for i, products in enumerate(events):
            data = products_to_array(products)
            # Empty datasets cannot be chunked
            group.create_dataset(str(i), data=data,
                                 compression=compression if len(data) else None)


def read_events(filepath: Union[str, Path]) -> List[np.ndarray]:
    """
    Read events written by `write_events`.

    Returns:
        One PRODUCT_DTYPE array per event, in written order

    Raises:
        ValueError: The file is not a product HDF5 file
    """
    filepath = Path(filepath)
    if not h5py.is_hdf5(filepath):
        raise ValueError(f"Not an HDF5 file: {filepath}")

    with h5py.File(filepath, "r") as f:
        if "events" not in f:
            raise ValueError(f"No events group in {filepath}")
        group = f["events"]
        n_events = int(f.attrs.get("n_events", len(group)))
        events = [np.asarray(group[str(i)][()], dtype=PRODUCT_DTYPE) for i in range(n_events)]

    logger.info("Read %d events from %s", len(events), filepath)
    return events
