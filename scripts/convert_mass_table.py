"""
Convert a nuclear mass table from CSV to binary NumPy format.

The CSV holds rows of A, Z, mass [MeV] and an optional natural abundance,
with an optional header line. NuclearData reads the resulting .npy directly,
which avoids re-parsing the text table every time a handler is built.

Usage:
    python scripts/convert_mass_table.py masses.csv [masses.npy]
"""

import numpy as np
from pathlib import Path
import time
import sys

# Add parent directory to path to import deexcitation_mc
sys.path.insert(0, str(Path(__file__).parent.parent))

from deexcitation_mc.core.nuclear_data import NuclearData


def convert_csv_to_npy(csv_file, npy_file=None):
    """
    Convert one mass table and check that both forms load identically.

    Parameters:
        csv_file: Comma-separated mass table
        npy_file: Output path (defaults to csv_file with a .npy suffix)

    Returns:
        Path of the written .npy file
    """
    csv_path = Path(csv_file)
    npy_path = Path(npy_file) if npy_file is not None else csv_path.with_suffix('.npy')

    print(f"Processing: {csv_path.name}")

    start = time.time()
    from_text = NuclearData(mass_file=csv_path)
    time_text = time.time() - start

    with open(csv_path, 'r') as f:
        first_line = f.readline()
    has_header = any(c.isalpha() for c in first_line)
    data = np.loadtxt(csv_path, delimiter=',', comments='#', ndmin=2,
                      skiprows=1 if has_header else 0)
    np.save(npy_path, data)

    start = time.time()
    from_binary = NuclearData(mass_file=npy_path)
    time_binary = time.time() - start

    for row in data:
        A, Z = int(row[0]), int(row[1])
        assert from_text.nuclear_mass(Z, A) == from_binary.nuclear_mass(Z, A), \
            f"Mass mismatch for A={A}, Z={Z}"

    print(f"  Nuclides: {data.shape[0]} ({data.shape[1]} columns)")
    print(f"  Text load: {time_text*1000:.1f}ms")
    print(f"  Binary load: {time_binary*1000:.1f}ms")
    print(f"  ✓ Saved: {npy_path.name}\n")

    return npy_path


if __name__ == "__main__":
    if len(sys.argv) < 2:
        print(__doc__)
        sys.exit(1)

    convert_csv_to_npy(*sys.argv[1:3])
    print("Pass the .npy file as nucleiCsv to create_handler to use it.")
