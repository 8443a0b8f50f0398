#!/usr/bin/env python3
"""
Quick test script to verify installation.

Run this after setting up the environment to check everything works.
"""

import sys
import time

print("="*70)
print("deexcitation_mc Installation Test")
print("="*70)

# Test 1: Import packages
print("\n1. Testing imports...")
try:
    import numpy as np
    print("   ✓ NumPy:", np.__version__)
    import scipy
    print("   ✓ SciPy:", scipy.__version__)
    import numba
    print("   ✓ Numba:", numba.__version__)
    import h5py
    print("   ✓ h5py:", h5py.__version__)
    import yaml
    print("   ✓ PyYAML:", yaml.__version__)
except ImportError as e:
    print(f"   ✗ Failed: {e}")
    sys.exit(1)

# Test 2: Import deexcitation_mc
print("\n2. Testing deexcitation_mc imports...")
try:
    from deexcitation_mc import ExcitationHandler, Fragment, create_handler
    print("   ✓ ExcitationHandler imported")
except ImportError as e:
    print(f"   ✗ Failed: {e}")
    sys.exit(1)

# Test 3: Build a handler
print("\n3. Building handler...")
handler = create_handler({'cache': 'lfu', 'seed': 1})
print(f"   ✓ Fermi split cache: {handler.fermi_break_up_model.cache}")

# Test 4: De-excite C-12 @ 50 MeV
print("\n4. De-exciting C-12 @ 50 MeV...")
fragment = Fragment.at_rest(12, 6, 50.0, handler.nuclear_data)
products = handler.break_it_up(fragment)
mass_total = sum(p.atomic_mass for p in products)
charge_total = sum(p.atomic_number for p in products)
print(f"   Products: {[p.definition.name for p in products]}")
if (mass_total, charge_total) == (12, 6):
    print("   ✓ Mass and charge conserved")
else:
    print(f"   ✗ Conservation violated: A={mass_total}, Z={charge_total}")
    sys.exit(1)

# Test 5: Numba JIT compilation (first call compiles the kinematics kernels)
print("\n5. Timing de-excitation...")
start = time.time()
for _ in range(100):
    handler.break_it_up(fragment)
elapsed = (time.time() - start) / 100
print(f"   ✓ {elapsed*1000:.2f} ms per C-12 de-excitation")

# Summary
print("\n" + "="*70)
print("Installation test complete!")
print("="*70)
print("\n✓ All systems operational. Ready to run simulations!")
print("\nNext steps:")
print("  1. Run examples/scripts/fragment_yields.py")
print("  2. Run pytest tests/")
