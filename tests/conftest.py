import sys
from pathlib import Path

# Ensure the top-level modules are importable when running pytest from the repo root.
ROOT = Path(__file__).resolve().parents[1]
for path in (ROOT, ROOT / "tests"):
    if str(path) not in sys.path:
        sys.path.insert(0, str(path))
