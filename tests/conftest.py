from __future__ import annotations

import sys
from pathlib import Path

# Make local `src` importable when running from repo checkout
SRC = Path(__file__).resolve().parents[1] / "src"
if SRC.exists() and str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))
