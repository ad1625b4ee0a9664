from __future__ import annotations

import sys
from pathlib import Path

# Make ``import grapher`` work from a plain checkout without installing.
_REPO_ROOT = Path(__file__).resolve().parent.parent
if str(_REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(_REPO_ROOT))
