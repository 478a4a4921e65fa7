import os
import tempfile
from pathlib import Path

# the API modules open their store and provider at import time
_DB_DIR = Path(tempfile.mkdtemp(prefix="vitals-tests-"))
os.environ.setdefault("VITALS_DB_URL", f"sqlite:///{_DB_DIR / 'import.db'}")
os.environ.setdefault("AI_PROVIDER", "offline")
