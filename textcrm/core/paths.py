#!/usr/bin/env python3
"""
paths.py
-------------------
Path constants for the TextCRM project.

The project structure:
    ROOT/
    ├── textcrm/       # Package code
    ├── data/          # User data (message database, contacts)
    └── logs/          # Application logs

Every path can be overridden from the CLI; these are only the defaults.
"""
# --- Annotations ---
from __future__ import annotations

# --- Standard library imports ---
from pathlib import Path


def _get_project_root() -> Path:
    """
    Determine project root directory.

    Assumes this file is at ROOT/textcrm/core/paths.py.
    """
    # paths.py -> core/ -> textcrm/ -> ROOT/
    return Path(__file__).resolve().parent.parent.parent


# ----- Project directory -----
ROOT: Path = _get_project_root()
DATA_DIR = ROOT / "data"

# --- Database ---
DB_DIR = DATA_DIR / "store"
DB_PATH = DB_DIR / "textcrm.db"

# --- Collaborators ---
CONTACTS_PATH = DATA_DIR / "contacts.yaml"
CONFIG_PATH = DATA_DIR / "config.yaml"

# ---- Logs ----
LOG_DIR = ROOT / "logs"
