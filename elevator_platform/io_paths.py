from __future__ import annotations

"""Centralized path utilities for the project.

These provide absolute `Path` objects to key directories, avoiding
hard-coded relative paths throughout the codebase.
"""

from pathlib import Path


# The package directory is one level below the project root
PROJECT_ROOT = Path(__file__).resolve().parents[1]

# Canonical directories used throughout the project
LOGS_DIR = PROJECT_ROOT / "logs"
CONFIG_YAML = PROJECT_ROOT / "config.yaml"
ENV_FILE = PROJECT_ROOT / ".env"
