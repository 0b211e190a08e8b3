"""
Configuration management for the Medicare physician panel report.

Handles paths, constants, and loading of YAML configuration files.
"""

import logging
from pathlib import Path
from typing import Any

import yaml

logger = logging.getLogger(__name__)

# Project root directory
PROJECT_ROOT = Path(__file__).parent.parent.resolve()

# Data directories
DATA_DIR = PROJECT_ROOT / "data"
RAW_DATA_DIR = DATA_DIR / "raw"
CMS_RAW_DIR = RAW_DATA_DIR / "cms"

# Config directory
CONFIG_DIR = PROJECT_ROOT / "config"

# Output directories
OUTPUTS_DIR = PROJECT_ROOT / "outputs"
PLOTS_DIR = OUTPUTS_DIR / "plots"
TABLES_DIR = OUTPUTS_DIR / "tables"

# Source file patterns, tried in order ({year} is substituted)
CMS_FILE_PATTERNS = [
    "MUP_PHY_R*_{year}*Prov.csv",
    "*{year}*Prov*.csv",
]

# CMS "by Provider" PUF column -> canonical column
CMS_COLUMNS = {
    "Rndrng_NPI": "npi",
    "Rndrng_Prvdr_Crdntls": "credentials",
    "Rndrng_Prvdr_State_Abrvtn": "state",
    "Rndrng_Prvdr_Type": "specialty",
    "Tot_Sbmtd_Chrg": "submitted_charge",
    "Tot_Mdcr_Alowd_Amt": "allowed_amount",
}

# Canonical columns holding amounts (cast to DOUBLE on load)
AMOUNT_COLUMNS = ["submitted_charge", "allowed_amount"]

# Report defaults
DEFAULT_YEARS = (2022, 2023)
DEFAULT_TARGET_STATES = ("RI", "NH")
N_TARGET_STATES = 2
DEFAULT_TOP_SPECIALTIES = 3


def load_yaml_config(config_name: str) -> dict[str, Any]:
    """
    Load a YAML configuration file from the config directory.

    Args:
        config_name: Name of the config file (with or without .yaml extension)

    Returns:
        Dictionary containing the configuration
    """
    if not config_name.endswith(".yaml"):
        config_name = f"{config_name}.yaml"

    config_path = CONFIG_DIR / config_name

    if not config_path.exists():
        raise FileNotFoundError(f"Configuration file not found: {config_path}")

    with open(config_path, "r", encoding="utf-8") as f:
        return yaml.safe_load(f) or {}


def get_report_config() -> dict[str, Any]:
    """
    Load the report configuration, filling in defaults for missing keys.

    Returns:
        Dictionary with years, target_states, top_specialties, columns
        and (optionally) credential_rules
    """
    try:
        config = load_yaml_config("report")
    except FileNotFoundError as e:
        logger.warning(f"{e}; using built-in defaults")
        config = {}

    config.setdefault("years", list(DEFAULT_YEARS))
    config.setdefault("target_states", list(DEFAULT_TARGET_STATES))
    config.setdefault("top_specialties", DEFAULT_TOP_SPECIALTIES)
    config.setdefault("columns", dict(CMS_COLUMNS))
    return config


def ensure_directories() -> None:
    """Create all required directories if they don't exist."""
    dirs = [
        RAW_DATA_DIR,
        CMS_RAW_DIR,
        OUTPUTS_DIR,
        PLOTS_DIR,
        TABLES_DIR,
    ]
    for d in dirs:
        d.mkdir(parents=True, exist_ok=True)
