"""Configuration: database paths and scan tuning, overridable from the environment."""

import os


def _env_int(name: str, default: int) -> int:
    raw = os.environ.get(name, "").strip()
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        raise RuntimeError(f"{name} must be an integer, got {raw!r}")


#Configuracion
VERSION = "1.0.0"

DB_PATH = os.environ.get("INSPECTOR_DB", "./blockchain.db")
NODE1_PATH = os.environ.get("INSPECTOR_NODE1", os.path.join(".", "nodes", "node1", "blockchain.db"))
NODE2_PATH = os.environ.get("INSPECTOR_NODE2", os.path.join(".", "nodes", "node2", "blockchain.db"))
NODES_DIR = os.environ.get("INSPECTOR_NODES_DIR", "nodes")
NODE_DB_FILE = "blockchain.db"

#Alturas extra revisadas despues de la ultima buena para detectar huecos al final
SCAN_OVERSCAN = _env_int("INSPECTOR_OVERSCAN", 10)
FUTURE_TOLERANCE_SECONDS = _env_int("INSPECTOR_FUTURE_TOLERANCE", 300)
MAX_AGE_SECONDS = _env_int("INSPECTOR_MAX_AGE", 10 * 365 * 24 * 60 * 60)

SAMPLE_BLOCKS = _env_int("INSPECTOR_SAMPLE_BLOCKS", 10)
SAMPLE_BLOCK_INTERVAL = 10

GENESIS_PREV_HASH = "0"
