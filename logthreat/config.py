import os
from dataclasses import dataclass
from pathlib import Path
from typing import Tuple


@dataclass(frozen=True)
class AnalyzerConfig:
    # top offenders
    top_n: int = 5

    # brute-force escalation: running count strictly above threshold
    high_threshold: int = 5
    critical_threshold: int = 10

    # timeline width in hours (24 / bucket_hours buckets)
    bucket_hours: int = 4

    # plain prefix check, not CIDR
    internal_prefixes: Tuple[str, ...] = ("192.168.", "10.", "172.")


DEFAULT_CONFIG = AnalyzerConfig()

LOG_DIR = Path(os.environ.get("LOGTHREAT_LOG_DIR", "logs"))
LOG_PATTERN = os.environ.get("LOGTHREAT_LOG_PATTERN", "*")
HOST = os.environ.get("LOGTHREAT_HOST", "0.0.0.0")
PORT = int(os.environ.get("LOGTHREAT_PORT", "8000"))
