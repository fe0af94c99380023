import logging
import re
from pathlib import Path
from typing import List, Optional, Union
from .models import LogFile

logger = logging.getLogger(__name__)

# No octet range check: 999.999.999.999 is accepted.
IPV4_REGEX = re.compile(r"\b(?:[0-9]{1,3}\.){3}[0-9]{1,3}\b")

# Tried in order, first match wins. Each carries the hour in group 'hour'.
# ISO-ish:  2024-03-16 13:55:36 / 2024-03-16T13:55:36
# syslog:   Mar 16 13:55:36
# Apache:   16/Mar/2024:13:55:36
TIMESTAMP_REGEXES = (
    re.compile(r"\d{4}-\d{2}-\d{2}[ T](?P<hour>\d{2}):\d{2}:\d{2}"),
    re.compile(r"[A-Za-z]{3}\s+\d{1,2}\s+(?P<hour>\d{2}):\d{2}:\d{2}"),
    re.compile(r"\d{2}/[A-Za-z]{3}/\d{4}:(?P<hour>\d{2}):\d{2}:\d{2}"),
)

FALLBACK_TS_FORMAT = '%Y-%m-%d %H:%M:%S'


def split_lines(content: str) -> List[str]:
    """Split on '\\n' only, so line indices match the raw text (blank lines included)."""
    return content.split('\n')


def extract_address(line: str) -> str:
    m = IPV4_REGEX.search(line)
    return m.group(0) if m else 'unknown'


def extract_timestamp(line: str) -> Optional[str]:
    for regex in TIMESTAMP_REGEXES:
        m = regex.search(line)
        if m:
            return m.group(0)
    return None


def timestamp_hour(timestamp: str) -> Optional[int]:
    """Hour-of-day of a recognized timestamp, or None if it has no valid hour."""
    for regex in TIMESTAMP_REGEXES:
        m = regex.search(timestamp)
        if m:
            hour = int(m.group('hour'))
            return hour if 0 <= hour < 24 else None
    return None


def read_log_file(path: Union[str, Path]) -> LogFile:
    """Read one log file into an input record.

    Undecodable bytes are dropped. A file that cannot be read comes back with
    ``content=None`` so the classifier skips it instead of failing the run.
    """
    p = Path(path)
    try:
        with open(p, 'r', encoding='utf-8', errors='ignore') as f:
            content = f.read()
    except OSError as e:
        logger.warning("Could not read %s: %s", p, e)
        content = None
    return LogFile(name=p.name, content=content)


def load_log_dir(directory: Union[str, Path], pattern: str = '*') -> List[LogFile]:
    d = Path(directory)
    if not d.is_dir():
        return []
    return [read_log_file(p) for p in sorted(d.glob(pattern)) if p.is_file()]
