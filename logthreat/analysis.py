import logging
import re
from collections import Counter
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Callable, Dict, Iterable, List, Mapping, Optional, Tuple, Union
from .config import AnalyzerConfig, DEFAULT_CONFIG
from .models import (
    AnalysisResult,
    DistributionEntry,
    LogFile,
    SeveritySummary,
    ThreatEvent,
    TimelineBucket,
    TopAddress,
)
from .parser import (
    FALLBACK_TS_FORMAT,
    extract_address,
    extract_timestamp,
    split_lines,
    timestamp_hour,
)

logger = logging.getLogger(__name__)

PORT_REGEX = re.compile(r"port\s+\d+", re.IGNORECASE)
DOS_WORD_REGEX = re.compile(r"\b(timeout|refused|unavailable)\b", re.IGNORECASE)
SUSPICIOUS_WORD_REGEX = re.compile(r"\b(blocked|denied|rejected)\b", re.IGNORECASE)

DISTRIBUTION_NAMES = (
    ('brute-force', 'Brute Force'),
    ('scan', 'Port Scanning'),
    ('dos', 'DoS Attempts'),
    ('suspicious', 'Suspicious Activity'),
)


def _is_brute_force(line: str) -> bool:
    low = line.lower()
    return 'failed' in low and ('login' in low or 'password' in low or 'authentication' in low)


def _is_scan(line: str) -> bool:
    return ('scan' in line.lower()
            or ('TCP' in line and 'SYN' in line)
            or PORT_REGEX.search(line) is not None)


def _is_dos(line: str) -> bool:
    low = line.lower()
    return ('dos' in low
            or 'flood' in low
            or ('HTTP' in line and '500' in line)
            or DOS_WORD_REGEX.search(line) is not None)


def _is_suspicious(line: str) -> bool:
    low = line.lower()
    return ('suspicious' in low
            or 'malware' in low
            or 'virus' in low
            or SUSPICIOUS_WORD_REGEX.search(line) is not None)


def _brute_force_severity(count: int, config: AnalyzerConfig) -> str:
    if count > config.critical_threshold:
        return 'critical'
    if count > config.high_threshold:
        return 'high'
    return 'medium'


@dataclass(frozen=True)
class ThreatRule:
    kind: str
    id_suffix: str
    matches: Callable[[str], bool]
    severity: Callable[[int, AnalyzerConfig], str]
    timeline_field: Optional[str]  # 'attacks' | 'scans' | None
    description: str
    counts_attempts: bool = False


# Evaluated in this order for every line; each match emits its own event.
RULES: Tuple[ThreatRule, ...] = (
    ThreatRule('brute-force', '', _is_brute_force, _brute_force_severity, 'attacks',
               'Failed authentication attempt detected from {address}', counts_attempts=True),
    ThreatRule('scan', '-scan', _is_scan, lambda count, config: 'high', 'scans',
               'Port scanning activity detected from {address}'),
    ThreatRule('dos', '-dos', _is_dos, lambda count, config: 'critical', 'attacks',
               'Potential DoS attack detected from {address}'),
    ThreatRule('suspicious', '-suspicious', _is_suspicious, lambda count, config: 'medium', None,
               'Suspicious activity detected from {address}'),
)


def timeline_label(hour: int, bucket_hours: int = 4) -> str:
    return f"{hour // bucket_hours * bucket_hours:02d}:00"


def empty_timeline(bucket_hours: int = 4) -> Dict[str, TimelineBucket]:
    return {
        timeline_label(h, bucket_hours): TimelineBucket(label=timeline_label(h, bucket_hours))
        for h in range(0, 24, bucket_hours)
    }


def classify_location(address: str, internal_prefixes: Iterable[str] = DEFAULT_CONFIG.internal_prefixes) -> str:
    return 'Internal' if address.startswith(tuple(internal_prefixes)) else 'External'


def summarize(events: List[ThreatEvent]) -> SeveritySummary:
    by_severity = Counter(e.severity for e in events)
    return SeveritySummary(
        total=len(events),
        critical=by_severity['critical'],
        high=by_severity['high'],
        medium=by_severity['medium'],
        low=by_severity['low'],
    )


def top_addresses(counts: Dict[str, int], limit: int = 5,
                  internal_prefixes: Iterable[str] = DEFAULT_CONFIG.internal_prefixes) -> List[TopAddress]:
    # sorted() is stable, so ties keep first-seen order
    ranked = sorted(counts.items(), key=lambda kv: kv[1], reverse=True)[:limit]
    return [
        TopAddress(address=ip, attempts=n, location=classify_location(ip, internal_prefixes))
        for ip, n in ranked
    ]


def threat_distribution(events: List[ThreatEvent]) -> List[DistributionEntry]:
    by_kind = Counter(e.kind for e in events)
    return [DistributionEntry(name=name, count=by_kind[kind]) for kind, name in DISTRIBUTION_NAMES]


def _classify_line(line: str, line_id: str, address_counts: Dict[str, int],
                   timeline: Dict[str, TimelineBucket], fallback_ts: str,
                   config: AnalyzerConfig) -> List[ThreatEvent]:
    address = extract_address(line)
    timestamp = extract_timestamp(line)
    inferred = timestamp is None
    if inferred:
        timestamp = fallback_ts

    # every line from a known address counts, matched or not
    if address != 'unknown':
        address_counts[address] = address_counts.get(address, 0) + 1
    running = address_counts.get(address, 0)

    events: List[ThreatEvent] = []
    for rule in RULES:
        if not rule.matches(line):
            continue
        events.append(ThreatEvent(
            id=line_id + rule.id_suffix,
            kind=rule.kind,
            severity=rule.severity(running, config),
            source_address=address,
            timestamp=timestamp,
            timestamp_inferred=inferred,
            description=rule.description.format(address=address),
            attempt_count=max(running, 1) if rule.counts_attempts else 1,
        ))
        if rule.timeline_field:
            hour = timestamp_hour(timestamp)
            if hour is not None:
                bucket = timeline.get(timeline_label(hour, config.bucket_hours))
                if bucket is not None:
                    setattr(bucket, rule.timeline_field, getattr(bucket, rule.timeline_field) + 1)
    return events


def classify(files: Iterable[Union[LogFile, Mapping]], *, now: Optional[datetime] = None,
             config: AnalyzerConfig = DEFAULT_CONFIG) -> AnalysisResult:
    """Classify log lines into threat events and aggregate them.

    Files are scanned in the order given, then line by line. That order matters:
    a brute-force event's ``attempt_count`` (and so its severity) is the running
    number of lines seen from its address up to that point.

    Parameters
    ----------
    files : Iterable[LogFile | Mapping]
        Input records. Records without content are skipped.
    now : Optional[datetime]
        Time stamped on lines without a recognized timestamp. Defaults to the
        current UTC time, read once per call.
    config : AnalyzerConfig
        Thresholds, bucket width and internal-address prefixes.

    Never raises on malformed text; lines that match nothing yield no events.
    """
    records = [f if isinstance(f, LogFile) else LogFile.model_validate(f) for f in files]
    if now is None:
        now = datetime.now(timezone.utc)
    fallback_ts = now.strftime(FALLBACK_TS_FORMAT)

    events: List[ThreatEvent] = []
    address_counts: Dict[str, int] = {}
    timeline = empty_timeline(config.bucket_hours)

    for file_index, log_file in enumerate(records):
        if not log_file.content:
            continue
        logger.debug("Analyzing file: %s", log_file.name)
        for line_index, line in enumerate(split_lines(log_file.content)):
            if not line.strip():
                continue
            events.extend(_classify_line(
                line, f"{file_index}-{line_index}", address_counts, timeline, fallback_ts, config))

    logger.info("Analysis complete: %d threats found in %d files", len(events), len(records))
    return AnalysisResult(
        events=events,
        summary=summarize(events),
        top_addresses=top_addresses(address_counts, config.top_n, config.internal_prefixes),
        timeline=list(timeline.values()),
        distribution=threat_distribution(events),
        files_analyzed=len(records),
    )
