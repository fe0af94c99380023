import csv
import io
from datetime import date, datetime
from pathlib import Path
from typing import Optional, Union
from .models import AnalysisResult


def report_filename(day: Optional[date] = None) -> str:
    day = day or date.today()
    return f"security_analysis_{day.isoformat()}.csv"


def _write_sections(w, result: AnalysisResult, generated_at: datetime) -> None:
    s = result.summary

    w.writerow(["Security Analysis Report"])
    w.writerow(["Generated on:", generated_at.isoformat(sep=" ", timespec="seconds")])
    w.writerow(["Files Analyzed:", str(result.files_analyzed)])
    w.writerow([""])

    w.writerow(["THREAT SUMMARY"])
    w.writerow(["Total Threats:", str(s.total)])
    w.writerow(["Critical:", str(s.critical)])
    w.writerow(["High:", str(s.high)])
    w.writerow(["Medium:", str(s.medium)])
    w.writerow(["Low:", str(s.low)])
    w.writerow([""])

    w.writerow(["DETAILED THREATS"])
    w.writerow(["ID", "Type", "Severity", "IP Address", "Timestamp", "Description", "Attempts"])
    for e in result.events:
        w.writerow([
            e.id,
            e.kind,
            e.severity,
            e.source_address,
            e.timestamp,
            e.description,
            str(e.attempt_count),
        ])
    w.writerow([""])

    w.writerow(["TOP OFFENDING IPs"])
    w.writerow(["IP Address", "Attempts", "Location"])
    for a in result.top_addresses:
        w.writerow([a.address, str(a.attempts), a.location])
    w.writerow([""])

    w.writerow(["THREAT DISTRIBUTION"])
    w.writerow(["Threat Type", "Count"])
    for d in result.distribution:
        w.writerow([d.name, str(d.count)])
    w.writerow([""])

    w.writerow(["TIMELINE DATA"])
    w.writerow(["Time", "Attacks", "Scans"])
    for b in result.timeline:
        w.writerow([b.label, str(b.attacks), str(b.scans)])


def render_csv(result: AnalysisResult, generated_at: Optional[datetime] = None) -> str:
    """Render the analysis as a sectioned CSV report.

    Every field is quoted and rows end with a bare newline. Sections, in order:
    header, threat summary, detailed threats, top offending IPs, threat
    distribution, timeline.
    """
    buf = io.StringIO()
    w = csv.writer(buf, quoting=csv.QUOTE_ALL, lineterminator="\n")
    _write_sections(w, result, generated_at or datetime.now())
    return buf.getvalue()


def write_csv(
    filepath: Union[str, Path],
    result: AnalysisResult,
    generated_at: Optional[datetime] = None,
) -> Path:
    path = Path(filepath)
    path.parent.mkdir(parents=True, exist_ok=True)

    with path.open("w", newline="", encoding="utf-8") as f:
        w = csv.writer(f, quoting=csv.QUOTE_ALL, lineterminator="\n")
        _write_sections(w, result, generated_at or datetime.now())

    return path
