from datetime import date, datetime

from logthreat.analysis import classify
from logthreat.models import LogFile
from logthreat.report import render_csv, report_filename, write_csv

GENERATED = datetime(2024, 3, 16, 12, 0, 0)


def sample_result():
    content = "\n".join([
        "2024-03-16 02:00:00 Failed login from 1.1.1.1",
        '2024-03-16 14:00:00 "quoted" port 80 scan from 8.8.8.8',
    ])
    return classify([LogFile(name="a.log", content=content), LogFile(name="b.log")])


def test_render_csv_sections_in_order():
    lines = render_csv(sample_result(), generated_at=GENERATED).split("\n")
    assert lines[:4] == [
        '"Security Analysis Report"',
        '"Generated on:","2024-03-16 12:00:00"',
        '"Files Analyzed:","2"',
        '""',
    ]
    headers = ['"THREAT SUMMARY"', '"DETAILED THREATS"', '"TOP OFFENDING IPs"',
               '"THREAT DISTRIBUTION"', '"TIMELINE DATA"']
    positions = [lines.index(h) for h in headers]
    assert positions == sorted(positions)
    assert lines[-1] == ""
    assert lines[-2] == '"20:00","0","0"'


def test_render_csv_rows():
    text = render_csv(sample_result(), generated_at=GENERATED)
    assert '"Total Threats:","2"' in text
    assert '"Medium:","1"' in text
    assert '"High:","1"' in text
    assert ('"0-0","brute-force","medium","1.1.1.1","2024-03-16 02:00:00",'
            '"Failed authentication attempt detected from 1.1.1.1","1"') in text
    assert '"8.8.8.8","1","External"' in text
    assert '"Port Scanning","1"' in text
    assert '"00:00","1","0"' in text
    assert '"12:00","0","1"' in text


def test_render_csv_empty_result():
    lines = render_csv(classify([]), generated_at=GENERATED).split("\n")
    start = lines.index('"DETAILED THREATS"')
    assert lines[start + 1] == '"ID","Type","Severity","IP Address","Timestamp","Description","Attempts"'
    assert lines[start + 2] == '""'


def test_write_csv_matches_render(tmp_path):
    result = sample_result()
    path = write_csv(tmp_path / "out" / "report.csv", result, generated_at=GENERATED)
    assert path.read_text(encoding="utf-8") == render_csv(result, generated_at=GENERATED)


def test_report_filename():
    assert report_filename(date(2024, 3, 16)) == "security_analysis_2024-03-16.csv"
