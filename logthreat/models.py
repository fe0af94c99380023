from pydantic import BaseModel, ConfigDict, Field
from typing import List, Literal, Optional

ThreatKind = Literal['brute-force', 'dos', 'scan', 'suspicious']
Severity = Literal['low', 'medium', 'high', 'critical']
Location = Literal['Internal', 'External']

SEVERITY_ORDER = ('low', 'medium', 'high', 'critical')


class LogFile(BaseModel):
    name: str
    content: Optional[str] = None  # None when the read failed or is pending


class ThreatEvent(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    kind: ThreatKind
    severity: Severity
    source_address: str = 'unknown'
    timestamp: str
    timestamp_inferred: bool = False  # True when stamped with analysis time
    description: str
    attempt_count: int = Field(default=1, ge=1)


class SeveritySummary(BaseModel):
    total: int = 0
    critical: int = 0
    high: int = 0
    medium: int = 0
    low: int = 0


class TopAddress(BaseModel):
    address: str
    attempts: int
    location: Location


class TimelineBucket(BaseModel):
    label: str  # 'HH:00'
    attacks: int = 0
    scans: int = 0


class DistributionEntry(BaseModel):
    name: str
    count: int = 0


class AnalysisResult(BaseModel):
    events: List[ThreatEvent] = []
    summary: SeveritySummary = SeveritySummary()
    top_addresses: List[TopAddress] = []
    timeline: List[TimelineBucket] = []
    distribution: List[DistributionEntry] = []
    files_analyzed: int = 0


class AnalyzeRequest(BaseModel):
    files: List[LogFile]
