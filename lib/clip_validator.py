"""Clip timing diagnostics.

Flags clips whose start/end offsets look corrupted: negative or zero
durations, clips that are implausibly long or short, start offsets deep into
a video, and values that look like minutes multiplied by 3600 instead of 60.
The checks are advisory; nothing here blocks a write or mutates a clip.
"""

from dataclasses import dataclass, field
from typing import Iterable, List

SEVERITY_LOW = "low"
SEVERITY_MEDIUM = "medium"
SEVERITY_HIGH = "high"

_SEVERITY_RANK = {SEVERITY_LOW: 0, SEVERITY_MEDIUM: 1, SEVERITY_HIGH: 2}

MAX_DURATION_SECONDS = 1800
SHORT_DURATION_SECONDS = 30
LATE_START_SECONDS = 14400
CONVERSION_CHECK_FLOOR = 7200

_ACTIONS = {
    SEVERITY_HIGH: "Review immediately - likely data corruption",
    SEVERITY_MEDIUM: "Review when convenient - unusual but might be valid",
    SEVERITY_LOW: "No action needed",
}


@dataclass
class ClipTiming:
    id: str
    start_time_seconds: int
    end_time_seconds: int
    episode: str = ""
    title: str = ""


@dataclass
class ClipValidationResult:
    is_valid: bool
    issues: List[str]
    severity: str
    suggested_action: str

    def to_dict(self) -> dict:
        return {
            "isValid": self.is_valid,
            "issues": list(self.issues),
            "severity": self.severity,
            "suggestedAction": self.suggested_action,
        }


@dataclass
class FlaggedClip:
    clip: object
    validation: ClipValidationResult


@dataclass
class BatchValidationReport:
    valid_clips: list = field(default_factory=list)
    flagged_clips: List[FlaggedClip] = field(default_factory=list)
    total: int = 0
    high_severity: int = 0
    medium_severity: int = 0
    low_severity: int = 0

    @property
    def valid(self) -> int:
        return len(self.valid_clips)

    @property
    def flagged(self) -> int:
        return len(self.flagged_clips)

    def summary(self) -> dict:
        return {
            "total": self.total,
            "valid": self.valid,
            "flagged": self.flagged,
            "highSeverity": self.high_severity,
            "mediumSeverity": self.medium_severity,
            "lowSeverity": self.low_severity,
        }


def _escalate(current: str, candidate: str) -> str:
    if _SEVERITY_RANK[candidate] > _SEVERITY_RANK[current]:
        return candidate
    return current


def _suspected_conversion(label: str, value: int):
    """Return an issue message if value looks like minutes*3600 + seconds."""
    if value <= CONVERSION_CHECK_FLOOR:
        return None
    possible_minutes = value // 3600
    remainder = value % 3600
    if remainder < 60 and possible_minutes < 90:
        return (
            f"{label} time might be incorrectly converted: {value}s could be "
            f"{possible_minutes}:{remainder:02d} ({possible_minutes}m {remainder}s)"
        )
    return None


def validate_clip_timing(clip) -> ClipValidationResult:
    """Inspect a clip's start/end seconds and grade anything suspicious.

    ``clip`` is anything with ``start_time_seconds`` and ``end_time_seconds``
    attributes. Severity is the highest of the triggered checks.
    """
    start = clip.start_time_seconds
    end = clip.end_time_seconds
    duration = end - start
    issues = []
    severity = SEVERITY_LOW

    if duration < 0:
        issues.append(f"Negative duration: End time ({end}s) is before start time ({start}s)")
        severity = _escalate(severity, SEVERITY_HIGH)

    if duration == 0:
        issues.append("Zero duration: Start and end times are identical")
        severity = _escalate(severity, SEVERITY_MEDIUM)

    if duration > MAX_DURATION_SECONDS:
        issues.append(
            f"Unusually long clip: {duration // 60} minutes (typical testimonies are 1-10 minutes)"
        )
        severity = _escalate(severity, SEVERITY_HIGH)

    if 0 < duration < SHORT_DURATION_SECONDS:
        issues.append(f"Very short clip: {duration} seconds (might be too brief for a testimony)")
        severity = _escalate(severity, SEVERITY_LOW)

    if start > LATE_START_SECONDS:
        issues.append(
            f"Very late start time: {start // 3600}h {(start % 3600) // 60}m into video "
            f"(might be conversion error)"
        )
        severity = _escalate(severity, SEVERITY_HIGH)

    for label, value in (("Start", start), ("End", end)):
        message = _suspected_conversion(label, value)
        if message:
            issues.append(message)
            severity = _escalate(severity, SEVERITY_MEDIUM)

    return ClipValidationResult(
        is_valid=not issues,
        issues=issues,
        severity=severity,
        suggested_action=_ACTIONS[severity],
    )


def batch_validate_clips(clips: Iterable) -> BatchValidationReport:
    """Split clips into valid and flagged, counting flagged ones by severity."""
    report = BatchValidationReport()
    for clip in clips:
        report.total += 1
        validation = validate_clip_timing(clip)
        if validation.is_valid:
            report.valid_clips.append(clip)
            continue
        report.flagged_clips.append(FlaggedClip(clip=clip, validation=validation))
        if validation.severity == SEVERITY_HIGH:
            report.high_severity += 1
        elif validation.severity == SEVERITY_MEDIUM:
            report.medium_severity += 1
        else:
            report.low_severity += 1
    return report
