"""Ambulance and questionnaire records and their JSON form."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import Any, Mapping

ZERO_TIME = datetime(1, 1, 1, tzinfo=timezone.utc)

_TIMESTAMP = re.compile(
    r"^(\d{4})-(\d{2})-(\d{2})[Tt](\d{2}):(\d{2}):(\d{2})"
    r"(?:\.(\d+))?([Zz]|[+-]\d{2}:\d{2})$"
)


def _parse_timestamp(text: str) -> datetime:
    """Parse an RFC 3339 timestamp; a zone designator is required."""
    match = _TIMESTAMP.match(text)
    if match is None:
        raise ValueError(f"invalid timestamp {text!r}")
    year, month, day, hour, minute, second, fraction, zone = match.groups()
    microsecond = int((fraction or "")[:6].ljust(6, "0"))
    if zone in ("Z", "z"):
        tz = timezone.utc
    else:
        sign = -1 if zone[0] == "-" else 1
        hours, minutes = int(zone[1:3]), int(zone[4:6])
        tz = timezone(sign * timedelta(hours=hours, minutes=minutes))
    try:
        return datetime(
            int(year), int(month), int(day),
            int(hour), int(minute), int(second), microsecond, tzinfo=tz,
        )
    except ValueError as exc:
        raise ValueError(f"invalid timestamp {text!r}: {exc}") from exc


def _format_timestamp(value: datetime) -> str:
    """Format a datetime as RFC 3339 with trimmed fractional seconds."""
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    text = value.replace(microsecond=0, tzinfo=None).isoformat()
    fraction = f"{value.microsecond:06d}".rstrip("0")
    if fraction:
        text += "." + fraction
    offset = value.utcoffset() or timedelta(0)
    if offset == timedelta(0):
        return text + "Z"
    sign = "-" if offset < timedelta(0) else "+"
    total_minutes = abs(int(offset.total_seconds())) // 60
    return f"{text}{sign}{total_minutes // 60:02d}:{total_minutes % 60:02d}"


def _require_mapping(data: Any, what: str) -> Mapping[str, Any]:
    if not isinstance(data, Mapping):
        raise ValueError(f"{what} must be a JSON object")
    return data


def _string(data: Mapping[str, Any], key: str) -> str:
    value = data.get(key)
    if value is None:
        return ""
    if not isinstance(value, str):
        raise ValueError(f"field {key!r} must be a string")
    return value


@dataclass
class Questionnaire:
    """A patient's questionnaire entry kept by an ambulance."""

    id: str = ""
    name: str = ""
    patient_id: str = ""
    last_modified: datetime = ZERO_TIME
    questions: list[str] | None = None

    @classmethod
    def from_dict(cls, data: Any) -> Questionnaire:
        """Build an entry from its JSON object; unknown keys are ignored."""
        data = _require_mapping(data, "questionnaire")
        raw_time = data.get("lastModified")
        if raw_time is None:
            last_modified = ZERO_TIME
        elif isinstance(raw_time, str):
            last_modified = _parse_timestamp(raw_time)
        else:
            raise ValueError("field 'lastModified' must be a string")

        raw_questions = data.get("questions")
        if raw_questions is None:
            questions = None
        elif isinstance(raw_questions, list) and all(
            isinstance(answer, str) for answer in raw_questions
        ):
            questions = list(raw_questions)
        else:
            raise ValueError("field 'questions' must be a list of strings")

        return cls(
            id=_string(data, "id"),
            name=_string(data, "name"),
            patient_id=_string(data, "patientId"),
            last_modified=last_modified,
            questions=questions,
        )

    def to_dict(self) -> dict[str, Any]:
        """Return the JSON object for this entry."""
        return {
            "id": self.id,
            "name": self.name,
            "patientId": self.patient_id,
            "lastModified": _format_timestamp(self.last_modified),
            "questions": None if self.questions is None else list(self.questions),
        }


@dataclass
class Ambulance:
    """An ambulance with its list of questionnaire entries."""

    id: str = ""
    name: str = ""
    room_number: str = ""
    questionnaires: list[Questionnaire] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Any) -> Ambulance:
        """Build an ambulance from its JSON object; unknown keys are ignored."""
        data = _require_mapping(data, "ambulance")
        raw_entries = data.get("questionnaires")
        if raw_entries is None:
            entries: list[Questionnaire] = []
        elif isinstance(raw_entries, list):
            entries = [Questionnaire.from_dict(entry) for entry in raw_entries]
        else:
            raise ValueError("field 'questionnaires' must be a list")
        return cls(
            id=_string(data, "id"),
            name=_string(data, "name"),
            room_number=_string(data, "roomNumber"),
            questionnaires=entries,
        )

    def to_dict(self) -> dict[str, Any]:
        """Return the JSON object; an empty entry list is left out."""
        result: dict[str, Any] = {
            "id": self.id,
            "name": self.name,
            "roomNumber": self.room_number,
        }
        if self.questionnaires:
            result["questionnaires"] = [entry.to_dict() for entry in self.questionnaires]
        return result