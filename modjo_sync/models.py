"""
Canonical data models for Modjo call exports.
"""

from dataclasses import dataclass, field
from typing import Optional

DOCUMENT_ID_PREFIX = "modjo-transcript-"


def document_id_for(call_id: int) -> str:
    """Destination document ID for a call. Stable across runs."""
    return f"{DOCUMENT_ID_PREFIX}{call_id}"


@dataclass
class Topic:
    topic_id: int
    name: str


@dataclass
class Speaker:
    speaker_id: int
    name: str
    type: str
    email: Optional[str] = None
    phone_number: Optional[str] = None

    @classmethod
    def from_dict(cls, data: dict) -> "Speaker":
        return cls(
            speaker_id=data["speakerId"],
            name=data.get("name") or "",
            type=data.get("type") or "",
            email=data.get("email"),
            phone_number=data.get("phoneNumber"),
        )


@dataclass
class TranscriptEntry:
    """One chronological chunk of the transcript, spoken by a single speaker."""
    start_time: float  # seconds from call start
    end_time: float
    speaker_id: Optional[int]  # may be missing or unknown
    content: str
    topics: list[Topic] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: dict) -> "TranscriptEntry":
        return cls(
            start_time=data.get("startTime") or 0,
            end_time=data.get("endTime") or 0,
            speaker_id=data.get("speakerId"),
            content=data.get("content") or "",
            topics=[
                Topic(topic_id=t.get("topicId"), name=t.get("name") or "")
                for t in data.get("topics") or []
            ],
        )


@dataclass
class CallExport:
    """
    A single call as exported by Modjo, with its relations.

    Speakers and transcript entries keep the order given by the API;
    transcript entries refer to speakers by ``speaker_id`` only.
    """
    call_id: int
    title: str
    start_date: str
    duration: float  # seconds
    provider: str
    language: str
    call_crm_id: Optional[str] = None
    recording_url: Optional[str] = None
    ai_summary: Optional[str] = None
    speakers: list[Speaker] = field(default_factory=list)
    transcript: list[TranscriptEntry] = field(default_factory=list)

    @property
    def document_id(self) -> str:
        return document_id_for(self.call_id)

    @classmethod
    def from_dict(cls, data: dict) -> "CallExport":
        """
        Build from one item of the export endpoint's ``values`` list.

        Missing relations are treated as empty. Raises KeyError when the
        call or one of its speakers lacks an identifier.
        """
        relations = data.get("relations") or {}
        recording = relations.get("recording")
        return cls(
            call_id=data["callId"],
            title=data.get("title") or "",
            start_date=data.get("startDate") or "",
            duration=data.get("duration") or 0,
            provider=data.get("provider") or "",
            language=data.get("language") or "",
            call_crm_id=data.get("callCrmId"),
            recording_url=recording.get("url") if recording else None,
            ai_summary=relations.get("aiSummary"),
            speakers=[Speaker.from_dict(s) for s in relations.get("speakers") or []],
            transcript=[
                TranscriptEntry.from_dict(e) for e in relations.get("transcript") or []
            ],
        )
