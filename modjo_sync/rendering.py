"""
Flattens a Modjo call export into the plain-text document stored in Dust.
"""

from .models import CallExport, Speaker


def format_time(seconds: float) -> str:
    """Format an offset in seconds as MM:SS. Minutes are not capped at two digits."""
    minutes = int(seconds // 60)
    remaining_seconds = int(seconds % 60)
    return f"{minutes:02d}:{remaining_seconds:02d}"


def _format_duration(duration: float) -> str:
    # 125.0 -> "125"
    if isinstance(duration, float) and duration.is_integer():
        return str(int(duration))
    return str(duration)


def _speaker_lookup(speakers: list[Speaker]) -> dict[int, Speaker]:
    # First speaker wins on duplicate IDs
    lookup: dict[int, Speaker] = {}
    for speaker in speakers:
        lookup.setdefault(speaker.speaker_id, speaker)
    return lookup


def _format_speaker(speaker: Speaker) -> str:
    line = f"{speaker.speaker_id}: {speaker.name} ({speaker.type})"
    if speaker.email:
        line += f" - Email: {speaker.email}"
    if speaker.phone_number:
        line += f" - Phone: {speaker.phone_number}"
    return line


def render_document(call: CallExport) -> str:
    """
    Render a call as a single text document.

    Sections are, in order: call header, speakers, transcript. Optional
    header fields are omitted when empty. Transcript lines whose speaker
    is not listed fall back to ``Speaker <id>``. The result is stripped of
    leading and trailing whitespace.
    """
    lines = [
        f"Call ID: {call.call_id}",
        f"Title: {call.title}",
        f"Date: {call.start_date}",
        f"Duration: {_format_duration(call.duration)} seconds",
        f"Provider: {call.provider}",
        f"Language: {call.language}",
    ]
    if call.call_crm_id:
        lines.append(f"CRM ID: {call.call_crm_id}")
    if call.recording_url:
        lines.append(f"Recording URL: {call.recording_url}")
    if call.ai_summary:
        lines.append(f"AI Summary: {call.ai_summary}")

    lines.append("")
    lines.append("Speakers:")
    lines.extend(_format_speaker(speaker) for speaker in call.speakers)

    lines.append("")
    lines.append("Transcript:")
    speakers = _speaker_lookup(call.speakers)
    for entry in call.transcript:
        speaker = speakers.get(entry.speaker_id)
        speaker_name = speaker.name if speaker else f"Speaker {entry.speaker_id}"
        lines.append(
            f"[{format_time(entry.start_time)} - {format_time(entry.end_time)}] "
            f"{speaker_name}: {entry.content}"
        )
        if entry.topics:
            lines.append(f"Topics: {', '.join(t.name for t in entry.topics)}")
        lines.append("")

    return "\n".join(lines).strip()
