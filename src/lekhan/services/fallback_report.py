from __future__ import annotations

"""Deterministic report synthesis used when the generative backend fails.

Everything here is plain string interpolation over the event snapshot: no
randomness and no backend calls, so the same event rendered on the same day
always produces the same document.
"""

from datetime import date, datetime
from typing import List, Optional, Sequence

from ..domain.report_models import (
    AchievementBlock,
    ContentBlock,
    EventRecord,
    ImageBlock,
    QuoteBlock,
    TextBlock,
)
from .formatting import format_coordinators, format_date, or_placeholder


FILLER_PARAGRAPH = (
    "## Additional Event Content\n"
    "Detailed proceedings and activities were conducted as planned, contributing to the overall "
    "success of the event."
)


def compute_duration(start: date, end: date) -> str:
    """Label the span between ``start`` and ``end``.

    Whole-day differences: 0 -> ``one-day``, 1 -> ``two-day``, 2..7 ->
    ``<n>-day``, anything longer -> ``multi-day``. The number in ``<n>-day``
    is the day difference, so 10 to 12 January reads ``2-day``.
    """
    start_day = start.date() if isinstance(start, datetime) else start
    end_day = end.date() if isinstance(end, datetime) else end
    days = abs((end_day - start_day).days)
    if days == 0:
        return "one-day"
    if days == 1:
        return "two-day"
    if days <= 7:
        return f"{days}-day"
    return "multi-day"


def _render_image_block(block: ImageBlock) -> str:
    lines = [f"## {block.title or 'Event Gallery'}"]
    description = block.caption or block.content
    if description:
        lines.append(description)
    urls = block.all_image_urls()
    if urls:
        noun = "photograph" if len(urls) == 1 else "photographs"
        lines.append(f"*{len(urls)} {noun} ({block.image_layout} layout)*")
    if block.credit:
        lines.append(f"*Photo credit: {block.credit}*")
    if len(lines) == 1:
        lines.append("Photographs captured during the event document its key moments.")
    return "\n".join(lines)


def render_block(block: ContentBlock) -> str:
    if isinstance(block, TextBlock):
        return f"## {block.title}\n{block.content}"
    if isinstance(block, QuoteBlock):
        return f'## Featured Quote\n> "{block.content}"\n> *- {block.title}*'
    if isinstance(block, AchievementBlock):
        return f"## Achievement: {block.title}\n{block.content}"
    if isinstance(block, ImageBlock):
        return _render_image_block(block)
    title = or_placeholder(getattr(block, "title", None), "Additional Content")
    content = or_placeholder(getattr(block, "content", None), "")
    return f"## {title}\n{content}".rstrip()


def render_content_blocks(blocks: Optional[Sequence[ContentBlock]]) -> str:
    if not blocks:
        return FILLER_PARAGRAPH
    return "\n\n".join(render_block(block) for block in blocks)


def _overview_table(event: EventRecord) -> str:
    rows = [
        ("Title", event.title),
        ("Type", event.event_type),
        ("Organizing Body", event.organized_by),
        ("Institution", event.institute),
        ("Duration", f"{format_date(event.start_date)} to {format_date(event.end_date)}"),
        ("Venue", event.venue),
        ("Target Audience", event.target_audience),
        ("Participants", f"{event.participant_count} attendees"),
    ]
    if event.academic_year:
        rows.append(("Academic Year", event.academic_year))
    if event.semester:
        rows.append(("Semester", event.semester))
    lines = ["| Detail | Information |", "| --- | --- |"]
    lines.extend(f"| {label} | {or_placeholder(value)} |" for label, value in rows)
    return "\n".join(lines)


def build_fallback_report(event: EventRecord, today: Optional[date] = None) -> str:
    today = today or date.today()
    duration = compute_duration(event.start_date, event.end_date)
    faculty = format_coordinators(event.faculty_coordinators, empty="the organizing committee")
    institute = event.institute

    sections: List[str] = [
        f"# {event.title} - Event Report",
        "## Introduction\n"
        f'The {event.event_type} titled "{event.title}" was successfully conducted by {event.organized_by} '
        f"at {institute}. This {duration} event demonstrated exceptional organization and achieved its "
        f"educational objectives with remarkable participation from {event.participant_count} attendees.",
        "## Event Overview\n" + _overview_table(event),
        "## Faculty Coordination and Leadership\n"
        f"The event was meticulously coordinated under the guidance of {faculty}. Their dedicated efforts and "
        "strategic planning contributed significantly to the event's success, ensuring smooth execution and "
        "meaningful learning experiences for all participants.",
        "## Event Proceedings and Highlights\n"
        f"The {event.event_type} was structured to maximize participant engagement and learning outcomes. "
        "Key highlights of the event include:\n\n"
        f"- **High Participation:** The event attracted {event.participant_count} participants, demonstrating "
        "strong interest in the subject matter\n"
        "- **Quality Content:** Well-structured sessions that provided valuable insights and practical knowledge\n"
        "- **Professional Organization:** Seamless coordination and execution reflecting institutional excellence\n"
        "- **Interactive Sessions:** Engaging activities that promoted active participation and knowledge sharing"
        "\n\n" + render_content_blocks(event.content_blocks),
        "## Educational Impact and Learning Outcomes\n"
        "The event successfully achieved its educational objectives by:\n"
        "- Providing participants with current industry insights and best practices\n"
        "- Facilitating knowledge transfer through expert interactions\n"
        "- Creating networking opportunities among participants\n"
        "- Enhancing practical skills and theoretical understanding\n"
        "- Contributing to the professional development of attendees",
        "## Participant Engagement and Feedback\n"
        f"The event was designed for {event.target_audience}, and their engagement throughout was evident from:\n"
        "- Active participation in Q&A sessions\n"
        "- Positive response to interactive activities\n"
        "- Constructive feedback and suggestions\n"
        "- Networking and collaboration among attendees\n"
        "- Expressed interest in future similar events",
        "## Institutional Excellence\n"
        f"This event exemplifies {institute}'s commitment to:\n"
        "- **Quality Education:** Providing relevant and timely learning opportunities\n"
        "- **Professional Development:** Supporting skill enhancement and career growth\n"
        "- **Industry Connection:** Bridging academic learning with practical applications\n"
        "- **Community Building:** Fostering collaborative learning environments",
        "## Conclusion and Future Recommendations\n"
        f'The successful execution of "{event.title}" reinforces {institute}\'s position as a leading '
        "educational institution. The event's positive outcomes validate the effectiveness of well-planned "
        "educational initiatives and highlight the importance of continued investment in such programs.\n\n"
        "**Recommendations for Future Events:**\n"
        "- Continue organizing similar events to maintain momentum in professional development\n"
        "- Explore opportunities for follow-up sessions or advanced modules\n"
        "- Consider expanding the target audience to reach more beneficiaries\n"
        "- Document best practices for replication in other departments or programs\n"
        "- Establish feedback mechanisms for continuous improvement",
        f"---\n*Report generated on {format_date(today)} for {institute}*",
    ]
    return "\n\n".join(sections)


def build_summary_document(event: EventRecord, summary: str, today: Optional[date] = None) -> str:
    """Frame an executive summary with the event details block."""
    today = today or date.today()
    lines = [
        f"{event.title} - Event Summary",
        "",
        "Event Details",
        f"Event: {event.title}",
        f"Type: {event.event_type}",
        f"Date: {format_date(event.start_date)} to {format_date(event.end_date)}",
        f"Venue: {event.venue}",
        f"Participants: {event.participant_count}",
        f"Organized by: {event.organized_by}",
        "",
        "Executive Summary",
        summary.strip(),
        "",
        f"Prepared by: {event.institute}",
        f"Report Date: {format_date(today)}",
    ]
    return "\n".join(lines)
