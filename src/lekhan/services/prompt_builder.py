from __future__ import annotations

"""Prompt assembly for report generation and the Lekhan assistant.

All builders are pure: identical inputs (and the same current date where a
report date is embedded) give identical prompt text. Optional values render
as ``Not specified`` so the prompt layout never shifts.
"""

from typing import List, Optional, Sequence

from ..domain.chat_models import ChatTurn
from ..domain.report_models import (
    AchievementBlock,
    BlockContext,
    ContentBlock,
    EventRecord,
    ImageBlock,
    QuoteBlock,
    TextBlock,
)
from .formatting import format_coordinators, format_date, or_placeholder


ASSISTANT_NAME = "Lekhan AI"

REPORT_SECTIONS = (
    ("Introduction", "Context and objectives of the event"),
    ("Event Details", "Comprehensive description of the event proceedings"),
    ("Key Highlights", "Major achievements and memorable moments"),
    ("Participant Engagement", "Description of audience participation and feedback"),
    ("Faculty Coordination", "Recognition of organizing team's efforts"),
    ("Learning Outcomes", "Educational value and knowledge gained"),
    ("Impact and Results", "Concrete outcomes and achievements"),
    ("Conclusion", "Summary of success and future recommendations"),
)

CHAT_PREAMBLE = (
    f"You are {ASSISTANT_NAME}, an intelligent assistant from the Vishvakarma Lekhan platform specialized in "
    'academic event reporting and documentation. Your motto is "Think Less, Report More" - you help users '
    "create professional event reports efficiently with minimal effort.\n\n"
    "Your capabilities include:\n"
    "- Helping with event report creation and formatting\n"
    "- Providing content suggestions for different report sections\n"
    "- Assisting with academic writing and documentation\n"
    "- Answering questions about best practices in event reporting\n"
    "- General assistance with academic and professional writing\n"
    "- Making report generation effortless and professional"
)


def render_block_line(block: ContentBlock) -> str:
    """Single-line rendering of a content block for inclusion in a prompt."""
    if isinstance(block, TextBlock):
        return f"Text Section - {block.title}: {block.content}"
    if isinstance(block, QuoteBlock):
        return f'Quote - {block.title}: "{block.content}"'
    if isinstance(block, AchievementBlock):
        return f"Achievement - {block.title}: {block.content}"
    if isinstance(block, ImageBlock):
        count = len(block.all_image_urls())
        description = block.caption or block.content or "No caption provided"
        label = block.title or "Event Photograph"
        return f"Image - {label}: {description} ({count} image(s), {block.image_layout} layout)"
    title = or_placeholder(getattr(block, "title", None))
    content = or_placeholder(getattr(block, "content", None))
    return f"{title}: {content}"


def render_block_lines(blocks: Sequence[ContentBlock], empty: str = "No additional content blocks provided") -> str:
    if not blocks:
        return empty
    return "\n".join(render_block_line(block) for block in blocks)


def _date_range(event: EventRecord) -> str:
    return f"{format_date(event.start_date)} to {format_date(event.end_date)}"


def build_report_prompt(event: EventRecord) -> str:
    outline = "\n".join(
        f"{index}. **{name}**: {description}" for index, (name, description) in enumerate(REPORT_SECTIONS, start=1)
    )
    return (
        "You are a professional report writer for an educational institution. Generate a comprehensive, "
        "well-structured, and professional event report based on the following details. The report should be "
        "formal, engaging, and suitable for academic documentation.\n\n"
        "EVENT DETAILS:\n"
        f"- Event Title: {or_placeholder(event.title)}\n"
        f"- Tagline: {or_placeholder(event.tagline)}\n"
        f"- Event Type: {or_placeholder(event.event_type)}\n"
        f"- Institute: {or_placeholder(event.institute)}\n"
        f"- Organized By: {or_placeholder(event.organized_by)}\n"
        f"- Academic Year: {or_placeholder(event.academic_year)}\n"
        f"- Semester: {or_placeholder(event.semester)}\n"
        f"- Start Date: {format_date(event.start_date)}\n"
        f"- End Date: {format_date(event.end_date)}\n"
        f"- Venue: {or_placeholder(event.venue)}\n"
        f"- Target Audience: {or_placeholder(event.target_audience)}\n"
        f"- Participant Count: {event.participant_count}\n"
        f"- Faculty Coordinators: {format_coordinators(event.faculty_coordinators)}\n\n"
        "ADDITIONAL CONTENT:\n"
        f"{render_block_lines(event.content_blocks)}\n\n"
        "REPORT STRUCTURE REQUIREMENTS:\n"
        f"{outline}\n\n"
        "NOTE: Do NOT include an executive summary section or any other section not listed above. "
        "Focus on detailed content for each section above.\n\n"
        "WRITING GUIDELINES:\n"
        "- Use professional, academic language appropriate for institutional reports\n"
        "- Include specific details from the provided data\n"
        "- Maintain a positive and constructive tone\n"
        "- Structure content with clear headings and logical flow\n"
        "- Incorporate the additional content blocks naturally into the narrative\n"
        "- Ensure the report is comprehensive yet concise (800-1200 words)\n"
        "- Use proper formatting with bullet points where appropriate\n"
        "- Include quantitative data (dates, participant count, etc.) naturally\n"
        "- Reflect the educational mission and values of the institution\n\n"
        "Please generate a complete, professional report that can be used for official documentation and "
        "future reference."
    )


def build_summary_prompt(event: EventRecord) -> str:
    if event.content_blocks:
        additional = "; ".join(render_block_line(block) for block in event.content_blocks)
    else:
        additional = "None"
    return (
        "Generate a comprehensive executive summary for the following event. This summary should be detailed "
        "and suitable for summary reports:\n\n"
        f"Event: {or_placeholder(event.title)}\n"
        f"Type: {or_placeholder(event.event_type)}\n"
        f"Institute: {or_placeholder(event.institute)}\n"
        f"Organized By: {or_placeholder(event.organized_by)}\n"
        f"Participants: {event.participant_count}\n"
        f"Duration: {_date_range(event)}\n"
        f"Venue: {or_placeholder(event.venue)}\n"
        f"Target Audience: {or_placeholder(event.target_audience)}\n\n"
        f"Additional Content: {additional}\n\n"
        "Generate a detailed executive summary that includes:\n"
        "- Overview of the event and its objectives\n"
        "- Key highlights and achievements\n"
        "- Participant engagement and learning outcomes\n"
        "- Impact and significance of the event\n"
        "- Notable accomplishments and success metrics\n\n"
        "The summary should be 10-15 sentences long, professional, and comprehensive enough to provide a "
        "complete understanding of the event's success and impact. Use formal academic language appropriate "
        "for institutional documentation."
    )


def build_recommendations_prompt(event: EventRecord) -> str:
    titles = [t for t in (getattr(block, "title", None) for block in event.content_blocks) if t]
    content_areas = ", ".join(titles) or "General"
    return (
        "Based on the following event details, generate 3-5 actionable recommendations for future similar "
        "events:\n\n"
        f"Event: {or_placeholder(event.title)}\n"
        f"Type: {or_placeholder(event.event_type)}\n"
        f"Participants: {event.participant_count}\n"
        f"Venue: {or_placeholder(event.venue)}\n"
        f"Target Audience: {or_placeholder(event.target_audience)}\n\n"
        f"Content Areas: {content_areas}\n\n"
        "Provide specific, practical recommendations that could improve future events. Focus on organization, "
        "engagement, learning outcomes, and institutional development."
    )


_BLOCK_INSTRUCTIONS = {
    "text": (
        "Generate professional, informative content for a text section in an academic event report. "
        "The content should be:\n"
        "- Well-structured and professional\n"
        "- Relevant to the event context\n"
        "- Educational and informative\n"
        "- 150-300 words\n"
        "- Suitable for institutional documentation\n\n"
        "Focus on providing valuable information about the event proceedings, learning outcomes, or key "
        "activities. Use formal academic language appropriate for educational institutions."
    ),
    "quote": (
        "Generate an inspiring and relevant quote that would be appropriate for this educational event. "
        "The quote should be:\n"
        "- Motivational and educational\n"
        "- Relevant to the event theme\n"
        "- Professional and meaningful\n"
        "- From a credible source (educator, industry expert, or well-known figure)\n"
        "- Include proper attribution\n\n"
        'Format: "Quote text" - Attribution (Title/Position)\n\n'
        "Return a single attributed line."
    ),
    "achievement": (
        "Generate content describing a significant achievement or success from this event. The content "
        "should highlight:\n"
        "- Specific accomplishments or milestones\n"
        "- Impact on participants or institution\n"
        "- Measurable outcomes when possible\n"
        "- Recognition of excellence\n"
        "- 100-200 words\n"
        "- Professional and celebratory tone"
    ),
    "image": (
        "Generate a professional caption or description for an image that would be included in this event "
        "report. The description should:\n"
        "- Be concise but informative (50-100 words)\n"
        "- Describe what the image likely shows (participants, activities, presentations, etc.)\n"
        "- Connect the image to the event's objectives\n"
        "- Use professional language\n\n"
        "Format the response as an image caption that would appear below a photograph in the report."
    ),
}


def build_block_prompt(block_type: str, context: BlockContext) -> str:
    lines = [
        "Event Context:",
        f"- Event Title: {or_placeholder(context.event_title)}",
        f"- Event Type: {or_placeholder(context.event_type)}",
        f"- Target Audience: {or_placeholder(context.target_audience)}",
        f"- Additional Info: {or_placeholder(context.additional_info, 'None')}",
    ]
    if context.existing_content:
        lines.append(f"- Existing Content: {context.existing_content}")
    base_context = "\n".join(lines)

    instructions = _BLOCK_INSTRUCTIONS.get(block_type)
    if instructions is None:
        instructions = (
            f"Generate professional content for a {block_type} section in an academic event report. The content "
            "should be well-structured, informative, and appropriate for institutional documentation. Keep it "
            "concise but comprehensive, focusing on the educational value and professional significance of the "
            "event."
        )
    return f"{base_context}\n\n{instructions}"


def build_section_suggestions_prompt(section_type: str, event: EventRecord) -> str:
    return (
        f'Generate professional content suggestions for the "{section_type}" section of an academic event '
        "report.\n\n"
        "Event Details:\n"
        f"- Title: {or_placeholder(event.title)}\n"
        f"- Type: {or_placeholder(event.event_type)}\n"
        f"- Organized By: {or_placeholder(event.organized_by)}\n"
        f"- Participants: {event.participant_count}\n"
        f"- Duration: {_date_range(event)}\n\n"
        "Provide 2-3 well-structured paragraph suggestions that are professional, informative, and suitable for "
        f'academic documentation. Focus on the specific requirements of the "{section_type}" section.'
    )


def _role_label(role: str) -> str:
    return "User" if role == "user" else ASSISTANT_NAME


def build_contextual_chat_prompt(
    user_message: str,
    history: Sequence[ChatTurn],
    report_context: Optional[EventRecord] = None,
) -> str:
    """Assemble the assistant prompt.

    ``history`` must already be chronological (oldest first); it is rendered
    in the order given.
    """
    parts: List[str] = [CHAT_PREAMBLE]

    if history:
        lines = ["Previous conversation context:"]
        lines.extend(f"{_role_label(turn.role)}: {turn.content}" for turn in history)
        parts.append("\n".join(lines))

    if report_context is not None:
        parts.append(
            "Current Report Context:\n"
            f"- Event Title: {or_placeholder(report_context.title)}\n"
            f"- Event Type: {or_placeholder(report_context.event_type)}\n"
            f"- Organized By: {or_placeholder(report_context.organized_by)}\n"
            f"- Date: {_date_range(report_context)}\n"
            f"- Venue: {or_placeholder(report_context.venue)}\n"
            f"- Participants: {report_context.participant_count}\n"
            f"- Status: {or_placeholder(report_context.status)}"
        )

    parts.append(f"User's Current Question/Request: {user_message}")
    parts.append(
        "Please provide a helpful, professional, and contextually relevant response. If the user is asking about "
        "report writing, provide specific and actionable advice. If they need content suggestions, be creative "
        "and professional. Maintain a friendly but professional tone throughout."
    )
    return "\n\n".join(parts)

