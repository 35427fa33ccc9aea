from datetime import date, datetime

import pytest

from src.lekhan.domain.report_models import (
    AchievementBlock,
    ImageBlock,
    QuoteBlock,
    TextBlock,
)
from src.lekhan.services import fallback_report
from src.lekhan.services.fallback_report import (
    FILLER_PARAGRAPH,
    build_fallback_report,
    build_summary_document,
    compute_duration,
    render_block,
    render_content_blocks,
)
from src.lekhan.services.formatting import format_coordinators, format_date, or_placeholder


@pytest.mark.parametrize(
    "start,end,label",
    [
        (date(2024, 1, 10), date(2024, 1, 10), "one-day"),
        (date(2024, 1, 10), date(2024, 1, 11), "two-day"),
        (date(2024, 1, 10), date(2024, 1, 12), "2-day"),
        (date(2024, 1, 10), date(2024, 1, 17), "7-day"),
        (date(2024, 1, 10), date(2024, 1, 18), "multi-day"),
        (date(2024, 1, 10), date(2024, 3, 1), "multi-day"),
    ],
)
def test_compute_duration_boundaries(start, end, label):
    assert compute_duration(start, end) == label


def test_compute_duration_counts_calendar_days_for_datetimes():
    start = datetime(2024, 1, 10, 9, 0)
    assert compute_duration(start, datetime(2024, 1, 10, 17, 0)) == "one-day"
    assert compute_duration(start, datetime(2024, 1, 11, 8, 0)) == "two-day"


def test_format_date_is_locale_independent():
    assert format_date(date(2024, 1, 10)) == "10 January 2024"
    assert format_date(date(2023, 12, 1)) == "1 December 2023"


def test_or_placeholder_and_coordinators(make_event):
    assert or_placeholder(None) == "Not specified"
    assert or_placeholder("   ") == "Not specified"
    assert or_placeholder(" x ") == "x"
    event = make_event(
        faculty_coordinators=[
            {"name": "Dr. Rao", "designation": "Professor"},
            {"name": "Ms. Iyer"},
        ]
    )
    assert format_coordinators(event.faculty_coordinators) == "Dr. Rao (Professor), Ms. Iyer"
    assert format_coordinators([], empty="the committee") == "the committee"


def test_render_block_per_variant():
    assert render_block(TextBlock(id="1", title="Agenda", content="Talks")) == "## Agenda\nTalks"
    quote = render_block(QuoteBlock(id="2", title="A. Kalam", content="Dream big"))
    assert quote == '## Featured Quote\n> "Dream big"\n> *- A. Kalam*'
    achievement = render_block(AchievementBlock(id="3", title="Hackathon win", content="First prize"))
    assert achievement.startswith("## Achievement: Hackathon win")
    assert "First prize" in achievement


def test_render_image_block_describes_gallery():
    block = ImageBlock(
        id="4",
        title="Moments",
        caption="Students at the lab",
        image_url="a.jpg",
        image_urls=["b.jpg"],
        image_layout="grid",
        credit="Photo Club",
    )
    text = render_block(block)
    assert text.startswith("## Moments")
    assert "Students at the lab" in text
    assert "2 photographs (grid layout)" in text
    assert "Photo credit: Photo Club" in text


def test_render_image_block_without_details_has_default_line():
    text = render_block(ImageBlock(id="5"))
    assert text.splitlines()[0] == "## Event Gallery"
    assert len(text.splitlines()) == 2


def test_render_content_blocks_empty_uses_filler():
    assert render_content_blocks([]) == FILLER_PARAGRAPH
    assert render_content_blocks(None) == FILLER_PARAGRAPH


def test_fallback_report_scenario_two_day_event(make_event):
    event = make_event()
    text = build_fallback_report(event, today=date(2024, 2, 1))
    assert text.startswith("# AI Workshop - Event Report")
    assert "This two-day event" in text
    assert "120 attendees" in text
    assert FILLER_PARAGRAPH in text
    assert "| Duration | 10 January 2024 to 11 January 2024 |" in text
    assert "Dr. Rao (Professor)" in text
    assert text.rstrip().endswith("*Report generated on 1 February 2024 for VIT Pune*")


def test_fallback_report_sections_in_order(make_event):
    text = build_fallback_report(make_event(), today=date(2024, 2, 1))
    headings = [
        "## Introduction",
        "## Event Overview",
        "## Faculty Coordination and Leadership",
        "## Event Proceedings and Highlights",
        "## Educational Impact and Learning Outcomes",
        "## Participant Engagement and Feedback",
        "## Institutional Excellence",
        "## Conclusion and Future Recommendations",
    ]
    positions = [text.index(h) for h in headings]
    assert positions == sorted(positions)


def test_fallback_report_is_idempotent_for_same_day(make_event):
    event = make_event(
        content_blocks=[
            {"type": "text", "id": "t1", "title": "Agenda", "content": "Keynote and labs"},
            {"type": "quote", "id": "q1", "title": "Dean", "content": "Learn by doing"},
        ]
    )
    first = build_fallback_report(event, today=date(2024, 2, 1))
    second = build_fallback_report(event, today=date(2024, 2, 1))
    assert first == second
    assert "## Agenda\nKeynote and labs" in first
    assert FILLER_PARAGRAPH not in first


def test_fallback_report_without_coordinators_names_committee(make_event):
    text = build_fallback_report(make_event(faculty_coordinators=[]), today=date(2024, 2, 1))
    assert "under the guidance of the organizing committee" in text


def test_fallback_report_defaults_to_today(monkeypatch, make_event):
    class _FixedDate(date):
        @classmethod
        def today(cls):
            return cls(2025, 5, 4)

    monkeypatch.setattr(fallback_report, "date", _FixedDate)
    text = build_fallback_report(make_event())
    assert "Report generated on 4 May 2025" in text


def test_summary_document_frames_summary(make_event):
    doc = build_summary_document(make_event(), "  A great event.  ", today=date(2024, 2, 1))
    lines = doc.splitlines()
    assert lines[0] == "AI Workshop - Event Summary"
    assert "Date: 10 January 2024 to 11 January 2024" in lines
    assert "A great event." in lines
    assert lines[-1] == "Report Date: 1 February 2024"
