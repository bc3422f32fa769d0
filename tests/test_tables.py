from __future__ import annotations

from docuwrite.core.markdown.headings import NO_HEADING_FOUND
from docuwrite.pipelines.tables import EXISTING_CAPTION_TARGET, mark_tables, table_caption


FIRST = "| a | b |\n|---|---|\n| 1 | 2 |\n"
SECOND = "| c | d |\n|---|---|\n| 3 | 4 |\n"


def test_mark_tables_adjacent_tables_get_separate_captions() -> None:
    text = "# Results\n\n" + FIRST + "\n" + SECOND
    result = mark_tables(text)

    assert len(result.tables) == 2
    assert result.captions_added == 2
    assert [t.derived_name for t in result.tables] == ["Results", "Results"]
    assert result.text == (
        "# Results\n\n"
        "\nTable: Results\n\n" + FIRST + "\n"
        "\nTable: Results\n\n" + SECOND
    )
    for table in result.tables:
        assert table.succeeded
        assert table.output_ref == "Table: Results"
        assert text[table.source_start:table.source_end] in (FIRST, SECOND)
        assert result.text[table.start_offset:table.end_offset].startswith("\nTable: Results\n\n|")
    assert result.tables[0].end_offset <= result.tables[1].start_offset


def test_mark_tables_names_from_nearest_heading() -> None:
    text = FIRST + "\n# Later\n\n" + SECOND
    result = mark_tables(text)
    assert [t.derived_name for t in result.tables] == [NO_HEADING_FOUND, "Later"]
    assert result.text.startswith("\nTable: no header found\n\n| a | b |")


def test_mark_tables_is_idempotent() -> None:
    text = "# Data\n\n" + FIRST + "\n## More\n\n" + SECOND
    once = mark_tables(text)
    twice = mark_tables(once.text)

    assert twice.text == once.text
    assert twice.captions_added == 0
    assert [t.target for t in twice.tables] == [EXISTING_CAPTION_TARGET, EXISTING_CAPTION_TARGET]
    assert [t.output_ref for t in twice.tables] == ["Table: Data", "Table: More"]


def test_mark_tables_keeps_author_caption() -> None:
    text = "# Data\n\nTable: Quarterly revenue\n\n" + FIRST
    result = mark_tables(text)
    assert result.text == text
    (table,) = result.tables
    assert table.output_ref == table_caption("Quarterly revenue")
    assert result.captions_added == 0


def test_mark_tables_without_tables() -> None:
    result = mark_tables("# Nothing\n\nJust prose | with a pipe.\n")
    assert result.tables == []
    assert result.text == "# Nothing\n\nJust prose | with a pipe.\n"


def test_mark_tables_caption_lookup_skips_blank_lines_only() -> None:
    captioned = "# Data\n\nTable: Kept\n  \n\n" + FIRST
    assert mark_tables(captioned).captions_added == 0

    separated = "# Data\n\nTable: Other\n\nA paragraph in between.\n\n" + FIRST
    result = mark_tables(separated)
    assert result.captions_added == 1
    assert "A paragraph in between.\n\n\nTable: Data\n\n| a | b |" in result.text
