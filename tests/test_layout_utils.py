import sys
from pathlib import Path

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

import resume_layout.layout_utils as layout_utils
from resume_layout.lines import group_lines
from resume_layout.types import TextFragment


def _make_fragment(text, x, y, page=0, end_of_line=True):
    return TextFragment(text=text, x=x, y=y, width=len(text) * 6.0, end_of_line=end_of_line, page=page)


def build_fragments():
    # Two columns read row by row, as the engine reports them.
    return [
        _make_fragment("Left", 50, 100, end_of_line=False),
        _make_fragment("Right", 350, 100),
        _make_fragment("Column", 60, 114, end_of_line=False),
        _make_fragment("Side", 360, 114),
        _make_fragment("Body", 80, 400, page=1),
    ]


def test_assign_columns_and_sorting():
    fragments = build_fragments()

    column_ids = dict(zip((fragment.text for fragment in fragments), layout_utils.assign_columns(fragments)))
    assert column_ids["Left"] == column_ids["Column"]
    assert column_ids["Right"] != column_ids["Left"]
    assert column_ids["Right"] == column_ids["Side"]

    ordered = [fragment.text for fragment in layout_utils.sort_reading_order(fragments)]
    assert ordered == ["Left", "Column", "Right", "Side", "Body"]


def test_column_order_feeds_line_grouping():
    ordered = layout_utils.sort_reading_order(build_fragments())

    lines = group_lines(ordered)

    assert [line.text for line in lines] == ["Left", "Column", "Right", "Side", "Body"]


def test_blank_markers_follow_previous_column():
    fragments = [
        _make_fragment("Right", 350, 100),
        _make_fragment("", 72, 114),
        _make_fragment("Left", 50, 128),
    ]

    column_ids = layout_utils.assign_columns(fragments)

    assert column_ids[1] == column_ids[0]
    assert column_ids[0] != column_ids[2]
