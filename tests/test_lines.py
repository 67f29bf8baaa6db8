from resume_layout.lines import DEFAULT_CHAR_WIDTH, GroupingConfig, group_lines, typical_char_width
from resume_layout.types import TextFragment


def _fragment(text, x, y, end_of_line=False, page=0, font_name="Helvetica"):
    return TextFragment(text=text, x=x, y=y, width=len(text) * 6.0, font_name=font_name, end_of_line=end_of_line, page=page)


def test_fragments_on_one_row_join_sorted_by_x():
    fragments = [
        _fragment("Smith", 140, 100.0),
        _fragment("John", 72, 101.5, end_of_line=True),
        _fragment("Engineer", 72, 120.0, end_of_line=True),
    ]

    lines = group_lines(fragments)

    assert [line.text for line in lines] == ["John Smith", "Engineer"]
    for line in lines:
        xs = [fragment.x for fragment in line.fragments]
        assert xs == sorted(xs)


def test_every_fragment_stays_within_tolerance_of_the_line_reference():
    fragments = [
        _fragment("a", 72, 100.0),
        _fragment("b", 90, 102.5),
        _fragment("c", 110, 105.0),
        _fragment("d", 130, 107.5),
    ]

    lines = group_lines(fragments, GroupingConfig(y_tolerance=3.0))

    assert [line.text for line in lines] == ["a b", "c d"]
    for line in lines:
        assert all(abs(fragment.y - line.y) <= 3.0 for fragment in line.fragments)
    assert sum(len(line.fragments) for line in lines) == len(fragments)


def test_end_of_line_closes_line_even_on_same_row():
    fragments = [
        _fragment("Left", 72, 100.0, end_of_line=True),
        _fragment("Right", 300, 100.0, end_of_line=True),
    ]

    assert [line.text for line in group_lines(fragments)] == ["Left", "Right"]


def test_page_change_never_merges_rows():
    fragments = [
        _fragment("Bottom of page one", 72, 700.0, page=0),
        _fragment("Top of page two", 72, 700.0, page=1),
    ]

    lines = group_lines(fragments)

    assert [(line.text, line.page) for line in lines] == [("Bottom of page one", 0), ("Top of page two", 1)]


def test_blank_end_of_line_fragment_becomes_blank_line():
    fragments = [
        _fragment("First", 72, 14.0, end_of_line=True),
        _fragment("", 72, 28.0, end_of_line=True),
        _fragment("Second", 72, 42.0, end_of_line=True),
    ]

    lines = group_lines(fragments)

    assert [line.is_blank for line in lines] == [False, True, False]


def test_empty_input_gives_no_lines():
    assert group_lines([]) == []


def test_touching_fragments_join_without_space():
    fragments = [
        _fragment("Engin", 72, 100.0),
        _fragment("eering", 102, 100.0, font_name="Helvetica-Bold"),
        _fragment("Manager", 150, 100.0, end_of_line=True),
    ]

    lines = group_lines(fragments)

    assert lines[0].text == "Engineering Manager"


def test_touching_fragments_keep_space_after_punctuation_and_around_separators():
    fragments = [
        _fragment("Skills:", 72, 100.0),
        _fragment("Python", 114, 100.0),
        _fragment("|", 150, 100.0),
        _fragment("Go", 156, 100.0, end_of_line=True),
    ]

    lines = group_lines(fragments)

    assert lines[0].text == "Skills: Python | Go"


def test_typical_char_width_uses_the_body_font():
    fragments = [
        TextFragment(text="JANE DOE", x=72, y=20, width=96.0, height=16.0, font_name="Helvetica-Bold"),
        TextFragment(text="Backend engineer", x=72, y=40, width=80.0, height=10.0, font_name="Helvetica"),
        TextFragment(text="Austin", x=72, y=54, width=30.0, height=10.0, font_name="Helvetica"),
    ]

    assert typical_char_width(fragments) == 5.0
    assert typical_char_width([]) == DEFAULT_CHAR_WIDTH
