from resume_layout.skills import categorize_skills, extract_skills, split_raw_skills
from resume_layout.types import Line, Section, TextFragment


def _section(*texts):
    section = Section(name="skills")
    for index, text in enumerate(texts):
        fragment = TextFragment(text=text, x=72.0, y=14.0 * (index + 1), end_of_line=True)
        section.add_line(Line(fragments=(fragment,)))
    return section


def test_raw_and_categorized_skills():
    section = _section("Python, JavaScript, React", "Docker | AWS | Git", "Leadership; python")

    result = extract_skills(section, full_text="Worked with Go and Kubernetes. Went to college in 2010.")

    assert result.raw == ["Python", "JavaScript", "React", "Docker", "AWS", "Git", "Leadership"]
    assert result.categorized == {
        "languages": ["Python", "JavaScript", "Go"],
        "frameworks": ["React"],
        "tools": ["Docker", "AWS", "Git", "Kubernetes"],
        "soft": ["Leadership"],
    }


def test_raw_skills_filter_short_numeric_and_long_items():
    text = "C\n2019\n" + "x" * 50 + "\nSQL • Excel · Tableau"
    assert split_raw_skills(text) == ["SQL", "Excel", "Tableau"]


def test_short_names_are_case_sensitive():
    assert "languages" not in categorize_skills("I love to go hiking and read")
    assert categorize_skills("C, C++ and C#")["languages"] == ["C", "C++", "C#"]


def test_names_are_normalized():
    categorized = categorize_skills("nodejs, reactjs, postgres, vscode")
    assert categorized["frameworks"] == ["Node.js", "React"]
    assert categorized["tools"] == ["PostgreSQL", "VS Code"]


def test_empty_input_has_no_categories():
    result = extract_skills(None)
    assert result.raw == []
    assert result.categorized == {}
