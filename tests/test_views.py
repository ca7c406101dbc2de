import pathlib

from perception_eval.models.project_model import Project, Question
from perception_eval.views.components.answer_form import question_heading
from perception_eval.views.consent_view import title_html

VIEWS_DIR = pathlib.Path(__file__).resolve().parent.parent / "perception_eval" / "views"


def test_question_heading_escapes_markup():
    q = Question(id="q1", text='<img src=x onerror="alert(1)"> & more')
    heading = question_heading(q)
    assert "<img" not in heading
    assert "&lt;img src=x onerror=&quot;alert(1)&quot;&gt; &amp; more" in heading


def test_project_title_escapes_markup():
    assert title_html(Project(id="p1", name="<script>x</script>")) == "<h1>&lt;script&gt;x&lt;/script&gt;</h1>"
    assert title_html(Project(id="p<1>")) == "<h1>p&lt;1&gt;</h1>"


def test_views_use_width_instead_of_deprecated_container_flag():
    offenders = [
        str(path.relative_to(VIEWS_DIR))
        for path in VIEWS_DIR.rglob("*.py")
        if "use_container_width" in path.read_text(encoding="utf-8")
    ]
    assert offenders == []
