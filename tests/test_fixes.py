"""Tests for the fix suggestion composer."""

from fwaudit.analysis import fixes
from fwaudit.analysis.models import AnalysisResult, CodeFile, FileKind, Issue, Language, Severity


def make_issue(description="Missing @Controller decorator on controller class", url="https://docs.nestjs.com/controllers"):
    return Issue(
        id="missing-controller-decorator-Cats",
        description=description,
        severity=Severity.ERROR,
        line_start=3,
        line_end=7,
        suggested_fix="Add @Controller() decorator to the class",
        documentation_url=url,
    )


class TestFormatSuggestion:
    """Text layout of a single suggestion."""

    def test_layout_without_practices(self):
        text = fixes.format_suggestion(make_issue(), [])
        assert text == (
            "Issue: Missing @Controller decorator on controller class\n"
            "Severity: error\n"
            "Location: Lines 3-7\n\n"
            "Suggested Fix:\nAdd @Controller() decorator to the class\n\n"
            "\nReference: https://docs.nestjs.com/controllers"
        )

    def test_related_practices_are_condensed(self):
        related = ["## Keep it thin\nDelegate to services.\n```typescript\nthis.svc.run();\n```"]
        text = fixes.format_suggestion(make_issue(), related)
        assert "Related Best Practices:\n- Delegate to services.\n[Code example]...\n" in text
        assert "Keep it thin" not in text

    def test_snippet_limit(self):
        text = fixes.format_suggestion(make_issue(), ["y" * 500], snippet_chars=10)
        assert "- yyyyyyyyyy...\n" in text

    def test_no_reference_without_url(self):
        assert "Reference:" not in fixes.format_suggestion(make_issue(url=""), [])


class TestSuggest:
    """One suggestion per issue, grounded in indexed documentation."""

    def test_one_suggestion_per_issue(self, index, run):
        file = CodeFile("cats.controller.ts", "", Language.TYPESCRIPT, FileKind.NESTJS_CONTROLLER)
        result = AnalysisResult(file=file, framework="nestjs", issues=(make_issue(), make_issue()))
        suggestions = run(fixes.suggest(result, index))
        assert len(suggestions) == 2
        assert all(s.startswith("Issue: Missing @Controller decorator") for s in suggestions)

    def test_related_practices_capped(self, index, config, run, monkeypatch):
        """At most related_practices passages are attached to one issue."""

        async def many(framework, component):
            return [f"practice number {n}" for n in range(5)]

        monkeypatch.setattr(index, "best_practices", many)
        file = CodeFile("cats.controller.ts", "", Language.TYPESCRIPT, FileKind.NESTJS_CONTROLLER)
        result = AnalysisResult(file=file, framework="nestjs", issues=(make_issue(),))
        [text] = run(fixes.suggest(result, index))
        assert text.count("- practice number") == config["limits"]["related_practices"]
        assert "practice number 2" not in text

    def test_framework_follows_file_kind(self, index, fetcher, run):
        """A NestJS kind is grounded in NestJS docs even if the caller said angular."""
        file = CodeFile("cats.controller.ts", "", Language.TYPESCRIPT, FileKind.NESTJS_CONTROLLER)
        result = AnalysisResult(file=file, framework="angular", issues=(make_issue(),))
        run(fixes.suggest(result, index))
        assert not any("angular/angular" in url for url in fetcher.requests)
