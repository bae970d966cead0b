"""Tests for the operation envelopes exposed to the CLI."""

from fwaudit.docs.index import DocumentationIndex
from fwaudit.operations import (
    analyze_code_file,
    analyze_project,
    browse_documentation,
    detect_framework_and_file_type,
    extract_code_snippet,
    extract_documentation,
    extract_multiple_code_snippets,
    generate_fix_suggestions,
    get_best_practices,
    get_documentation_topic,
    search_documentation,
)
from fwaudit.operations.documentation import code_type, detect_docs_framework
from fwaudit.utils.error_handler import envelope_errors

from conftest import NESTJS_ROOT, FakeFetcher
from test_analyzer import CLEAN_CONTROLLER, CONTROLLER_WITH_HELPER
from test_index import PROFILE_PHOTO_PATH

PARSE_INT_PIPE = """import { Injectable } from '@nestjs/common';

@Injectable()
export class ParseIntPipe {}
"""


class TestCodeAnalysis:
    """Single file, project, fixes and detection."""

    def test_bare_controller(self, index, run):
        envelope = run(analyze_code_file(index, "widget.controller.ts", "export class WidgetController {}", "nestjs"))
        assert envelope["status"] == "success"
        assert envelope["fileInfo"] == {
            "path": "widget.controller.ts",
            "language": "typescript",
            "fileType": "nestjs-controller",
        }
        assert len(envelope["issues"]) == 1
        assert envelope["issues"][0]["severity"] == "error"
        assert len(envelope["fixSuggestions"]) == 1
        assert envelope["bestPractices"]

    def test_best_practice_descriptions_are_truncated(self, index, config, run):
        envelope = run(analyze_code_file(index, "cats.controller.ts", CLEAN_CONTROLLER, "nestjs"))
        limit = config["limits"]["practice_snippet_chars"]
        assert all(len(bp["description"]) <= limit + 3 for bp in envelope["bestPractices"])
        assert envelope["issues"] == []
        assert envelope["fixSuggestions"] == []

    def test_project_summary(self, index, run):
        files = [
            {"path": "parse-int.pipe.ts", "content": PARSE_INT_PIPE},
            {"path": "cats.controller.ts", "content": CLEAN_CONTROLLER},
            {"path": "widgets.controller.ts", "content": CONTROLLER_WITH_HELPER},
        ]
        envelope = run(analyze_project(index, files, "nestjs"))
        assert envelope["status"] == "success"
        assert envelope["projectSummary"] == {
            "totalFiles": 3,
            "filesWithIssues": 2,
            "totalIssues": 3,
            "issuesBySeverity": {"error": 2, "warning": 1, "info": 0},
        }
        assert [r["fileInfo"]["path"] for r in envelope["results"]] == [f["path"] for f in files]
        assert envelope["results"][1]["fixSuggestions"] == []

    def test_empty_project(self, index, run):
        envelope = run(analyze_project(index, [], "nestjs"))
        assert envelope["projectSummary"]["totalFiles"] == 0
        assert envelope["results"] == []

    def test_fix_suggestions_without_issues(self, index, run):
        envelope = run(generate_fix_suggestions(index, "cats.controller.ts", CLEAN_CONTROLLER, "nestjs"))
        assert envelope == {"status": "success", "message": "No issues found in the file!", "suggestions": []}

    def test_fix_suggestions(self, index, run):
        envelope = run(generate_fix_suggestions(index, "parse-int.pipe.ts", PARSE_INT_PIPE, "nestjs"))
        assert envelope["issueCount"] == 2
        assert envelope["suggestions"][0].startswith("Issue: Pipe class should implement PipeTransform interface")

    def test_detect(self, index, run):
        envelope = run(detect_framework_and_file_type(index, "src/hero.component.ts", "export class Hero {}"))
        assert envelope["framework"] == "angular"
        assert envelope["fileInfo"]["fileType"] == "angular-component"

    def test_detect_unknown(self, index, run):
        envelope = run(detect_framework_and_file_type(index, "notes.txt", "hello"))
        assert envelope["framework"] == "unknown"


class TestSearchAndPractices:
    def test_search(self, index, run):
        envelope = run(search_documentation(index, "nestjs", "guard"))
        assert envelope["status"] == "success"
        assert envelope["sourceInfo"]["id"] == "nestjs-github"
        assert envelope["resultCount"] == 1
        assert envelope["results"][0]["title"] == "Guards"
        assert envelope["results"][0]["bestPractices"]

    def test_search_preview_is_truncated(self, index, config, run):
        config["limits"]["preview_chars"] = 20
        envelope = run(search_documentation(index, "nestjs", "guard"))
        content = envelope["results"][0]["content"]
        assert content.endswith("...")
        assert len(content) == 23

    def test_search_unloaded_topic(self, config, run):
        index = DocumentationIndex(fetcher=FakeFetcher(files={f"{NESTJS_ROOT}/pipes/pipes.md": ""}), config=config)
        envelope = run(search_documentation(index, "nestjs", "pipes"))
        assert envelope["results"][0]["content"] == "Content will be loaded when requested"

    def test_search_no_results(self, index, run):
        envelope = run(search_documentation(index, "nestjs", "zzz-nothing"))
        assert envelope["status"] == "warning"
        assert envelope["message"] == (
            "No documentation found for query: zzz-nothing in nestjs. Try a different search term."
        )

    def test_search_unknown_framework(self, index, run):
        assert run(search_documentation(index, "vue", "x"))["status"] == "error"

    def test_best_practices(self, index, run):
        envelope = run(get_best_practices(index, "nestjs", "controller"))
        assert envelope["count"] == 4
        assert [bp["id"] for bp in envelope["bestPractices"]] == ["bp-1", "bp-2", "bp-3", "bp-4"]
        assert envelope["bestPractices"][0]["title"] == "Best practices"

    def test_best_practices_without_examples(self, index, run):
        envelope = run(get_best_practices(index, "nestjs", "controller", include_examples=False))
        contents = "\n".join(bp["content"] for bp in envelope["bestPractices"])
        assert "[Code example omitted]" in contents
        assert "```" not in contents

    def test_best_practices_none(self, index, run):
        envelope = run(get_best_practices(index, "angular", "zzz-nonexistent-zzz"))
        assert envelope["status"] == "warning"
        assert envelope["bestPractices"] == []


class TestBrowsing:
    def test_browse(self, index, run):
        envelope = run(browse_documentation(index, "nestjs"))
        [source] = envelope["sources"]
        assert source["id"] == "nestjs-github"
        techniques = source["sections"][-1]
        assert techniques["topicCount"] == 2
        assert [t["id"] for t in techniques["topicPreview"]] == ["topic-advanced-caching", "topic-validation"]

    def test_topic(self, index, run):
        envelope = run(get_documentation_topic(index, "nestjs-github", "topic-guards"))
        assert envelope["topic"]["title"] == "Guards"
        assert envelope["topic"]["content"].startswith("# Guards")

    def test_topic_not_found(self, index, run):
        envelope = run(get_documentation_topic(index, "nestjs-github", "topic-nope"))
        assert envelope == {"status": "error", "message": "Topic not found with ID: topic-nope in source: nestjs-github"}


class TestExtractDocumentation:
    """Tiered topic matching and the three output modes."""

    def test_url_tier(self, index, run):
        envelope = run(extract_documentation(index, "anatomy", "angular"))
        match = envelope["matches"][0]
        assert (match["topicId"], match["foundVia"]) == ("topic-anatomy-of-components", "url")
        assert match["sourceId"] == "angular-github"

    def test_docs_code_is_inlined(self, index, run):
        envelope = run(extract_documentation(index, "anatomy", "angular"))
        examples = envelope["matches"][0]["codeExamples"]
        assert examples[-1]["content"].startswith("@Component({")
        assert examples[-1]["isTypeScript"]

    def test_title_tier(self, index, run):
        envelope = run(extract_documentation(index, "reactive forms", "angular"))
        assert envelope["matches"][0]["foundVia"] == "title"
        assert envelope["matches"][0]["topicId"] == "topic-reactive-forms"

    def test_term_tier(self, index, run):
        envelope = run(extract_documentation(index, "validate incoming data correctness", "nestjs"))
        assert [(m["topicId"], m["foundVia"]) for m in envelope["matches"]] == [("topic-validation", "terms")]

    def test_html_mode(self, index, run):
        envelope = run(extract_documentation(index, "templates", "angular", mode="html"))
        assert envelope["count"] == 1
        assert envelope["examples"][0]["usesModernSyntax"]

    def test_no_match(self, index, run):
        envelope = run(extract_documentation(index, "qqqzzz", "nestjs"))
        assert envelope["status"] == "error"

    def test_unknown_mode(self, index, run):
        assert run(extract_documentation(index, "guards", "nestjs", mode="pdf"))["status"] == "error"

    def test_framework_detection(self):
        assert detect_docs_framework("nestjs guard interceptor") == "nestjs"
        assert detect_docs_framework("reactive form template") == "angular"
        assert detect_docs_framework("nothing relevant") == "angular"


class TestCodeSnippets:
    def test_single_snippet(self, index, run):
        envelope = run(extract_code_snippet(index, path=PROFILE_PHOTO_PATH, visible_region="class"))
        assert envelope["status"] == "success"
        assert envelope["codeType"] == "typescript"
        assert envelope["lines"] == 5
        assert envelope["strategy"] == "contents-api"

    def test_snippet_from_selector(self, index, run):
        selector = f'<docs-code path="{PROFILE_PHOTO_PATH}" visibleRegion="class"/>'
        envelope = run(extract_code_snippet(index, selector=selector))
        assert envelope["code"].startswith("@Component({")

    def test_snippet_requires_input(self, index, run):
        assert run(extract_code_snippet(index))["status"] == "error"

    def test_snippet_not_found(self, index, run):
        envelope = run(extract_code_snippet(index, path="adev/src/content/examples/missing/nothing.ts"))
        assert envelope["status"] == "error"
        assert envelope["details"].startswith("Could not retrieve code for")

    def test_multiple_snippets(self, index, run):
        requests = [
            {"path": PROFILE_PHOTO_PATH, "visibleRegion": "class", "description": "profile photo"},
            {"path": "adev/src/content/examples/missing/page.html"},
            {"description": "incomplete"},
        ]
        envelope = run(extract_multiple_code_snippets(index, requests, batch_size=2))
        assert envelope["summary"] == {"totalRequested": 3, "successful": 1, "failed": 2}
        grouped = envelope["groupedByType"]
        assert [r["description"] for r in grouped["typescript"]] == ["profile photo"]
        assert len(grouped["html"]) == 1
        assert grouped["css"] == []
        assert len(grouped["other"]) == 1
        assert [r["path"] for r in envelope["allResults"]][:2] == [r["path"] for r in requests[:2]]

    def test_multiple_snippets_empty(self, index, run):
        assert run(extract_multiple_code_snippets(index, []))["status"] == "error"

    def test_code_type(self):
        assert code_type("a/b.scss", "") == "scss"
        assert code_type(None, "<div></div>") == "html"
        assert code_type(None, "export class A {}") == "typescript"
        assert code_type("a/b.txt", "<div>") == "unknown"


def test_envelope_errors_contains_exceptions(run):
    @envelope_errors("doing the thing")
    async def explode():
        raise ValueError("boom")

    assert run(explode()) == {"status": "error", "message": "Error doing the thing: boom"}
