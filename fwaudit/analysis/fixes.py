"""Fix suggestion composer."""

from fwaudit.analysis.models import AnalysisResult, Issue
from fwaudit.docs import markdown
from fwaudit.docs.index import DocumentationIndex


def format_suggestion(issue: Issue, related: list[str], snippet_chars: int = 200) -> str:
    text = (
        f"Issue: {issue.description}\n"
        f"Severity: {issue.severity.value}\n"
        f"Location: Lines {issue.line_start}-{issue.line_end}\n\n"
        f"Suggested Fix:\n{issue.suggested_fix}\n\n"
    )
    if related:
        text += "Related Best Practices:\n"
        for passage in related:
            text += f"- {markdown.condense_passage(passage, snippet_chars)}...\n"
    if issue.documentation_url:
        text += f"\nReference: {issue.documentation_url}"
    return text


async def suggest(result: AnalysisResult, index: DocumentationIndex) -> list[str]:
    """One remediation text per issue, in issue order.

    Each issue triggers its own best-practice lookup keyed by its description.
    """
    limits = index.config["limits"]
    framework = result.file.kind.framework or result.framework
    suggestions = []
    for issue in result.issues:
        related = await index.best_practices(framework, issue.description)
        suggestions.append(format_suggestion(
            issue,
            related[:limits["related_practices"]],
            limits["practice_snippet_chars"],
        ))
    return suggestions
