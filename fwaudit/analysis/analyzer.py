"""Analyzer: classify, gather grounding practices, run the rule catalog."""

from fwaudit.analysis import rules, syntax
from fwaudit.analysis.classifier import classify
from fwaudit.analysis.models import CODE_LANGUAGES, AnalysisResult, BestPractice, CodeFile, FileKind, Issue
from fwaudit.docs import markdown
from fwaudit.docs.index import DocumentationIndex
from fwaudit.utils.logging import logger

FALLBACK_TERMS = ("best practices", "style guide", "conventions")


def to_best_practice(passage: str, position: int) -> BestPractice:
    """Wrap a raw passage, sniffing title, URL and the first code example."""
    return BestPractice(
        id=f"bp-{position + 1}",
        title=markdown.sniff_title(passage) or f"Best Practice {position + 1}",
        description=passage,
        documentation_url=markdown.sniff_url(passage),
        code_example=markdown.first_code_block(passage),
    )


def find_issues(file: CodeFile, framework: str) -> list[Issue]:
    """Structural issues for a classified file.

    Unknown kinds and non-code languages yield nothing. Parse or traversal
    errors are logged and also yield nothing.
    """
    if file.kind is FileKind.UNKNOWN or file.language not in CODE_LANGUAGES:
        return []
    try:
        summary = syntax.summarize(file.content)
        return rules.check_common(summary, framework) + rules.check_classes(file.kind, summary)
    except Exception as e:
        logger.opt(exception=True).error("Error analyzing file {path}: {err}", path=file.path, err=e)
        return []


class CodeAnalyzer:
    """Runs the rule catalog and grounds results in indexed documentation."""

    def __init__(self, index: DocumentationIndex):
        self.index = index

    async def relevant_practices(self, file: CodeFile, framework: str) -> list[str]:
        component = file.kind.component
        if not component:
            return []
        passages = await self.index.best_practices(framework, component)
        if passages:
            return passages
        for term in FALLBACK_TERMS:
            passages = await self.index.best_practices(framework, term)
            if passages:
                logger.debug("Using '{term}' practices for {path}", term=term, path=file.path)
                return passages
        return []

    async def analyze(self, file: CodeFile, framework: str) -> AnalysisResult:
        classified = classify(file, framework)
        passages = await self.relevant_practices(classified, framework)
        practices = tuple(to_best_practice(p, i) for i, p in enumerate(passages))
        issues = tuple(find_issues(classified, framework))
        logger.debug(
            "Analyzed {path} as {kind}: {count} issues",
            path=classified.path,
            kind=classified.kind.value,
            count=len(issues),
        )
        return AnalysisResult(file=classified, framework=framework, issues=issues, best_practices=practices)

    async def analyze_many(self, files: list[CodeFile], framework: str) -> list[AnalysisResult]:
        """Analyze files one after another; no state is shared between them."""
        results = []
        for file in files:
            results.append(await self.analyze(file, framework))
        return results
