"""Code analysis operations: single file, project, fix suggestions, detection."""

from typing import Any

from fwaudit.analysis import fixes
from fwaudit.analysis.analyzer import CodeAnalyzer
from fwaudit.analysis.classifier import classify, framework_of
from fwaudit.analysis.models import AnalysisResult, CodeFile, Severity
from fwaudit.docs.index import DocumentationIndex
from fwaudit.utils.error_handler import envelope_errors


async def _file_result(index: DocumentationIndex, result: AnalysisResult) -> dict[str, Any]:
    """Per-file payload shared by single-file and project analysis."""
    payload = {
        "fileInfo": result.file.info(),
        "issues": [issue.to_dict() for issue in result.issues],
    }
    payload["fixSuggestions"] = await fixes.suggest(result, index) if result.issues else []
    return payload


@envelope_errors("analyzing code")
async def analyze_code_file(
    index: DocumentationIndex,
    file_path: str,
    file_content: str,
    framework: str,
) -> dict[str, Any]:
    analyzer = CodeAnalyzer(index)
    result = await analyzer.analyze(CodeFile(file_path, file_content), framework)
    snippet_chars = index.config["limits"]["practice_snippet_chars"]

    payload = await _file_result(index, result)
    return {
        "status": "success",
        "fileInfo": payload["fileInfo"],
        "issues": payload["issues"],
        "bestPractices": [bp.to_dict(description_limit=snippet_chars) for bp in result.best_practices],
        "fixSuggestions": payload["fixSuggestions"],
    }


@envelope_errors("analyzing project")
async def analyze_project(
    index: DocumentationIndex,
    files: list[dict[str, str]],
    framework: str,
) -> dict[str, Any]:
    """Analyze ``files`` (each a ``{"path", "content"}`` mapping) in order."""
    analyzer = CodeAnalyzer(index)
    code_files = [CodeFile(f["path"], f.get("content", "")) for f in files]
    results = await analyzer.analyze_many(code_files, framework)

    by_severity = {severity.value: sum(r.count(severity) for r in results) for severity in Severity}
    return {
        "status": "success",
        "projectSummary": {
            "totalFiles": len(results),
            "filesWithIssues": sum(1 for r in results if r.issues),
            "totalIssues": sum(len(r.issues) for r in results),
            "issuesBySeverity": by_severity,
        },
        "results": [await _file_result(index, r) for r in results],
    }


@envelope_errors("generating fix suggestions")
async def generate_fix_suggestions(
    index: DocumentationIndex,
    file_path: str,
    file_content: str,
    framework: str,
) -> dict[str, Any]:
    analyzer = CodeAnalyzer(index)
    result = await analyzer.analyze(CodeFile(file_path, file_content), framework)
    if not result.issues:
        return {
            "status": "success",
            "message": "No issues found in the file!",
            "suggestions": [],
        }
    return {
        "status": "success",
        "fileInfo": result.file.info(),
        "issueCount": len(result.issues),
        "suggestions": await fixes.suggest(result, index),
    }


@envelope_errors("detecting framework and file type")
async def detect_framework_and_file_type(
    index: DocumentationIndex,
    file_path: str,
    file_content: str,
) -> dict[str, Any]:
    file = classify(CodeFile(file_path, file_content))
    return {
        "status": "success",
        "fileInfo": file.info(),
        "framework": framework_of(file),
    }
