"""Documentation operations: search, practices, browsing, topics, code extraction."""

import re
from typing import Any

from fwaudit.docs import markdown
from fwaudit.docs.index import DocumentationIndex
from fwaudit.docs.models import CodeSnippet, Topic
from fwaudit.utils.error_handler import envelope_errors, error_envelope
from fwaudit.utils.logging import logger

NESTJS_KEYWORDS = (
    "nest", "controller", "module", "nestjs", "gateway",
    "interceptor", "middleware", "pipe", "filter", "guard",
)
ANGULAR_KEYWORDS = (
    "angular", "component", "service", "directive", "pipe",
    "module", "template", "reactive", "form", "router",
)
EXTRACT_MODES = ("complete", "html", "typescript")
CONTENT_MATCH_LIMIT = 5

EXTENSION_CODE_TYPES = {
    ".html": "html",
    ".ts": "typescript",
    ".js": "javascript",
    ".css": "css",
    ".scss": "scss",
}
CODE_TYPE_GROUPS = {
    "html": ("html",),
    "typescript": ("typescript", "javascript"),
    "css": ("css", "scss"),
}


def _preview(topic: Topic, limit: int) -> str:
    if not topic.content:
        return "Content will be loaded when requested"
    if len(topic.content) > limit:
        return topic.content[:limit] + "..."
    return topic.content


def _uses_modern_syntax(code: str) -> bool:
    return any(marker in code for marker in markdown.CONTROL_FLOW_MARKERS)


def _is_html(code: str) -> bool:
    return "<" in code and ">" in code and "import " not in code


def _is_typescript(code: str) -> bool:
    return any(token in code for token in ("import", "class", "function", "interface"))


def code_type(path: str | None, code: str) -> str:
    """Classify a snippet by path extension, falling back to its content."""
    if path:
        for suffix, kind in EXTENSION_CODE_TYPES.items():
            if path.endswith(suffix):
                return kind
        return "unknown"
    if _is_html(code):
        return "html"
    if _is_typescript(code):
        return "typescript"
    return "unknown"


@envelope_errors("searching documentation")
async def search_documentation(index: DocumentationIndex, framework: str, query: str) -> dict[str, Any]:
    sources = await index.sources(framework)
    if not sources:
        return error_envelope(f"No documentation sources found for framework: {framework}")

    source = sources[0]
    topics = await index.search(source.id, query)
    if not topics:
        return {
            "status": "warning",
            "message": f"No documentation found for query: {query} in {framework}. Try a different search term.",
        }

    limit = index.config["limits"]["preview_chars"]
    return {
        "status": "success",
        "sourceInfo": source.info(),
        "results": [
            {
                "title": topic.title,
                "url": topic.url,
                "content": _preview(topic, limit),
                "bestPractices": list(topic.best_practices),
                "codeExamples": list(topic.code_examples),
            }
            for topic in topics
        ],
        "resultCount": len(topics),
    }


@envelope_errors("getting best practices")
async def get_best_practices(
    index: DocumentationIndex,
    framework: str,
    component: str,
    include_examples: bool = True,
) -> dict[str, Any]:
    passages = await index.best_practices(framework, component)
    if not passages:
        return {
            "status": "warning",
            "message": (
                f"No best practices found for {component} in {framework}. "
                "Try a more general term like 'component', 'module', or 'service'."
            ),
            "bestPractices": [],
        }

    if not include_examples:
        passages = [markdown.replace_code_blocks(p, "[Code example omitted]") for p in passages]

    return {
        "status": "success",
        "framework": framework,
        "component": component,
        "count": len(passages),
        "bestPractices": [
            {
                "id": f"bp-{i + 1}",
                "title": markdown.sniff_title(passage) or f"Best Practice {i + 1} for {component}",
                "content": passage,
            }
            for i, passage in enumerate(passages)
        ],
    }


@envelope_errors("browsing documentation")
async def browse_documentation(index: DocumentationIndex, framework: str) -> dict[str, Any]:
    sources = await index.sources(framework)
    if not sources:
        return error_envelope(f"No documentation sources found for framework: {framework}")

    preview = index.config["limits"]["topic_preview"]
    return {
        "status": "success",
        "framework": framework,
        "sources": [
            {
                **source.info(),
                "sections": [
                    {
                        "id": section.id,
                        "title": section.title,
                        "url": section.url,
                        "topicCount": len(section.topics),
                        "topicPreview": [
                            {"id": t.id, "title": t.title, "url": t.url}
                            for t in section.topics[:preview]
                        ],
                    }
                    for section in source.sections
                ],
            }
            for source in sources
        ],
    }


@envelope_errors("getting documentation topic")
async def get_documentation_topic(index: DocumentationIndex, source_id: str, topic_id: str) -> dict[str, Any]:
    topic = await index.topic(source_id, topic_id)
    if topic is None:
        return error_envelope(f"Topic not found with ID: {topic_id} in source: {source_id}")
    return {"status": "success", "topic": topic.to_dict()}


def detect_docs_framework(search: str) -> str:
    """Pick the framework whose keywords occur more often in ``search``; angular on ties."""
    lowered = search.lower()
    nestjs_hits = sum(1 for k in NESTJS_KEYWORDS if k in lowered)
    angular_hits = sum(1 for k in ANGULAR_KEYWORDS if k in lowered)
    return "nestjs" if nestjs_hits > angular_hits else "angular"


def match_topics(topics: list[Topic], search: str) -> list[tuple[Topic, str]]:
    """Tiered matching: URL, then title, then content, then individual terms.

    Later tiers only run while fewer than three matches were found; the term
    tier only runs when nothing matched at all.
    """
    needle = search.lower()
    matched: list[tuple[Topic, str]] = []
    seen: set[str] = set()

    def take(candidates, via):
        for topic in candidates:
            if topic.id not in seen:
                seen.add(topic.id)
                matched.append((topic, via))

    take(
        [t for t in topics if f"/{needle}" in t.url.lower() or f"/{needle}.md" in t.url.lower()],
        "url",
    )
    if len(matched) < 3:
        take([t for t in topics if needle in t.title.lower()], "title")
    if len(matched) < 3:
        content_hits = [t for t in topics if t.content and needle in t.content.lower() and t.id not in seen]
        take(content_hits[:CONTENT_MATCH_LIMIT], "content")
    if not matched:
        terms = [term for term in re.split(r"[\s\-_,.]+", needle) if len(term) > 3]
        if terms:
            take(
                [
                    t for t in topics
                    if t.content and sum(1 for term in terms if term in t.content.lower()) > len(terms) // 2
                ],
                "terms",
            )
    return matched


@envelope_errors("extracting documentation")
async def extract_documentation(
    index: DocumentationIndex,
    topic: str,
    framework: str | None = None,
    mode: str = "complete",
) -> dict[str, Any]:
    if mode not in EXTRACT_MODES:
        return error_envelope(f"Unknown mode: {mode}. Expected one of: {', '.join(EXTRACT_MODES)}")

    framework = (framework or detect_docs_framework(topic)).lower()
    sources = await index.sources(framework)
    if not sources:
        return error_envelope(f"No documentation sources found for framework: {framework}")

    source = sources[0]
    loaded = [t for s, t in await index.loaded_topics(framework) if s.id == source.id]
    logger.debug("Indexed {count} topics for {framework}", count=len(loaded), framework=framework)

    matches = match_topics(loaded, topic)
    if not matches:
        return error_envelope(
            f"No {framework} documentation matches: \"{topic}\". Try another term."
        )

    enriched = [(await index.inline_docs_code(t), via) for t, via in matches]

    if mode == "html":
        examples = [
            {"title": t.title, "url": t.url, "content": ex, "usesModernSyntax": _uses_modern_syntax(ex)}
            for t, _ in enriched
            for ex in t.code_examples
            if _is_html(ex)
        ]
        return {"status": "success", "framework": framework, "topic": topic,
                "examples": examples, "count": len(examples)}

    if mode == "typescript":
        examples = [
            {"title": t.title, "url": t.url, "content": ex}
            for t, _ in enriched
            for ex in t.code_examples
            if _is_typescript(ex)
        ]
        return {"status": "success", "framework": framework, "topic": topic,
                "examples": examples, "count": len(examples)}

    return {
        "status": "success",
        "framework": framework,
        "topic": topic,
        "matches": [
            {
                "sourceId": source.id,
                "topicId": t.id,
                "title": t.title,
                "url": t.url,
                "content": t.content,
                "codeExamples": [
                    {
                        "content": ex,
                        "isHtml": _is_html(ex),
                        "isTypeScript": _is_typescript(ex),
                        "usesModernSyntax": _uses_modern_syntax(ex),
                    }
                    for ex in t.code_examples
                ],
                "bestPractices": list(t.best_practices),
                "foundVia": via,
            }
            for t, via in enriched
        ],
        "count": len(enriched),
    }


def _snippet_payload(snippet: CodeSnippet, description: str | None = None) -> dict[str, Any]:
    code = snippet.code or ""
    return {
        "description": description or snippet.region or "Code snippet",
        "path": snippet.path,
        "visibleRegion": snippet.region or "",
        "codeType": code_type(snippet.path or None, code),
        "usesModernSyntax": _uses_modern_syntax(code),
        "code": snippet.code,
        "strategy": snippet.strategy,
        "error": snippet.error,
    }


@envelope_errors("extracting code snippet")
async def extract_code_snippet(
    index: DocumentationIndex,
    selector: str | None = None,
    path: str | None = None,
    visible_region: str | None = None,
    header: str | None = None,
) -> dict[str, Any]:
    if selector and "<docs-code" in selector:
        snippet = await index.resolve_docs_code(selector)
    elif path:
        snippet = await index.resolve_code(path, visible_region, header)
    else:
        return error_envelope("Provide either a complete docs-code selector or a file path")

    if not snippet.found:
        return error_envelope(
            "Could not extract the code. The file or region may not exist.",
            details=snippet.error,
        )

    return {
        "status": "success",
        "codeType": code_type(snippet.path or None, snippet.code),
        "usesModernSyntax": _uses_modern_syntax(snippet.code),
        "code": snippet.code,
        "lines": len(snippet.code.split("\n")),
        "strategy": snippet.strategy,
    }


@envelope_errors("extracting multiple code snippets")
async def extract_multiple_code_snippets(
    index: DocumentationIndex,
    selectors: list[dict[str, Any]],
    batch_size: int | None = None,
) -> dict[str, Any]:
    if not selectors:
        return error_envelope("Provide at least one selector to extract code from")

    snippets = await index.resolve_many(selectors, batch_size)
    results = [_snippet_payload(s, request.get("description")) for s, request in zip(snippets, selectors)]

    grouped = {
        group: [r for r in results if r["codeType"] in kinds]
        for group, kinds in CODE_TYPE_GROUPS.items()
    }
    known = {kind for kinds in CODE_TYPE_GROUPS.values() for kind in kinds}
    grouped["other"] = [r for r in results if r["codeType"] not in known]

    successful = sum(1 for r in results if not r["error"])
    return {
        "status": "success",
        "summary": {
            "totalRequested": len(selectors),
            "successful": successful,
            "failed": len(results) - successful,
        },
        "groupedByType": grouped,
        "allResults": results,
    }
