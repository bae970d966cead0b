"""Markdown heuristics for documentation pages.

Title sniffing, code-example extraction, best-practice passage mining and
named-region slicing. Everything here is a pure function over text; recall is
favoured over precision and overlapping passages are kept.
"""

import re

CODE_LANGUAGES = ("typescript", "javascript", "html", "css")
PRACTICE_CODE_LANGUAGES = ("typescript", "javascript", "html")

PRACTICE_HEADINGS = (
    "best practices",
    "recommended practices",
    "style guide",
    "guidelines",
    "conventions",
)
BULLET_TRIGGERS = ("best practice", "recommend", "should", "always", "never")
CODE_TRIGGERS = ("best practice", "recommend", "preferred way", "correct", "example")
PRECEDING_WINDOW = 200

HEADING_RE = re.compile(r"^(#{1,6})\s+(.+?)\s*$")
H1_RE = re.compile(r"^#\s+(.+)$", re.MULTILINE)
H2_RE = re.compile(r"^##\s+(.+)$", re.MULTILINE)
DECORATIVE_TITLE_RE = re.compile(r'<docs-decorative-header\s+title="([^"]+)"')
FENCE_LINE_RE = re.compile(r"^\s*(```|~~~)")
BULLET_RE = re.compile(r"^\s*(?:[*-]|\d+\.)\s+\S")
DOS_AND_DONTS_RE = re.compile(r"^#{1,3}\s+Do['’]s and Don['’]ts", re.IGNORECASE | re.MULTILINE)
NEXT_HEADING_RE = re.compile(r"^#{1,6}\s+", re.MULTILINE)

PRACTICE_BLOCK_RE = re.compile(r"```(?:typescript|javascript|html)[\s\S]*?```")
URL_RE = re.compile(r"https?://[^\s)]+")
EMBEDDED_HEADING_RE = re.compile(r"^#+\s+(.+)$", re.MULTILINE)
LEADING_HEADING_RE = re.compile(r"^#+\s+.+\n")

DOCS_CODE_BODY_RE = re.compile(r"<docs-code[^>]*>([\s\S]*?)</docs-code>")
DOCS_CODE_HEADER_PATH_RE = re.compile(
    r"<docs-code[^>]*?header=['\"]([^'\"]+)['\"][^>]*?path=['\"]([^'\"]+)['\"][^>]*?>"
)
VISIBLE_REGION_RE = re.compile(r"visibleRegion=['\"]([^'\"]+)['\"]")
DOCS_CODE_ATTR_RE = re.compile(r"\b(path|visibleRegion|header|language)=['\"]([^'\"]+)['\"]")
CONTROL_FLOW_MARKERS = ("@if", "@for", "@switch")
CONTROL_FLOW_PREFIX = "// Modern Angular control flow syntax\n"


def _fence_re(languages: tuple[str, ...]) -> re.Pattern:
    alternatives = "|".join(languages)
    return re.compile(rf"```(?:{alternatives})\b[^\n]*\r?\n([\s\S]*?)```")


CODE_FENCE_RE = _fence_re(CODE_LANGUAGES)
PRACTICE_FENCE_RE = _fence_re(PRACTICE_CODE_LANGUAGES)


def extract_title(content: str) -> str | None:
    """Title: h1, then the decorative header marker, then h2, then the first non-empty line."""
    if not content:
        return None
    for pattern in (H1_RE, DECORATIVE_TITLE_RE, H2_RE):
        match = pattern.search(content)
        if match:
            return match.group(1).strip()
    for line in content.splitlines():
        if line.strip():
            return line.strip()
    return None


def title_from_filename(filename: str) -> str:
    """'dependency-injection.md' -> 'Dependency Injection'."""
    stem = re.sub(r"\.md$", "", filename, flags=re.IGNORECASE)
    words = re.split(r"[-_\s]+", stem)
    return " ".join(w[:1].upper() + w[1:] for w in words if w)


def extract_code_examples(content: str, docs_code: bool = False) -> list[str]:
    """Collect fenced code blocks in a recognized language.

    With ``docs_code`` set, ``<docs-code>`` elements are also harvested: their
    body when inline, otherwise a placeholder naming the referenced path or
    visible region. The referenced bytes are fetched separately on demand.
    """
    examples = []
    for match in CODE_FENCE_RE.finditer(content or ""):
        code = match.group(1).strip()
        if code:
            examples.append(code)

    if not docs_code:
        return examples

    for match in DOCS_CODE_BODY_RE.finditer(content):
        body = match.group(1).strip()
        if body:
            examples.append(body)

    for match in DOCS_CODE_HEADER_PATH_RE.finditer(content):
        examples.append(
            f"// Header: {match.group(1)}\n"
            f"// Path reference: {match.group(2)}\n"
            "// Actual code would be loaded from this path"
        )

    for match in VISIBLE_REGION_RE.finditer(content):
        examples.append(
            f"// Visible region: {match.group(1)}\n"
            "// This references a specific section of code in an example file"
        )

    return [
        CONTROL_FLOW_PREFIX + ex if any(marker in ex for marker in CONTROL_FLOW_MARKERS) else ex
        for ex in examples
    ]


def parse_docs_code(element: str) -> dict[str, str]:
    """Read path/visibleRegion/header attributes from a ``<docs-code>`` element."""
    return {name: value for name, value in DOCS_CODE_ATTR_RE.findall(element or "")}


def _heading_sections(content: str) -> list[tuple[int, str, int]]:
    """Return (level, title, line index) for every heading outside fenced code."""
    headings = []
    in_fence = False
    for i, line in enumerate(content.splitlines()):
        if FENCE_LINE_RE.match(line):
            in_fence = not in_fence
            continue
        if in_fence:
            continue
        match = HEADING_RE.match(line)
        if match:
            headings.append((len(match.group(1)), match.group(2), i))
    return headings


def _practice_heading_passages(content: str) -> list[str]:
    """First heading per phrase, captured to the next heading of equal or higher level."""
    lines = content.splitlines()
    headings = _heading_sections(content)
    passages = []
    for phrase in PRACTICE_HEADINGS:
        for pos, (level, title, line_no) in enumerate(headings):
            if level > 3 or phrase not in title.lower():
                continue
            end = len(lines)
            for next_level, _, next_line in headings[pos + 1:]:
                if next_level <= level:
                    end = next_line
                    break
            passage = "\n".join(lines[line_no:end]).strip()
            if passage:
                passages.append(passage)
            break
    return passages


def _bullet_passages(content: str) -> list[str]:
    """Contiguous bullet or numbered list blocks mentioning a trigger word."""
    blocks: list[list[str]] = []
    current: list[str] = []
    for line in content.splitlines():
        if BULLET_RE.match(line):
            current.append(line)
            continue
        if current:
            blocks.append(current)
            current = []
    if current:
        blocks.append(current)

    passages = []
    for block in blocks:
        text = "\n".join(block).strip()
        lowered = text.lower()
        if any(trigger in lowered for trigger in BULLET_TRIGGERS):
            passages.append(text)
    return passages


def _code_passages(content: str) -> list[str]:
    """Code blocks introduced by a trigger phrase in the preceding window."""
    passages = []
    for match in PRACTICE_FENCE_RE.finditer(content):
        preceding = content[max(0, match.start() - PRECEDING_WINDOW):match.start()]
        if any(trigger in preceding.lower() for trigger in CODE_TRIGGERS):
            passages.append(preceding.strip() + "\n\n" + match.group(0))
    return passages


def _dos_and_donts_passage(content: str) -> list[str]:
    match = DOS_AND_DONTS_RE.search(content)
    if not match:
        return []
    following = NEXT_HEADING_RE.search(content, match.end())
    end = following.start() if following else len(content)
    return [content[match.start():end].strip()]


def extract_best_practices(content: str) -> list[str]:
    """Run all four passage heuristics and concatenate their results.

    Every heuristic runs; a region matched by several heuristics appears once
    per heuristic.
    """
    if not content:
        return []
    return (
        _practice_heading_passages(content)
        + _bullet_passages(content)
        + _code_passages(content)
        + _dos_and_donts_passage(content)
    )


def _region_patterns(name: str, end: bool) -> list[re.Pattern]:
    keyword = "enddocregion" if end else "docregion"
    escaped = re.escape(name)
    tail = r"(?![\w-])[^\S\r\n]*"
    return [
        re.compile(rf"//[^\S\r\n]*#{keyword}[^\S\r\n]+{escaped}{tail}(?:\r?\n|$)"),
        re.compile(rf"<!--\s*#{keyword}\s+{escaped}{tail}-->[^\S\r\n]*(?:\r?\n|$)"),
        re.compile(rf"/\*\s*#{keyword}\s+{escaped}{tail}\*/[^\S\r\n]*(?:\r?\n|$)"),
    ]


def extract_region(text: str, region: str | None) -> str:
    """Slice the named region out of ``text``.

    Supports line-comment, block-comment and markup-comment markers. Without a
    start marker the whole text is returned; without an end marker the text
    after the start marker is returned.
    """
    if not text or not region:
        return text

    starts = [m for m in (p.search(text) for p in _region_patterns(region, end=False)) if m]
    if not starts:
        return text
    start = min(starts, key=lambda m: m.start())

    body_start = start.end()
    ends = [m for m in (p.search(text, body_start) for p in _region_patterns(region, end=True)) if m]
    if not ends:
        return text[body_start:].strip()
    end = min(ends, key=lambda m: m.start())
    return text[body_start:end.start()].strip()


def sniff_title(passage: str) -> str | None:
    match = EMBEDDED_HEADING_RE.search(passage)
    return match.group(1).strip() if match else None


def sniff_url(passage: str) -> str:
    match = URL_RE.search(passage)
    return match.group(0) if match else ""


def first_code_block(passage: str) -> str | None:
    """Body of the first fenced block, fences removed."""
    match = PRACTICE_FENCE_RE.search(passage)
    return match.group(1).strip() if match else None


def replace_code_blocks(text: str, placeholder: str) -> str:
    return PRACTICE_BLOCK_RE.sub(placeholder, text)


def condense_passage(passage: str, limit: int) -> str:
    """Drop a heading on the first line, collapse code blocks, cut to ``limit`` characters."""
    text = LEADING_HEADING_RE.sub("", passage, count=1)
    text = replace_code_blocks(text, "[Code example]")
    return text[:limit]
