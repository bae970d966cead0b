"""File classification: path and content to language and entity kind.

Pure decision tables; no I/O.
"""

import re
from pathlib import PurePosixPath

from fwaudit.analysis.models import CODE_LANGUAGES, CodeFile, FileKind, Language

EXTENSION_LANGUAGES = {
    ".ts": Language.TYPESCRIPT,
    ".js": Language.JAVASCRIPT,
    ".html": Language.HTML,
    ".css": Language.CSS,
    ".scss": Language.SCSS,
    ".json": Language.JSON,
    ".yml": Language.YAML,
    ".yaml": Language.YAML,
}

# Checked before any framework rules
GENERIC_PATH_RULES = (
    ((".spec.", ".test."), FileKind.TEST),
    ((".config.",), FileKind.CONFIGURATION),
)

PATH_RULES = {
    "nestjs": (
        ((".controller.",), FileKind.NESTJS_CONTROLLER),
        ((".service.", ".provider.", ".repository."), FileKind.NESTJS_SERVICE),
        ((".module.",), FileKind.NESTJS_MODULE),
        ((".middleware.",), FileKind.NESTJS_MIDDLEWARE),
        ((".pipe.",), FileKind.NESTJS_PIPE),
        ((".guard.",), FileKind.NESTJS_GUARD),
        ((".interceptor.", ".filter."), FileKind.NESTJS_INTERCEPTOR),
    ),
    "angular": (
        ((".component.",), FileKind.ANGULAR_COMPONENT),
        ((".service.",), FileKind.ANGULAR_SERVICE),
        ((".module.",), FileKind.ANGULAR_MODULE),
        ((".directive.",), FileKind.ANGULAR_DIRECTIVE),
        ((".pipe.",), FileKind.ANGULAR_PIPE),
    ),
}

# (required markers, any-of name hints, forbidden markers, kind)
CONTENT_RULES = {
    "nestjs": (
        (("@Controller",), (), (), FileKind.NESTJS_CONTROLLER),
        (("@Injectable",), ("Service", "Provider", "Repository"), ("@angular/",), FileKind.NESTJS_SERVICE),
        (("@Module",), (), (), FileKind.NESTJS_MODULE),
        (("@Injectable",), ("Middleware",), (), FileKind.NESTJS_MIDDLEWARE),
        (("@Injectable",), ("Pipe",), ("@angular/",), FileKind.NESTJS_PIPE),
        (("@Injectable",), ("Guard",), (), FileKind.NESTJS_GUARD),
        (("@Injectable",), ("Interceptor", "Filter"), (), FileKind.NESTJS_INTERCEPTOR),
    ),
    "angular": (
        (("@Component",), (), (), FileKind.ANGULAR_COMPONENT),
        (("@Injectable",), (), ("@nestjs/",), FileKind.ANGULAR_SERVICE),
        (("@NgModule",), (), (), FileKind.ANGULAR_MODULE),
        (("@Directive",), (), (), FileKind.ANGULAR_DIRECTIVE),
        (("@Pipe",), (), (), FileKind.ANGULAR_PIPE),
    ),
}

DEFAULT_ORDER = ("nestjs", "angular")
IMPORT_ORIGIN_RE = re.compile(r"""from\s+['"]@(nestjs|angular)/""")


def detect_language(path: str) -> Language:
    return EXTENSION_LANGUAGES.get(PurePosixPath(path).suffix.lower(), Language.UNKNOWN)


def framework_order(content: str, framework: str | None = None) -> tuple[str, ...]:
    """Frameworks in the order their rules are tried.

    An explicit framework goes first; otherwise the first framework package
    imported by the file does; otherwise the default order applies.
    """
    preferred = (framework or "").lower()
    if preferred not in DEFAULT_ORDER:
        match = IMPORT_ORIGIN_RE.search(content or "")
        preferred = match.group(1) if match else ""
    if preferred in DEFAULT_ORDER:
        return (preferred,) + tuple(f for f in DEFAULT_ORDER if f != preferred)
    return DEFAULT_ORDER


def classify_by_path(path: str, order: tuple[str, ...] = DEFAULT_ORDER) -> FileKind:
    name = PurePosixPath(path).name.lower()
    for fragments, kind in GENERIC_PATH_RULES:
        if any(f in name for f in fragments):
            return kind
    for framework in order:
        for fragments, kind in PATH_RULES[framework]:
            if any(f in name for f in fragments):
                return kind
    return FileKind.UNKNOWN


def classify_by_content(content: str, order: tuple[str, ...] = DEFAULT_ORDER) -> FileKind:
    for framework in order:
        for required, hints, forbidden, kind in CONTENT_RULES[framework]:
            if not all(marker in content for marker in required):
                continue
            if hints and not any(hint in content for hint in hints):
                continue
            if any(marker in content for marker in forbidden):
                continue
            return kind
    return FileKind.UNKNOWN


def classify(file: CodeFile, framework: str | None = None) -> CodeFile:
    """Assign language and entity kind. Idempotent for already-classified files."""
    if file.kind is not FileKind.UNKNOWN:
        return file

    language = file.language
    if language is Language.UNKNOWN:
        language = detect_language(file.path)

    kind = FileKind.UNKNOWN
    if language in CODE_LANGUAGES:
        order = framework_order(file.content, framework)
        kind = classify_by_path(file.path, order)
        if kind is FileKind.UNKNOWN:
            kind = classify_by_content(file.content or "", order)

    return file.classified(language, kind)


def framework_of(file: CodeFile) -> str:
    """'nestjs', 'angular' or 'unknown' for a classified file."""
    if file.kind.framework:
        return file.kind.framework
    match = IMPORT_ORIGIN_RE.search(file.content or "")
    return match.group(1) if match else "unknown"
