"""Value types for code analysis."""

from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any


class Language(Enum):
    TYPESCRIPT = "typescript"
    JAVASCRIPT = "javascript"
    HTML = "html"
    CSS = "css"
    SCSS = "scss"
    JSON = "json"
    YAML = "yaml"
    UNKNOWN = "unknown"


class FileKind(Enum):
    """Structural role of an analyzed file."""

    NESTJS_CONTROLLER = "nestjs-controller"
    NESTJS_SERVICE = "nestjs-service"
    NESTJS_MODULE = "nestjs-module"
    NESTJS_MIDDLEWARE = "nestjs-middleware"
    NESTJS_PIPE = "nestjs-pipe"
    NESTJS_GUARD = "nestjs-guard"
    NESTJS_INTERCEPTOR = "nestjs-interceptor"
    ANGULAR_COMPONENT = "angular-component"
    ANGULAR_SERVICE = "angular-service"
    ANGULAR_MODULE = "angular-module"
    ANGULAR_DIRECTIVE = "angular-directive"
    ANGULAR_PIPE = "angular-pipe"
    TEST = "test"
    CONFIGURATION = "configuration"
    UNKNOWN = "unknown"

    @property
    def framework(self) -> str | None:
        prefix = self.value.split("-", 1)[0]
        return prefix if prefix in ("nestjs", "angular") else None

    @property
    def component(self) -> str | None:
        """Documentation term for this kind ('controller', 'service', ...)."""
        if self.framework is None:
            return None
        return self.value.split("-", 1)[1]


class Severity(Enum):
    ERROR = "error"
    WARNING = "warning"
    INFO = "info"


CODE_LANGUAGES = frozenset({Language.TYPESCRIPT, Language.JAVASCRIPT})


@dataclass(frozen=True)
class CodeFile:
    path: str
    content: str
    language: Language = Language.UNKNOWN
    kind: FileKind = FileKind.UNKNOWN

    def classified(self, language: Language, kind: FileKind) -> "CodeFile":
        return replace(self, language=language, kind=kind)

    def info(self) -> dict[str, str]:
        return {"path": self.path, "language": self.language.value, "fileType": self.kind.value}


@dataclass(frozen=True)
class Issue:
    id: str
    description: str
    severity: Severity
    line_start: int
    line_end: int
    suggested_fix: str = ""
    documentation_url: str = ""

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "description": self.description,
            "severity": self.severity.value,
            "lineStart": self.line_start,
            "lineEnd": self.line_end,
            "fix": self.suggested_fix,
            "documentationUrl": self.documentation_url,
        }


@dataclass(frozen=True)
class BestPractice:
    id: str
    title: str
    description: str
    documentation_url: str = ""
    code_example: str | None = None

    def to_dict(self, description_limit: int | None = None) -> dict[str, Any]:
        description = self.description
        if description_limit is not None and len(description) > description_limit:
            description = description[:description_limit] + "..."
        return {"id": self.id, "title": self.title, "description": description}


@dataclass(frozen=True)
class AnalysisResult:
    file: CodeFile
    framework: str
    issues: tuple[Issue, ...] = field(default_factory=tuple)
    best_practices: tuple[BestPractice, ...] = field(default_factory=tuple)

    def count(self, severity: Severity) -> int:
        return sum(1 for issue in self.issues if issue.severity is severity)
