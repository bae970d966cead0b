"""Known documentation sources and how their trees are sectioned."""

import re
from dataclasses import dataclass

from fwaudit.docs.fetcher import GitHubLocation, parse_github_url
from fwaudit.docs.models import Source

DIRECTORY_LAYOUT = "directories"
TAXONOMY_LAYOUT = "taxonomy"


@dataclass(frozen=True)
class SourceDefinition:
    """Static description of a documentation root."""

    id: str
    name: str
    url: str
    version: str
    framework: str
    layout: str

    @property
    def location(self) -> GitHubLocation:
        return parse_github_url(self.url)

    def build(self) -> Source:
        return Source(self.id, self.name, self.url, self.version, self.framework)


SOURCE_DEFINITIONS: dict[str, tuple[SourceDefinition, ...]] = {
    "nestjs": (
        SourceDefinition(
            id="nestjs-github",
            name="NestJS Documentation (GitHub)",
            url="https://github.com/nestjs/docs.nestjs.com/tree/master/content",
            version="master",
            framework="nestjs",
            layout=DIRECTORY_LAYOUT,
        ),
    ),
    "angular": (
        SourceDefinition(
            id="angular-github",
            name="Angular Documentation (GitHub)",
            url="https://github.com/angular/angular/tree/main/adev/src/content/guide",
            version="main",
            framework="angular",
            layout=TAXONOMY_LAYOUT,
        ),
    ),
}


@dataclass(frozen=True)
class TaxonomySection:
    key: str
    title: str
    directory: str


ANGULAR_TAXONOMY = (
    TaxonomySection("fundamentals", "Fundamentals", "fundamentals"),
    TaxonomySection("components", "Components", "components"),
    TaxonomySection("dependency-injection", "Dependency Injection", "di"),
    TaxonomySection("forms", "Forms", "forms"),
    TaxonomySection("routing", "Routing", "routing"),
    TaxonomySection("best-practices", "Best Practices & Style Guide", "style-guide"),
    TaxonomySection("other", "Other Topics", ""),
)

# directory name -> taxonomy key
TAXONOMY_DIRECTORIES = {
    "components": "components",
    "forms": "forms",
    "routing": "routing",
    "di": "dependency-injection",
    "style-guide": "best-practices",
}

# (taxonomy key, content keywords, filename keywords), checked in order
TAXONOMY_KEYWORDS = (
    ("components", ("component",), ("component",)),
    ("dependency-injection", ("dependency injection",), ("inject",)),
    ("forms", ("form",), ("form",)),
    ("routing", ("router", "routing"), ("route", "navigation")),
    ("best-practices", ("best practice", "style guide"), ("best", "style")),
)
FUNDAMENTALS_PREFIX = re.compile(r"^(introduction|getting-started|overview|concept)")

FALLBACK_BUCKET = "other"


def bucket_for(filename: str, content: str) -> str:
    """Pick the taxonomy key for a top-level markdown file."""
    lowered_content = (content or "").lower()
    lowered_name = filename.lower()
    for key, content_terms, name_terms in TAXONOMY_KEYWORDS:
        if any(t in lowered_content for t in content_terms) or any(t in lowered_name for t in name_terms):
            return key
    if FUNDAMENTALS_PREFIX.match(lowered_name):
        return "fundamentals"
    return FALLBACK_BUCKET


def section_id(name: str) -> str:
    return "section-" + re.sub(r"\s+", "-", name.lower())


def topic_id(filename: str, prefix: str = "") -> str:
    stem = re.sub(r"\.md$", "", re.sub(r"\s+", "-", filename.lower()))
    return f"topic-{prefix}-{stem}" if prefix else f"topic-{stem}"


def known_frameworks() -> list[str]:
    return list(SOURCE_DEFINITIONS)


def definition_for(source_id: str) -> SourceDefinition | None:
    for definitions in SOURCE_DEFINITIONS.values():
        for definition in definitions:
            if definition.id == source_id:
                return definition
    return None


def code_location(repo_path: str) -> GitHubLocation:
    """Resolve a docs-code path to a repository location.

    Paths are relative to the Angular repository unless they name the NestJS
    docs repository or are full github.com URLs.
    """
    parsed = parse_github_url(repo_path)
    if parsed is not None:
        return parsed
    path = repo_path.lstrip("/")
    if "nestjs" in path or "docs.nestjs.com" in path:
        return GitHubLocation("nestjs", "docs.nestjs.com", "master", path)
    return GitHubLocation("angular", "angular", "main", path)
