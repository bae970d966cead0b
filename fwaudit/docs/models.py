"""Documentation hierarchy: Source -> Section -> Topic."""

from dataclasses import dataclass, field, replace
from typing import Any


@dataclass(frozen=True)
class Topic:
    """One documentation page.

    Immutable. Loading content produces a new Topic with the same id via
    ``with_content``; the index replaces the old value in its section.
    """

    id: str
    title: str
    url: str
    content: str = ""
    best_practices: tuple[str, ...] = ()
    code_examples: tuple[str, ...] = ()

    @property
    def loaded(self) -> bool:
        return bool(self.content)

    def with_content(
        self,
        content: str,
        title: str | None = None,
        best_practices: list[str] | None = None,
        code_examples: list[str] | None = None,
    ) -> "Topic":
        """Return the content-bearing version of this topic."""
        return replace(
            self,
            content=content,
            title=title or self.title,
            best_practices=tuple(best_practices or ()),
            code_examples=tuple(code_examples or ()),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "title": self.title,
            "url": self.url,
            "content": self.content,
            "bestPractices": list(self.best_practices),
            "codeExamples": list(self.code_examples),
        }


@dataclass
class Section:
    """A named grouping of topics owned by one Source. Topics are append-only."""

    id: str
    title: str
    url: str
    topics: list[Topic] = field(default_factory=list)

    def add_topic(self, topic: Topic) -> bool:
        """Append a topic unless one with the same id is already present."""
        if any(t.id == topic.id for t in self.topics):
            return False
        self.topics.append(topic)
        return True

    def replace_topic(self, topic: Topic) -> None:
        """Swap in the newer value for an existing topic id."""
        for i, existing in enumerate(self.topics):
            if existing.id == topic.id:
                self.topics[i] = topic
                return

    def find(self, topic_id: str) -> Topic | None:
        for topic in self.topics:
            if topic.id == topic_id:
                return topic
        return None


@dataclass
class Source:
    """A framework's documentation root."""

    id: str
    name: str
    url: str
    version: str
    framework: str
    sections: list[Section] = field(default_factory=list)

    def add_section(self, section: Section) -> bool:
        """Attach a section; empty sections are never retained."""
        if not section.topics:
            return False
        self.sections.append(section)
        return True

    def iter_topics(self):
        """Yield (section, topic) in discovery order."""
        for section in self.sections:
            for topic in list(section.topics):
                yield section, topic

    def info(self) -> dict[str, str]:
        return {"id": self.id, "name": self.name, "url": self.url, "version": self.version}


@dataclass(frozen=True)
class CodeSnippet:
    """Result of resolving a code reference.

    ``code`` is None when every strategy failed; ``error`` then explains why.
    """

    path: str
    code: str | None = None
    region: str | None = None
    strategy: str | None = None
    error: str | None = None

    @property
    def found(self) -> bool:
        return self.code is not None
