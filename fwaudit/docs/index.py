"""In-memory documentation index.

Owns the framework -> source -> section -> topic hierarchy for one process (or
one test). Sections are discovered once per source; topic content is loaded on
first use and swapped into its section as a new Topic value.
"""

import asyncio
import re
from collections.abc import Awaitable, Callable
from pathlib import PurePosixPath
from typing import Any

from fwaudit.config_runtime import load_runtime_config
from fwaudit.docs import markdown
from fwaudit.docs.fetcher import GitHubContentFetcher, GitHubLocation, to_raw_url
from fwaudit.docs.models import CodeSnippet, Section, Source, Topic
from fwaudit.docs.sources import (
    ANGULAR_TAXONOMY,
    SOURCE_DEFINITIONS,
    TAXONOMY_DIRECTORIES,
    TAXONOMY_LAYOUT,
    SourceDefinition,
    bucket_for,
    code_location,
    definition_for,
    section_id,
    topic_id,
)
from fwaudit.utils.logging import logger

CodeStrategy = Callable[[GitHubLocation, str | None], Awaitable[str | None]]


class DocumentationIndex:
    """Lazily populated documentation hierarchy for every known framework."""

    def __init__(self, fetcher: Any = None, config: dict[str, Any] | None = None):
        self.config = config or load_runtime_config()
        self.fetcher = fetcher or GitHubContentFetcher(self.config)
        self.raw_base = self.config["github"]["raw_base"]
        self._sources: dict[str, list[Source]] = {
            framework: [d.build() for d in definitions]
            for framework, definitions in SOURCE_DEFINITIONS.items()
        }
        self._discovery_locks: dict[str, asyncio.Lock] = {}

    # ------------------------------------------------------------------
    # lookup
    # ------------------------------------------------------------------

    async def sources(self, framework: str) -> list[Source]:
        """Sources for ``framework`` with their sections discovered."""
        sources = self._sources.get((framework or "").lower(), [])
        for source in sources:
            await self._ensure_discovered(source)
        return sources

    def find_source(self, source_id: str) -> Source | None:
        for sources in self._sources.values():
            for source in sources:
                if source.id == source_id:
                    return source
        return None

    async def topic(self, source_id: str, topic_id_: str) -> Topic | None:
        """Look up a topic, loading its content on first access."""
        source = self.find_source(source_id)
        if source is None:
            return None
        await self._ensure_discovered(source)
        for section, topic in source.iter_topics():
            if topic.id == topic_id_:
                return await self._load(source, section, topic)
        return None

    async def search(self, source_id: str, query: str) -> list[Topic]:
        """Case-insensitive substring match over title and content, in traversal order."""
        source = self.find_source(source_id)
        if source is None:
            return []
        await self._ensure_discovered(source)
        needle = (query or "").lower()
        results = []
        for section, topic in source.iter_topics():
            topic = await self._load(source, section, topic)
            if needle in topic.title.lower() or needle in topic.content.lower():
                results.append(topic)
        return results

    async def best_practices(self, framework: str, component: str) -> list[str]:
        """All passages from topics mentioning ``component``, framework-wide.

        Passages are not deduplicated across topics.
        """
        needle = (component or "").lower()
        passages: list[str] = []
        for source in await self.sources(framework):
            for section, topic in source.iter_topics():
                topic = await self._load(source, section, topic)
                if needle in topic.title.lower() or needle in topic.content.lower():
                    passages.extend(topic.best_practices)
        return passages

    async def loaded_topics(self, framework: str) -> list[tuple[Source, Topic]]:
        """Every topic of the framework with content loaded."""
        topics = []
        for source in await self.sources(framework):
            for section, topic in source.iter_topics():
                topics.append((source, await self._load(source, section, topic)))
        return topics

    # ------------------------------------------------------------------
    # content
    # ------------------------------------------------------------------

    def _materialize(self, framework: str, topic: Topic, content: str, title: str | None = None) -> Topic:
        return topic.with_content(
            content,
            title=title,
            best_practices=markdown.extract_best_practices(content),
            code_examples=markdown.extract_code_examples(
                content, docs_code=framework == "angular"
            ),
        )

    async def _load(self, source: Source, section: Section, topic: Topic) -> Topic:
        """Return the content-bearing value for ``topic``, fetching it if needed."""
        current = section.find(topic.id) or topic
        if current.loaded:
            return current
        content = await self.fetcher.fetch_text(to_raw_url(current.url, self.raw_base))
        if not content:
            return current
        upgraded = self._materialize(source.framework, current, content)
        section.replace_topic(upgraded)
        logger.debug("Loaded topic {topic} from {source}", topic=upgraded.id, source=source.id)
        return upgraded

    # ------------------------------------------------------------------
    # discovery
    # ------------------------------------------------------------------

    async def _ensure_discovered(self, source: Source) -> None:
        if source.sections:
            return
        lock = self._discovery_locks.setdefault(source.id, asyncio.Lock())
        async with lock:
            if source.sections:
                return
            definition = definition_for(source.id)
            logger.debug("Discovering sections for {source}", source=source.id)
            try:
                if definition.layout == TAXONOMY_LAYOUT:
                    discovered = await self._discover_taxonomy(definition)
                else:
                    discovered = await self._discover_directories(definition)
            except Exception as e:
                logger.opt(exception=True).warning(
                    "Section discovery failed for {source}: {err}", source=source.id, err=e
                )
                discovered = []
            # attached only after the whole walk; callers never observe a partial tree
            for section in discovered:
                source.add_section(section)
            logger.debug(
                "Discovered {count} sections for {source}", count=len(source.sections), source=source.id
            )

    def _child_location(self, parent: GitHubLocation, entry: dict[str, Any]) -> GitHubLocation:
        path = entry.get("path") or parent.child(entry["name"]).path
        return GitHubLocation(parent.owner, parent.repo, parent.branch, path)

    def _entry_url(self, location: GitHubLocation, entry: dict[str, Any], kind: str) -> str:
        return entry.get("html_url") or (
            f"https://github.com/{location.owner}/{location.repo}/{kind}/{location.branch}/{location.path}"
        )

    async def _collect_topics(self, section: Section, location: GitHubLocation, prefix: str = "") -> None:
        """Add every markdown file under ``location`` (recursively) as a content-empty topic."""
        for entry in await self.fetcher.list_directory(location):
            name = entry["name"]
            child = self._child_location(location, entry)
            if entry.get("type") == "dir":
                nested = f"{prefix}-{name.lower()}" if prefix else name.lower()
                await self._collect_topics(section, child, nested)
            elif entry.get("type") == "file" and name.endswith(".md"):
                section.add_topic(Topic(
                    id=topic_id(name, prefix),
                    title=markdown.title_from_filename(name),
                    url=self._entry_url(child, entry, "blob"),
                ))

    async def _directory_section(self, root: GitHubLocation, entry: dict[str, Any]) -> Section:
        location = self._child_location(root, entry)
        section = Section(
            id=section_id(entry["name"]),
            title=markdown.title_from_filename(entry["name"]),
            url=self._entry_url(location, entry, "tree"),
        )
        await self._collect_topics(section, location)
        return section

    async def _discover_directories(self, definition: SourceDefinition) -> list[Section]:
        """One section per top-level directory."""
        root = definition.location
        sections = []
        for entry in await self.fetcher.list_directory(root):
            if entry.get("type") != "dir":
                continue
            sections.append(await self._directory_section(root, entry))
        return sections

    async def _discover_taxonomy(self, definition: SourceDefinition) -> list[Section]:
        """Bucket a flat tree into fixed logical sections.

        Known directories fill their taxonomy section, other directories become
        sections of their own, and top-level files are bucketed by keywords.
        Taxonomy sections follow the directory sections.
        """
        root = definition.location
        buckets = {
            t.key: Section(
                id=f"section-{t.key}",
                title=t.title,
                url=root.child(t.directory).web_url if t.directory else root.web_url,
            )
            for t in ANGULAR_TAXONOMY
        }
        sections: list[Section] = []

        for entry in await self.fetcher.list_directory(root):
            name = entry["name"]
            if entry.get("type") == "dir":
                key = TAXONOMY_DIRECTORIES.get(name.lower())
                if key:
                    await self._collect_topics(buckets[key], self._child_location(root, entry))
                else:
                    sections.append(await self._directory_section(root, entry))
            elif entry.get("type") == "file" and name.endswith(".md"):
                location = self._child_location(root, entry)
                content = await self.fetcher.fetch_text(
                    entry.get("download_url") or self.fetcher.raw_url(location)
                )
                topic = Topic(
                    id=topic_id(name),
                    title=markdown.title_from_filename(name),
                    url=self._entry_url(location, entry, "blob"),
                )
                if content:
                    topic = self._materialize(
                        definition.framework, topic, content, title=markdown.extract_title(content)
                    )
                buckets[bucket_for(name, content)].add_topic(topic)

        return sections + [buckets[taxonomy.key] for taxonomy in ANGULAR_TAXONOMY]

    # ------------------------------------------------------------------
    # code references
    # ------------------------------------------------------------------

    async def _from_contents_api(self, location: GitHubLocation, region: str | None) -> str | None:
        metadata = await self.fetcher.file_metadata(location)
        if metadata is None:
            return None
        url = metadata.get("download_url") or self.fetcher.raw_url(location)
        text = await self.fetcher.fetch_text(url)
        return markdown.extract_region(text, region) if text else None

    async def _from_raw_url(self, location: GitHubLocation, region: str | None) -> str | None:
        text = await self.fetcher.fetch_file(location)
        return markdown.extract_region(text, region) if text else None

    async def _from_indexed_topics(self, location: GitHubLocation, region: str | None) -> str | None:
        filename = PurePosixPath(location.path).name
        if not filename:
            return None
        for framework in self._sources:
            for source in await self.sources(framework):
                for section, topic in source.iter_topics():
                    if filename not in topic.url:
                        continue
                    topic = await self._load(source, section, topic)
                    if not topic.code_examples:
                        continue
                    if region:
                        for example in topic.code_examples:
                            if region in example or filename.lower() in example.lower():
                                return example
                    return topic.code_examples[0]
        return None

    def _code_strategies(self) -> list[tuple[str, CodeStrategy]]:
        return [
            ("contents-api", self._from_contents_api),
            ("raw-url", self._from_raw_url),
            ("indexed-topics", self._from_indexed_topics),
        ]

    async def resolve_code(self, path: str, region: str | None = None, header: str | None = None) -> CodeSnippet:
        """Fetch the code a docs-code reference points at.

        Strategies run in order and the first non-empty result wins. When all
        of them fail the snippet's ``code`` is None.
        """
        if not path:
            return CodeSnippet(path="", region=region, error="No path given")
        location = code_location(path)
        for name, strategy in self._code_strategies():
            code = await strategy(location, region)
            if code:
                if header:
                    code = f"// {header}\n{code}"
                return CodeSnippet(path=path, code=code, region=region, strategy=name)
            logger.debug("Code strategy {name} found nothing for {path}", name=name, path=location.path)

        suffix = f" with region {region}" if region else ""
        return CodeSnippet(
            path=path,
            region=region,
            error=f"Could not retrieve code for {location.path}{suffix}",
        )

    async def resolve_docs_code(self, element: str) -> CodeSnippet:
        attrs = markdown.parse_docs_code(element)
        if not attrs.get("path"):
            return CodeSnippet(path="", error=f"No path found in docs-code element: {element}")
        return await self.resolve_code(attrs["path"], attrs.get("visibleRegion"), attrs.get("header"))

    async def resolve_many(self, requests: list[dict[str, Any]], batch_size: int | None = None) -> list[CodeSnippet]:
        """Resolve many references, one concurrent batch at a time, preserving order.

        Each request has either ``selector`` (a docs-code element) or ``path``
        plus optional ``visibleRegion``.
        """
        size = max(1, batch_size or self.config["limits"]["snippet_batch_size"])

        async def resolve_one(request: dict[str, Any]) -> CodeSnippet:
            selector = request.get("selector") or ""
            if "<docs-code" in selector:
                return await self.resolve_docs_code(selector)
            if request.get("path"):
                return await self.resolve_code(request["path"], request.get("visibleRegion"))
            return CodeSnippet(path="", error="Incomplete request: 'selector' or 'path' is required")

        results: list[CodeSnippet] = []
        for start in range(0, len(requests), size):
            batch = requests[start:start + size]
            results.extend(await asyncio.gather(*(resolve_one(r) for r in batch)))
        return results

    async def inline_docs_code(self, topic: Topic) -> Topic:
        """Return ``topic`` with the code its docs-code references point at appended."""
        fetched = []
        for match in re.finditer(r"<docs-code[^>]*>", topic.content):
            attrs = markdown.parse_docs_code(match.group(0))
            if not attrs.get("path"):
                continue
            snippet = await self.resolve_code(attrs["path"], attrs.get("visibleRegion"))
            if snippet.found:
                fetched.append(snippet.code)
        if not fetched:
            return topic
        return topic.with_content(
            topic.content,
            best_practices=list(topic.best_practices),
            code_examples=list(topic.code_examples) + fetched,
        )
