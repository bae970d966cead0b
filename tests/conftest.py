"""Pytest configuration and fixtures.

Nothing here touches the network: ``FakeFetcher`` serves a small NestJS and
Angular documentation tree from memory through the same interface as
``GitHubContentFetcher``.
"""

import asyncio
import copy

import pytest

from fwaudit.analysis.analyzer import CodeAnalyzer
from fwaudit.config_runtime import DEFAULTS
from fwaudit.docs.index import DocumentationIndex

RAW_BASE = DEFAULTS["github"]["raw_base"]
API_BASE = DEFAULTS["github"]["api_base"]

NESTJS_ROOT = "nestjs/docs.nestjs.com/master/content"
ANGULAR_ROOT = "angular/angular/main/adev/src/content/guide"
ANGULAR_EXAMPLES = "angular/angular/main/adev/src/content/examples"

CONTROLLERS_MD = """# Controllers

Controllers are responsible for handling incoming requests and returning responses to the client.

## Best practices

- Controllers should stay thin and delegate work to a service.
- Always use DTO classes for request bodies.

## Routing

The recommended way to declare a route handler:

```typescript
@Get()
findAll(): string {
  return 'This action returns all cats';
}
```
"""

GUARDS_MD = """# Guards

A guard is a class annotated with the `@Injectable()` decorator, which implements the `CanActivate` interface.

### Do's and Don'ts

Do keep guards focused on authorization.

## Binding guards

Guards can be controller-scoped, method-scoped, or global-scoped.
"""

ANATOMY_MD = """<docs-decorative-header title="Anatomy of a component">
</docs-decorative-header>

Every component must have a TypeScript class with the `@Component` decorator.

<docs-code header="profile-photo.component.ts" path="adev/src/content/examples/components/anatomy/profile-photo.component.ts" visibleRegion="class"/>

```html
<img src="profile-photo.jpg" alt="Your profile photo">
```
"""

REACTIVE_FORMS_MD = """# Reactive forms

Reactive forms provide a model-driven approach to handling form inputs.

## Adding a basic form control

```typescript
import { FormControl } from '@angular/forms';

export class NameEditorComponent {
  name = new FormControl('');
}
```
"""

STYLE_GUIDE_MD = """# Angular coding style guide

## Best practices

- Always prefer consistent naming for services.
- Never put more than one concept in a single file.
"""

TEMPLATES_MD = """# Template syntax

Templates use @if and @for blocks.

```html
@if (user) {
  <p>{{ user.name }}</p>
}
```
"""

PROFILE_PHOTO_TS = """import { Component } from '@angular/core';

// #docregion class
@Component({
  selector: 'profile-photo',
  template: `<img src="profile-photo.jpg">`,
})
export class ProfilePhoto {}
// #enddocregion class
"""

DOCS_TREE = {
    f"{NESTJS_ROOT}/README.md": "# Docs\n",
    f"{NESTJS_ROOT}/assets/logo.png": "png",
    f"{NESTJS_ROOT}/controllers/controllers.md": CONTROLLERS_MD,
    f"{NESTJS_ROOT}/guards/guards.md": GUARDS_MD,
    f"{NESTJS_ROOT}/overview/first-steps.md": "# First steps\n\nSetting up a new project is simple with the Nest CLI.\n",
    f"{NESTJS_ROOT}/techniques/validation.md": (
        "# Validation\n\n"
        "It is best practice to validate the correctness of any data sent into a web application.\n"
    ),
    f"{NESTJS_ROOT}/techniques/advanced/caching.md": "# Caching\n\nCaching is a great and simple technique.\n",
    f"{ANGULAR_ROOT}/components/anatomy-of-components.md": ANATOMY_MD,
    f"{ANGULAR_ROOT}/forms/reactive-forms.md": REACTIVE_FORMS_MD,
    f"{ANGULAR_ROOT}/overview.md": (
        "# What is Angular?\n\n"
        "Angular is a web framework that empowers developers to build fast, reliable applications.\n"
    ),
    f"{ANGULAR_ROOT}/style-guide.md": STYLE_GUIDE_MD,
    f"{ANGULAR_ROOT}/templates.md": TEMPLATES_MD,
    f"{ANGULAR_ROOT}/testing/overview.md": "# Testing\n\nTesting your Angular application helps you check that it works.\n",
    f"{ANGULAR_EXAMPLES}/components/anatomy/profile-photo.component.ts": PROFILE_PHOTO_TS,
}


def _key(location) -> str:
    return f"{location.owner}/{location.repo}/{location.branch}/{location.path}".rstrip("/")


class FakeFetcher:
    """In-memory stand-in for GitHubContentFetcher.

    ``files`` maps ``owner/repo/branch/path`` to file text. Directory listings
    are derived from the keys. Every request URL is recorded in ``requests``.
    """

    def __init__(self, files: dict[str, str] | None = None):
        self.files = dict(DOCS_TREE if files is None else files)
        self.requests: list[str] = []
        self.closed = False

    def raw_url(self, location) -> str:
        return f"{RAW_BASE}/{_key(location)}"

    def contents_url(self, location) -> str:
        return (
            f"{API_BASE}/repos/{location.owner}/{location.repo}"
            f"/contents/{location.path}?ref={location.branch}"
        )

    async def fetch_text(self, url: str) -> str:
        self.requests.append(url)
        if not url.startswith(RAW_BASE + "/"):
            return ""
        return self.files.get(url[len(RAW_BASE) + 1:], "")

    async def fetch_json(self, url: str):
        self.requests.append(url)
        return None

    async def list_directory(self, location) -> list[dict]:
        self.requests.append(self.contents_url(location))
        # yield so concurrent callers interleave as they would over the network
        await asyncio.sleep(0)
        prefix = _key(location) + "/"
        entries: dict[str, dict] = {}
        for key in self.files:
            if not key.startswith(prefix):
                continue
            name, sep, _ = key[len(prefix):].partition("/")
            path = f"{location.path}/{name}"
            if sep:
                entries.setdefault(name, {"name": name, "type": "dir", "path": path})
            else:
                entries[name] = {
                    "name": name,
                    "type": "file",
                    "path": path,
                    "download_url": f"{RAW_BASE}/{key}",
                }
        return [entries[name] for name in sorted(entries)]

    async def file_metadata(self, location) -> dict | None:
        self.requests.append(self.contents_url(location))
        key = _key(location)
        if key not in self.files:
            return None
        return {"name": location.path.rsplit("/", 1)[-1], "type": "file", "download_url": f"{RAW_BASE}/{key}"}

    async def fetch_file(self, location) -> str:
        return await self.fetch_text(self.raw_url(location))

    async def aclose(self) -> None:
        self.closed = True


@pytest.fixture
def config():
    """Built-in defaults, isolated per test."""
    return copy.deepcopy(DEFAULTS)


@pytest.fixture
def fetcher():
    return FakeFetcher()


@pytest.fixture
def index(fetcher, config):
    """Documentation index over the in-memory tree."""
    return DocumentationIndex(fetcher=fetcher, config=config)


@pytest.fixture
def empty_index(config):
    """Documentation index whose remote tree has nothing in it."""
    return DocumentationIndex(fetcher=FakeFetcher(files={}), config=config)


@pytest.fixture
def analyzer(index):
    return CodeAnalyzer(index)


@pytest.fixture
def run():
    """Drive a coroutine to completion."""
    return asyncio.run
