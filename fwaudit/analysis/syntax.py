"""TypeScript syntax extraction using tree-sitter.

Reduces a parsed file to the handful of facts the rule catalog checks:
classes (decorators, heritage, methods, constructor parameters), import
bindings, line comments and identifier occurrence counts.
"""

import re
from collections import Counter
from dataclasses import dataclass, field
from functools import lru_cache
from typing import Any

from tree_sitter_language_pack import get_parser

IDENTIFIER_TYPES = frozenset({
    "identifier",
    "type_identifier",
    "property_identifier",
    "shorthand_property_identifier",
    "shorthand_property_identifier_pattern",
})
CLASS_TYPES = frozenset({"class_declaration", "abstract_class_declaration", "class"})
PARAMETER_TYPES = frozenset({"required_parameter", "optional_parameter"})
ACCESSOR_KEYWORDS = frozenset({"get", "set"})
FRAMEWORK_MODULE_PREFIXES = ("@nestjs/", "@angular/")


@dataclass
class Span:
    line_start: int
    line_end: int


@dataclass
class Decorator(Span):
    name: str
    arguments: str
    text: str


@dataclass
class Parameter(Span):
    name: str
    accessibility: str | None
    text: str


@dataclass
class Method(Span):
    name: str
    accessibility: str | None
    decorators: list[Decorator] = field(default_factory=list)
    is_static: bool = False


@dataclass
class ClassInfo(Span):
    name: str
    text: str
    decorators: list[Decorator] = field(default_factory=list)
    implements: list[str] = field(default_factory=list)
    extends: list[str] = field(default_factory=list)
    methods: list[Method] = field(default_factory=list)
    constructor_parameters: list[Parameter] = field(default_factory=list)

    def decorator(self, name: str) -> Decorator | None:
        for dec in self.decorators:
            if dec.name == name:
                return dec
        return None

    def implements_any(self, interface: str) -> bool:
        return any(interface in impl for impl in self.implements)

    def has_method(self, name: str) -> bool:
        return any(m.name == name for m in self.methods)


@dataclass
class ImportBinding(Span):
    local_name: str
    imported_name: str
    module: str

    def describe(self) -> str:
        """'B' or 'A as B', followed by the module it comes from."""
        name = self.local_name
        if self.imported_name not in (self.local_name, "default", "*"):
            name = f"{self.imported_name} as {self.local_name}"
        return f"{name} from '{self.module}'"


@dataclass
class Comment(Span):
    text: str


@dataclass
class SyntaxSummary:
    classes: list[ClassInfo]
    imports: list[ImportBinding]
    comments: list[Comment]
    identifier_counts: Counter

    def framework_base(self, cls: ClassInfo) -> ImportBinding | None:
        """The framework import ``cls`` extends, e.g. AuthGuard from @nestjs/passport."""
        for base in cls.extends:
            for binding in self.imports:
                if binding.local_name == base and binding.module.startswith(FRAMEWORK_MODULE_PREFIXES):
                    return binding
        return None


def _get_node_text(node: Any) -> str:
    """Extract text from a tree-sitter node."""
    if node is None:
        return ""
    return node.text.decode("utf-8", errors="ignore")


def _lines(node: Any) -> tuple[int, int]:
    return node.start_point[0] + 1, node.end_point[0] + 1


def _find_child_by_type(node: Any, child_type: str) -> Any | None:
    """Find first child of given type."""
    if node is None:
        return None
    for child in node.children:
        if child.type == child_type:
            return child
    return None


def _find_children_by_type(node: Any, child_type: str) -> list[Any]:
    """Find all children of given type."""
    if node is None:
        return []
    return [child for child in node.children if child.type == child_type]


def _walk(node: Any):
    """Pre-order traversal over every descendant, node included."""
    stack = [node]
    while stack:
        current = stack.pop()
        yield current
        stack.extend(reversed(current.children))


def _type_name(text: str) -> str:
    """'PipeTransform<string, number>' -> 'PipeTransform'."""
    return re.split(r"[<\s(]", text.strip(), maxsplit=1)[0]


@lru_cache(maxsize=1)
def _parser():
    return get_parser("typescript")


def parse(content: str):
    """Parse TypeScript (or JavaScript) source into a tree-sitter tree."""
    return _parser().parse(content.encode("utf-8"))


def extract_decorator(node: Any) -> Decorator:
    start, end = _lines(node)
    target = node.named_children[0] if node.named_children else None
    arguments = ""
    if target is not None and target.type == "call_expression":
        arguments = _get_node_text(target.child_by_field_name("arguments"))
        target = target.child_by_field_name("function")
    name = _get_node_text(target).split(".")[-1]
    return Decorator(start, end, name=name, arguments=arguments, text=_get_node_text(node))


def _accessibility(node: Any) -> str | None:
    modifier = _find_child_by_type(node, "accessibility_modifier")
    return _get_node_text(modifier) if modifier is not None else None


def _extract_parameters(method_node: Any) -> list[Parameter]:
    params_node = method_node.child_by_field_name("parameters")
    params = []
    for child in params_node.children if params_node is not None else []:
        if child.type not in PARAMETER_TYPES:
            continue
        start, end = _lines(child)
        pattern = child.child_by_field_name("pattern")
        params.append(Parameter(
            start,
            end,
            name=_get_node_text(pattern) or "unknown",
            accessibility=_accessibility(child),
            text=_get_node_text(child),
        ))
    return params


def _extract_heritage(class_node: Any) -> tuple[list[str], list[str]]:
    implements, extends = [], []
    heritage = _find_child_by_type(class_node, "class_heritage")
    if heritage is None:
        return implements, extends
    for clause in heritage.children:
        if clause.type == "implements_clause":
            implements.extend(_type_name(_get_node_text(c)) for c in clause.named_children)
        elif clause.type == "extends_clause":
            extends.extend(
                name for name in (_type_name(_get_node_text(c)) for c in clause.named_children) if name
            )
    return implements, extends


def _extract_members(body: Any) -> tuple[list[Method], list[Parameter]]:
    """Methods (constructor and get/set accessors excluded) and constructor parameters of a class body.

    Member decorators appear as siblings immediately before the member.
    """
    methods: list[Method] = []
    constructor_params: list[Parameter] = []
    pending: list[Decorator] = []
    for child in body.children if body is not None else []:
        if child.type == "decorator":
            pending.append(extract_decorator(child))
            continue
        if child.type == "method_definition":
            name = _get_node_text(child.child_by_field_name("name"))
            decorators = pending + [extract_decorator(d) for d in _find_children_by_type(child, "decorator")]
            if name == "constructor":
                constructor_params = _extract_parameters(child)
            elif not any(c.type in ACCESSOR_KEYWORDS for c in child.children):
                start, end = _lines(child)
                if decorators:
                    start = min(start, decorators[0].line_start)
                methods.append(Method(
                    start,
                    end,
                    name=name,
                    accessibility=_accessibility(child),
                    decorators=decorators,
                    is_static=any(c.type == "static" for c in child.children),
                ))
        if child.type not in ("comment", ";"):
            pending = []
    return methods, constructor_params


def extract_class(node: Any) -> ClassInfo:
    outer = node.parent if node.parent is not None and node.parent.type == "export_statement" else node
    decorators = [extract_decorator(d) for d in _find_children_by_type(outer, "decorator")]
    if outer is not node:
        decorators += [extract_decorator(d) for d in _find_children_by_type(node, "decorator")]
    implements, extends = _extract_heritage(node)
    methods, constructor_params = _extract_members(node.child_by_field_name("body"))
    start, end = _lines(outer)
    return ClassInfo(
        start,
        end,
        name=_get_node_text(node.child_by_field_name("name")) or "unknown",
        text=_get_node_text(node),
        decorators=decorators,
        implements=implements,
        extends=extends,
        methods=methods,
        constructor_parameters=constructor_params,
    )


def extract_imports(root: Any) -> list[ImportBinding]:
    """Every local binding introduced by an import statement."""
    bindings = []
    for stmt in _find_children_by_type(root, "import_statement"):
        start, end = _lines(stmt)
        source = _get_node_text(stmt.child_by_field_name("source")).strip("'\"`")
        clause = _find_child_by_type(stmt, "import_clause")
        if clause is None:
            continue
        for child in clause.children:
            if child.type == "identifier":
                name = _get_node_text(child)
                bindings.append(ImportBinding(start, end, name, "default", source))
            elif child.type == "namespace_import":
                ident = _find_child_by_type(child, "identifier")
                name = _get_node_text(ident)
                bindings.append(ImportBinding(start, end, name, "*", source))
            elif child.type == "named_imports":
                for spec in _find_children_by_type(child, "import_specifier"):
                    imported = _get_node_text(spec.child_by_field_name("name"))
                    alias = spec.child_by_field_name("alias")
                    local = _get_node_text(alias) if alias is not None else imported
                    bindings.append(ImportBinding(start, end, local, imported, source))
    return bindings


def summarize(content: str) -> SyntaxSummary:
    """Parse ``content`` and collect everything the rule catalog needs."""
    tree = parse(content)
    root = tree.root_node
    classes, comments = [], []
    counts: Counter = Counter()
    for node in _walk(root):
        if node.type in CLASS_TYPES and node.child_by_field_name("name") is not None:
            classes.append(extract_class(node))
        elif node.type == "comment":
            start, end = _lines(node)
            comments.append(Comment(start, end, text=_get_node_text(node)))
        elif node.type in IDENTIFIER_TYPES:
            counts[_get_node_text(node)] += 1
    return SyntaxSummary(
        classes=classes,
        imports=extract_imports(root),
        comments=comments,
        identifier_counts=counts,
    )
