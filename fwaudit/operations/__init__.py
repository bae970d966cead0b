"""Request/response operations returning status envelopes.

Every operation is a coroutine returning a dict with a ``status`` of
``success``, ``warning`` or ``error``; none of them raise.
"""

from fwaudit.operations.code_analysis import (
    analyze_code_file,
    analyze_project,
    detect_framework_and_file_type,
    generate_fix_suggestions,
)
from fwaudit.operations.documentation import (
    browse_documentation,
    extract_code_snippet,
    extract_documentation,
    extract_multiple_code_snippets,
    get_best_practices,
    get_documentation_topic,
    search_documentation,
)

__all__ = [
    "analyze_code_file",
    "analyze_project",
    "browse_documentation",
    "detect_framework_and_file_type",
    "extract_code_snippet",
    "extract_documentation",
    "extract_multiple_code_snippets",
    "generate_fix_suggestions",
    "get_best_practices",
    "get_documentation_topic",
    "search_documentation",
]
