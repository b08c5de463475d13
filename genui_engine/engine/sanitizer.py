"""Strip generation wrappers so the model output is an embeddable component."""

from __future__ import annotations

import re

_FENCE = re.compile(r"```[A-Za-z0-9_+-]*")

# One complete import statement, named-import braces may span lines:
#   import X from 'm';  import { a,\n b } from "m";  import './side-effect.css';
_IMPORT_STATEMENT = r"""import\b(?:[^;'"<>()]*?\bfrom)?\s*(['"])[^'"\n]*\1[ \t]*;?"""
_LEADING_IMPORTS = re.compile(rf"\A(?:\s*{_IMPORT_STATEMENT})+")
_IMPORT_LINE = re.compile(rf"^{_IMPORT_STATEMENT}[ \t]*\n?", re.MULTILINE)

_EXPORT_DEFAULT_FUNCTION = re.compile(r"export\s+default\s+function")
_EXPORT_DEFAULT_CLASS = re.compile(r"export\s+default\s+class")
_EXPORT_DEFAULT_IDENTIFIER = re.compile(r"^export\s+default\s+[A-Za-z_$][\w$]*;?\s*$", re.MULTILINE)
_EXPORT_DEFAULT = re.compile(r"export\s+default\s+")


def sanitize_component(text: str) -> str:
    """Remove fences, import statements and ``export default`` forms.

    Only whole import statements are removed: the run at the top of the
    text, plus any that start in column 0 further down. Indented lines that
    merely begin with the word "import" (JSX text) are kept.

    Pure and idempotent: ``sanitize_component(sanitize_component(x)) ==
    sanitize_component(x)``.
    """
    clean = _FENCE.sub("", text).strip()
    clean = _EXPORT_DEFAULT_FUNCTION.sub("function", clean)
    clean = _EXPORT_DEFAULT_CLASS.sub("class", clean)
    clean = _EXPORT_DEFAULT_IDENTIFIER.sub("", clean)
    clean = _EXPORT_DEFAULT.sub("", clean)
    clean = _LEADING_IMPORTS.sub("", clean)
    clean = _IMPORT_LINE.sub("", clean)
    return clean.strip()
