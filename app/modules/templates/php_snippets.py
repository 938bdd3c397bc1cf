"""
Slug and PHP snippet helpers shared by the theme and template generators.

Everything here is plain string assembly: no PHP is parsed or executed.
"""

import hashlib
import re
from typing import List, Optional

_WHITESPACE_RUN = re.compile(r"\s+")
# PHP label grammar: [a-zA-Z_\x80-\xff][a-zA-Z0-9_\x80-\xff]*, restricted to ASCII here
_PHP_IDENTIFIER = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")
_PHP_INVALID_CHARS = re.compile(r"[^A-Za-z0-9_]")


def slugify(name: Optional[str]) -> str:
    """Lowercase the name and replace each run of whitespace with a hyphen."""
    return _WHITESPACE_RUN.sub("-", (name or "").lower())


def is_php_identifier(value: str) -> bool:
    return bool(_PHP_IDENTIFIER.match(value))


def php_identifier(slug: str, name: Optional[str] = None) -> str:
    """
    Turn a slug into a PHP function-name prefix.

    Hyphens become underscores. A result that still is not a valid identifier
    has its invalid characters replaced and gets a short hash of the original
    name appended, so two names that only differ in punctuation keep distinct
    prefixes.
    """
    candidate = slug.replace("-", "_")
    if is_php_identifier(candidate):
        return candidate
    cleaned = _PHP_INVALID_CHARS.sub("_", candidate) or "theme"
    if cleaned[0].isdigit():
        cleaned = f"theme_{cleaned}"
    digest = hashlib.sha1((name if name is not None else slug).encode("utf-8")).hexdigest()[:8]
    return f"{cleaned}_{digest}"


def generate_theme_function(function_name: str, params: Optional[List[str]] = None, body: str = "") -> str:
    """Render a PHP function declaration; each body line is indented by four spaces."""
    params_str = ", ".join(params or [])
    indented = body.replace("\n", "\n    ")
    return f"""
function {function_name}({params_str}) {{
    {indented}
}}
"""


def generate_action_hook(hook_name: str, function_name: str, priority: int = 10) -> str:
    return f"add_action('{hook_name}', '{function_name}', {priority});\n"
