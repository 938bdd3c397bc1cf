import json
import logging
import shutil
import subprocess
from functools import lru_cache
from typing import Iterable, List, Optional, Tuple

logger = logging.getLogger(__name__)

LINT_TIMEOUT_SEC = 10

# Prints the names of functions and classes declared in the PHP read from stdin, as JSON
_DECLARATIONS_SCRIPT = r"""
$tokens = token_get_all(stream_get_contents(STDIN));
$out = ['functions' => [], 'classes' => []];
$pending = null;
$depth = 0;
foreach ($tokens as $token) {
    if (is_array($token)) {
        if ($token[0] === T_FUNCTION && $depth === 0) { $pending = 'functions'; continue; }
        if ($token[0] === T_CLASS) { $pending = 'classes'; continue; }
        if ($pending !== null && $token[0] === T_STRING) { $out[$pending][] = $token[1]; $pending = null; }
        if ($token[0] === T_CURLY_OPEN || $token[0] === T_DOLLAR_OPEN_CURLY_BRACES) { $depth++; }
        continue;
    }
    if ($token === '{') { $depth++; }
    elseif ($token === '}') { $depth--; }
    elseif ($token === '(') { $pending = null; }
}
echo json_encode($out);
"""


class PhpValidator:
    """Lint user supplied PHP with the php CLI (php -l). Raises at construction when php is not installed."""

    def __init__(self, php_binary: str = "php"):
        resolved = shutil.which(php_binary)
        if not resolved:
            raise FileNotFoundError(f"PHP binary '{php_binary}' not found on PATH")
        self.php_binary = resolved

    def _run(self, args: List[str], source: str) -> subprocess.CompletedProcess:
        return subprocess.run(
            [self.php_binary, *args],
            input=source,
            capture_output=True,
            text=True,
            timeout=LINT_TIMEOUT_SEC,
        )

    def lint(self, code: str, label: str, php_mode: bool = False) -> List[str]:
        """
        Return syntax issues for one snippet (empty when it lints clean).

        ``php_mode`` snippets are appended after an open ``<?php`` tag (functions.php),
        so the tag is prepended before linting; template and component code starts
        in HTML mode and is linted as-is.
        """
        if not code or not code.strip():
            return []
        source = f"<?php\n{code}" if php_mode else code
        try:
            result = self._run(["-l"], source)
        except subprocess.TimeoutExpired:
            return [f"{label}: PHP lint timed out"]
        except OSError as e:
            logger.warning(f"PHP lint could not run for {label}: {e}")
            return [f"{label}: PHP lint could not run: {e}"]
        if result.returncode == 0:
            return []
        output = (result.stdout or "") + (result.stderr or "")
        messages = [
            line.strip() for line in output.splitlines()
            if line.strip() and not line.startswith("Errors parsing")
        ]
        return [f"{label}: {m}" for m in messages] or [f"{label}: PHP syntax error"]

    def declared_names(self, code: str, php_mode: bool = False) -> Tuple[List[str], List[str]]:
        """Return (functions, classes) declared at top level of the snippet. Empty lists when php fails."""
        if not code or not code.strip():
            return [], []
        source = f"<?php\n{code}" if php_mode else code
        try:
            result = self._run(["-r", _DECLARATIONS_SCRIPT], source)
            if result.returncode != 0:
                return [], []
            parsed = json.loads(result.stdout or "{}")
        except (subprocess.TimeoutExpired, OSError, ValueError) as e:
            logger.warning(f"Could not extract PHP declarations: {e}")
            return [], []
        return list(parsed.get("functions") or []), list(parsed.get("classes") or [])

    def validate(
        self,
        code: Optional[str],
        label: str,
        php_mode: bool = False,
        reserved_functions: Iterable[str] = (),
    ) -> Tuple[bool, List[str]]:
        """
        Validate one snippet.
        Returns (is_valid, list_of_issues); redeclaring a reserved (generated) function is an issue.
        """
        issues = self.lint(code or "", label, php_mode=php_mode)
        if issues:
            return False, issues
        reserved = {name.lower() for name in reserved_functions}
        if reserved:
            functions, _ = self.declared_names(code or "", php_mode=php_mode)
            for name in functions:
                if name.lower() in reserved:
                    issues.append(f"{label}: function '{name}' is already declared by the generated functions.php")
        return len(issues) == 0, issues


def build_php_validator(php_binary: str, enabled: bool) -> Optional[PhpValidator]:
    """Return a validator, or None when linting is disabled or php is unavailable."""
    if not enabled:
        return None
    try:
        return PhpValidator(php_binary)
    except Exception as e:
        logger.warning(f"PhpValidator initialization failed: {e}")
        return None


@lru_cache(maxsize=None)
def shared_php_validator(php_binary: str, enabled: bool) -> Optional[PhpValidator]:
    """Process-wide validator per (binary, enabled); php is looked up once, not on every request."""
    return build_php_validator(php_binary, enabled)
