"""Unit tests for app.modules.templates.php_validator.

The php CLI is never invoked: shutil.which and subprocess.run are patched.
"""

from __future__ import annotations

import json
import subprocess
from unittest.mock import MagicMock, patch

import pytest

from app.modules.templates.php_validator import PhpValidator, build_php_validator, shared_php_validator


def _completed(returncode: int = 0, stdout: str = "", stderr: str = "") -> subprocess.CompletedProcess:
    return subprocess.CompletedProcess(args=["php"], returncode=returncode, stdout=stdout, stderr=stderr)


@pytest.fixture
def validator():
    with patch("app.modules.templates.php_validator.shutil.which", return_value="/usr/bin/php"):
        yield PhpValidator("php")


class TestConstruction:
    @pytest.mark.unit
    def test_missing_binary_raises(self):
        with patch("app.modules.templates.php_validator.shutil.which", return_value=None):
            with pytest.raises(FileNotFoundError):
                PhpValidator("php")

    @pytest.mark.unit
    def test_build_disabled(self):
        assert build_php_validator("php", enabled=False) is None

    @pytest.mark.unit
    def test_build_without_php_returns_none(self):
        with patch("app.modules.templates.php_validator.shutil.which", return_value=None):
            assert build_php_validator("php", enabled=True) is None

    @pytest.mark.unit
    def test_shared_validator_looks_up_php_once(self):
        shared_php_validator.cache_clear()
        try:
            with patch("app.modules.templates.php_validator.shutil.which", return_value=None) as which:
                assert shared_php_validator("php-missing", True) is None
                assert shared_php_validator("php-missing", True) is None
            which.assert_called_once_with("php-missing")
        finally:
            shared_php_validator.cache_clear()

    @pytest.mark.unit
    def test_services_reuse_the_shared_validator(self, fake_supabase, monkeypatch):
        from app.config import settings
        from app.modules.components.service import ComponentService
        from app.modules.templates.service import TemplateService
        from app.modules.themes.service import ThemeService

        monkeypatch.setattr(settings, "php_lint_on_save", True)
        shared_php_validator.cache_clear()
        try:
            with patch("app.modules.templates.php_validator.shutil.which", return_value="/usr/bin/php") as which:
                validators = {
                    id(ThemeService(fake_supabase).validator),
                    id(TemplateService(fake_supabase).validator),
                    id(ComponentService(fake_supabase).validator),
                }
            assert len(validators) == 1
            assert which.call_count == 1
        finally:
            shared_php_validator.cache_clear()


class TestLint:
    @pytest.mark.unit
    def test_blank_code_skips_php(self, validator):
        with patch("app.modules.templates.php_validator.subprocess.run") as run:
            assert validator.lint("   ", "x") == []
            run.assert_not_called()

    @pytest.mark.unit
    def test_clean_code(self, validator):
        with patch("app.modules.templates.php_validator.subprocess.run", return_value=_completed(0, "No syntax errors detected in Standard input code")) as run:
            assert validator.lint("echo 1;", "functions.php", php_mode=True) == []
        args, kwargs = run.call_args
        assert args[0] == ["/usr/bin/php", "-l"]
        assert kwargs["input"] == "<?php\necho 1;"

    @pytest.mark.unit
    def test_syntax_error_is_reported(self, validator):
        output = "PHP Parse error:  syntax error, unexpected end of file in Standard input code on line 2\nErrors parsing Standard input code\n"
        with patch("app.modules.templates.php_validator.subprocess.run", return_value=_completed(255, output)):
            issues = validator.lint("<?php echo ", "template 'Home'")
        assert issues == [
            "template 'Home': PHP Parse error:  syntax error, unexpected end of file in Standard input code on line 2"
        ]

    @pytest.mark.unit
    def test_timeout(self, validator):
        with patch(
            "app.modules.templates.php_validator.subprocess.run",
            side_effect=subprocess.TimeoutExpired(cmd="php", timeout=10),
        ):
            assert validator.lint("<?php while(true){} ?>", "c") == ["c: PHP lint timed out"]


class TestValidate:
    @pytest.mark.unit
    def test_redeclared_generated_function(self, validator):
        declarations = json.dumps({"functions": ["My_Theme_Setup", "helper"], "classes": []})
        run = MagicMock(side_effect=[_completed(0), _completed(0, declarations)])
        with patch("app.modules.templates.php_validator.subprocess.run", run):
            ok, issues = validator.validate(
                "function My_Theme_Setup() {}",
                "functions.php",
                php_mode=True,
                reserved_functions=["my_theme_setup", "my_theme_scripts"],
            )
        assert ok is False
        assert issues == [
            "functions.php: function 'My_Theme_Setup' is already declared by the generated functions.php"
        ]

    @pytest.mark.unit
    def test_valid_without_reserved_names_runs_lint_only(self, validator):
        run = MagicMock(return_value=_completed(0))
        with patch("app.modules.templates.php_validator.subprocess.run", run):
            assert validator.validate("<p>hi</p>", "component 'x'") == (True, [])
        assert run.call_count == 1

    @pytest.mark.unit
    def test_declarations_failure_is_not_an_issue(self, validator):
        run = MagicMock(side_effect=[_completed(0), _completed(0, "not json")])
        with patch("app.modules.templates.php_validator.subprocess.run", run):
            assert validator.validate("echo 1;", "f", php_mode=True, reserved_functions=["a"]) == (True, [])
