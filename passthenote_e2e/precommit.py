"""
Pre-commit validation.

Runs the checks every change must pass before it is committed or pushed:

- compilation: every Python file compiles
- credentials: no configured secret appears in the tree and no Python file
  assigns a string literal to a password/secret/token name
- naming: module, class, function and test-file naming conventions
- tests: the offline test suite (``-m "not e2e"``) passes

``install_hook`` wires the staged-file variant into ``.git/hooks/pre-commit``.
"""

import ast
import logging
import os
import re
import stat
import subprocess
import sys
from dataclasses import dataclass, field, asdict
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Sequence

from .config import Settings, load_settings, ENV_PREFIX
from .exceptions import HookInstallError

logger = logging.getLogger(__name__)

FORBIDDEN_STRINGS_ENV = f"{ENV_PREFIX}FORBIDDEN_STRINGS"

SKIP_DIRS = {".git", ".venv", "venv", "node_modules", "__pycache__", ".pytest_cache", "test-results", "build", "dist"}
TEXT_SUFFIXES = {".py", ".md", ".txt", ".toml", ".cfg", ".ini", ".json", ".yml", ".yaml", ".sh", ".env"}

SECRET_NAME = re.compile(r"(password|passwd|psswd|secret|token|api_key)$", re.IGNORECASE)
SNAKE_CASE = re.compile(r"^_{0,2}[a-z][a-z0-9_]*_{0,2}$")
CAP_WORDS = re.compile(r"^_?[A-Z][A-Za-z0-9]*$")
TEST_MODULE = re.compile(r"^(test_[a-z0-9_]+|conftest|__init__)\.py$")

HOOK_MARKER = "# passthenote-e2e pre-commit hook"
HOOK_SCRIPT = f"""#!/bin/sh
{HOOK_MARKER}
exec "{sys.executable}" -m passthenote_e2e.cli precommit --staged
"""


@dataclass
class Issue:
    check: str
    path: str
    message: str
    line: Optional[int] = None

    def __str__(self):
        location = f"{self.path}:{self.line}" if self.line else self.path
        return f"[{self.check}] {location}: {self.message}"


@dataclass
class ValidationReport:
    files_checked: int = 0
    checks_run: List[str] = field(default_factory=list)
    issues: List[Issue] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.issues

    def to_dict(self) -> Dict:
        return {
            "ok": self.ok,
            "files_checked": self.files_checked,
            "checks_run": list(self.checks_run),
            "issues": [asdict(issue) for issue in self.issues],
        }


def _git(root: Path, *args: str) -> List[str]:
    completed = subprocess.run(
        ["git", *args],
        cwd=root,
        capture_output=True,
        text=True,
        check=True,
        timeout=30
    )
    return [line for line in completed.stdout.splitlines() if line.strip()]


def _walk(root: Path) -> List[Path]:
    files = []
    for dirpath, dirnames, filenames in os.walk(root):
        dirnames[:] = [d for d in dirnames if d not in SKIP_DIRS and not d.endswith(".egg-info")]
        files.extend(Path(dirpath) / name for name in filenames)
    return sorted(files)


def collect_files(root: Path, staged_only: bool = False) -> List[Path]:
    """Files to validate: staged ones, all tracked ones, or the whole tree without git"""
    root = Path(root)
    args = ["diff", "--cached", "--name-only", "--diff-filter=ACM"] if staged_only else ["ls-files"]
    try:
        names = _git(root, *args)
    except (OSError, subprocess.CalledProcessError, subprocess.TimeoutExpired) as e:
        logger.info("git unavailable (%s); walking %s instead", e, root)
        return _walk(root)

    return [root / name for name in names if (root / name).is_file()]


def _relative(path: Path, root: Path) -> str:
    try:
        return path.relative_to(root).as_posix()
    except ValueError:
        return path.as_posix()


def _read_text(path: Path) -> Optional[str]:
    try:
        return path.read_text(encoding="utf-8")
    except (UnicodeDecodeError, OSError):
        return None


def check_compilation(paths: Iterable[Path], root: Path) -> List[Issue]:
    issues = []
    for path in paths:
        if path.suffix != ".py":
            continue
        source = _read_text(path)
        if source is None:
            issues.append(Issue("compile", _relative(path, root), "file is not readable UTF-8"))
            continue
        try:
            compile(source, str(path), "exec")
        except SyntaxError as e:
            issues.append(Issue("compile", _relative(path, root), e.msg, e.lineno))
    return issues


def _assigned_names(node: ast.AST) -> List[str]:
    if isinstance(node, ast.Assign):
        targets = node.targets
    elif isinstance(node, ast.AnnAssign):
        targets = [node.target]
    elif isinstance(node, ast.keyword):
        return [node.arg] if node.arg else []
    else:
        return []

    names = []
    for target in targets:
        if isinstance(target, ast.Name):
            names.append(target.id)
        elif isinstance(target, ast.Attribute):
            names.append(target.attr)
    return names


def _hardcoded_secrets(tree: ast.AST) -> List[ast.AST]:
    found = []
    for node in ast.walk(tree):
        value = getattr(node, "value", None)
        if isinstance(value, ast.Constant) and isinstance(value.value, str) and len(value.value) >= 4:
            if any(SECRET_NAME.search(name) for name in _assigned_names(node)):
                found.append(node)
        if isinstance(node, ast.Dict):
            for key, item in zip(node.keys, node.values):
                if (isinstance(key, ast.Constant) and isinstance(key.value, str)
                        and SECRET_NAME.search(key.value)
                        and isinstance(item, ast.Constant) and isinstance(item.value, str)
                        and len(item.value) >= 4):
                    found.append(item)
    return found


def forbidden_strings(settings: Optional[Settings] = None, env=None) -> List[str]:
    """Literal secrets that must never be committed"""
    env = os.environ if env is None else env
    settings = settings or load_settings(env)
    strings = [s.strip() for s in env.get(FORBIDDEN_STRINGS_ENV, "").split(",") if s.strip()]
    if settings.password:
        strings.append(settings.password)
    return strings


def check_credentials(paths: Iterable[Path], root: Path, secrets: Sequence[str] = ()) -> List[Issue]:
    issues = []
    for path in paths:
        if path.suffix not in TEXT_SUFFIXES and path.name != ".env":
            continue
        text = _read_text(path)
        if text is None:
            continue
        rel = _relative(path, root)

        for lineno, line in enumerate(text.splitlines(), start=1):
            for secret in secrets:
                if secret in line:
                    issues.append(Issue("credentials", rel, "contains a configured secret value", lineno))

        # Test fixtures use throwaway literals; only the secret values above apply there
        if path.suffix == ".py" and not rel.startswith("tests/"):
            try:
                tree = ast.parse(text)
            except SyntaxError:
                continue  # reported by check_compilation
            for node in _hardcoded_secrets(tree):
                issues.append(Issue(
                    "credentials", rel,
                    "hardcoded credential literal; read it from the environment",
                    getattr(node, "lineno", None)
                ))
    return issues


def check_naming(paths: Iterable[Path], root: Path) -> List[Issue]:
    issues = []
    for path in paths:
        if path.suffix != ".py":
            continue
        rel = _relative(path, root)
        parts = Path(rel).parts

        if not SNAKE_CASE.match(path.stem):
            issues.append(Issue("naming", rel, f"module name '{path.stem}' is not snake_case"))
        if parts and parts[0] == "tests" and not TEST_MODULE.match(path.name):
            issues.append(Issue("naming", rel, "test modules must be named test_*.py"))

        source = _read_text(path)
        if source is None:
            continue
        try:
            tree = ast.parse(source)
        except SyntaxError:
            continue

        in_pages = "pages" in parts[:-1]
        for node in ast.walk(tree):
            if isinstance(node, ast.ClassDef):
                if not CAP_WORDS.match(node.name):
                    issues.append(Issue("naming", rel, f"class '{node.name}' is not CapWords", node.lineno))
                elif in_pages and not node.name.startswith("_") and not node.name.endswith("Page"):
                    issues.append(Issue("naming", rel, f"page object '{node.name}' should end with 'Page'", node.lineno))
            elif isinstance(node, (ast.FunctionDef, ast.AsyncFunctionDef)):
                if not SNAKE_CASE.match(node.name):
                    issues.append(Issue("naming", rel, f"function '{node.name}' is not snake_case", node.lineno))
    return issues


def run_tests(root: Path) -> List[Issue]:
    """Run the offline test suite"""
    command = [sys.executable, "-m", "pytest", "-q", "-m", "not e2e"]
    logger.info("Running %s", " ".join(command))
    completed = subprocess.run(command, cwd=root, capture_output=True, text=True)
    if completed.returncode != 0:
        tail = "\n".join(completed.stdout.strip().splitlines()[-5:])
        return [Issue("tests", "tests", f"pytest exited with {completed.returncode}: {tail}")]
    return []


def run_checks(
        root: Path,
        files: Optional[Iterable[Path]] = None,
        staged_only: bool = False,
        include_tests: bool = True,
        settings: Optional[Settings] = None
) -> ValidationReport:
    """Run every check and collect the issues"""
    root = Path(root).resolve()
    paths = [Path(p).resolve() for p in files] if files is not None else collect_files(root, staged_only)

    report = ValidationReport(files_checked=len(paths))

    report.checks_run.append("compile")
    report.issues.extend(check_compilation(paths, root))

    report.checks_run.append("credentials")
    report.issues.extend(check_credentials(paths, root, forbidden_strings(settings)))

    report.checks_run.append("naming")
    report.issues.extend(check_naming(paths, root))

    if include_tests:
        report.checks_run.append("tests")
        report.issues.extend(run_tests(root))

    for issue in report.issues:
        logger.error("%s", issue)
    logger.info(
        "Checked %d files: %s", report.files_checked,
        "ok" if report.ok else f"{len(report.issues)} issue(s)"
    )
    return report


def install_hook(repo_root: Path, force: bool = False) -> Path:
    """Write the pre-commit hook, refusing to replace someone else's"""
    hooks_dir = Path(repo_root) / ".git" / "hooks"
    if not hooks_dir.parent.is_dir():
        raise HookInstallError(f"{repo_root} is not a git repository")

    hook = hooks_dir / "pre-commit"
    if hook.exists() and not force and HOOK_MARKER not in hook.read_text(errors="replace"):
        raise HookInstallError(f"{hook} already exists; use force to replace it")

    hooks_dir.mkdir(parents=True, exist_ok=True)
    hook.write_text(HOOK_SCRIPT)
    hook.chmod(hook.stat().st_mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
    logger.info("Installed pre-commit hook at %s", hook)
    return hook
