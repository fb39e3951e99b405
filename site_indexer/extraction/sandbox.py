# File: site_indexer/extraction/sandbox.py
"""Restricted compilation of externally generated extractor source.

The source is parsed with :mod:`ast` and checked against allow-lists before it
is compiled:

* top level may hold only function definitions, ``import re``, assignments
  and a docstring;
* no other imports, no classes, no ``global``/``nonlocal``, no generators,
  no ``match`` statements;
* no names or attributes starting with ``_``;
* attribute access is limited to :data:`ALLOWED_ATTRIBUTES` (the page
  capability plus common ``str``/``list``/``dict``/``re`` methods).

The compiled code runs with :data:`SAFE_BUILTINS` only and receives a
:class:`PageCapability` instead of the browser page.
"""
from __future__ import annotations

import ast
import builtins
import re
from typing import Any, Callable, Dict, Final, FrozenSet, List, Optional

from site_indexer.crawler.renderer import RenderedPage
from site_indexer.errors import StrategyBuildError

__all__ = (
    "ALLOWED_ATTRIBUTES",
    "ALLOWED_MODULES",
    "PAGE_METHODS",
    "SAFE_BUILTINS",
    "PageCapability",
    "compile_extractor",
    "validate_source",
)

_FILENAME: Final[str] = "<generated-extractor>"

ALLOWED_MODULES: Final[FrozenSet[str]] = frozenset({"re"})

PAGE_METHODS: Final[FrozenSet[str]] = frozenset(
    {"url", "title", "wait_for_load_state", "remove", "inner_text", "text_content"}
)

ALLOWED_ATTRIBUTES: Final[FrozenSet[str]] = PAGE_METHODS | frozenset(
    {
        # str
        "strip", "lstrip", "rstrip", "split", "rsplit", "splitlines", "join", "replace",
        "lower", "upper", "casefold", "startswith", "endswith", "find", "count",
        "isspace", "partition", "rpartition",
        # list / dict
        "append", "extend", "insert", "pop", "get", "items", "keys", "values", "copy", "sort",
        # re
        "sub", "subn", "compile", "findall", "finditer", "search", "match", "fullmatch",
        "group", "groups", "IGNORECASE", "I", "MULTILINE", "M", "DOTALL", "S",
    }
)

_DENIED_NAMES: Final[FrozenSet[str]] = frozenset(
    {
        "eval", "exec", "compile", "open", "getattr", "setattr", "delattr", "globals",
        "locals", "vars", "dir", "type", "object", "super", "breakpoint", "input",
        "help", "memoryview", "classmethod", "staticmethod", "property",
    }
)

_FORBIDDEN_NODES = (
    ast.ClassDef,
    ast.Global,
    ast.Nonlocal,
    ast.Yield,
    ast.YieldFrom,
    ast.Delete,
    # class patterns read attributes by name (kwd_attrs), outside visit_Attribute
    ast.Match,
)

_TOP_LEVEL_NODES = (ast.FunctionDef, ast.AsyncFunctionDef, ast.Import, ast.Assign, ast.AnnAssign)


def _guarded_import(name: str, globals=None, locals=None, fromlist=(), level=0):  # noqa: A002
    if level != 0 or name not in ALLOWED_MODULES:
        raise ImportError(f"import of {name!r} is not allowed")
    return builtins.__import__(name, globals, locals, fromlist, level)


SAFE_BUILTINS: Final[Dict[str, Any]] = {
    name: getattr(builtins, name)
    for name in (
        "len", "str", "int", "float", "bool", "list", "dict", "tuple", "set", "frozenset",
        "range", "enumerate", "zip", "min", "max", "sum", "sorted", "reversed", "any", "all",
        "isinstance", "map", "filter", "Exception", "ValueError", "TypeError", "KeyError",
        "IndexError", "RuntimeError", "AttributeError",
    )
}
SAFE_BUILTINS["__import__"] = _guarded_import


class PageCapability:
    """The only handle generated code gets: wait, remove elements, read text."""

    __slots__ = ("_page",)

    def __init__(self, page: RenderedPage) -> None:
        self._page = page

    @property
    def url(self) -> str:
        return self._page.url

    async def title(self) -> str:
        return await self._page.title()

    async def wait_for_load_state(self, state: str = "networkidle", timeout: Optional[float] = None) -> None:
        await self._page.wait_for_load_state(str(state), timeout=timeout)

    async def remove(self, selector: str) -> int:
        return await self._page.remove(str(selector))

    async def inner_text(self, selector: str = "body") -> str:
        return await self._page.inner_text(str(selector))

    async def text_content(self, selector: str = "body") -> str:
        return await self._page.text_content(str(selector))


class _SourceValidator(ast.NodeVisitor):
    def __init__(self) -> None:
        self.violations: List[str] = []

    def _reject(self, node: ast.AST, message: str) -> None:
        self.violations.append(f"line {getattr(node, 'lineno', '?')}: {message}")

    def check_module(self, tree: ast.Module) -> None:
        for index, stmt in enumerate(tree.body):
            if isinstance(stmt, _TOP_LEVEL_NODES):
                continue
            if index == 0 and isinstance(stmt, ast.Expr) and isinstance(stmt.value, ast.Constant):
                continue
            self._reject(stmt, f"top-level {type(stmt).__name__} is not allowed")
        self.visit(tree)

    def generic_visit(self, node: ast.AST) -> None:
        if isinstance(node, _FORBIDDEN_NODES):
            self._reject(node, f"{type(node).__name__} is not allowed")
        super().generic_visit(node)

    def visit_Import(self, node: ast.Import) -> None:
        for alias in node.names:
            if alias.name not in ALLOWED_MODULES or alias.asname is not None:
                self._reject(node, f"import of {alias.name!r} is not allowed")

    def visit_ImportFrom(self, node: ast.ImportFrom) -> None:
        self._reject(node, f"from-import of {node.module!r} is not allowed")

    def visit_Name(self, node: ast.Name) -> None:
        if node.id.startswith("_") or node.id in _DENIED_NAMES:
            self._reject(node, f"name {node.id!r} is not allowed")

    def visit_Attribute(self, node: ast.Attribute) -> None:
        if node.attr not in ALLOWED_ATTRIBUTES:
            self._reject(node, f"attribute {node.attr!r} is not allowed")
        self.generic_visit(node)

    def visit_arg(self, node: ast.arg) -> None:
        if node.arg.startswith("_"):
            self._reject(node, f"argument {node.arg!r} is not allowed")
        self.generic_visit(node)

    def _visit_def(self, node: ast.FunctionDef | ast.AsyncFunctionDef) -> None:
        if node.name.startswith("_"):
            self._reject(node, f"function name {node.name!r} is not allowed")
        if node.decorator_list:
            self._reject(node, "decorators are not allowed")
        self.generic_visit(node)

    visit_FunctionDef = _visit_def
    visit_AsyncFunctionDef = _visit_def


def validate_source(source: str) -> ast.Module:
    """Parse *source* and check it against the allow-lists; raises StrategyBuildError."""
    try:
        tree = ast.parse(source, filename=_FILENAME, mode="exec")
    except SyntaxError as exc:
        raise StrategyBuildError(f"Generated source is not valid Python: {exc.msg} (line {exc.lineno})") from exc
    validator = _SourceValidator()
    validator.check_module(tree)
    if validator.violations:
        shown = "; ".join(validator.violations[:5])
        more = len(validator.violations) - 5
        suffix = f" (+{more} more)" if more > 0 else ""
        raise StrategyBuildError(f"Generated source rejected: {shown}{suffix}")
    return tree


def compile_extractor(source: str, entrypoint: str) -> Callable[..., Any]:
    """Compile validated *source* in an isolated namespace and return *entrypoint*."""
    tree = validate_source(source)
    namespace: Dict[str, Any] = {"__builtins__": SAFE_BUILTINS, "re": re}
    try:
        exec(compile(tree, _FILENAME, "exec"), namespace)  # noqa: S102
    except Exception as exc:
        raise StrategyBuildError(f"Generated source failed to load: {exc}") from exc
    func = namespace.get(entrypoint)
    if not callable(func):
        raise StrategyBuildError(f"Generated source does not define a callable {entrypoint!r}")
    return func
