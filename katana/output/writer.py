"""The standard output writer for crawl results and errors."""

from __future__ import annotations

import json
import logging
import operator
import os
import re
import shutil
import sys
import threading
from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from typing import Any

from katana.output.custom_field import (
    CustomFieldConfig,
    init_custom_field_config_file,
    load_custom_fields,
    parse_custom_field_names,
)
from katana.output.fields import format_field, store_fields, validate_field_names
from katana.output.files import (
    INDEX_FILE,
    FileWriter,
    response_file_name,
    response_host,
    update_index,
)
from katana.output.result import ErrorRecord, Result
from katana.utils.extensions import Validator

logger = logging.getLogger(__name__)

DEFAULT_RESPONSE_DIR = "katana_response"
DEFAULT_STORE_FIELD_DIR = "katana_field"

_DECOLORIZER = re.compile(r"\x1b\[[0-9;]*[a-zA-Z]")
_BLUE = 34
_GREEN = 32


class OutputError(Exception):
    """Raised when a result cannot be written or the writer cannot be set up."""


@dataclass
class WriterOptions:
    """Configuration of the output writer."""

    colors: bool = False
    json: bool = False
    verbose: bool = False
    store_response: bool = False
    no_clobber: bool = False
    omit_raw: bool = False
    omit_body: bool = False
    output_file: str = ""
    fields: str = ""
    store_fields: str = ""
    store_response_dir: str = ""
    store_field_dir: str = ""
    field_config: str = ""
    error_log_file: str = ""
    match_regex: list[re.Pattern[str]] = field(default_factory=list)
    filter_regex: list[re.Pattern[str]] = field(default_factory=list)
    extension_validator: Validator | None = None
    output_match_condition: str = ""
    output_filter_condition: str = ""


# --- condition expressions -------------------------------------------------


class _DSLError(Exception):
    def __init__(self, message: str, ignorable: bool = False) -> None:
        super().__init__(message)
        self.ignorable = ignorable


_LEXEME = re.compile(
    r"""(?P<number>[0-9]+(?:\.[0-9]+)?)
    |(?P<string>"(?:[^"\\]|\\.)*"|'(?:[^'\\]|\\.)*')
    |(?P<name>[A-Za-z_][A-Za-z0-9_]*)
    |(?P<op>\|\||&&|==|!=|<=|>=|=~|!~|[<>!+\-*/%(),])""",
    re.VERBOSE | re.DOTALL,
)
_ESCAPES = {"n": "\n", "t": "\t", "r": "\r"}
_CONSTANTS = {"true": True, "false": False, "nil": None}


def _tokenize(text: str) -> list[tuple[str, str]]:
    lexemes = []
    pos = 0
    while pos < len(text):
        if text[pos].isspace():
            pos += 1
            continue
        match = _LEXEME.match(text, pos)
        if match is None:
            raise _DSLError(f"invalid character {text[pos]!r} in expression")
        lexemes.append((match.lastgroup, match.group(match.lastgroup)))
        pos = match.end()
    return lexemes


def _unquote(quoted: str) -> str:
    return re.sub(
        r"\\(.)", lambda m: _ESCAPES.get(m.group(1), m.group(1)), quoted[1:-1], flags=re.DOTALL
    )


def _add(left: Any, right: Any) -> Any:
    if isinstance(left, str) or isinstance(right, str):
        return f"{left}{right}"
    return left + right


def _length(value: Any) -> int:
    return len(value) if hasattr(value, "__len__") else len(str(value))


_COMPARISONS: dict[str, Callable[[Any, Any], Any]] = {
    "==": operator.eq,
    "!=": operator.ne,
    "<": operator.lt,
    "<=": operator.le,
    ">": operator.gt,
    ">=": operator.ge,
    "=~": lambda a, b: re.search(str(b), str(a)) is not None,
    "!~": lambda a, b: re.search(str(b), str(a)) is None,
}
_ADDITIVE: dict[str, Callable[[Any, Any], Any]] = {"+": _add, "-": operator.sub}
_MULTIPLICATIVE: dict[str, Callable[[Any, Any], Any]] = {
    "*": operator.mul,
    "/": operator.truediv,
    "%": operator.mod,
}
_FUNCTIONS: dict[str, Callable[..., Any]] = {
    "contains": lambda s, sub: str(sub) in str(s),
    "contains_any": lambda s, *subs: any(str(x) in str(s) for x in subs),
    "contains_all": lambda s, *subs: all(str(x) in str(s) for x in subs),
    "starts_with": lambda s, *ps: any(str(s).startswith(str(p)) for p in ps),
    "ends_with": lambda s, *ps: any(str(s).endswith(str(p)) for p in ps),
    "to_lower": lambda s: str(s).lower(),
    "to_upper": lambda s: str(s).upper(),
    "trim_space": lambda s: str(s).strip(),
    "len": _length,
    "regex": lambda pattern, s: re.search(str(pattern), str(s)) is not None,
}

_Node = Callable[[Mapping[str, Any]], Any]


def _lookup(env: Mapping[str, Any], name: str) -> Any:
    if name not in env:
        raise _DSLError(f"No parameter '{name}' found.", ignorable=True)
    return env[name]


def _invoke(name: str, function: Callable[..., Any], arguments: list[Any]) -> Any:
    try:
        return function(*arguments)
    except TypeError as exc:
        raise _DSLError(f"invalid arguments for {name}: {exc}", ignorable=True) from exc


def _apply(function: Callable[[Any, Any], Any], left: _Node, right: _Node) -> _Node:
    return lambda env: function(left(env), right(env))


def _either(left: _Node, right: _Node) -> _Node:
    return lambda env: bool(left(env)) or bool(right(env))


def _both(left: _Node, right: _Node) -> _Node:
    return lambda env: bool(left(env)) and bool(right(env))


class _Parser:
    def __init__(self, text: str) -> None:
        self._lexemes = _tokenize(text)
        self._pos = 0

    def parse(self) -> _Node:
        node = self._or()
        if self._pos < len(self._lexemes):
            raise _DSLError(f"unexpected token {self._lexemes[self._pos][1]!r}")
        return node

    def _accept(self, *ops: str) -> str | None:
        if self._pos < len(self._lexemes):
            kind, value = self._lexemes[self._pos]
            if kind == "op" and value in ops:
                self._pos += 1
                return value
        return None

    def _next(self) -> tuple[str, str]:
        if self._pos >= len(self._lexemes):
            raise _DSLError("unexpected end of expression")
        lexeme = self._lexemes[self._pos]
        self._pos += 1
        return lexeme

    def _or(self) -> _Node:
        left = self._and()
        while self._accept("||"):
            left = _either(left, self._and())
        return left

    def _and(self) -> _Node:
        left = self._comparison()
        while self._accept("&&"):
            left = _both(left, self._comparison())
        return left

    def _binary(self, operand: Callable[[], _Node], table: dict[str, Callable]) -> _Node:
        left = operand()
        while (op := self._accept(*table)) is not None:
            left = _apply(table[op], left, operand())
        return left

    def _comparison(self) -> _Node:
        return self._binary(self._additive, _COMPARISONS)

    def _additive(self) -> _Node:
        return self._binary(self._multiplicative, _ADDITIVE)

    def _multiplicative(self) -> _Node:
        return self._binary(self._unary, _MULTIPLICATIVE)

    def _unary(self) -> _Node:
        if self._accept("!"):
            inner = self._unary()
            return lambda env: not inner(env)
        if self._accept("-"):
            negated = self._unary()
            return lambda env: -negated(env)
        return self._primary()

    def _primary(self) -> _Node:
        kind, value = self._next()
        if kind == "number":
            number = float(value) if "." in value else int(value)
            return lambda env: number
        if kind == "string":
            text = _unquote(value)
            return lambda env: text
        if kind == "name":
            if value in _CONSTANTS:
                constant = _CONSTANTS[value]
                return lambda env: constant
            if self._accept("("):
                return self._call(value)
            return lambda env: _lookup(env, value)
        if value == "(":
            node = self._or()
            if not self._accept(")"):
                raise _DSLError("missing closing parenthesis")
            return node
        raise _DSLError(f"unexpected token {value!r}")

    def _call(self, name: str) -> _Node:
        function = _FUNCTIONS.get(name)
        if function is None:
            raise _DSLError(f"undefined function {name}")
        arguments: list[_Node] = []
        if not self._accept(")"):
            while True:
                arguments.append(self._or())
                if self._accept(")"):
                    break
                if not self._accept(","):
                    raise _DSLError(f"expected ',' or ')' in call to {name}")
        return lambda env: _invoke(name, function, [argument(env) for argument in arguments])


def _evaluate(expression: str, variables: Mapping[str, Any]) -> Any:
    try:
        return _Parser(expression).parse()(variables)
    except _DSLError:
        raise
    except (TypeError, ValueError, ZeroDivisionError, re.error) as exc:
        raise _DSLError(str(exc)) from exc


def _ignore_error(error: _DSLError) -> bool:
    if os.environ.get("SHOW_DSL_ERRORS", "").lower() == "true":
        return False
    return error.ignorable or "No parameter" in str(error)


def flatten(mapping: Mapping[str, Any]) -> dict[str, Any]:
    """Merge nested mappings into one flat mapping, keeping only the leaf keys."""
    flat: dict[str, Any] = {}
    for key, value in mapping.items():
        if isinstance(value, Mapping):
            flat.update(flatten(value))
        else:
            flat[key] = value
    return flat


def _eval_condition(result: Result, expression: str) -> bool:
    try:
        value = _evaluate(expression, flatten(result.to_dict()))
    except _DSLError as exc:
        if not _ignore_error(exc):
            logger.error("Could not evaluate DSL expression: %s", exc)
        return False
    return value is True


# --- response directories --------------------------------------------------


def _split_dir(directory: str) -> tuple[str, str]:
    directory = os.path.normpath(directory)
    return os.path.dirname(directory) or ".", os.path.basename(directory)


def create_dir_name_no_clobber(directory: str) -> str:
    """Return ``directory``, or a numbered sibling name if it already exists."""
    if not os.path.isdir(directory):
        return directory
    parent, name = _split_dir(directory)
    try:
        entries = list(os.scandir(parent))
    except OSError:
        return name
    pattern = re.compile(f"^{re.escape(name)}([0-9]+)$")
    highest = 0
    for entry in entries:
        if entry.is_dir() and (match := pattern.match(entry.name)):
            highest = max(highest, int(match.group(1)))
    return os.path.normpath(os.path.join(parent, f"{name}{highest + 1}"))


def remove_dirs_with_suffix(directory: str) -> None:
    """Remove ``directory`` and its numbered siblings."""
    parent, name = _split_dir(directory)
    try:
        entries = list(os.scandir(parent))
    except OSError:
        return
    pattern = re.compile(f"^{re.escape(name)}[0-9]*$")
    for entry in entries:
        if entry.is_dir() and pattern.match(entry.name):
            shutil.rmtree(os.path.join(parent, entry.name), ignore_errors=True)


# --- the writer ------------------------------------------------------------


def _open(path: str, what: str) -> FileWriter:
    try:
        return FileWriter(path)
    except OSError as exc:
        raise OutputError(f"could not create {what}: {exc}") from exc


class StandardWriter:
    """Writes results to the screen and optionally to files."""

    def __init__(self, options: WriterOptions) -> None:
        self.fields = options.fields
        self.json = options.json
        self.verbose = options.verbose
        self.colors = options.colors
        self.store_response = options.store_response
        self.store_response_dir = options.store_response_dir
        self.no_clobber = options.no_clobber
        self.omit_raw = options.omit_raw
        self.omit_body = options.omit_body
        self.match_regex = list(options.match_regex)
        self.filter_regex = list(options.filter_regex)
        self.extension_validator = options.extension_validator
        self.output_match_condition = options.output_match_condition
        self.output_filter_condition = options.output_filter_condition
        self.store_field_dir = options.store_field_dir or DEFAULT_STORE_FIELD_DIR
        self.store_fields: list[str] = []
        self._lock = threading.Lock()
        self._output_file: FileWriter | None = None
        self._error_file: FileWriter | None = None

        field_config = options.field_config or str(init_custom_field_config_file())
        parse_custom_field_names(field_config)
        self.custom_fields: dict[str, CustomFieldConfig] = load_custom_fields(
            field_config, f"{options.fields},{options.store_fields}"
        )

        if options.fields:
            try:
                validate_field_names(options.fields, self.custom_fields)
            except ValueError as exc:
                raise OutputError(f"could not validate fields: {exc}") from exc
        if options.store_fields:
            os.makedirs(self.store_field_dir, exist_ok=True)
            try:
                validate_field_names(options.store_fields, self.custom_fields)
            except ValueError as exc:
                raise OutputError(f"could not validate store fields: {exc}") from exc
            self.store_fields = options.store_fields.split(",")

        if options.output_file:
            self._output_file = _open(options.output_file, "output file")
        if options.store_response:
            self._prepare_response_dir(options.store_response_dir)
        if options.error_log_file:
            self._error_file = _open(options.error_log_file, "error file")

    def _prepare_response_dir(self, requested: str) -> None:
        directory = DEFAULT_RESPONSE_DIR
        if requested and requested != DEFAULT_RESPONSE_DIR:
            directory = requested
        if self.no_clobber:
            directory = create_dir_name_no_clobber(directory)
        else:
            remove_dirs_with_suffix(directory)
        os.makedirs(directory, exist_ok=True)
        self.store_response_dir = directory
        _open(os.path.join(directory, INDEX_FILE), "index file").close()

    def _paint(self, code: int, text: str) -> str:
        return f"\x1b[{code}m{text}\x1b[0m" if self.colors else text

    def _match_output(self, result: Result) -> bool:
        if not self.match_regex and not self.output_match_condition:
            return True
        if any(pattern.search(result.request.url) for pattern in self.match_regex):
            return True
        if self.output_match_condition:
            return _eval_condition(result, self.output_match_condition)
        return False

    def _filter_output(self, result: Result) -> bool:
        if not self.filter_regex and not self.output_filter_condition:
            return False
        if any(pattern.search(result.request.url) for pattern in self.filter_regex):
            return True
        if self.output_filter_condition:
            return _eval_condition(result, self.output_filter_condition)
        return False

    def _format_json(self, result: Result) -> str:
        if result.request.custom_fields:
            return ""
        return json.dumps(result.to_dict(), separators=(",", ":"), ensure_ascii=False)

    def _format_screen(self, result: Result) -> str:
        if self.fields:
            lines = []
            for output in format_field(result, self.fields):
                prefix = f"[{self._paint(_BLUE, output.field)}] " if self.verbose else ""
                lines.append(f"{prefix}{output.value}\n")
            return "".join(lines)
        request = result.request
        text = ""
        if self.verbose and request.tag:
            text += f"[{self._paint(_BLUE, request.tag)}] "
        if self.verbose and request.method:
            text += f"[{self._paint(_GREEN, request.method)}] "
        text += request.url
        if self.verbose and request.body:
            text += f" [{request.body}]"
        return text

    @staticmethod
    def _format_result(result: Result) -> str:
        response_raw = result.response.raw if result.response is not None else ""
        return f"{result.request.url}\n\n\n{result.request.raw}\n\n{response_raw}"

    def _store_response(self, result: Result) -> None:
        url = result.response.url or result.request.url
        try:
            domain = response_host(url)
            file_name = response_file_name(self.store_response_dir, domain, url)
            file_writer = FileWriter(file_name)
        except (OSError, ValueError):
            return
        with file_writer:
            result.response.stored_response_path = os.path.abspath(file_name)
            data = self._format_result(result)
            try:
                update_index(self.store_response_dir, result)
                file_writer.write(data)
            except (OSError, ValueError) as exc:
                raise OutputError(f"could not store response: {exc}") from exc

    def write(self, result: Result | None) -> None:
        """Write a result to the screen and the output file.

        Raises OutputError when the result is skipped or cannot be written.
        """
        if result is None:
            raise OutputError("result is nil")
        if self.store_fields:
            store_fields(result, self.store_fields, self.store_field_dir, self.custom_fields)
        if self.extension_validator is not None and not self.extension_validator.validate_path(
            result.request.url
        ):
            raise OutputError("result does not match extension filter")
        if not self._match_output(result):
            raise OutputError("result does not match output")
        if self._filter_output(result):
            raise OutputError("result is filtered out")

        if self.store_response and result.has_response():
            self._store_response(result)
        if self.omit_raw:
            result.request.raw = ""
            if result.response is not None:
                result.response.raw = ""
        if self.omit_body and result.has_response():
            result.response.body = ""

        data = self._format_json(result) if self.json else self._format_screen(result)
        if not data:
            raise OutputError("result is empty")

        with self._lock:
            print(data, end="" if data.endswith("\n") else "\n", file=sys.stdout)
            if self._output_file is not None:
                if not self.json:
                    data = _DECOLORIZER.sub("", data)
                try:
                    self._output_file.write(data)
                except OSError as exc:
                    raise OutputError(f"could not write to output: {exc}") from exc

    def write_error(self, error: ErrorRecord) -> None:
        """Append an error record to the error log, if one is configured."""
        data = json.dumps(error.to_dict(), separators=(",", ":"), ensure_ascii=False)
        with self._lock:
            if self._error_file is not None:
                try:
                    self._error_file.write(data)
                except OSError as exc:
                    raise OutputError(f"write to error file: {exc}") from exc

    def close(self) -> None:
        """Flush and close the output and error files."""
        if self._output_file is not None:
            self._output_file.close()
        if self._error_file is not None:
            self._error_file.close()

    def __enter__(self) -> StandardWriter:
        return self

    def __exit__(self, *args) -> None:
        self.close()