"""Parser for type reference strings in graph documents.

Grammar (reflection style)::

    ref      := name args? suffix*
    args     := '<' ref (',' ref)* '>'
    suffix   := '[' ','* ']' | '*' | '&'
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Tuple

_DELIMITERS = set("<>,[]*&")


class TypeRefSyntaxError(ValueError):
    """Raised for a malformed type reference string."""


@dataclass(frozen=True)
class TypeRefSpec:
    """Parsed form of a type reference string."""

    name: str
    arguments: Tuple["TypeRefSpec", ...] = ()
    # "[]" with rank, "*" or "&", innermost first
    suffixes: Tuple[str, ...] = field(default=())


class _Parser:
    def __init__(self, text: str) -> None:
        self.text = text
        self.pos = 0

    def parse(self) -> TypeRefSpec:
        spec = self._ref()
        self._skip_spaces()
        if self.pos != len(self.text):
            raise self._error("unexpected trailing input")
        return spec

    def _ref(self) -> TypeRefSpec:
        self._skip_spaces()
        name = self._name()
        arguments: List[TypeRefSpec] = []
        self._skip_spaces()
        if self._peek() == "<":
            self.pos += 1
            arguments.append(self._ref())
            self._skip_spaces()
            while self._peek() == ",":
                self.pos += 1
                arguments.append(self._ref())
                self._skip_spaces()
            self._expect(">")
        suffixes: List[str] = []
        while True:
            self._skip_spaces()
            char = self._peek()
            if char in {"*", "&"}:
                suffixes.append(char)
                self.pos += 1
            elif char == "[":
                self.pos += 1
                commas = 0
                while self._peek() == ",":
                    commas += 1
                    self.pos += 1
                self._expect("]")
                suffixes.append("[" + "," * commas + "]")
            else:
                break
        return TypeRefSpec(name=name, arguments=tuple(arguments), suffixes=tuple(suffixes))

    def _name(self) -> str:
        start = self.pos
        while self.pos < len(self.text):
            char = self.text[self.pos]
            if char in _DELIMITERS or char.isspace():
                break
            self.pos += 1
        if self.pos == start:
            raise self._error("expected a type name")
        return self.text[start : self.pos]

    def _peek(self) -> str:
        return self.text[self.pos] if self.pos < len(self.text) else ""

    def _expect(self, char: str) -> None:
        self._skip_spaces()
        if self._peek() != char:
            raise self._error(f"expected '{char}'")
        self.pos += 1

    def _skip_spaces(self) -> None:
        while self.pos < len(self.text) and self.text[self.pos].isspace():
            self.pos += 1

    def _error(self, message: str) -> TypeRefSyntaxError:
        return TypeRefSyntaxError(f"{message} at column {self.pos} in {self.text!r}")


def parse_type_ref(text: str) -> TypeRefSpec:
    """Parse ``text`` into a :class:`TypeRefSpec`."""
    return _Parser(text).parse()


def split_full_name(full_name: str) -> Tuple[str, str]:
    """Split ``Ns.Outer+Inner`` into ``("Ns", "Outer+Inner")``."""
    outer = full_name.split("+", 1)[0]
    if "." not in outer:
        return "", full_name
    namespace, _, _ = outer.rpartition(".")
    return namespace, full_name[len(namespace) + 1 :]


__all__ = ["TypeRefSpec", "TypeRefSyntaxError", "parse_type_ref", "split_full_name"]
