# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Syntax nodes for the declaration skeleton of a Go source file.

Only what the generator needs is modelled in full: the package clause,
imports, comment groups and type declarations (with complete type
expressions). Function, variable and constant declarations are kept as
opaque `OtherDecl` entries so annotations attached to them can be reported.

Type expressions form a closed union tagged by `TypeExprKind`. The resolver
dispatches on that tag; everything that is neither a name, a selector, a
parenthesised type nor a func/interface literal is `OTHER`.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Iterator, List, Optional, Union

from evon.core.span import Span


class TypeExprKind(Enum):
	IDENT = "ident"
	QUALIFIED = "qualified"
	PAREN = "paren"
	FUNC = "func"
	INTERFACE = "interface"
	OTHER = "other"


class BindingKind(Enum):
	PACKAGE = "package"
	TYPE = "type"
	BUILTIN = "builtin"
	TYPE_PARAM = "type-param"


@dataclass(frozen=True)
class Binding:
	"""
	What an identifier refers to, as established by the loader.

	`module` is the import path of the defining package (`""` for the
	universe scope). For PACKAGE bindings it is the imported package's path.
	"""

	kind: BindingKind
	module: str
	name: str


@dataclass(eq=False)
class Comment:
	text: str
	span: Span

	@property
	def end_line(self) -> int:
		return (self.span.line or 0) + self.text.count("\n")


@dataclass(eq=False)
class CommentGroup:
	comments: List[Comment]
	# True for a group that starts on the line of a preceding token
	# (`x int // trailing`); such groups are never doc comments.
	trailing: bool = False

	@property
	def span(self) -> Span:
		return self.comments[0].span

	@property
	def end_line(self) -> int:
		return self.comments[-1].end_line

	@property
	def text(self) -> str:
		return "\n".join(c.text for c in self.comments)


class TypeExpr:
	kind: TypeExprKind
	span: Span

	def children(self) -> Iterator["TypeExpr"]:
		return iter(())


@dataclass(eq=False)
class Ident(TypeExpr):
	"""
	An identifier occurrence.

	`name` is mutable: import finalization rewrites it in place to the
	qualified, aliased spelling used by the generated file.
	"""

	name: str
	span: Span = field(default_factory=Span)
	binding: Optional[Binding] = None
	kind = TypeExprKind.IDENT

	@property
	def is_exported(self) -> bool:
		return is_exported(self.name)


@dataclass(eq=False)
class SelectorExpr(TypeExpr):
	x: Ident
	sel: Ident
	span: Span = field(default_factory=Span)
	kind = TypeExprKind.QUALIFIED

	def children(self) -> Iterator[TypeExpr]:
		yield self.x
		yield self.sel


@dataclass(eq=False)
class ParenExpr(TypeExpr):
	x: TypeExpr
	span: Span = field(default_factory=Span)
	kind = TypeExprKind.PAREN

	def children(self) -> Iterator[TypeExpr]:
		yield self.x


@dataclass(eq=False)
class Field:
	"""
	A parameter/result group, struct field or interface element.

	Interface methods have exactly one name and a FuncType; embedded elements
	have no names.
	"""

	names: List[Ident]
	type: TypeExpr
	tag: Optional[str] = None
	span: Span = field(default_factory=Span)


@dataclass(eq=False)
class FuncType(TypeExpr):
	params: List[Field] = field(default_factory=list)
	results: List[Field] = field(default_factory=list)
	span: Span = field(default_factory=Span)
	kind = TypeExprKind.FUNC

	def children(self) -> Iterator[TypeExpr]:
		for f in self.params:
			yield f.type
		for f in self.results:
			yield f.type


@dataclass(eq=False)
class InterfaceType(TypeExpr):
	elems: List[Field] = field(default_factory=list)
	span: Span = field(default_factory=Span)
	kind = TypeExprKind.INTERFACE

	def children(self) -> Iterator[TypeExpr]:
		for f in self.elems:
			yield f.type


class OtherType(TypeExpr):
	kind = TypeExprKind.OTHER


@dataclass(eq=False)
class StarExpr(OtherType):
	x: TypeExpr
	span: Span = field(default_factory=Span)

	def children(self) -> Iterator[TypeExpr]:
		yield self.x


@dataclass(eq=False)
class ArrayType(OtherType):
	"""`[]T` when `length` is None, `[N]T` otherwise (`length` is source text)."""

	length: Optional[str]
	elem: TypeExpr
	span: Span = field(default_factory=Span)

	def children(self) -> Iterator[TypeExpr]:
		yield self.elem


@dataclass(eq=False)
class MapType(OtherType):
	key: TypeExpr
	value: TypeExpr
	span: Span = field(default_factory=Span)

	def children(self) -> Iterator[TypeExpr]:
		yield self.key
		yield self.value


class ChanDir(Enum):
	BOTH = "chan"
	SEND = "chan<-"
	RECV = "<-chan"


@dataclass(eq=False)
class ChanType(OtherType):
	dir: ChanDir
	value: TypeExpr
	span: Span = field(default_factory=Span)

	def children(self) -> Iterator[TypeExpr]:
		yield self.value


@dataclass(eq=False)
class StructType(OtherType):
	fields: List[Field] = field(default_factory=list)
	span: Span = field(default_factory=Span)

	def children(self) -> Iterator[TypeExpr]:
		for f in self.fields:
			yield f.type


@dataclass(eq=False)
class EllipsisType(OtherType):
	"""Variadic marker `...T`; only valid as the last parameter group."""

	elt: TypeExpr
	span: Span = field(default_factory=Span)

	def children(self) -> Iterator[TypeExpr]:
		yield self.elt


@dataclass(eq=False)
class IndexExpr(OtherType):
	"""Generic instantiation `T[A, B]`."""

	x: TypeExpr
	indices: List[TypeExpr]
	span: Span = field(default_factory=Span)

	def children(self) -> Iterator[TypeExpr]:
		yield self.x
		yield from self.indices


@dataclass(eq=False)
class TildeExpr(OtherType):
	x: TypeExpr
	span: Span = field(default_factory=Span)

	def children(self) -> Iterator[TypeExpr]:
		yield self.x


@dataclass(eq=False)
class UnionExpr(OtherType):
	"""Constraint type set `A | ~B`."""

	terms: List[TypeExpr]
	span: Span = field(default_factory=Span)

	def children(self) -> Iterator[TypeExpr]:
		yield from self.terms


@dataclass(eq=False)
class TypeParam:
	names: List[Ident]
	constraint: TypeExpr


@dataclass(eq=False)
class TypeSpec:
	name: Ident
	type: TypeExpr
	doc: Optional[CommentGroup] = None
	type_params: List[TypeParam] = field(default_factory=list)
	is_alias: bool = False
	span: Span = field(default_factory=Span)


@dataclass(eq=False)
class TypeDecl:
	"""`type X T` or `type ( ... )`; `grouped` is True for the parenthesised form."""

	specs: List[TypeSpec]
	doc: Optional[CommentGroup] = None
	grouped: bool = False
	span: Span = field(default_factory=Span)


@dataclass(eq=False)
class OtherDecl:
	"""
	A func/var/const declaration; only its keyword, the package-level names it
	declares and its position are kept. Methods declare no package-level name.
	"""

	keyword: str
	names: List[str] = field(default_factory=list)
	span: Span = field(default_factory=Span)


Decl = Union[TypeDecl, OtherDecl]


@dataclass(eq=False)
class ImportSpec:
	path: str
	name: Optional[str] = None  # explicit local name, "." or "_"
	span: Span = field(default_factory=Span)


@dataclass(eq=False)
class File:
	path: str
	package: str
	imports: List[ImportSpec] = field(default_factory=list)
	decls: List[Decl] = field(default_factory=list)
	comments: List[CommentGroup] = field(default_factory=list)
	build_constraint: Optional[str] = None
	span: Span = field(default_factory=Span)

	def type_decls(self) -> Iterator[TypeDecl]:
		for d in self.decls:
			if isinstance(d, TypeDecl):
				yield d


def is_exported(name: str) -> bool:
	"""Go's export rule: the first character is an upper-case letter."""
	return bool(name) and name[0].isupper()


def walk(expr: TypeExpr) -> Iterator[TypeExpr]:
	"""Pre-order traversal of a type expression."""
	stack = [expr]
	while stack:
		node = stack.pop()
		yield node
		stack.extend(reversed(list(node.children())))


__all__ = [
	"ArrayType",
	"Binding",
	"BindingKind",
	"ChanDir",
	"ChanType",
	"Comment",
	"CommentGroup",
	"Decl",
	"EllipsisType",
	"Field",
	"File",
	"FuncType",
	"Ident",
	"ImportSpec",
	"IndexExpr",
	"InterfaceType",
	"MapType",
	"OtherDecl",
	"OtherType",
	"ParenExpr",
	"SelectorExpr",
	"StarExpr",
	"StructType",
	"TildeExpr",
	"TypeDecl",
	"TypeExpr",
	"TypeExprKind",
	"TypeParam",
	"TypeSpec",
	"UnionExpr",
	"is_exported",
	"walk",
]
