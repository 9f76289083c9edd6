# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Type expressions back to Go source text.

Output follows gofmt spacing for type expressions; composite literal types
(interfaces, structs) are printed on one line with `; ` separators. Identifier
names are printed as they currently are, so after import finalization foreign
types come out qualified with their final alias.
"""

from __future__ import annotations

from typing import List

from evon.parser.ast import (
	ArrayType,
	ChanType,
	EllipsisType,
	Field,
	FuncType,
	Ident,
	IndexExpr,
	InterfaceType,
	MapType,
	ParenExpr,
	SelectorExpr,
	StarExpr,
	StructType,
	TildeExpr,
	TypeExpr,
	UnionExpr,
)


def print_type(expr: TypeExpr) -> str:
	if isinstance(expr, Ident):
		return expr.name
	if isinstance(expr, SelectorExpr):
		return f"{expr.x.name}.{expr.sel.name}"
	if isinstance(expr, ParenExpr):
		return f"({print_type(expr.x)})"
	if isinstance(expr, StarExpr):
		return "*" + print_type(expr.x)
	if isinstance(expr, ArrayType):
		return f"[{expr.length or ''}]{print_type(expr.elem)}"
	if isinstance(expr, MapType):
		return f"map[{print_type(expr.key)}]{print_type(expr.value)}"
	if isinstance(expr, ChanType):
		return f"{expr.dir.value} {print_type(expr.value)}"
	if isinstance(expr, FuncType):
		return "func" + print_signature(expr)
	if isinstance(expr, InterfaceType):
		if not expr.elems:
			return "interface{}"
		parts = []
		for e in expr.elems:
			if e.names:
				parts.append(e.names[0].name + print_signature(e.type))  # type: ignore[arg-type]
			else:
				parts.append(print_type(e.type))
		return "interface{ " + "; ".join(parts) + " }"
	if isinstance(expr, StructType):
		if not expr.fields:
			return "struct{}"
		parts = []
		for f in expr.fields:
			text = print_field(f)
			if f.tag is not None:
				text += " " + f.tag
			parts.append(text)
		return "struct{ " + "; ".join(parts) + " }"
	if isinstance(expr, EllipsisType):
		return "..." + print_type(expr.elt)
	if isinstance(expr, IndexExpr):
		return print_type(expr.x) + "[" + ", ".join(print_type(i) for i in expr.indices) + "]"
	if isinstance(expr, TildeExpr):
		return "~" + print_type(expr.x)
	if isinstance(expr, UnionExpr):
		return " | ".join(print_type(t) for t in expr.terms)
	raise TypeError(f"cannot print {type(expr).__name__}")


def print_field(f: Field) -> str:
	if not f.names:
		return print_type(f.type)
	return ", ".join(n.name for n in f.names) + " " + print_type(f.type)


def print_fields(fields: List[Field]) -> str:
	return ", ".join(print_field(f) for f in fields)


def print_signature(ft: FuncType) -> str:
	"""`(params) results` as it follows `func` or a method name."""
	out = f"({print_fields(ft.params)})"
	if not ft.results:
		return out
	if len(ft.results) == 1 and not ft.results[0].names:
		return f"{out} {print_type(ft.results[0].type)}"
	return f"{out} ({print_fields(ft.results)})"


__all__ = ["print_field", "print_fields", "print_signature", "print_type"]
