# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Go skeleton parser: lark parse tree -> `evon.parser.ast` nodes.

The grammar is ambiguous in the places Go's own grammar is (parameter lists,
`[` after a type name), so it runs on lark's Earley parser with the basic
lexer. The post-lexer keeps func, var and const declarations away from the
parser, which leaves it the imports and type declarations. The builder
resolves the remaining shape questions the way `go/parser` does (e.g.
`func(a, b int)` groups `a` with `b`).
"""

from __future__ import annotations

import ast as pyast
import re
from pathlib import Path
from typing import Dict, List, Optional, Tuple

from lark import Lark, Token, Tree
from lark.exceptions import UnexpectedCharacters, UnexpectedEOF, UnexpectedToken

from evon.core.span import Span
from .ast import (
	ArrayType,
	ChanDir,
	ChanType,
	CommentGroup,
	EllipsisType,
	Field,
	File,
	FuncType,
	Ident,
	ImportSpec,
	IndexExpr,
	InterfaceType,
	MapType,
	ParenExpr,
	SelectorExpr,
	StarExpr,
	StructType,
	TildeExpr,
	TypeDecl,
	TypeExpr,
	TypeParam,
	TypeSpec,
	UnionExpr,
)
from .lexer import CLOSERS, OPENERS, CommentCollector, GoPostLex

_GRAMMAR_PATH = Path(__file__).with_name("go_skeleton.lark")
_GRAMMAR_SRC = _GRAMMAR_PATH.read_text(encoding="utf-8")

_POSTLEX = GoPostLex()

_PARSER = Lark(
	_GRAMMAR_SRC,
	parser="earley",
	lexer="basic",
	start="start",
	ambiguity="resolve",
	maybe_placeholders=False,
	postlex=_POSTLEX,
)

_GO_BUILD_RE = re.compile(r"^//go:build\s+(.*)$")
_PLUS_BUILD_RE = re.compile(r"^//\s*\+build\s+(.*)$")


class GoSyntaxError(ValueError):
	"""
	User-facing syntax error in a Go source file.

	Raised by the builder for shapes the grammar accepts but Go rejects
	(e.g. mixing named and unnamed parameters); the loader turns it into a
	load-phase diagnostic.
	"""

	def __init__(self, message: str, *, loc: Span | None) -> None:
		super().__init__(message)
		self.loc = loc


def parse_program(source: str, *, path: str = "<source>") -> File:
	"""Parse one Go source file into its declaration skeleton."""
	_POSTLEX.file = path
	try:
		tree = _PARSER.parse(source)
	except UnexpectedCharacters as e:
		raise GoSyntaxError(
			f"unexpected character {source[e.pos_in_stream]!r}",
			loc=Span(file=path, line=e.line, column=e.column),
		) from e
	except UnexpectedToken as e:
		tok = e.token
		what = "end of file" if tok.type == "$END" else repr(str(tok))
		raise GoSyntaxError(
			f"unexpected {what}",
			loc=Span(file=path, line=getattr(tok, "line", None), column=getattr(tok, "column", None)),
		) from e
	except UnexpectedEOF as e:
		raise GoSyntaxError("unexpected end of file", loc=Span(file=path)) from e
	out = _FileBuilder(path, _POSTLEX).build(tree)
	out.build_constraint = header_constraint(source)
	return out


def header_constraint(source: str) -> Optional[str]:
	"""
	Build constraint from the comment lines above the package clause.

	Works on the raw text, so the loader can drop a file before parsing it.
	"""
	plus_lines: List[str] = []
	in_block = False
	for raw in source.splitlines():
		line = raw.strip()
		if in_block:
			in_block = "*/" not in line
			continue
		if not line:
			continue
		if line.startswith("//"):
			m = _GO_BUILD_RE.match(line)
			if m:
				return m.group(1).strip()
			m = _PLUS_BUILD_RE.match(line)
			if m:
				plus_lines.append(m.group(1).strip())
			continue
		if line.startswith("/*"):
			in_block = "*/" not in line[2:]
			continue
		break
	if plus_lines:
		return _plus_build_to_expr(plus_lines)
	return None


def _tokens(tree: Tree, ttype: str | None = None) -> List[Token]:
	return [c for c in tree.children if isinstance(c, Token) and (ttype is None or c.type == ttype)]


def _subtrees(tree: Tree) -> List[Tree]:
	return [c for c in tree.children if isinstance(c, Tree)]


def _decode_go_string(tok: Token) -> str:
	text = str(tok)
	if text.startswith("`"):
		return text[1:-1]
	# Go interpreted strings share Python's escape syntax for import paths.
	return pyast.literal_eval(text)


def _plus_build_to_expr(lines: List[str]) -> str:
	"""
	Translate legacy `// +build` lines into a `//go:build` expression.

	Lines are ANDed, space-separated options ORed, comma-separated terms ANDed.
	"""
	clauses = []
	for line in lines:
		options = []
		for opt in line.split():
			terms = [t for t in opt.split(",") if t]
			options.append("(" + " && ".join(terms) + ")" if len(terms) > 1 else terms[0])
		clauses.append("(" + " || ".join(options) + ")" if len(options) > 1 else options[0])
	return " && ".join(clauses)


_BINARY = {"OP", "STAR", "VBAR"}
_WORDS = {"IDENT", "NUMBER", "STRING", "RAW_STRING", "RUNE", "TYPE", "FUNC", "VAR", "CONST", "INTERFACE", "STRUCT", "MAP", "CHAN"}


def _expr_text(tokens: List[Token]) -> str:
	"""
	Re-spell an expression from its tokens: binary operators get a space on
	each side, commas one after, adjacent words one between.
	"""
	parts: List[str] = []
	prev: Optional[Token] = None
	for tok in tokens:
		if tok.type == "_SEMI":
			continue
		binary = prev is not None and prev.type not in _BINARY and prev.type not in OPENERS and prev.type != "_COMMA"
		if tok.type in _BINARY and binary:
			parts.append(f" {tok} ")
		elif tok.type == "_COMMA":
			parts.append(", ")
		elif prev is not None and prev.type in _WORDS and tok.type in _WORDS:
			parts.append(f" {tok}")
		else:
			parts.append(str(tok))
		prev = tok
	return "".join(parts)


class _FileBuilder:
	def __init__(self, path: str, postlex: GoPostLex) -> None:
		self.path = path
		self.comments: CommentCollector = postlex.comments
		self.other_decls = postlex.decls
		self.tokens = postlex.tokens
		self._token_index: Dict[Tuple[int, int], int] = {}

	def span(self, tok: Token) -> Span:
		return Span(file=self.path, line=tok.line, column=tok.column)

	def ident(self, tok: Token) -> Ident:
		return Ident(name=str(tok), span=self.span(tok))

	def build(self, tree: Tree) -> File:
		package_tok = _tokens(_subtrees(tree)[0], "IDENT")[0]
		out = File(
			path=self.path,
			package=str(package_tok),
			comments=list(self.comments.groups),
			span=self.span(package_tok),
		)

		for node in _subtrees(tree)[1:]:
			if node.data == "import_decl":
				out.imports.extend(self._import_spec(s) for s in _subtrees(node))
			elif node.data == "type_decl":
				type_tok = _tokens(node, "TYPE")[0]
				spec = self._type_spec(_subtrees(node)[0], doc=None)
				out.decls.append(
					TypeDecl(specs=[spec], doc=self.comments.lead_for(type_tok), span=self.span(type_tok))
				)
			elif node.data == "grouped_type_decl":
				type_tok = _tokens(node, "TYPE")[0]
				specs = []
				for s in _subtrees(node):
					name_tok = _tokens(s, "IDENT")[0]
					specs.append(self._type_spec(s, doc=self.comments.lead_for(name_tok)))
				out.decls.append(
					TypeDecl(
						specs=specs,
						doc=self.comments.lead_for(type_tok),
						grouped=True,
						span=self.span(type_tok),
					)
				)
		if self.other_decls:
			out.decls.extend(self.other_decls)
			out.decls.sort(key=lambda d: (d.span.line or 0, d.span.column or 0))
		return out

	def _import_spec(self, node: Tree) -> ImportSpec:
		path_tree = _subtrees(node)[0]
		path_tok = path_tree.children[0]
		name = None
		for tok in _tokens(node):
			if tok.type in ("IDENT", "DOT"):
				name = str(tok)
		return ImportSpec(path=_decode_go_string(path_tok), name=name, span=self.span(path_tok))

	def _type_spec(self, node: Tree, *, doc: Optional[CommentGroup]) -> TypeSpec:
		name_tok = node.children[0]
		type_params: List[TypeParam] = []
		is_alias = False
		type_tree: Optional[Tree] = None
		for child in node.children[1:]:
			if isinstance(child, Token):
				if child.type == "EQUAL":
					is_alias = True
				continue
			if child.data == "type_params":
				for decl in _subtrees(child):
					names = [self.ident(t) for t in _tokens(decl, "IDENT")]
					type_params.append(TypeParam(names=names, constraint=self._union(_subtrees(decl)[0])))
			else:
				type_tree = child
		assert type_tree is not None, "grammar guarantees a type in every type_spec"
		return TypeSpec(
			name=self.ident(name_tok),
			type=self.type(type_tree),
			doc=doc,
			type_params=type_params,
			is_alias=is_alias,
			span=self.span(name_tok),
		)

	# ---- types ----------------------------------------------------------

	def type(self, node: Tree) -> TypeExpr:
		handler = getattr(self, f"_t_{node.data}", None)
		if handler is None:
			raise AssertionError(f"unhandled type node {node.data!r}")
		return handler(node)

	def _t_named_type(self, node: Tree) -> TypeExpr:
		idents = _tokens(node, "IDENT")
		if len(idents) == 1:
			return self.ident(idents[0])
		x, sel = idents
		return SelectorExpr(x=self.ident(x), sel=self.ident(sel), span=self.span(x))

	def _t_generic_type(self, node: Tree) -> TypeExpr:
		base, args = _subtrees(node)
		x = self._t_named_type(base)
		return IndexExpr(x=x, indices=[self.type(t) for t in _subtrees(args)], span=x.span)

	def _t_paren_type(self, node: Tree) -> TypeExpr:
		inner = self.type(_subtrees(node)[0])
		return ParenExpr(x=inner, span=inner.span)

	def _t_pointer_type(self, node: Tree) -> TypeExpr:
		star = _tokens(node, "STAR")[0]
		return StarExpr(x=self.type(_subtrees(node)[0]), span=self.span(star))

	def _t_slice_type(self, node: Tree) -> TypeExpr:
		elem = self.type(_subtrees(node)[0])
		return ArrayType(length=None, elem=elem, span=elem.span)

	def _t_array_type(self, node: Tree) -> TypeExpr:
		length_tree, elem_tree = _subtrees(node)
		elem = self.type(elem_tree)
		return ArrayType(length=_expr_text(self._bracketed(length_tree)), elem=elem, span=elem.span)

	def _bracketed(self, length_tree: Tree) -> List[Token]:
		"""
		Tokens between the `[` and `]` of an array type.

		The tree drops the punctuation, so the run is taken from the
		post-lexer's token list instead: back over leading `(`, then forward
		to the `]` that closes the length.
		"""
		if not self._token_index:
			self._token_index = {(t.line, t.column): i for i, t in enumerate(self.tokens)}
		first = next(length_tree.scan_values(lambda v: isinstance(v, Token)), None)
		if first is None:
			return []
		start = self._token_index[(first.line, first.column)]
		while start > 0 and self.tokens[start - 1].type == "_LPAR":
			start -= 1
		out: List[Token] = []
		depth = 0
		for tok in self.tokens[start:]:
			if tok.type in CLOSERS:
				if depth == 0:
					break
				depth -= 1
			elif tok.type in OPENERS:
				depth += 1
			out.append(tok)
		return out

	def _t_map_type(self, node: Tree) -> TypeExpr:
		kw = _tokens(node, "MAP")[0]
		key, value = _subtrees(node)
		return MapType(key=self.type(key), value=self.type(value), span=self.span(kw))

	def _t_chan_type(self, node: Tree) -> TypeExpr:
		toks = _tokens(node)
		if toks[0].type == "ARROW":
			direction = ChanDir.RECV
		elif len(toks) > 1 and toks[1].type == "ARROW":
			direction = ChanDir.SEND
		else:
			direction = ChanDir.BOTH
		return ChanType(dir=direction, value=self.type(_subtrees(node)[0]), span=self.span(toks[0]))

	def _t_func_type(self, node: Tree) -> TypeExpr:
		kw = _tokens(node, "FUNC")[0]
		params, results = self._signature(_subtrees(node)[0])
		return FuncType(params=params, results=results, span=self.span(kw))

	def _t_interface_type(self, node: Tree) -> TypeExpr:
		kw = _tokens(node, "INTERFACE")[0]
		elems: List[Field] = []
		for elem in _subtrees(node):
			if elem.data == "method_elem":
				name_tok = _tokens(elem, "IDENT")[0]
				params, results = self._signature(_subtrees(elem)[0])
				ftype = FuncType(params=params, results=results, span=self.span(name_tok))
				elems.append(Field(names=[self.ident(name_tok)], type=ftype, span=self.span(name_tok)))
			else:
				embedded = self._union(_subtrees(elem)[0])
				elems.append(Field(names=[], type=embedded, span=embedded.span))
		return InterfaceType(elems=elems, span=self.span(kw))

	def _t_struct_type(self, node: Tree) -> TypeExpr:
		kw = _tokens(node, "STRUCT")[0]
		fields: List[Field] = []
		for f in _subtrees(node):
			tag = None
			subs = _subtrees(f)
			if subs and subs[-1].data == "field_tag":
				tag = str(subs[-1].children[0])
				subs = subs[:-1]
			if f.data == "named_field":
				names = [self.ident(t) for t in _tokens(f, "IDENT")]
				fields.append(Field(names=names, type=self.type(subs[0]), tag=tag, span=names[0].span))
			else:
				ftype = self.type(subs[0])
				stars = _tokens(f, "STAR")
				if stars:
					ftype = StarExpr(x=ftype, span=self.span(stars[0]))
				fields.append(Field(names=[], type=ftype, tag=tag, span=ftype.span))
		return StructType(fields=fields, span=self.span(kw))

	def _union(self, node: Tree) -> TypeExpr:
		terms: List[TypeExpr] = []
		for term in _subtrees(node):
			inner = self.type(_subtrees(term)[0])
			tilde = _tokens(term, "TILDE")
			terms.append(TildeExpr(x=inner, span=self.span(tilde[0])) if tilde else inner)
		if len(terms) == 1:
			return terms[0]
		return UnionExpr(terms=terms, span=terms[0].span)

	# ---- signatures -----------------------------------------------------

	def _signature(self, node: Tree) -> tuple[List[Field], List[Field]]:
		subs = _subtrees(node)
		params = self._parameters(subs[0], allow_variadic=True)
		results: List[Field] = []
		if len(subs) > 1:
			inner = _subtrees(subs[1])[0]
			if inner.data == "parameters":
				results = self._parameters(inner, allow_variadic=False)
			else:
				rtype = self.type(inner)
				results = [Field(names=[], type=rtype, span=rtype.span)]
		return params, results

	def _parameters(self, node: Tree, *, allow_variadic: bool) -> List[Field]:
		"""
		Group parameter entries the way go/parser does.

		If any entry is `name Type`, bare identifiers before it are names that
		share its type (`a, b int`); otherwise every entry is an unnamed type.
		"""
		entries = _subtrees(node)
		named_mode = any(e.data in ("param_named", "param_named_variadic") for e in entries)
		fields: List[Field] = []

		if not named_mode:
			for e in entries:
				ptype = self.type(_subtrees(e)[0])
				if e.data == "param_variadic":
					ptype = EllipsisType(elt=ptype, span=self.span(_tokens(e, "ELLIPSIS")[0]))
				fields.append(Field(names=[], type=ptype, span=ptype.span))
		else:
			pending: List[Ident] = []
			for e in entries:
				if e.data == "param_type":
					bare = _subtrees(e)[0]
					idents = _tokens(bare, "IDENT") if bare.data == "named_type" else []
					if len(idents) != 1:
						raise GoSyntaxError("mixed named and unnamed parameters", loc=self._first_span(bare))
					pending.append(self.ident(idents[0]))
					continue
				if e.data == "param_variadic":
					raise GoSyntaxError("mixed named and unnamed parameters", loc=self.span(_tokens(e, "ELLIPSIS")[0]))
				name_tok = _tokens(e, "IDENT")[0]
				ptype = self.type(_subtrees(e)[0])
				if e.data == "param_named_variadic":
					ptype = EllipsisType(elt=ptype, span=self.span(_tokens(e, "ELLIPSIS")[0]))
				names = pending + [self.ident(name_tok)]
				pending = []
				fields.append(Field(names=names, type=ptype, span=names[0].span))
			if pending:
				raise GoSyntaxError("missing parameter type", loc=pending[-1].span)

		for i, f in enumerate(fields):
			if isinstance(f.type, EllipsisType) and (not allow_variadic or i != len(fields) - 1):
				raise GoSyntaxError("can only use ... with final parameter in list", loc=f.type.span)
			if isinstance(f.type, EllipsisType) and len(f.names) > 1:
				raise GoSyntaxError("can only use ... with final parameter in list", loc=f.type.span)
		return fields

	def _first_span(self, node: Tree) -> Span:
		for tok in node.scan_values(lambda v: isinstance(v, Token)):
			return self.span(tok)
		return Span(file=self.path)


__all__ = ["GoSyntaxError", "header_constraint", "parse_program"]
