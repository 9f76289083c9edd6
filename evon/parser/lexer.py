# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Post-lexer for the Go skeleton grammar.

Three jobs, all done on the token stream before the parser sees it:

* Automatic semicolon insertion (Go spec, "Semicolons"): a newline becomes a
  terminator when the line's final token is an identifier, a literal,
  `++`/`--` or one of `) ] }`.
* Comment collection. Comments never reach the parser; they are gathered into
  groups the way `go/parser` does it: adjacent lines form one group, a comment
  starting on the line of a preceding token opens a trailing group, and a
  non-trailing group that ends on the line right before a token becomes that
  token's lead (doc) comment.
* Top-level func, var and const declarations are cut out of the stream. Only
  their keyword, the package-level names they declare and their position are
  kept (`decls`); the parser sees imports and type declarations only.
"""

from __future__ import annotations

from typing import Dict, List, Optional, Tuple

from lark import Token

from evon.core.span import Span
from .ast import Comment, CommentGroup, OtherDecl

OPENERS = {"_LPAR", "_LSQB", "_LBRACE"}
CLOSERS = {"_RPAR", "_RSQB", "_RBRACE"}


class CommentCollector:
	"""Groups comments and remembers which token each lead group precedes."""

	def __init__(self, file: Optional[str] = None) -> None:
		self.file = file
		self.groups: List[CommentGroup] = []
		self.lead: Dict[Tuple[int, int], CommentGroup] = {}
		self._current: Optional[CommentGroup] = None

	def add(self, token: Token, prev_token_line: Optional[int]) -> None:
		comment = Comment(text=str(token), span=Span(file=self.file, line=token.line, column=token.column))
		line = token.line
		cur = self._current
		if cur is not None:
			limit = cur.end_line if cur.trailing else cur.end_line + 1
			if line <= limit:
				cur.comments.append(comment)
				return
			self._current = None
		trailing = prev_token_line is not None and line == prev_token_line
		group = CommentGroup(comments=[comment], trailing=trailing)
		self.groups.append(group)
		self._current = group

	def before_token(self, token: Token) -> None:
		cur = self._current
		if cur is None:
			return
		self._current = None
		if not cur.trailing and cur.end_line + 1 == token.line:
			self.lead[(token.line, token.column)] = cur

	def lead_for(self, token: Token) -> Optional[CommentGroup]:
		return self.lead.get((token.line, token.column))

	def finish(self) -> None:
		self._current = None


def _value_names(tokens: List[Token]) -> List[str]:
	"""
	Names declared by the specs of a var/const declaration (keyword excluded).

	Each spec starts with `a, b, ...`; in the parenthesised form, specs are
	separated by terminators at depth one.
	"""
	grouped = bool(tokens) and tokens[0].type == "_LPAR"
	names: List[str] = []
	depth = 0
	state = "name"
	for tok in tokens[1:] if grouped else tokens:
		ttype = tok.type
		if ttype in OPENERS:
			depth += 1
		elif ttype in CLOSERS:
			depth -= 1
		if depth != 0:
			state = "done"
			continue
		if ttype == "_SEMI":
			state = "name" if grouped else "done"
		elif state == "name" and ttype == "IDENT":
			names.append(str(tok))
			state = "comma"
		elif state == "comma" and ttype == "_COMMA":
			state = "name"
		else:
			state = "done"
	return names


class GoPostLex:
	"""Combined post-lexer: comment grouping, declaration skipping, terminator insertion."""

	# Lark drops terminals the grammar never references unless the post-lexer
	# asks to keep them.
	always_accept = ("NEWLINE", "COMMENT")

	TERMINABLE = {
		"IDENT",
		"NUMBER",
		"STRING",
		"RAW_STRING",
		"RUNE",
		"_RPAR",
		"_RSQB",
		"_RBRACE",
	}
	TERMINABLE_OPS = {"++", "--"}
	SKIPPED_DECLS = {"FUNC", "VAR", "CONST"}

	def __init__(self) -> None:
		self.file: Optional[str] = None
		self.comments = CommentCollector()
		self.decls: List[OtherDecl] = []
		self.tokens: List[Token] = []

	def process(self, stream):
		"""
		Insert `_SEMI` tokens, strip comments/newlines and cut out func, var
		and const declarations.

		A block comment spanning lines counts as a newline, as in Go. Every
		token handed to the parser is also kept in `tokens`.
		"""
		self.comments = CommentCollector(self.file)
		self.decls = []
		self.tokens = []
		can_terminate = False
		depth = 0
		# True right after a top-level terminator, where a declaration starts.
		at_decl = False
		skipped: Optional[List[Token]] = None
		last: Optional[Token] = None

		for token in stream:
			ttype = token.type

			if ttype == "COMMENT":
				prev_line = None
				if last is not None:
					prev_line = getattr(last, "end_line", None) or last.line
				self.comments.add(token, prev_line)
				if "\n" not in token or not can_terminate:
					continue
				token = Token.new_borrow_pos("_SEMI", ";", token)
				ttype = "_SEMI"
			elif ttype == "NEWLINE":
				if not can_terminate:
					continue
				token = Token.new_borrow_pos("_SEMI", ";", token)
				ttype = "_SEMI"
			else:
				self.comments.before_token(token)
				last = token

			if ttype in OPENERS:
				depth += 1
			elif ttype in CLOSERS:
				depth = max(depth - 1, 0)
			can_terminate = ttype in self.TERMINABLE or (ttype == "OP" and token in self.TERMINABLE_OPS)

			if skipped is not None:
				if ttype == "_SEMI" and depth == 0:
					self.decls.append(self._other_decl(skipped))
					skipped = None
					at_decl = True
				else:
					skipped.append(token)
				continue
			if at_decl and depth == 0 and ttype in self.SKIPPED_DECLS:
				skipped = [token]
				at_decl = False
				continue

			at_decl = ttype == "_SEMI" and depth == 0
			self.tokens.append(token)
			yield token

		if skipped is not None:
			self.decls.append(self._other_decl(skipped))
		elif can_terminate and last is not None:
			yield Token.new_borrow_pos("_SEMI", ";", last)
		self.comments.finish()

	def _other_decl(self, tokens: List[Token]) -> OtherDecl:
		kw = tokens[0]
		names: List[str] = []
		if kw.type == "FUNC":
			# Methods (`func (r T) M`) declare no package-level name.
			if len(tokens) > 1 and tokens[1].type == "IDENT":
				names.append(str(tokens[1]))
		else:
			names = _value_names(tokens[1:])
		return OtherDecl(keyword=str(kw), names=names, span=Span(file=self.file, line=kw.line, column=kw.column))


__all__ = ["CLOSERS", "CommentCollector", "GoPostLex", "OPENERS"]
