"""Tests for lisp/syntax.py: tokenizer and paren structure index."""
from __future__ import annotations

import pytest

from lisp.syntax import MalformedFormError, SyntaxIndex, TokenKind, tokenize


def _kinds(text: str):
    return [(t.kind, text[t.start:t.end]) for t in tokenize(text)]


# ─────────────────────────────────────────────────────────
# tokenize
# ─────────────────────────────────────────────────────────


class TestTokenize:
    def test_simple_form(self):
        assert _kinds("(foo bar)") == [
            (TokenKind.OPEN, "("),
            (TokenKind.ATOM, "foo"),
            (TokenKind.ATOM, "bar"),
            (TokenKind.CLOSE, ")"),
        ]

    def test_string_with_escaped_quote(self):
        text = r'"a \"b\" c" x'
        toks = tokenize(text)
        assert toks[0].kind is TokenKind.STRING
        assert text[toks[0].start:toks[0].end] == r'"a \"b\" c"'
        assert toks[1].kind is TokenKind.ATOM

    def test_unterminated_string_runs_to_end(self):
        text = '(a "open'
        toks = tokenize(text)
        assert toks[-1].kind is TokenKind.STRING
        assert toks[-1].end == len(text)

    def test_line_comment(self):
        text = "; (not a form)\n(a)"
        toks = tokenize(text)
        assert toks[0].kind is TokenKind.COMMENT
        assert text[toks[0].start:toks[0].end] == "; (not a form)"
        assert toks[1].kind is TokenKind.OPEN

    def test_block_comment(self):
        text = "#| ( \" |# x"
        assert _kinds(text) == [(TokenKind.COMMENT, '#| ( " |#'), (TokenKind.ATOM, "x")]

    def test_elisp_char_literals(self):
        text = '(list ?\\( ?\\" ?a)'
        kinds = [k for k, _ in _kinds(text)]
        assert kinds.count(TokenKind.CHAR) == 3
        assert kinds.count(TokenKind.STRING) == 0
        assert kinds[-1] is TokenKind.CLOSE

    def test_question_mark_inside_symbol_is_atom(self):
        assert _kinds("(null? x)")[1] == (TokenKind.ATOM, "null?")

    def test_common_lisp_char_literal(self):
        text = '(char= c #\\()'
        kinds = _kinds(text)
        assert (TokenKind.CHAR, "#\\(") in kinds
        assert kinds[-1] == (TokenKind.CLOSE, ")")

    def test_clojure_char_literal(self):
        text = "(= c \\()"
        kinds = _kinds(text)
        assert (TokenKind.CHAR, "\\(") in kinds
        assert kinds[-1] == (TokenKind.CLOSE, ")")

    def test_prefixes(self):
        kinds = _kinds("'a `(b ,c ,@d) #'e")
        prefixes = [s for k, s in kinds if k is TokenKind.PREFIX]
        assert prefixes == ["'", "`", ",", ",@", "#'"]


# ─────────────────────────────────────────────────────────
# SyntaxIndex
# ─────────────────────────────────────────────────────────


class TestSyntaxIndex:
    def test_depth(self):
        idx = SyntaxIndex("(a (b) c)")
        assert idx.depth_at(0) == 0
        assert idx.depth_at(1) == 1
        assert idx.depth_at(4) == 2
        assert idx.depth_at(6) == 1
        assert idx.depth_at(9) == 0

    def test_parens_in_strings_and_comments_ignored(self):
        text = '(a ")" ; )\n b)'
        idx = SyntaxIndex(text)
        assert idx.form_end(0) == len(text)

    def test_form_end(self):
        text = "(a (b c)) (d)"
        idx = SyntaxIndex(text)
        assert idx.form_end(0) == 9
        assert idx.form_end(3) == 8
        assert idx.form_end(10) == 13

    def test_form_end_not_an_opener(self):
        with pytest.raises(MalformedFormError):
            SyntaxIndex("(a b)").form_end(1)

    def test_form_end_unclosed(self):
        with pytest.raises(MalformedFormError):
            SyntaxIndex("(a (b)").form_end(0)

    def test_top_level_form(self):
        text = "(a)\n(b (c))"
        idx = SyntaxIndex(text)
        assert idx.top_level_form(1) == (0, 3)
        assert idx.top_level_form(8) == (4, 11)
        assert idx.top_level_form(3) is None

    def test_top_level_form_unclosed(self):
        idx = SyntaxIndex("(a)\n(b (c)")
        with pytest.raises(MalformedFormError):
            idx.top_level_form(6)

    def test_stray_closer_ignored(self):
        idx = SyntaxIndex(") (a)")
        assert idx.depth_at(1) == 0
        assert idx.top_level_form(3) == (2, 5)
