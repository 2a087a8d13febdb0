"""Tests for relocating method declarations."""

import pytest

from gomsort.errors import RenderError
from gomsort.extractor import extract_methods
from gomsort.ordering import sort_methods
from gomsort.parsing import GoParser
from gomsort.rewriter import render_unit, rewrite, validate_rendering

SOURCE = """package test

import "fmt"

// Server serves.
type Server struct{} // trailing on type

// helper does the work.
// It is called by Start.
func (s *Server) helper() string {
	// inside helper
	return "help" // inline
}

// section marker

// Start is the entry point.
func (s *Server) Start() error {
	fmt.Println(s.helper()) // call
	return nil
}
"""

EXPECTED = """package test

import "fmt"

// Server serves.
type Server struct{} // trailing on type

// section marker

// Start is the entry point.
func (s *Server) Start() error {
	fmt.Println(s.helper()) // call
	return nil
}

// helper does the work.
// It is called by Start.
func (s *Server) helper() string {
	// inside helper
	return "help" // inline
}
"""


class TestRewrite:
    """Tests for rewrite and render_unit."""

    def test_comments_travel_with_their_methods(self, go_parser: GoParser) -> None:
        """Doc comments move with the method, body comments stay inside it."""
        unit = go_parser.parse(SOURCE)
        methods = extract_methods(unit)
        start, helper = methods[1], methods[0]

        result = render_unit(rewrite(unit, [start, helper]))

        assert result == EXPECTED

    def test_no_comment_is_duplicated_or_lost(self, go_parser: GoParser) -> None:
        """Each comment of the input appears exactly once in the output."""
        unit = go_parser.parse(SOURCE)
        methods = extract_methods(unit)

        result = render_unit(rewrite(unit, list(reversed(methods))))

        for comment in [
            "// Server serves.",
            "// trailing on type",
            "// helper does the work.",
            "// It is called by Start.",
            "// inside helper",
            "// inline",
            "// section marker",
            "// Start is the entry point.",
            "// call",
        ]:
            assert result.count(comment) == 1, comment

    def test_input_unit_is_untouched(self, go_parser: GoParser) -> None:
        """Rewriting builds a new unit."""
        unit = go_parser.parse(SOURCE)
        methods = extract_methods(unit)

        rewrite(unit, list(reversed(methods)))

        assert unit.render() == SOURCE

    def test_non_methods_keep_relative_order(self, go_parser: GoParser) -> None:
        """Types, functions, consts and vars stay in order, byte for byte."""
        source = """package test

import "fmt"

type Server struct {
	name string
}

func globalFunction() {
	fmt.Println("global")
}

func (s *Server) helper() {}

const MaxRetries = 3

func (s *Server) Start() error {
	return nil
}

var GlobalVar = "value"
"""
        unit = go_parser.parse(source)

        result = rewrite(unit, sort_methods(extract_methods(unit)))

        assert [d.text.split("\n")[0] for d in result.decls] == [
            "package test",
            'import "fmt"',
            "type Server struct {",
            "func globalFunction() {",
            "const MaxRetries = 3",
            'var GlobalVar = "value"',
            "func (s *Server) Start() error {",
            "func (s *Server) helper() {}",
        ]
        for original in unit.decls:
            if not original.is_method:
                assert original.text in render_unit(result)

    def test_exactly_one_blank_line_between_items(self, go_parser: GoParser) -> None:
        """Methods written back to back get separated."""
        source = """package test

type Server struct{}
func (s *Server) helper() {}
func (s *Server) Start() error { return nil }
"""
        unit = go_parser.parse(source)

        result = render_unit(rewrite(unit, sort_methods(extract_methods(unit))))

        assert result == """package test

type Server struct{}

func (s *Server) Start() error { return nil }

func (s *Server) helper() {}
"""

    def test_unclassified_methods_stay_put(self, go_parser: GoParser) -> None:
        """A method with a malformed receiver stays among the other declarations."""
        source = """package test

type T struct{}

func (t *T) b() {}

func (t **T) weird() {}

func (t *T) A() {}
"""
        unit = go_parser.parse(source)

        result = rewrite(unit, sort_methods(extract_methods(unit)))

        assert [d.text for d in result.decls[2:]] == [
            "func (t **T) weird() {}",
            "func (t *T) A() {}",
            "func (t *T) b() {}",
        ]

    def test_empty_method_list(self, go_parser: GoParser) -> None:
        """Nothing to move means the unit comes back as it was."""
        unit = go_parser.parse("package test\n\nfunc main() {}\n")

        assert render_unit(rewrite(unit, [])) == "package test\n\nfunc main() {}\n"

    def test_crlf_separators(self, go_parser: GoParser) -> None:
        """Inserted blank lines use the file's own line ending."""
        source = "package test\r\n\r\ntype T struct{}\r\nfunc (t T) b() {}\r\nfunc (t T) A() {}\r\n"
        unit = go_parser.parse(source)

        result = render_unit(rewrite(unit, sort_methods(extract_methods(unit))))

        assert result == (
            "package test\r\n\r\ntype T struct{}\r\n\r\nfunc (t T) A() {}\r\n\r\nfunc (t T) b() {}\r\n"
        )


class TestValidateRendering:
    """Tests for validate_rendering."""

    def test_accepts_valid_output(self, go_parser: GoParser) -> None:
        """Valid Go with the right method count passes."""
        validate_rendering(EXPECTED, 2, go_parser, "server.go")

    def test_rejects_unparsable_output(self, go_parser: GoParser) -> None:
        """Output that no longer parses is a RenderError."""
        with pytest.raises(RenderError, match="does not parse"):
            validate_rendering("package test\n\nfunc (s *S) A( {\n", 1, go_parser, "x.go")

    def test_rejects_lost_methods(self, go_parser: GoParser) -> None:
        """Losing a method on the way is a RenderError."""
        with pytest.raises(RenderError, match="expected 3"):
            validate_rendering(EXPECTED, 3, go_parser, "x.go")
