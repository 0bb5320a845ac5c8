"""
Tests for the tree-sitter backed source parser.
"""

import pytest

from conftest import source

from react2svelte.config import ConversionOptions
from react2svelte.errors import ParseError, UnsupportedPatternError
from react2svelte.parser import SourceParser, parse_source


class TestSyntaxTree:
    """The adapted tree exposes spans, positions and fields."""

    def test_statements_and_locations(self):
        tree = parse_source(source("""
            import { useState } from 'react';

            function Counter() {
              return <p>hi</p>;
            }
        """))
        kinds = [statement.type for statement in tree.statements]
        assert kinds == ["import_statement", "function_declaration"]
        function = tree.statements[1]
        assert function.line == 3
        assert function.column == 1
        assert function.field("name").text == "Counter"
        assert function.location.end_line == 5
        assert function.location.spanned_lines() == (4, 5)
        assert not tree.statements[0].location.is_multiline

    def test_jsx_is_part_of_the_same_tree(self):
        tree = parse_source("const App = () => <div className=\"x\">{1}</div>;\n")
        types = {node.type for node in tree.root.walk()}
        assert "jsx_element" in types
        assert "jsx_expression" in types
        assert tree.root.contains_jsx()

    def test_unwrap_strips_parentheses(self):
        tree = parse_source("const x = ((1 + 2));\n")
        declarator = tree.statements[0].named_children[0]
        assert declarator.field("value").unwrap().type == "binary_expression"

    def test_columns_count_characters(self):
        tree = parse_source("const s = 'é'; const t = 1;\n")
        second = tree.statements[1]
        assert second.column == 16

    def test_typescript_grammar(self):
        options = ConversionOptions(typescript=True)
        tree = SourceParser(options).parse(
            "function Box({ size }: { size: number }) { return <div>{size}</div>; }\n"
        )
        assert tree.language == "tsx"


class TestParseFailures:
    """Syntax problems are fatal ParseErrors with locations."""

    def test_mismatched_jsx_tags(self):
        with pytest.raises(ParseError) as excinfo:
            parse_source(source("""
                function Broken() {
                  return <div><span>text</div></span>;
                }
            """))
        error = excinfo.value
        assert error.code == "parse-error"
        assert error.location.line is not None

    def test_unterminated_expression(self):
        with pytest.raises(ParseError):
            parse_source("function Broken() { return <div>{count</div>; }\n")

    def test_type_annotations_need_typescript(self):
        with pytest.raises(ParseError):
            parse_source("function Box({ size }: Props) { return <div />; }\n")

    def test_class_component_is_rejected(self):
        with pytest.raises(UnsupportedPatternError) as excinfo:
            parse_source(source("""
                class Legacy extends React.Component {
                  render() {
                    return <div />;
                  }
                }
            """))
        assert excinfo.value.construct == "class component"
        assert "Legacy" in excinfo.value.message
        assert excinfo.value.format().startswith("<input>:1:1: error[unsupported-pattern]: Class component Legacy")
