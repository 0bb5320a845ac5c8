"""
End-to-end tests for ``react2svelte.convert``.
"""

import logging

import pytest
from pydantic import ValidationError

from conftest import codes, errors, source

from react2svelte import ConversionOptions, Severity, Stage, convert

COUNTER = source("""
    import { useState } from 'react';

    function Counter({ initial = 0 }) {
      const [count, setCount] = useState(initial);
      return <button onClick={() => setCount(c => c + 1)}>{count}</button>;
    }
""")

UNKEYED_LIST = source("""
    export default function Names({ names }) {
      return (
        <ul>
          {names.map((name) => <li>{name}</li>)}
        </ul>
      );
    }
""")


class TestConvert:
    """Whole-pipeline behaviour."""

    def test_counter(self):
        result = convert(COUNTER)
        assert result.ok
        assert not errors(result.diagnostics)
        assert result.output_text == (
            "<script>\n"
            "  let { initial = 0 } = $props();\n"
            "  let count = $state(initial);\n"
            "</script>\n"
            "\n"
            "<button onclick={() => (count = count + 1)}>{count}</button>\n"
        )

    def test_output_is_deterministic(self):
        first = convert(UNKEYED_LIST)
        second = convert(UNKEYED_LIST)
        assert first.output_text == second.output_text
        assert [d.message for d in first.diagnostics] == [d.message for d in second.diagnostics]

    def test_unkeyed_list_warns(self):
        result = convert(UNKEYED_LIST)
        assert "{#each names as name, i (i)}" in result.output_text
        assert codes(result.diagnostics, Severity.WARNING) == ["missing-key"]

    def test_typescript_output(self):
        result = convert(
            source("""
                interface Props { label: string }

                function Tag({ label }: Props) {
                  return <span>{label}</span>;
                }
            """),
            ConversionOptions(typescript=True),
        )
        assert result.output_text.startswith('<script lang="ts">\n')
        assert "let { label }: Props = $props();" in result.output_text

    def test_camel_case_mapping_options(self):
        result = convert(COUNTER, {"indentWidth": 4, "sourceName": "Counter.jsx"})
        assert "    let count = $state(initial);\n" in result.output_text

    def test_malformed_options_raise(self):
        with pytest.raises(ValidationError):
            convert(COUNTER, {"indentWidth": "wide"})
        with pytest.raises(ValidationError):
            convert(COUNTER, {"unknown": True})


class TestFailures:
    """Fatal errors return no output; recoverable ones leave markers."""

    def test_parse_error(self):
        result = convert("function Broken() { return <div><span>x</div></span>; }\n")
        assert result.output_text is None
        assert codes(result.diagnostics, Severity.ERROR) == ["parse-error"]
        assert result.diagnostics[0].stage is Stage.PARSE

    def test_no_component(self):
        result = convert("export const answer = 42;\n")
        assert result.output_text is None
        assert "no-component" in codes(result.diagnostics, Severity.ERROR)

    def test_class_component(self):
        result = convert(source("""
            class Legacy extends React.Component {
              render() {
                return <div />;
              }
            }
        """))
        assert result.output_text is None
        assert codes(result.diagnostics, Severity.ERROR) == ["unsupported-pattern"]

    def test_unsupported_hook_leaves_marker(self):
        result = convert(source("""
            import { useTransition } from 'react';

            export default function Search() {
              const [isPending, startTransition] = useTransition();
              return <p>{isPending ? 'busy' : 'idle'}</p>;
            }
        """))
        assert result.output_text is not None
        error = errors(result.diagnostics)[0]
        assert error.code == "unsupported-pattern"
        assert f"// TODO({error.marker}):" in result.output_text

    def test_strict_mode_rejects_warnings(self):
        lenient = convert(UNKEYED_LIST)
        assert lenient.output_text is not None

        strict = convert(UNKEYED_LIST, ConversionOptions(strict_mode=True))
        assert strict.output_text is None
        assert codes(strict.diagnostics, Severity.ERROR) == ["missing-key"]

    def test_strict_mode_passes_clean_input(self):
        result = convert(COUNTER, {"strictMode": True})
        assert result.ok


class TestLogging:
    """Stage transitions are logged at DEBUG with structured extras."""

    def test_stage_events(self, caplog):
        caplog.set_level(logging.DEBUG, logger="react2svelte")
        convert(COUNTER, {"sourceName": "Counter.jsx"})
        events = [r.r2s_event for r in caplog.records if hasattr(r, "r2s_event")]
        assert events[0] == "parse.complete"
        assert events[-1] == "emit.complete"
        assert all(r.r2s_data["source"] == "Counter.jsx" for r in caplog.records if hasattr(r, "r2s_data"))

    def test_failure_event(self, caplog):
        caplog.set_level(logging.DEBUG, logger="react2svelte")
        convert("export const answer = 42;\n")
        failed = [r for r in caplog.records if getattr(r, "r2s_event", None) == "analyze.failed"]
        assert failed[0].r2s_data["code"] == "no-component"


class TestSetterValues:
    """State setters used as values, not called."""

    def test_setter_passed_as_prop(self):
        result = convert(source("""
            import { useState } from 'react';

            export default function Picker() {
              const [value, setValue] = useState('');
              return <Select onSelect={setValue} value={value} />;
            }
        """))
        assert result.ok
        assert "internal-error" not in codes(result.diagnostics)
        assert "onSelect={(next) => (value = next)}" in result.output_text
        assert "setter-as-value" in codes(result.diagnostics, Severity.INFO)

    def test_setter_in_provider_value(self):
        result = convert(source("""
            import { createContext, useState } from 'react';

            const UserContext = createContext(null);

            export default function UserProvider({ children }) {
              const [user, setUser] = useState(null);
              return (
                <UserContext.Provider value={{ user, setUser }}>
                  {children}
                </UserContext.Provider>
              );
            }
        """))
        assert result.ok
        assert "internal-error" not in codes(result.diagnostics)
        assert "setUser: (value) => (user = value)" in result.output_text


class TestText:
    def test_single_space_between_expressions(self):
        result = convert("function Pair({ a, b }) { return <p>{a} {b}</p>; }\n")
        assert "<p>{a} {b}</p>" in result.output_text


class TestInternalErrors:
    """Unexpected exceptions become an internal-error diagnostic."""

    def test_unexpected_exception_is_reported(self, monkeypatch, caplog):
        def explode(self, ir):
            raise RuntimeError("emitter exploded")

        monkeypatch.setattr("react2svelte.pipeline.SvelteEmitter.emit", explode)
        result = convert(COUNTER)
        assert result.output_text is None
        error = errors(result.diagnostics)[-1]
        assert error.code == "internal-error"
        assert error.stage is Stage.EMIT
        assert "emitter exploded" in error.message
        assert any(record.exc_info for record in caplog.records)
