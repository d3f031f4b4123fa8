"""Tests for the Liskov substitution detector."""
from conftest import analyze, message_ids

from solidlint.rules.lsp import LSPDetector, LSPOptions


class TestPreconditions:
    def test_extra_guard_is_stronger_precondition(self):
        source = (
            "class Base { save(item) { return item; } }\n"
            "class Child extends Base {\n"
            "  save(item) {\n"
            "    if (item === undefined) { return item; }\n"
            "    return item;\n"
            "  }\n"
            "}\n"
        )
        diagnostics = analyze(LSPDetector(), source)
        assert message_ids(diagnostics) == ['strongerPrecondition']
        assert diagnostics[0].data == {'name': 'save', 'base': 'Base'}
        assert diagnostics[0].location.line == 3

    def test_equal_guard_counts_are_fine(self):
        source = (
            "class Base { save(item) { if (item === null) { return 0; } return 1; } }\n"
            "class Child extends Base { save(item) { if (item == null) { return 2; } return 3; } }\n"
        )
        assert analyze(LSPDetector(), source) == []

    def test_fewer_parameters_is_stronger_precondition(self):
        source = (
            "class Base { move(x, y) { return x + y; } }\n"
            "class Child extends Base { move(x) { return x; } }\n"
        )
        assert message_ids(analyze(LSPDetector(), source)) == ['strongerPrecondition']


class TestPostconditions:
    def test_null_return_weakens_postcondition(self):
        source = (
            "class Base { find(id) { return this.items[id]; } }\n"
            "class Child extends Base { find(id) { return null; } }\n"
        )
        assert message_ids(analyze(LSPDetector(), source)) == ['weakerPostcondition']

    def test_base_returning_null_allows_override(self):
        source = (
            "class Base { find(id) { return null; } }\n"
            "class Child extends Base { find(id) { return null; } }\n"
        )
        assert analyze(LSPDetector(), source) == []


class TestExceptions:
    def test_new_exception_type_breaks_contract(self):
        source = (
            "class Base { run() { throw new TypeError('x'); } }\n"
            "class Child extends Base { run() { throw new RangeError('y'); } }\n"
        )
        diagnostics = analyze(LSPDetector(), source)
        assert message_ids(diagnostics) == ['newExceptionType', 'contractViolation']
        assert diagnostics[1].data == {'name': 'Child', 'base': 'Base'}

    def test_same_exception_type_is_fine(self):
        source = (
            "class Base { run() { throw new TypeError('x'); } }\n"
            "class Child extends Base { run() { throw new TypeError('y'); } }\n"
        )
        assert analyze(LSPDetector(), source) == []


class TestResolution:
    def test_compares_against_nearest_ancestor(self):
        source = (
            "class A { go() { return null; } }\n"
            "class B extends A { go() { return 1; } }\n"
            "class C extends B { go() { return null; } }\n"
        )
        diagnostics = analyze(LSPDetector(), source)
        assert message_ids(diagnostics) == ['weakerPostcondition']
        assert diagnostics[0].data['base'] == 'B'

    def test_overridable_method_with_unknown_base(self):
        source = "class Widget extends Component { render() { return null; } }\n"
        diagnostics = analyze(LSPDetector(), source)
        assert message_ids(diagnostics) == ['weakerPostcondition']
        assert diagnostics[0].data['base'] == 'Component'

    def test_other_methods_with_unknown_base_skipped(self):
        source = "class Widget extends Component { build() { return null; } }\n"
        assert analyze(LSPDetector(), source) == []

    def test_configured_overridable_methods(self):
        source = "class Widget extends Component { build() { return null; } }\n"
        detector = LSPDetector(LSPOptions(overridable_methods=['build']))
        assert message_ids(analyze(detector, source)) == ['weakerPostcondition']

    def test_constructor_skipped(self):
        source = (
            "class Base { constructor(a, b) { this.a = a; } }\n"
            "class Child extends Base { constructor() { super(1, 2); } }\n"
        )
        assert analyze(LSPDetector(), source) == []
