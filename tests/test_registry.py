"""Tests for the symbol registry and method profiling."""
from conftest import build_context, first_of_kind, parse

from solidlint.analyzer.registry import (
    ARROW_PROPERTY_KIND,
    GENERAL_CATEGORY,
    INTERFACE_SIGNATURE_KIND,
    OBJECT_METHOD_KIND,
    SymbolRegistry,
    calculate_complexity,
    categorize_method,
    is_interface_like_name,
)
from solidlint.analyzer.syntax import NodeKind


class TestCategories:
    """Name-based capability categories."""

    def test_first_matching_group_wins(self):
        assert categorize_method('fetchUser') == 'data'
        assert categorize_method('validateInput') == 'validation'
        assert categorize_method('renderView') == 'ui'
        assert categorize_method('sendEmail') == 'communication'

    def test_update_is_data_before_ui(self):
        assert categorize_method('updateScreen') == 'data'

    def test_unknown_name_is_general(self):
        assert categorize_method('frobnicate') == GENERAL_CATEGORY

    def test_interface_like_names(self):
        assert is_interface_like_name('IUserStore')
        assert is_interface_like_name('PaymentContract')
        assert not is_interface_like_name('Icon')
        assert not is_interface_like_name('UserStore')


class TestComplexity:
    def test_counts_each_decision_point(self):
        root = parse(
            "function f(a, b) {\n"
            "  if (a && b) { return 1; }\n"
            "  for (let i = 0; i < 3; i++) {}\n"
            "  switch (a) { case 1: break; case 2: break; default: break; }\n"
            "  return a ? 1 : 2;\n"
            "}\n"
        )
        # 1 + if + && + for + two cases + ternary
        assert calculate_complexity(first_of_kind(root, NodeKind.FUNCTION)) == 7

    def test_nested_function_and_catch(self):
        root = parse(
            "function g() {\n"
            "  try { run(() => 1); } catch (e) { log(e); }\n"
            "}\n"
        )
        assert calculate_complexity(first_of_kind(root, NodeKind.FUNCTION)) == 3

    def test_nullish_coalescing_not_counted(self):
        root = parse("function h(a) { return a ?? 0; }\n")
        assert calculate_complexity(first_of_kind(root, NodeKind.FUNCTION)) == 1

    def test_missing_body(self):
        assert calculate_complexity(None) == 1


class TestClassRegistration:
    """Classes, interfaces and their members."""

    def test_methods_and_profiles(self):
        context = build_context(
            "class Store {\n"
            "  constructor(db) { this.db = db; }\n"
            "  save(item) {\n"
            "    if (item === null) { throw new TypeError('item'); }\n"
            "    if (!item.id) { throw item.error; }\n"
            "    return null;\n"
            "  }\n"
            "}\n"
        )
        record = context.registry.get('Store')
        assert [m.name for m in record.methods] == ['constructor', 'save']

        save = record.get_method('save')
        assert save.category == 'data'
        assert save.parameter_count == 1
        assert save.validation_count == 1, "Only equality/null tests count as guards"
        assert save.has_throw
        assert save.throw_types == ['TypeError', None]
        assert save.can_return_null
        assert save.complexity == 3

    def test_arrow_property_member(self):
        context = build_context("class Button { onClick = (event) => { go(event); } }\n")
        method = context.registry.get('Button').get_method('onClick')
        assert method.kind == ARROW_PROPERTY_KIND
        assert method.parameter_count == 1

    def test_computed_keys_are_skipped(self):
        context = build_context("class A { ['dyn']() {} plain() {} }\n")
        assert [m.name for m in context.registry.get('A').methods] == ['plain']

    def test_typescript_interface(self):
        context = build_context(
            "interface IUserStore {\n"
            "  find(id: string): User;\n"
            "  remove(id: string): void;\n"
            "}\n",
            'src/store.ts',
        )
        record = context.registry.get('IUserStore')
        assert record.origin == 'interface'
        assert record.is_interface
        assert all(m.kind == INTERFACE_SIGNATURE_KIND for m in record.methods)
        assert record.get_method('find').return_type == 'User'

    def test_superclass_and_implements(self):
        context = build_context(
            "class SqlRepo extends BaseRepo implements IRepo {}\n", 'src/repo.ts')
        record = context.registry.get('SqlRepo')
        assert record.superclass == 'BaseRepo'
        assert record.implements == ['IRepo']
        assert not record.is_interface

    def test_anonymous_class(self):
        context = build_context("const Thing = class { run() {} };\n")
        assert context.registry.get('AnonymousClass') is not None

    def test_duplicate_name_last_wins(self):
        """A later declaration replaces the registry entry; record_for keeps both."""
        context = build_context("class A { one() {} }\nclass A { two() {} }\n")
        assert [m.name for m in context.registry.get('A').methods] == ['two']

        first, second = context.nodes(NodeKind.CLASS)
        assert context.record_for(first).has_method('one')
        assert context.record_for(second).has_method('two')
        assert len(context.class_records()) == 2


class TestObjectInterfaces:
    """Object literals with three or more functions."""

    def test_registered_with_context_name(self):
        context = build_context(
            "const api = {\n"
            "  load() {},\n"
            "  save: function (x) {},\n"
            "  reset: () => null,\n"
            "  version: 2,\n"
            "};\n"
        )
        record = context.registry.get('api_1')
        assert record is not None
        assert record.origin == 'object'
        assert record.is_interface
        assert [m.name for m in record.methods] == ['load', 'save', 'reset']
        assert all(m.kind == OBJECT_METHOD_KIND for m in record.methods)

    def test_two_functions_not_enough(self):
        context = build_context("const api = { a() {}, b() {} };\n")
        assert len(context.registry) == 0

    def test_unbound_literal_ignored(self):
        context = build_context("register({ a() {}, b() {}, c() {} });\n")
        assert len(context.registry) == 0

    def test_counter_increments(self):
        registry = SymbolRegistry('x.js')
        root = parse("const a = { x() {}, y() {}, z() {} };\nconst b = { x() {}, y() {}, z() {} };\n")
        stack = [root]
        objects = []
        while stack:
            node = stack.pop()
            if node.kind == NodeKind.OBJECT:
                objects.append(node)
            stack.extend(node.children)
        for node in sorted(objects, key=lambda n: n.start_byte):
            registry.register_object_interface(node)
        assert sorted(r.name for r in registry) == ['a_1', 'b_2']
