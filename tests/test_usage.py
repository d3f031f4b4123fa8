"""Tests for call-site and member-access usage tracking."""
from conftest import build_context

from solidlint.analyzer.registry import ClassRecord, MethodRecord, SymbolRegistry
from solidlint.analyzer.syntax import NodeKind, SyntaxNode
from solidlint.analyzer.usage import UsageTracker


def method(context, class_name, name):
    return context.registry.get(class_name).get_method(name)


def test_static_call_marks_method_used():
    context = build_context(
        "class Store { load() {} save() {} }\n"
        "Store.load();\n"
    )
    load = method(context, 'Store', 'load')
    assert load.is_used
    # seen once as a call and once as a member read
    assert load.usage_count == 2
    assert not method(context, 'Store', 'save').is_used


def test_property_read_counts():
    context = build_context(
        "class Config { port() {} }\n"
        "const handler = Config.port;\n"
    )
    assert method(context, 'Config', 'port').usage_count == 1


def test_this_calls_ignored():
    context = build_context("class Store { load() { this.save(); } save() {} }\n")
    assert not method(context, 'Store', 'save').is_used


def test_usage_before_declaration():
    context = build_context(
        "Store.save();\n"
        "class Store { save() {} }\n"
    )
    assert method(context, 'Store', 'save').is_used


def test_interface_substring_match_for_calls():
    """Calls through an object whose name contains an interface-like record's name."""
    context = build_context(
        "class IStore { load() {} }\n"
        "const myIStore = make();\n"
        "myIStore.load();\n"
    )
    load = method(context, 'IStore', 'load')
    assert load.is_used
    assert load.usage_count == 1, "Only the call event may use the substring match"


def test_unrelated_object_not_matched():
    context = build_context(
        "class Store { load() {} }\n"
        "cache.load();\n"
    )
    assert not method(context, 'Store', 'load').is_used


def test_flush_clears_buffer():
    node = SyntaxNode(NodeKind.CLASS, 'class_declaration', 0, 0, 1, 0, 1, 0)
    registry = SymbolRegistry()
    record = ClassRecord('Queue', node)
    record.methods.append(MethodRecord('push', node))
    registry.records['Queue'] = record

    tracker = UsageTracker()
    tracker.record_call('Queue', 'push')
    tracker.record_call(None, 'push')
    tracker.record_access('Queue', None)
    assert tracker.flush(registry) == 1
    assert tracker.flush(registry) == 0
    assert record.get_method('push').usage_count == 1
