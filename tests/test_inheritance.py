"""Tests for the networkx-backed inheritance resolver."""
from conftest import build_context

from solidlint.analyzer.inheritance import InheritanceResolver
from solidlint.analyzer.registry import SymbolRegistry

SOURCE = (
    "class Animal { speak() {} eat() {} }\n"
    "class Dog extends Animal { speak() {} }\n"
    "class Puppy extends Dog { play() {} }\n"
    "class Widget extends External { render() {} }\n"
)


def test_parent_and_ancestors():
    resolver = build_context(SOURCE).resolver
    assert resolver.parent_of('Puppy') == 'Dog'
    assert list(resolver.ancestors('Puppy')) == ['Dog', 'Animal']
    assert resolver.parent_of('Animal') is None


def test_find_inherited_returns_nearest_declaration():
    resolver = build_context(SOURCE).resolver
    ancestor, method = resolver.find_inherited('Puppy', 'speak')
    assert ancestor.name == 'Dog'
    assert method.name == 'speak'

    ancestor, _ = resolver.find_inherited('Puppy', 'eat')
    assert ancestor.name == 'Animal'


def test_own_methods_are_not_inherited():
    resolver = build_context(SOURCE).resolver
    assert not resolver.is_inherited('Puppy', 'play')
    assert not resolver.is_inherited('Animal', 'speak')


def test_unknown_parent_stops_the_walk():
    resolver = build_context(SOURCE).resolver
    assert resolver.find_inherited('Widget', 'render') is None


def test_cycles_terminate():
    resolver = InheritanceResolver(SymbolRegistry())
    resolver.record_edge('A', 'B')
    resolver.record_edge('B', 'A')
    assert list(resolver.ancestors('A')) == ['B']
    assert resolver.find_inherited('A', 'anything') is None


def test_new_parent_replaces_old_edge():
    resolver = InheritanceResolver(SymbolRegistry())
    resolver.record_edge('A', 'B')
    resolver.record_edge('A', 'C')
    assert resolver.parent_of('A') == 'C'
    assert resolver.subclasses('B') == []
    assert resolver.subclasses('C') == ['A']


def test_missing_parent_is_noop():
    resolver = InheritanceResolver(SymbolRegistry())
    resolver.record_edge('A', None)
    assert resolver.parent_of('A') is None
    assert resolver.graph.number_of_nodes() == 0


def test_redeclaration_without_extends_clears_parent():
    source = (
        "class B { m0() {} }\n"
        "class A extends B { m0() {} }\n"
        "class A { m0() {} }\n"
    )
    resolver = build_context(source).resolver
    assert resolver.parent_of('A') is None, "last declaration of A has no superclass"
    assert not resolver.is_inherited('A', 'm0')
    assert resolver.subclasses('B') == []
