"""Tests for the rule engine: ordering, isolation and end-to-end scenarios."""
import logging

import pytest

from solidlint.analyzer.engine import RuleEngine
from solidlint.rules.base import Detector
from solidlint.rules.catalog import build_detectors
from solidlint.rules.isp import ISPDetector, ISPOptions
from solidlint.rules.repository import RepositoryDetector
from solidlint.rules.srp import SRPDetector, SRPOptions


class ExplodingDetector(Detector):
    rule_id = 'exploding'
    messages = {}

    def check(self, context):
        raise RuntimeError("boom")


@pytest.fixture(autouse=True)
def propagate_logs():
    """Let caplog see solidlint records even after the CLI configured logging."""
    package_logger = logging.getLogger('solidlint')
    previous = package_logger.propagate
    package_logger.propagate = True
    yield
    package_logger.propagate = previous


def test_failing_detector_is_isolated(caplog):
    methods = ''.join(f"  m{i}() {{}}\n" for i in range(6))
    engine = RuleEngine([ExplodingDetector(), SRPDetector()])

    with caplog.at_level(logging.ERROR, logger='solidlint.analyzer.engine'):
        diagnostics = engine.analyze_source(f"class Wide {{\n{methods}}}\n", 'src/wide.js')

    assert [d.message_id for d in diagnostics] == ['tooManyMethods']
    assert any("exploding" in record.getMessage() for record in caplog.records)


def test_diagnostics_follow_detector_order():
    source = (
        "class Wide {\n" + ''.join(f"  op{i}() {{}}\n" for i in range(11)) + "}\n"
    )
    engine = RuleEngine([ISPDetector(), SRPDetector()])
    rules = [d.rule_id for d in engine.analyze_source(source, 'src/wide.js')]
    first_srp = rules.index('srp-violation')
    assert all(rule == 'isp-violation' for rule in rules[:first_srp])
    assert all(rule == 'srp-violation' for rule in rules[first_srp:])


def test_order_service_scenario():
    """Fat interface with nine unused methods, counted through static calls."""
    names = ['placeOrder', 'cancelOrder', 'refundOrder', 'shipOrder', 'trackOrder',
             'archiveOrder', 'auditOrder', 'quoteOrder', 'splitOrder', 'mergeOrder',
             'holdOrder', 'releaseOrder']
    body = ''.join(f"  {name}(order) {{ return order; }}\n" for name in names)
    calls = "OrderService.placeOrder(o);\nOrderService.shipOrder(o);\nOrderService.holdOrder(o);\n"
    engine = RuleEngine([ISPDetector(ISPOptions(max_methods=10, max_unused_methods=3))])

    diagnostics = engine.analyze_source(f"class OrderService {{\n{body}}}\n{calls}",
                                        'src/services/OrderService.js')
    by_id = {d.message_id: d for d in diagnostics}
    assert 'fatInterface' in by_id
    assert len(by_id['unusedMethods'].data['unused']) == 9
    assert 'placeOrder' not in by_id['unusedMethods'].data['unused']


def test_misplaced_repository_scenario():
    engine = RuleEngine([RepositoryDetector()])
    diagnostics = engine.analyze_source(
        "export class UserRepositoryImpl { findAll() { return []; } }\n",
        'src/services/UserRepositoryImpl.js',
    )
    assert [d.message_id for d in diagnostics].count('wrongDirectory') == 1


def test_severity_applied_to_diagnostics():
    engine = RuleEngine([SRPDetector(SRPOptions(max_methods=0), severity='error')])
    diagnostics = engine.analyze_source("class A { m() {} }\n", 'src/a.js')
    assert diagnostics[0].severity.value == 'error'
    assert diagnostics[0].to_dict()['severity'] == 'error'


def test_diagnostic_dict_shape():
    engine = RuleEngine([SRPDetector(SRPOptions(max_methods=0))])
    payload = engine.analyze_source("\nclass A { m() {} }\n", 'src/a.js')[0].to_dict()
    assert payload['rule'] == 'srp-violation'
    assert payload['messageId'] == 'tooManyMethods'
    assert (payload['file'], payload['line'], payload['column']) == ('src/a.js', 2, 1)
    assert payload['message'] == "Class 'A' has too many methods 1. Maximum allowed is 0."


def test_default_detectors_run_on_typescript():
    engine = RuleEngine(build_detectors())
    source = "interface IReader { read(): string; }\nexport class Reader implements IReader {\n  read() { return ''; }\n}\n"
    assert isinstance(engine.analyze_source(source, 'src/reader.ts'), list)


def test_unsupported_extension():
    with pytest.raises(ValueError):
        RuleEngine([]).analyze_source("x = 1", 'script.py')


def test_explicit_language_overrides_extension():
    diagnostics = RuleEngine([SRPDetector(SRPOptions(max_methods=0))]).analyze_source(
        "class A { m() {} }\n", 'snippet', language='javascript')
    assert len(diagnostics) == 1


def test_analyze_file(tmp_path):
    source_file = tmp_path / 'wide.js'
    source_file.write_text("class A { m() {} }\n")
    engine = RuleEngine([SRPDetector(SRPOptions(max_methods=0))])

    diagnostics = engine.analyze_file(source_file)
    assert diagnostics[0].location.file_path == source_file.as_posix()
    assert engine.analyze_file(tmp_path / 'missing.js') is None
    assert engine.analyze_file(tmp_path / 'notes.txt') is None
