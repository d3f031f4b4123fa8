"""Rule catalog: rule ids, their detector classes and configured instances."""
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional, Type

from solidlint.analyzer.reporter import Severity

from .base import Detector, RuleOptions
from .clean_architecture import CleanArchitectureDetector
from .dip import DIPDetector
from .isp import ISPDetector
from .lsp import LSPDetector
from .naming import NamingDetector
from .ocp import OCPDetector
from .repository import RepositoryDetector
from .srp import SRPDetector

# Run order; diagnostics of one file come out grouped in this order
DETECTOR_CLASSES: List[Type[Detector]] = [
    SRPDetector,
    OCPDetector,
    LSPDetector,
    ISPDetector,
    DIPDetector,
    CleanArchitectureDetector,
    RepositoryDetector,
    NamingDetector,
]

RULES: Dict[str, Type[Detector]] = {cls.rule_id: cls for cls in DETECTOR_CLASSES}


@dataclass
class RuleSetting:
    """Validated settings for one rule."""
    enabled: bool
    severity: Severity = Severity.WARNING
    options: RuleOptions = field(default_factory=RuleOptions)


def default_settings() -> Dict[str, RuleSetting]:
    return {
        rule_id: RuleSetting(cls.enabled_by_default, Severity.WARNING, cls.options_class())
        for rule_id, cls in RULES.items()
    }


def parse_rule_settings(raw_rules: Optional[Mapping[str, Any]]) -> Dict[str, RuleSetting]:
    """Merge a ``{"<rule-id>": {...}}`` mapping over the defaults.

    Each entry may set ``enabled``, ``severity`` and ``options``; a bare
    boolean or severity string is shorthand for enabled/severity.

    Raises:
        ValueError: On unknown rule ids, keys, severities or options
    """
    settings = default_settings()
    for rule_id, raw in (raw_rules or {}).items():
        if rule_id not in RULES:
            raise ValueError(f"Unknown rule: '{rule_id}'")
        detector_cls = RULES[rule_id]

        if isinstance(raw, bool):
            raw = {'enabled': raw}
        elif isinstance(raw, str):
            raw = {'enabled': raw != 'off', 'severity': 'warning' if raw == 'off' else raw}
        elif not isinstance(raw, Mapping):
            raise ValueError(f"Settings for '{rule_id}' must be an object, boolean or severity")

        unknown = set(raw) - {'enabled', 'severity', 'options'}
        if unknown:
            raise ValueError(f"Unknown keys for '{rule_id}': {', '.join(sorted(unknown))}")

        enabled = raw.get('enabled', True)
        if not isinstance(enabled, bool):
            raise ValueError(f"'enabled' for '{rule_id}' must be true or false")

        settings[rule_id] = RuleSetting(
            enabled=enabled,
            severity=Severity.parse(raw.get('severity', Severity.WARNING)),
            options=detector_cls.options_class.from_dict(raw.get('options')),
        )
    return settings


def build_detectors(settings: Optional[Mapping[str, RuleSetting]] = None,
                    only: Optional[List[str]] = None) -> List[Detector]:
    """Instantiate enabled detectors in catalog order.

    Args:
        settings: Output of parse_rule_settings() (defaults if None)
        only: Restrict to these rule ids; listed rules run even if disabled

    Raises:
        ValueError: If ``only`` names an unknown rule
    """
    settings = settings if settings is not None else default_settings()
    if only:
        unknown = [rule_id for rule_id in only if rule_id not in RULES]
        if unknown:
            raise ValueError(f"Unknown rule: '{unknown[0]}'")

    detectors = []
    for rule_id, detector_cls in RULES.items():
        setting = settings.get(rule_id)
        if setting is None:
            setting = RuleSetting(detector_cls.enabled_by_default, Severity.WARNING,
                                  detector_cls.options_class())
        selected = rule_id in only if only else setting.enabled
        if selected:
            detectors.append(detector_cls(setting.options, setting.severity))
    return detectors
