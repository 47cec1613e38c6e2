from __future__ import annotations

from typing import Dict, Mapping

from schema_lint.config import DirConfig
from schema_lint.policy.checks import DETECTORS, Detector, all_problem_names, problem_exists
from schema_lint.policy.types import ConfigError, Options, Severity

SEVERITY_OPTIONS = (
    ("lint-warning", Severity.WARNING),
    ("lint-error", Severity.ERROR),
)


def options_for_config(config: DirConfig, registry: Mapping[str, Detector] = DETECTORS) -> Options:
    problem_severity: Dict[str, Severity] = {}
    allowed = ", ".join(all_problem_names(registry))
    # lint-error is resolved last, so it wins for a problem named in both lists
    for option, severity in SEVERITY_OPTIONS:
        for name in config.get_slice(option):
            if not problem_exists(name, registry):
                raise ConfigError(
                    f"Option {option} must be a comma-separated list including these values: {allowed}"
                )
            problem_severity[name.lower()] = severity
    return Options(
        problem_severity=problem_severity,
        allowed_charsets=config.get_slice("lint-allowed-charset"),
        allowed_engines=config.get_slice("lint-allowed-engine"),
    )
