from __future__ import annotations

import pytest

from sentinelsync import main as main_module
from sentinelsync.config import MissingConfigurationError
from sentinelsync.domain.model import DEFAULT_SEVERITIES, DeploymentOutcome, ResourceKind, Severity
from sentinelsync.domain.reconciliation import DeploymentPolicy, DeploymentReport


def _report(*, failed: list[str] | None = None) -> DeploymentReport:
    return DeploymentReport(
        solutions=DeploymentOutcome(kind=ResourceKind.SOLUTION, failed=list(failed or []))
    )


def test_main_cli_defaults(monkeypatch: pytest.MonkeyPatch) -> None:
    captured: dict[str, object] = {}

    def fake_deploy(solutions: list[str], **kwargs: object) -> DeploymentReport:
        captured["solutions"] = solutions
        captured.update(kwargs)
        return _report()

    monkeypatch.setattr(main_module, "deploy_sentinel_content", fake_deploy)

    main_module.main(["--solutions", "Azure Activity", "DNS"])

    assert captured["solutions"] == ["Azure Activity", "DNS"]
    assert captured["severities"] == DEFAULT_SEVERITIES
    assert captured["policy"] == DeploymentPolicy()
    assert captured["is_gov"] is None
    assert captured["workspace"] is None


def test_main_cli_with_flags(monkeypatch: pytest.MonkeyPatch) -> None:
    captured: dict[str, object] = {}

    def fake_deploy(solutions: list[str], **kwargs: object) -> DeploymentReport:
        captured["solutions"] = solutions
        captured.update(kwargs)
        return _report()

    monkeypatch.setattr(main_module, "deploy_sentinel_content", fake_deploy)

    main_module.main(
        [
            "--resource-group",
            "rg",
            "--workspace",
            "ws",
            "--region",
            "eastus",
            "--solutions",
            "Azure Activity, DNS",
            "--severities",
            "high,medium",
            "--is-gov",
            "--force-solutions",
            "--skip-rule-updates",
            "--force-workbook-deployment",
            "--redeploy-workbooks",
        ]
    )

    assert captured["solutions"] == ["Azure Activity", "DNS"]
    assert captured["severities"] == (Severity.HIGH, Severity.MEDIUM)
    assert captured["resource_group"] == "rg"
    assert captured["workspace"] == "ws"
    assert captured["region"] == "eastus"
    assert captured["is_gov"] is True
    policy = captured["policy"]
    assert isinstance(policy, DeploymentPolicy)
    assert policy.solutions.force
    assert policy.rules.skip_updates
    assert not policy.rules.force_dependent
    assert policy.workbooks.force_dependent
    assert policy.workbooks.redeploy_existing


def test_main_cli_requires_solutions(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(main_module, "deploy_sentinel_content", lambda *_a, **_k: _report())

    with pytest.raises(SystemExit) as excinfo:
        main_module.main([])

    assert excinfo.value.code == 2


def test_main_cli_invalid_severity(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(main_module, "deploy_sentinel_content", lambda *_a, **_k: _report())

    with pytest.raises(SystemExit) as excinfo:
        main_module.main(["--solutions", "DNS", "--severities", "Critical"])

    assert excinfo.value.code == 2


def test_main_cli_missing_configuration_exits_2(monkeypatch: pytest.MonkeyPatch) -> None:
    def fake_deploy(*_args: object, **_kwargs: object) -> DeploymentReport:
        raise MissingConfigurationError(["SENTINEL_WORKSPACE"])

    monkeypatch.setattr(main_module, "deploy_sentinel_content", fake_deploy)

    with pytest.raises(SystemExit) as excinfo:
        main_module.main(["--solutions", "DNS"])

    assert excinfo.value.code == 2


def test_main_cli_failures_exit_1(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(
        main_module, "deploy_sentinel_content", lambda *_a, **_k: _report(failed=["DNS"])
    )

    with pytest.raises(SystemExit) as excinfo:
        main_module.main(["--solutions", "DNS"])

    assert excinfo.value.code == 1


def test_main_cli_unexpected_error_exits_1(monkeypatch: pytest.MonkeyPatch) -> None:
    def fake_deploy(*_args: object, **_kwargs: object) -> DeploymentReport:
        raise RuntimeError("boom")

    monkeypatch.setattr(main_module, "deploy_sentinel_content", fake_deploy)

    with pytest.raises(SystemExit) as excinfo:
        main_module.main(["--solutions", "DNS"])

    assert excinfo.value.code == 1
