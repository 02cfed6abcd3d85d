from __future__ import annotations

import logging

import pytest

from streamfixup.app import FixupSummary
from streamfixup.config import ConfigurationError
from streamfixup.domain.model import FixupField
from streamfixup.domain.reconciliation import FixupResult
from streamfixup.ui import cli as cli_module


def _capture(
    monkeypatch: pytest.MonkeyPatch,
    summary: FixupSummary | None = None,
) -> dict[str, object]:
    captured: dict[str, object] = {}

    def fake_fixup(**kwargs: object) -> FixupSummary:
        captured.update(kwargs)
        return summary or FixupSummary()

    monkeypatch.setattr(cli_module, "fixup_streams", fake_fixup)
    return captured


def test_main_cli_defaults(monkeypatch: pytest.MonkeyPatch) -> None:
    captured = _capture(monkeypatch)

    cli_module.main(["fixup"])

    assert captured == {
        "user_id": None,
        "provider_id": None,
        "ignore": None,
        "batch_size": None,
        "dry_run": False,
    }


def test_main_cli_with_flags(monkeypatch: pytest.MonkeyPatch) -> None:
    captured = _capture(monkeypatch)

    cli_module.main(
        [
            "-v",
            "fixup",
            "--user-id",
            "7",
            "--provider-id",
            "3",
            "--ignore",
            "logo, TVG_ID",
            "--batch-size",
            "50",
            "--dry-run",
        ]
    )

    assert captured["user_id"] == 7
    assert captured["provider_id"] == 3
    assert captured["ignore"] == frozenset({FixupField.LOGO, FixupField.TVG_ID})
    assert captured["batch_size"] == 50
    assert captured["dry_run"] is True


def test_main_cli_prints_summary(
    monkeypatch: pytest.MonkeyPatch,
    capsys: pytest.CaptureFixture[str],
) -> None:
    summary = FixupSummary(
        targets=2,
        results_by_user={1: FixupResult(names=3, logos=1), 2: FixupResult(channels=2)},
    )
    _capture(monkeypatch, summary)

    cli_module.main(["fixup", "--dry-run"])

    output = capsys.readouterr().out
    assert "FIXUP COMPLETE (DRY RUN)" in output
    assert "Users processed: 2" in output
    assert "Streams updated: 6" in output
    assert "Errors: 0" in output


def test_main_cli_invalid_ignore_exits_with_usage_error(monkeypatch: pytest.MonkeyPatch) -> None:
    captured = _capture(monkeypatch)

    with pytest.raises(SystemExit) as excinfo:
        cli_module.main(["fixup", "--ignore", "name,bogus"])

    assert excinfo.value.code == 2
    assert captured == {}


@pytest.mark.parametrize("value", ["0", "-5", "many"])
def test_main_cli_rejects_non_positive_batch_size(
    monkeypatch: pytest.MonkeyPatch,
    value: str,
) -> None:
    _capture(monkeypatch)

    with pytest.raises(SystemExit) as excinfo:
        cli_module.main(["fixup", "--batch-size", value])

    assert excinfo.value.code == 2


def test_main_cli_requires_a_command() -> None:
    with pytest.raises(SystemExit) as excinfo:
        cli_module.main([])

    assert excinfo.value.code == 2


def test_main_cli_configuration_error_exits_2(monkeypatch: pytest.MonkeyPatch) -> None:
    def fake_fixup(**_: object) -> FixupSummary:
        raise ConfigurationError("STREAMFIXUP_BATCH_SIZE must be an integer")

    monkeypatch.setattr(cli_module, "fixup_streams", fake_fixup)

    with pytest.raises(SystemExit) as excinfo:
        cli_module.main(["fixup"])

    assert excinfo.value.code == 2


def test_main_cli_fatal_error_exits_1(monkeypatch: pytest.MonkeyPatch) -> None:
    def fake_fixup(**_: object) -> FixupSummary:
        raise RuntimeError("connection refused")

    monkeypatch.setattr(cli_module, "fixup_streams", fake_fixup)

    with pytest.raises(SystemExit) as excinfo:
        cli_module.main(["fixup"])

    assert excinfo.value.code == 1


def test_main_cli_user_failures_exit_1(monkeypatch: pytest.MonkeyPatch) -> None:
    _capture(monkeypatch, FixupSummary(targets=1, failed_users=[4]))

    with pytest.raises(SystemExit) as excinfo:
        cli_module.main(["fixup"])

    assert excinfo.value.code == 1


@pytest.mark.parametrize(
    ("argv", "expected_level"),
    [
        (["fixup"], logging.INFO),
        (["-v", "fixup"], logging.DEBUG),
        (["fixup", "--verbose"], logging.DEBUG),
        (["fixup", "-v", "--dry-run"], logging.DEBUG),
    ],
)
def test_main_cli_verbose_flag_on_either_side_of_command(
    monkeypatch: pytest.MonkeyPatch,
    argv: list[str],
    expected_level: int,
) -> None:
    _capture(monkeypatch)
    levels: list[int] = []

    def fake_configure_logging(*, level: int, force: bool = False) -> None:
        del force
        levels.append(level)

    monkeypatch.setattr(cli_module, "configure_logging", fake_configure_logging)

    cli_module.main(argv)

    assert levels == [expected_level]
