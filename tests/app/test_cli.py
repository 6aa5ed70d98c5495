from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING

import pytest

from rollcall.adapters.zoom import parse_export
from rollcall.app import ResetResult
from rollcall.domain.attendance.persist import ConfirmationReport
from rollcall.domain.errors import EmptyInputError, MalformedInputError, PendingNotFoundError
from rollcall.domain.model import PendingAttendance, PendingStatus, Registration, WindowConfig
from rollcall.ui import cli as cli_module

if TYPE_CHECKING:
    from pathlib import Path


class _FakeWorkspace:
    def __init__(self) -> None:
        self.confirmed_auto = False
        self.not_found: list[str] = []

    def confirm_all_auto_matched(self) -> int:
        self.confirmed_auto = True
        return 1

    def blocking(self) -> list[str]:
        return ["Ghost"]

    def mark_not_found(self, name: str) -> None:
        self.not_found.append(name)


@pytest.fixture
def export_file(tmp_path: Path) -> Path:
    path = tmp_path / "participants.csv"
    path.write_text("\ufeffName,Join Time,Leave Time\n", encoding="utf-8")
    return path


@pytest.fixture(autouse=True)
def quiet_print_workspace(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(cli_module, "_print_workspace", lambda _workspace: print("summary"))


def _validate_args(export_file: Path, *extra: str) -> list[str]:
    return [
        "validate",
        str(export_file),
        "--training",
        "T1",
        "--live-start",
        "07/01/2026 07:00:00 PM",
        "--window-start",
        "2026-01-07T20:00:00",
        "--window-end",
        "2026-01-07T21:00:00",
        *extra,
    ]


def test_validate_builds_config(
    monkeypatch: pytest.MonkeyPatch,
    export_file: Path,
    capsys: pytest.CaptureFixture[str],
) -> None:
    captured: dict[str, object] = {}

    def fake_prepare(text: str, config: WindowConfig, **kwargs: object) -> _FakeWorkspace:
        captured.update(text=text, config=config, **kwargs)
        return _FakeWorkspace()

    monkeypatch.delenv("ROLLCALL_MIN_PERCENT", raising=False)
    monkeypatch.setattr(cli_module, "prepare_review", fake_prepare)

    cli_module.main(_validate_args(export_file, "--min-minutes", "45", "--exclude", "host"))

    config = captured["config"]
    assert isinstance(config, WindowConfig)
    assert config.training_id == "T1"
    assert config.live_start == datetime(2026, 1, 7, 19, 0)
    assert config.window_end == datetime(2026, 1, 7, 21, 0)
    assert config.live_end is None
    assert config.min_minutes == 45
    assert config.min_percent == 90
    assert captured["exclusions"] == ["host"]
    assert captured["text"] == "Name,Join Time,Leave Time\n"
    assert "summary" in capsys.readouterr().out


def test_validate_commit_confirms_and_persists(
    monkeypatch: pytest.MonkeyPatch,
    export_file: Path,
) -> None:
    workspace = _FakeWorkspace()
    persisted: list[object] = []

    def fake_confirm(target: object) -> ConfirmationReport:
        persisted.append(target)
        return ConfirmationReport(saved=1, pending_saved=1)

    monkeypatch.setattr(cli_module, "prepare_review", lambda *_args, **_kwargs: workspace)
    monkeypatch.setattr(cli_module, "confirm_review", fake_confirm)

    cli_module.main(_validate_args(export_file, "--commit"))

    assert workspace.confirmed_auto is True
    assert workspace.not_found == ["Ghost"]
    assert persisted == [workspace]


def test_validate_invalid_timestamp_exits_2(
    monkeypatch: pytest.MonkeyPatch,
    export_file: Path,
) -> None:
    monkeypatch.setattr(cli_module, "prepare_review", lambda *_args, **_kwargs: None)

    args = _validate_args(export_file)
    args[args.index("--window-end") + 1] = "not-a-date"
    with pytest.raises(SystemExit) as excinfo:
        cli_module.main(args)

    assert excinfo.value.code == 2


@pytest.mark.parametrize(
    "error",
    [
        EmptyInputError("Participant export has no usable rows (0 dropped)"),
        MalformedInputError("Participant export has no name column"),
    ],
)
def test_validate_input_error_exits_2_with_single_message(
    monkeypatch: pytest.MonkeyPatch,
    export_file: Path,
    capsys: pytest.CaptureFixture[str],
    error: Exception,
) -> None:
    def failing_prepare(*_args: object, **_kwargs: object) -> None:
        raise error

    monkeypatch.setattr(cli_module, "prepare_review", failing_prepare)

    with pytest.raises(SystemExit) as excinfo:
        cli_module.main(_validate_args(export_file))

    err = capsys.readouterr().err
    assert excinfo.value.code == 2
    assert f"Error: {error}" in err
    assert "Traceback" not in err


def test_validate_export_without_name_column_exits_2(
    monkeypatch: pytest.MonkeyPatch,
    tmp_path: Path,
    capsys: pytest.CaptureFixture[str],
) -> None:
    path = tmp_path / "other.csv"
    path.write_text("Foo,Bar\n1,2\n", encoding="utf-8")
    monkeypatch.setattr(
        cli_module,
        "prepare_review",
        lambda text, *_args, **_kwargs: parse_export(text),
    )

    with pytest.raises(SystemExit) as excinfo:
        cli_module.main(_validate_args(path))

    err = capsys.readouterr().err
    assert excinfo.value.code == 2
    assert "name column" in err
    assert "Traceback" not in err


def test_validate_missing_window_exits_2(export_file: Path) -> None:
    args = _validate_args(export_file)
    del args[args.index("--window-end") : args.index("--window-end") + 2]

    with pytest.raises(SystemExit) as excinfo:
        cli_module.main(args)

    assert excinfo.value.code == 2


def test_domain_error_exits_1_without_traceback(
    monkeypatch: pytest.MonkeyPatch,
    capsys: pytest.CaptureFixture[str],
) -> None:
    def failing_resolve(_pending_id: int, _registration_id: int) -> Registration:
        raise PendingNotFoundError("Pending attendance 4 not found or already resolved")

    monkeypatch.setattr(cli_module, "resolve_pending", failing_resolve)

    with pytest.raises(SystemExit) as excinfo:
        cli_module.main(["pending", "resolve", "4", "1"])

    err = capsys.readouterr().err
    assert excinfo.value.code == 1
    assert "Error: Pending attendance 4 not found or already resolved" in err
    assert "Traceback" not in err


def test_unexpected_error_exits_1(
    monkeypatch: pytest.MonkeyPatch,
    capsys: pytest.CaptureFixture[str],
) -> None:
    def broken_list(**_kwargs: object) -> list[PendingAttendance]:
        raise RuntimeError("disk on fire")

    monkeypatch.setattr(cli_module, "list_pending", broken_list)

    with pytest.raises(SystemExit) as excinfo:
        cli_module.main(["pending", "list"])

    assert excinfo.value.code == 1
    assert "Error: disk on fire" in capsys.readouterr().err


def test_validate_without_window_for_second_day(
    monkeypatch: pytest.MonkeyPatch,
    export_file: Path,
) -> None:
    captured: dict[str, object] = {}

    def fake_prepare(text: str, config: WindowConfig, **kwargs: object) -> _FakeWorkspace:
        captured.update(config=config)
        return _FakeWorkspace()

    monkeypatch.setattr(cli_module, "prepare_review", fake_prepare)

    cli_module.main(
        [
            "validate",
            str(export_file),
            "--training",
            "T1",
            "--live-start",
            "2026-01-08T19:00:00",
            "--no-window",
            "--days",
            "2",
            "--day",
            "2",
        ]
    )

    config = captured["config"]
    assert isinstance(config, WindowConfig)
    assert config.has_window is False
    assert config.window_start is None
    assert config.total_days == 2
    assert config.current_day == 2


def test_missing_subcommand_exits_2() -> None:
    with pytest.raises(SystemExit) as excinfo:
        cli_module.main([])

    assert excinfo.value.code == 2


def test_pending_list_and_resolve(
    monkeypatch: pytest.MonkeyPatch,
    capsys: pytest.CaptureFixture[str],
) -> None:
    entry = PendingAttendance(
        id=4,
        training_id="T1",
        participant_name="Ghost",
        status=PendingStatus.DOUBT,
        total_minutes=61,
        candidate_a_id=1,
        candidate_a_name="Ana",
        candidate_b_id=2,
        candidate_b_name="Bia",
    )
    resolved: list[tuple[int, int]] = []

    def fake_resolve(pending_id: int, registration_id: int) -> Registration:
        resolved.append((pending_id, registration_id))
        return Registration(id=registration_id, training_id="T1", display_name="Ana")

    monkeypatch.setattr(cli_module, "list_pending", lambda **_kwargs: [entry])
    monkeypatch.setattr(cli_module, "resolve_pending", fake_resolve)

    cli_module.main(["pending", "list", "--training", "T1"])
    cli_module.main(["pending", "resolve", "4", "1"])

    out = capsys.readouterr().out
    assert "Ghost" in out
    assert "#1 Ana, #2 Bia" in out
    assert resolved == [(4, 1)]


def test_attendance_commands(
    monkeypatch: pytest.MonkeyPatch,
    capsys: pytest.CaptureFixture[str],
) -> None:
    captured: dict[str, object] = {}

    def fake_list(**kwargs: object) -> list[Registration]:
        captured.update(kwargs)
        return [
            Registration(
                id=1,
                training_id="T1",
                display_name="Ana Souza",
                attendance_validated=True,
                attendance_approved=False,
                attendance_participant_name="ana",
                attendance_total_minutes=30,
                attendance_window_percentage=50,
            )
        ]

    monkeypatch.setattr(cli_module, "list_attendance", fake_list)
    monkeypatch.setattr(
        cli_module,
        "reset_training",
        lambda _training_id: ResetResult(cleared=3, pending_deleted=2),
    )
    monkeypatch.setattr(
        cli_module,
        "unlink_attendance",
        lambda registration_id: Registration(
            id=registration_id, training_id="T1", display_name="Ana Souza"
        ),
    )

    cli_module.main(["attendance", "list", "--all"])
    cli_module.main(["attendance", "unlink", "1"])
    cli_module.main(["attendance", "reset", "T1"])

    out = capsys.readouterr().out
    assert captured == {"training_id": None, "approved_only": False}
    assert "rejected" in out
    assert "Cleared attendance of registration 1" in out
    assert "3 registrations cleared, 2 pending entries removed" in out


def test_registration_add(
    monkeypatch: pytest.MonkeyPatch,
    capsys: pytest.CaptureFixture[str],
) -> None:
    captured: dict[str, object] = {}

    def fake_add(**kwargs: object) -> Registration:
        captured.update(kwargs)
        return Registration(id=9, training_id="T1", display_name="Ana")

    monkeypatch.setattr(cli_module, "add_registration", fake_add)

    cli_module.main(["registration", "add", "--training", "T1", "--name", "Ana", "--phone", "1"])

    assert captured["display_name"] == "Ana"
    assert captured["phone"] == "1"
    assert captured["recruiter_code"] is None
    assert "Created registration 9" in capsys.readouterr().out


def test_registration_search(
    monkeypatch: pytest.MonkeyPatch,
    capsys: pytest.CaptureFixture[str],
) -> None:
    captured: dict[str, object] = {}

    def fake_search(query: str, **kwargs: object) -> list[Registration]:
        captured.update(query=query, **kwargs)
        return [Registration(id=3, training_id="T1", display_name="Ana Souza", phone="1199")]

    monkeypatch.setattr(cli_module, "search_registrations", fake_search)

    cli_module.main(["registration", "search", "souza", "--limit", "5"])

    assert captured == {"query": "souza", "limit": 5}
    out = capsys.readouterr().out
    assert "Ana Souza" in out
    assert "1199" in out
