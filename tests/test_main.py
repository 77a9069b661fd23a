"""End-to-end tests for the installer entry point with faked host services."""

from __future__ import annotations

import json
from dataclasses import replace
from pathlib import Path

import pytest

from realsense_installer.lib.fstab import FstabMountTable
from realsense_installer.main import build_steps, main
from realsense_installer.state_store import FALLBACK_STATE_STEM
from realsense_installer.steps.step_85_smoke_test import SUCCESS_MESSAGE
from tests.conftest import FakeBuild, FakePython


@pytest.fixture
def as_root(monkeypatch) -> None:
    monkeypatch.setattr("realsense_installer.lib.privilege.os.geteuid", lambda: 0)


@pytest.fixture
def as_user(monkeypatch) -> None:
    monkeypatch.setattr("realsense_installer.lib.privilege.os.geteuid", lambda: 1000)


@pytest.fixture
def use_services(monkeypatch):
    def _use(services):
        monkeypatch.setattr("realsense_installer.main.default_services", lambda cfg, dry_run=False: services)
        return services

    return _use


def _argv(tmp_path: Path, config_file: Path, *extra: str) -> list:
    return [
        "--config",
        str(config_file),
        "--state",
        str(tmp_path / "state" / "state.json"),
        "--log",
        str(tmp_path / "installer.log"),
        *extra,
    ]


def _state(tmp_path: Path) -> dict:
    return json.loads((tmp_path / "state" / "state.json").read_text(encoding="utf-8"))


class TestPrivilege:
    def test_non_root_exits_1_without_touching_filesystem(self, tmp_path, monkeypatch, as_user) -> None:
        work = tmp_path / "cwd"
        work.mkdir()
        monkeypatch.chdir(work)

        rc = main(["--state", str(tmp_path / "s.json"), "--log", str(tmp_path / "i.log")])

        assert rc == 1
        assert sorted(p.name for p in tmp_path.iterdir()) == ["cwd"]
        assert list(work.iterdir()) == []


class TestFullRun:
    def test_fresh_machine(self, tmp_path, cfg, services, config_file, as_root, use_services) -> None:
        use_services(services)

        rc = main(_argv(tmp_path, config_file))

        assert rc == 0
        swap = Path(cfg.swap_path)
        assert swap.stat().st_size == cfg.swap_min_bytes
        assert cfg.swap_path in services.swap.active
        assert cfg.repo_path.is_dir()
        assert "/usr/local/lib" in Path(cfg.ld_conf_path).read_text(encoding="utf-8")
        assert services.python.installed == [str(cfg.python_wrapper_path)]

        state = _state(tmp_path)
        assert state["execution"]["decisions"]["smoke_test"] == {"ok": True, "output": SUCCESS_MESSAGE}
        assert state["execution"]["completed_steps"] == [s.step_id for s in build_steps()]
        assert state["execution"]["summary"]["exit_code"] == 0
        assert SUCCESS_MESSAGE in (tmp_path / "installer.log").read_text(encoding="utf-8")

    def test_second_run_pulls_and_keeps_swap(self, tmp_path, cfg, services, config_file, as_root, use_services) -> None:
        use_services(services)
        assert main(_argv(tmp_path, config_file)) == 0
        swap_calls = list(services.swap.calls)

        assert main(_argv(tmp_path, config_file)) == 0

        assert services.swap.calls == swap_calls
        assert services.vcs.calls[-1] == ("pull", str(cfg.repo_path))
        assert len(services.mounts.entries) == 1
        assert _state(tmp_path)["execution"]["decisions"]["swap"]["action"] == "adequate"

    def test_smoke_test_failure_still_succeeds(self, tmp_path, services, config_file, as_root, use_services) -> None:
        use_services(replace(services, python=FakePython(stdout="Error: No device connected\n")))

        rc = main(_argv(tmp_path, config_file))

        assert rc == 0
        state = _state(tmp_path)
        assert state["execution"]["decisions"]["smoke_test"]["ok"] is False
        assert "90_finalize" in state["execution"]["completed_steps"]


class TestFailFast:
    def test_build_failure_propagates_exit_code(self, tmp_path, cfg, services, config_file, as_root, use_services) -> None:
        use_services(replace(services, build=FakeBuild(fail_on="compile")))

        rc = main(_argv(tmp_path, config_file))

        assert rc == 2
        assert not Path(cfg.ld_conf_path).exists()
        assert services.python.installed == []
        state = _state(tmp_path)
        assert state["execution"]["errors"][0]["step"] == "60_build_sdk"
        assert "70_register_library_path" not in state["execution"]["completed_steps"]
        # no rollback of earlier steps
        assert Path(cfg.swap_path).exists()

    def test_fstab_write_failure_reports_swap_step(self, tmp_path, services, config_file, as_root, use_services) -> None:
        mounts = FstabMountTable(path=str(tmp_path / "nodir" / "fstab"))
        use_services(replace(services, mounts=mounts))

        rc = main(_argv(tmp_path, config_file))

        assert rc == 1
        error = _state(tmp_path)["execution"]["errors"][0]
        assert error["step"] == "30_ensure_swap"
        assert error["type"] == "ResourceError"
        assert services.vcs.calls == []

    def test_resume_skips_completed_steps(self, tmp_path, cfg, services, config_file, as_root, use_services) -> None:
        use_services(replace(services, build=FakeBuild(fail_on="compile")))
        assert main(_argv(tmp_path, config_file)) == 2

        fixed = use_services(replace(services, build=FakeBuild()))
        rc = main(_argv(tmp_path, config_file, "--resume"))

        assert rc == 0
        summary = _state(tmp_path)["execution"]["summary"]
        assert summary["skipped_steps"][-1] == "50_install_udev_rules"
        assert summary["ran_steps"][0] == "60_build_sdk"
        assert [c[0] for c in fixed.build.calls] == ["configure", "compile", "install"]


class TestCli:
    def test_list_steps(self, capsys) -> None:
        assert main(["--list-steps"]) == 0
        out = capsys.readouterr().out.split()
        assert out == [s.step_id for s in build_steps()]

    def test_unknown_step_is_usage_error(self, tmp_path, config_file, as_root) -> None:
        with pytest.raises(SystemExit) as exc:
            main(_argv(tmp_path, config_file, "--start-at", "99_nope"))
        assert exc.value.code == 2

    def test_reversed_step_range_is_usage_error(self, tmp_path, cfg, services, config_file, as_root, use_services) -> None:
        use_services(services)
        with pytest.raises(SystemExit) as exc:
            main(_argv(tmp_path, config_file, "--start-at", "60_build_sdk", "--stop-after", "30_ensure_swap"))
        assert exc.value.code == 2
        assert services.build.calls == []
        assert services.python.installed == []
        assert not Path(cfg.swap_path).exists()

    def test_dry_run_needs_no_root_and_changes_nothing(self, tmp_path, cfg, config_file, as_user) -> None:
        rc = main(_argv(tmp_path, config_file, "--dry-run"))

        assert rc == 0
        assert not Path(cfg.swap_path).exists()
        assert not cfg.repo_path.exists()
        assert not Path(cfg.ld_conf_path).exists()
        assert not Path(cfg.fstab_path).exists()
        assert _state(tmp_path)["execution"]["summary"]["exit_code"] == 0

    def test_dry_run_with_unwritable_state_falls_back_to_cwd(self, tmp_path, monkeypatch, config_file, as_user) -> None:
        work = tmp_path / "cwd"
        work.mkdir()
        monkeypatch.chdir(work)
        (tmp_path / "blocker").write_text("x", encoding="utf-8")

        rc = main(
            [
                "--config",
                str(config_file),
                "--state",
                str(tmp_path / "blocker" / "state.json"),
                "--log",
                str(tmp_path / "installer.log"),
                "--dry-run",
            ]
        )

        assert rc == 0
        saved = json.loads((work / f"{FALLBACK_STATE_STEM}.json").read_text(encoding="utf-8"))
        assert saved["execution"]["summary"]["exit_code"] == 0
