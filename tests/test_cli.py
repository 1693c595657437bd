"""Tests for CLI module."""

import json
from pathlib import Path

import pytest

from household_reviews.cli import cmd_init, cmd_version, get_default_data_path, main


def run(path: Path, *args: str) -> int:
    return main(["--file", str(path), "--as-of", "2024-03-15", *args])


@pytest.fixture
def workspace(tmp_path) -> Path:
    path = tmp_path / "households.json"
    assert run(path, "init") == 0
    assert run(path, "add", "--name", "Smith Family", "--member", "John Smith:Primary",
               "--due", "2024-04-01") == 0
    assert run(path, "add", "--name", "Johnson Household", "--member", "Ann Johnson",
               "--member", "Bob Johnson:Spouse", "--due", "2024-02-10",
               "--segment", "Red", "--priority", "High") == 0
    assert run(path, "add", "--name", "Garcia Trust", "--member", "Maria Garcia",
               "--due", "2024-03-28", "--priority", "VIP",
               "--review-type", "Required", "--auc", "2500000") == 0
    return path


def households(path: Path) -> list[dict]:
    return json.loads(path.read_text(encoding="utf-8"))["households"]


class TestGetDefaultDataPath:
    def test_returns_path_in_home_directory(self, monkeypatch):
        monkeypatch.delenv("HRV_DATA_FILE", raising=False)
        from household_reviews.config import get_settings

        get_settings.cache_clear()
        result = get_default_data_path()
        get_settings.cache_clear()

        assert isinstance(result, Path)
        assert ".household_reviews" in str(result)
        assert result.name == "households.json"


class TestCmdInit:
    def test_creates_new_workspace(self, tmp_path, capsys):
        path = tmp_path / "households.json"

        class Args:
            file = str(path)
            force = False

        result = cmd_init(Args())

        assert result == 0
        assert path.exists()
        assert households(path) == []
        captured = capsys.readouterr()
        assert "Initialized workspace" in captured.out

    def test_refuses_to_overwrite_existing_without_force(self, tmp_path, capsys):
        path = tmp_path / "households.json"
        path.write_text("{}")

        class Args:
            file = str(path)
            force = False

        result = cmd_init(Args())

        assert result == 1
        assert "already exists" in capsys.readouterr().out

    def test_overwrites_existing_with_force(self, tmp_path):
        path = tmp_path / "households.json"
        path.write_text("old data")

        class Args:
            file = str(path)
            force = True

        result = cmd_init(Args())

        assert result == 0
        assert households(path) == []


class TestCmdVersion:
    def test_prints_version(self, capsys):
        class Args:
            pass

        result = cmd_version(Args())

        assert result == 0
        assert "Household Review Tracker v0.1.0" in capsys.readouterr().out


class TestMain:
    def test_no_command_prints_help(self, capsys):
        result = main([])

        assert result == 0
        assert "usage" in capsys.readouterr().out.lower()

    def test_status(self, workspace, capsys):
        capsys.readouterr()

        result = run(workspace, "status")

        out = capsys.readouterr().out
        assert result == 0
        assert "Households: 3" in out
        assert "Overdue:   1" in out

    def test_status_without_workspace(self, tmp_path, capsys):
        result = run(tmp_path / "missing.json", "status")

        assert result == 1
        assert "No workspace found" in capsys.readouterr().out


class TestAddAndList:
    def test_add_persists_household(self, workspace):
        saved = households(workspace)

        assert [h["name"] for h in saved] == [
            "Smith Family",
            "Johnson Household",
            "Garcia Trust",
        ]
        assert saved[1]["members"][1] == {
            "name": "Bob Johnson",
            "role": "Spouse",
            "dateOfBirth": None,
        }
        assert saved[2]["reviewType"] == "Required"

    def test_add_rejects_bad_date(self, workspace, capsys):
        result = run(workspace, "add", "--name", "X", "--member", "Y", "--due", "soon")

        assert result == 1
        assert "Error" in capsys.readouterr().out

    def test_add_requires_member(self, workspace, capsys):
        result = run(workspace, "add", "--name", "X", "--due", "2024-05-01")

        assert result == 1
        assert "at least one member" in capsys.readouterr().out

    def test_list_filters(self, workspace, capsys):
        capsys.readouterr()

        result = run(workspace, "list", "--category", "Overdue")

        out = capsys.readouterr().out
        assert result == 0
        assert "Johnson Household" in out
        assert "Smith Family" not in out
        assert "1 of 3 households" in out

    def test_list_quick_and_query(self, workspace, capsys):
        capsys.readouterr()

        run(workspace, "list", "--quick", "vip", "--query", "garcia")

        out = capsys.readouterr().out
        assert "Garcia Trust" in out
        assert "1 of 3 households" in out

    def test_list_no_matches(self, workspace, capsys):
        capsys.readouterr()

        run(workspace, "list", "--query", "nobody")

        assert "No households found." in capsys.readouterr().out

    def test_list_unknown_category(self, workspace, capsys):
        result = run(workspace, "list", "--category", "Purple")

        assert result == 1
        assert "Unknown category" in capsys.readouterr().out


class TestComplete:
    def test_complete_advances_next_month(self, workspace, capsys):
        capsys.readouterr()

        result = run(workspace, "complete", "1")

        assert result == 0
        assert "Next review: 2024-05-01" in capsys.readouterr().out
        saved = households(workspace)[0]
        assert saved["lastCompletedDate"] == "2024-03-15"
        assert saved["nextReviewDate"] == "2024-05-01"

    def test_complete_with_custom_date(self, workspace):
        result = run(workspace, "complete", "2", "--custom-date", "2024-09-30")

        assert result == 0
        assert households(workspace)[1]["nextReviewDate"] == "2024-09-30"

    def test_complete_rejects_past_custom_date(self, workspace, capsys):
        result = run(workspace, "complete", "2", "--custom-date", "2024-03-01")

        assert result == 1
        assert "must be after" in capsys.readouterr().out
        assert households(workspace)[1]["lastCompletedDate"] is None

    def test_complete_unknown_household(self, workspace, capsys):
        result = run(workspace, "complete", "99")

        assert result == 1
        assert "Household not found: 99" in capsys.readouterr().out


class TestBulk:
    def test_mark_visible_completed(self, workspace, capsys):
        capsys.readouterr()

        result = run(workspace, "bulk", "mark_completed", "--visible", "--quick", "overdue")

        assert result == 0
        assert "Applied mark_completed to 1 households" in capsys.readouterr().out
        assert households(workspace)[1]["lastCompletedDate"] == "2024-03-15"

    def test_assign_month_by_id(self, workspace):
        result = run(workspace, "bulk", "assign_month", "1", "3", "--month", "June")

        assert result == 0
        saved = households(workspace)
        assert saved[0]["assignedMonth"] == "June"
        assert saved[0]["nextReviewDate"] == "2024-06-01"
        assert saved[2]["nextReviewDate"] == "2024-06-28"

    def test_delete(self, workspace):
        result = run(workspace, "bulk", "delete", "2")

        assert result == 0
        assert [h["id"] for h in households(workspace)] == [1, 3]

    def test_nothing_selected(self, workspace, capsys):
        result = run(workspace, "bulk", "delete", "42")

        assert result == 1
        assert "No households selected." in capsys.readouterr().out


class TestBackups:
    def test_backup_list_and_restore(self, workspace, capsys):
        capsys.readouterr()
        assert run(workspace, "backup") == 0
        out = capsys.readouterr().out
        assert "Created backup:" in out
        backup = out.split("Created backup:", 1)[1].strip()

        run(workspace, "bulk", "delete", "1", "2", "3")
        assert households(workspace) == []

        assert run(workspace, "restore", backup) == 0
        assert len(households(workspace)) == 3

        capsys.readouterr()
        run(workspace, "backups")
        assert "Backups (newest first):" in capsys.readouterr().out

    def test_restore_missing_backup(self, workspace, capsys):
        result = run(workspace, "restore", str(workspace.parent / "nope.json"))

        assert result == 1
        assert "Backup file does not exist" in capsys.readouterr().out


class TestExport:
    def test_export_to_stdout(self, workspace, capsys):
        capsys.readouterr()

        result = run(workspace, "export", "--category", "Red")

        out = capsys.readouterr().out
        assert result == 0
        assert "ID,Name,Segment" in out
        assert "Johnson Household" in out
        assert "Smith Family" not in out

    def test_export_to_file(self, workspace, tmp_path, capsys):
        output = tmp_path / "reviews.csv"

        result = run(workspace, "export", "--output", str(output))

        assert result == 0
        assert "Exported 3 households" in capsys.readouterr().out
        assert output.read_text(encoding="utf-8").count("\n") == 4


class TestInvalidAsOf:
    @pytest.mark.parametrize("command", ["status", "backup", "backups", "list"])
    def test_bad_as_of_date_reports_error(self, workspace, capsys, command):
        capsys.readouterr()

        result = main(["--file", str(workspace), "--as-of", "yesterday", command])

        assert result == 1
        assert "Error:" in capsys.readouterr().out

    def test_bad_as_of_date_on_restore(self, workspace, capsys):
        result = main(
            ["--file", str(workspace), "--as-of", "2024-13-01", "restore", "any.json"]
        )

        assert result == 1
        assert "Error:" in capsys.readouterr().out
