from __future__ import annotations

import json
from pathlib import Path

from typer.testing import CliRunner

from bards_quill.cli import app
from bards_quill.core.exceptions import StateError
from bards_quill.core.state import SettingsStore

runner = CliRunner()

SAMPLE = "The quick brown fox jumps."


def _split_args(state_dir: Path, *extra: str) -> list[str]:
    return [
        "split",
        "--max-length",
        "10",
        "--suffix",
        "...",
        "--no-rules",
        "--state-dir",
        str(state_dir),
        *extra,
    ]


def test_version_flag() -> None:
    result = runner.invoke(app, ["--version"])
    assert result.exit_code == 0
    assert result.stdout.startswith("bards-quill ")


def test_split_plain_output(state_dir: Path) -> None:
    result = runner.invoke(app, _split_args(state_dir), input=SAMPLE)
    assert result.exit_code == 0, result.output
    assert "--- Part 1/5 (7 chars) ---\nThe ..." in result.stdout
    assert "--- Part 5/5 (6 chars) ---\njumps." in result.stdout


def test_split_json_output(state_dir: Path) -> None:
    result = runner.invoke(app, _split_args(state_dir, "--json"), input=SAMPLE)
    assert result.exit_code == 0, result.output
    payload = json.loads(result.stdout)
    assert payload["parts"] == 5
    assert payload["characters"] == len(SAMPLE)
    assert [row["decorated_content"] for row in payload["segments"]] == [
        "The ...",
        "quick ...",
        "brown ...",
        "fox ...",
        "jumps.",
    ]


def test_split_reads_file(tmp_path: Path, state_dir: Path) -> None:
    source = tmp_path / "story.txt"
    source.write_text(SAMPLE, encoding="utf-8")
    result = runner.invoke(app, _split_args(state_dir, str(source), "--json"))
    assert result.exit_code == 0, result.output
    assert json.loads(result.stdout)["parts"] == 5


def test_split_missing_file_fails(tmp_path: Path, state_dir: Path) -> None:
    result = runner.invoke(app, _split_args(state_dir, str(tmp_path / "nope.txt")))
    assert result.exit_code == 1
    assert "Failed to read" in result.output


def test_split_empty_input(state_dir: Path) -> None:
    result = runner.invoke(app, _split_args(state_dir), input="")
    assert result.exit_code == 0
    assert "Nothing to split." in result.stdout


def test_split_rejects_zero_max_length(state_dir: Path) -> None:
    result = runner.invoke(
        app,
        ["split", "--max-length", "0", "--state-dir", str(state_dir)],
        input=SAMPLE,
    )
    assert result.exit_code == 1
    assert "Part size must be at least 1 character." in result.output


def test_split_uses_config_file(tmp_path: Path, state_dir: Path) -> None:
    config = tmp_path / "quill.yml"
    config.write_text(
        "chunk_size: 8\npart_prefix: '>'\npart_suffix: ''\n", encoding="utf-8"
    )
    result = runner.invoke(
        app,
        [
            "split",
            "--config",
            str(config),
            "--state-dir",
            str(state_dir),
            "--json",
        ],
        input="aaa bbb ccc",
    )
    assert result.exit_code == 0, result.output
    payload = json.loads(result.stdout)
    assert [row["decorated_content"] for row in payload["segments"]] == [
        "aaa bbb ",
        ">ccc",
    ]


def test_split_missing_config_file(tmp_path: Path, state_dir: Path) -> None:
    result = runner.invoke(
        app,
        [
            "split",
            "--config",
            str(tmp_path / "none.yml"),
            "--state-dir",
            str(state_dir),
        ],
        input=SAMPLE,
    )
    assert result.exit_code == 1
    assert "Config file not found" in result.output


def test_draft_round_trip(state_dir: Path) -> None:
    saved = runner.invoke(app, _split_args(state_dir, "--save-draft"), input=SAMPLE)
    assert saved.exit_code == 0, saved.output
    result = runner.invoke(app, _split_args(state_dir, "--use-draft", "--json"))
    assert result.exit_code == 0, result.output
    assert json.loads(result.stdout)["characters"] == len(SAMPLE)


def test_split_ignores_invalid_saved_settings(state_dir: Path) -> None:
    (state_dir / "settings.json").write_text(
        json.dumps({"chunk_size": 0}), encoding="utf-8"
    )
    result = runner.invoke(
        app, ["split", "--state-dir", str(state_dir), "--json"], input="hello world"
    )
    assert result.exit_code == 0, result.output
    payload = json.loads(result.stdout)
    assert [row["raw_content"] for row in payload["segments"]] == ["hello world"]


def test_render_keeps_suffix_of_forced_last_part(state_dir: Path) -> None:
    result = runner.invoke(
        app,
        [
            "render",
            "-n",
            "1",
            "--prefix",
            ">",
            "--suffix",
            "~",
            "--state-dir",
            str(state_dir),
        ],
        input="ab",
    )
    assert result.exit_code == 0, result.output
    assert result.stdout.splitlines() == [
        "--- Part 1/2 (2 chars) ---",
        "a~",
        "--- Part 2/2 (3 chars) ---",
        ">b~",
    ]


def test_render_json_includes_spans(state_dir: Path) -> None:
    result = runner.invoke(
        app,
        [
            "render",
            "--max-length",
            "15",
            "--suffix",
            "",
            "--state-dir",
            str(state_dir),
            "--json",
        ],
        input='He said "hello world" loudly',
    )
    assert result.exit_code == 0, result.output
    segments = json.loads(result.stdout)["segments"]
    assert segments[1]["carried_markup_id"] == "1"
    assert segments[1]["spans"][0]["color"] == "#2563eb"


def test_render_plain_output(state_dir: Path) -> None:
    result = runner.invoke(
        app,
        [
            "render",
            "--max-length",
            "15",
            "--suffix",
            "~",
            "--state-dir",
            str(state_dir),
        ],
        input='He said "hello world" loudly',
    )
    assert result.exit_code == 0, result.output
    assert "--- Part 1/" in result.stdout
    lines = [
        line for line in result.stdout.splitlines() if not line.startswith("---")
    ]
    assert "".join(line.rstrip("~") for line in lines) == 'He said "hello world" loudly'


class TestSettingsCommands:
    def test_show_defaults(self, state_dir: Path) -> None:
        result = runner.invoke(
            app, ["settings", "show", "--state-dir", str(state_dir)]
        )
        assert result.exit_code == 0
        assert "chunk_size: 256" in result.stdout
        assert "[1] Speech" in result.stdout

    def test_set_and_show_json(self, state_dir: Path) -> None:
        result = runner.invoke(
            app, ["settings", "set", "chunk_size", "42", "--state-dir", str(state_dir)]
        )
        assert result.exit_code == 0, result.output
        assert "chunk_size = 42" in result.stdout
        shown = runner.invoke(
            app, ["settings", "show", "--json", "--state-dir", str(state_dir)]
        )
        assert json.loads(shown.stdout)["chunk_size"] == 42

    def test_set_dark_mode(self, state_dir: Path) -> None:
        result = runner.invoke(
            app, ["settings", "set", "dark_mode", "on", "--state-dir", str(state_dir)]
        )
        assert result.exit_code == 0, result.output
        assert "dark_mode = True" in result.stdout

    def test_set_invalid_value_keeps_previous(self, state_dir: Path) -> None:
        runner.invoke(
            app, ["settings", "set", "chunk_size", "42", "--state-dir", str(state_dir)]
        )
        result = runner.invoke(
            app, ["settings", "set", "chunk_size", "0", "--state-dir", str(state_dir)]
        )
        assert result.exit_code == 1
        shown = runner.invoke(
            app, ["settings", "show", "--json", "--state-dir", str(state_dir)]
        )
        assert json.loads(shown.stdout)["chunk_size"] == 42

    def test_set_unknown_key(self, state_dir: Path) -> None:
        result = runner.invoke(
            app, ["settings", "set", "colour", "red", "--state-dir", str(state_dir)]
        )
        assert result.exit_code == 1
        assert "Unknown setting" in result.output

    def test_add_and_remove_rule(self, state_dir: Path) -> None:
        added = runner.invoke(
            app,
            [
                "settings",
                "add-rule",
                "[[",
                "]]",
                "--name",
                "Link",
                "--state-dir",
                str(state_dir),
            ],
        )
        assert added.exit_code == 0, added.output
        assert "Added rule 3" in added.stdout
        shown = runner.invoke(
            app, ["settings", "show", "--json", "--state-dir", str(state_dir)]
        )
        rules = json.loads(shown.stdout)["highlight_rules"]
        assert rules[-1]["start"] == "[["
        assert rules[-1]["name"] == "Link"

        removed = runner.invoke(
            app, ["settings", "remove-rule", "3", "--state-dir", str(state_dir)]
        )
        assert removed.exit_code == 0, removed.output
        missing = runner.invoke(
            app, ["settings", "remove-rule", "3", "--state-dir", str(state_dir)]
        )
        assert missing.exit_code == 1

    def test_remove_rule_write_failure_exits_cleanly(
        self, state_dir: Path, monkeypatch
    ) -> None:
        def _fail(self, overrides):
            raise StateError("disk full")

        monkeypatch.setattr(SettingsStore, "update_settings", _fail)
        result = runner.invoke(
            app, ["settings", "remove-rule", "1", "--state-dir", str(state_dir)]
        )
        assert result.exit_code == 1
        assert "disk full" in result.output
        assert not isinstance(result.exception, StateError)

    def test_reset(self, state_dir: Path) -> None:
        runner.invoke(
            app, ["settings", "set", "chunk_size", "42", "--state-dir", str(state_dir)]
        )
        result = runner.invoke(
            app, ["settings", "reset", "--state-dir", str(state_dir)]
        )
        assert result.exit_code == 0
        shown = runner.invoke(
            app, ["settings", "show", "--json", "--state-dir", str(state_dir)]
        )
        assert json.loads(shown.stdout)["chunk_size"] == 256
