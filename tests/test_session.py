"""Tests for edit sessions, from registration to installation."""

from __future__ import annotations

from pathlib import Path

import pytest
from stagedit import (
    EditOutcome,
    EditorExecutionError,
    EditorTerminatedError,
    EditSession,
    EmptySessionError,
    InstallError,
    InstallStatus,
)
from stagedit.config import StageditConfig

START = "### start"
END = "### end"


def _write_editor(tmp_path: Path, body: str) -> Path:
    """Create an executable stand-in editor running ``body`` for each file."""

    script = tmp_path / "fake-editor"
    script.write_text(
        "#!/bin/sh\n"
        'for f in "$@"; do\n'
        '  case "$f" in\n'
        "    +*) ;;\n"
        f"    *) {body} ;;\n"
        "  esac\n"
        "done\n",
        encoding="utf-8",
    )
    script.chmod(0o755)
    return script


def _session(editor: Path | str, **kwargs) -> EditSession:
    return EditSession(environ={"STAGEDIT_EDITOR": str(editor)}, **kwargs)


def test_add_same_target_twice_keeps_single_request(tmp_path: Path) -> None:
    session = EditSession()
    target = tmp_path / "app.conf"

    assert session.add(target) is True
    assert session.add(target, original_path=tmp_path / "other") is False

    assert len(session) == 1
    assert session.requests[0].original_path is None
    assert session.contains(target)


def test_add_makes_paths_absolute(tmp_path: Path, monkeypatch) -> None:
    monkeypatch.chdir(tmp_path)
    session = EditSession()

    session.add("app.conf")

    assert session.requests[0].target_path == Path.cwd() / "app.conf"
    assert session.add(Path.cwd() / "app.conf") is False


def test_add_deduplicates_reference_paths(tmp_path: Path) -> None:
    session = EditSession(START, END)
    ref = tmp_path / "ref.conf"

    session.add(tmp_path / "app.conf", reference_paths=[ref, ref])

    assert session.requests[0].reference_paths == (ref,)


def test_reference_paths_require_markers(tmp_path: Path) -> None:
    session = EditSession()

    with pytest.raises(ValueError):
        session.add(tmp_path / "app.conf", reference_paths=[tmp_path / "ref"])


def test_markers_must_be_paired() -> None:
    with pytest.raises(ValueError):
        EditSession(START, None)


def test_run_without_requests_raises() -> None:
    with pytest.raises(EmptySessionError):
        EditSession().run()


def test_editor_writes_new_file(tmp_path: Path) -> None:
    editor = _write_editor(tmp_path, "printf 'hello\\n' > \"$f\"")
    target = tmp_path / "etc" / "app.conf"

    with _session(editor) as session:
        session.add(target)
        outcomes = session.run()
        staging = session.requests[0].staging_path

    assert staging is None
    assert target.read_text(encoding="utf-8") == "hello\n"
    assert [o.status for o in outcomes] == [InstallStatus.INSTALLED]
    assert [p.name for p in target.parent.iterdir()] == ["app.conf"]


def test_editor_that_writes_nothing_leaves_target_absent(tmp_path: Path) -> None:
    target = tmp_path / "app.conf"

    with _session("true") as session:
        session.add(target)
        outcomes = session.run()

    assert outcomes[0].status is InstallStatus.NOT_MODIFIED
    assert not target.exists()
    assert list(tmp_path.iterdir()) == []


def test_missing_override_fails_without_touching_target(tmp_path: Path) -> None:
    target = tmp_path / "app.conf"
    target.write_text("keep\n", encoding="utf-8")
    original = tmp_path / "vendor.conf"
    original.write_text("vendor\n", encoding="utf-8")

    with _session(tmp_path / "no-such-editor") as session:
        session.add(target, original_path=original)
        with pytest.raises(EditorExecutionError):
            session.run()

    assert target.read_text(encoding="utf-8") == "keep\n"
    assert sorted(p.name for p in tmp_path.iterdir()) == ["app.conf", "vendor.conf"]


def test_markers_edit_replaces_target(tmp_path: Path) -> None:
    editor = _write_editor(tmp_path, "sed -i 's/^foo$/bar/' \"$f\"")
    target = tmp_path / "app.conf"
    target.write_text("foo\n", encoding="utf-8")

    with _session(editor, marker_start=START, marker_end=END) as session:
        session.add(target, reference_paths=[target])
        session.run()

    assert target.read_text(encoding="utf-8") == "bar\n"


def test_whitespace_only_edit_keeps_target(tmp_path: Path) -> None:
    editor = _write_editor(
        tmp_path, f"printf '{START}\\n  \\n  {END}\\n' > \"$f\""
    )
    target = tmp_path / "app.conf"
    target.write_bytes(b"original\n")

    with _session(editor, marker_start=START, marker_end=END) as session:
        session.add(target, reference_paths=[])
        outcomes = session.run()

    assert outcomes[0].status is InstallStatus.NOT_MODIFIED
    assert target.read_bytes() == b"original\n"
    assert [p.name for p in tmp_path.iterdir() if p.name != "fake-editor"] == [
        "app.conf"
    ]


def test_editor_failure_can_discard_edits(tmp_path: Path) -> None:
    original = tmp_path / "vendor.conf"
    original.write_text("vendor\n", encoding="utf-8")
    target = tmp_path / "app.conf"

    with _session("false", skip_install_on_editor_failure=True) as session:
        session.add(target, original_path=original)
        outcomes = session.run()

    assert session.editor_returncode == 1
    assert outcomes[0].status is InstallStatus.SKIPPED
    assert not target.exists()


def test_editor_failure_still_installs_by_default(tmp_path: Path) -> None:
    original = tmp_path / "vendor.conf"
    original.write_text("vendor\n", encoding="utf-8")
    target = tmp_path / "app.conf"

    with _session("false") as session:
        session.add(target, original_path=original)
        outcomes = session.run()

    assert outcomes[0].status is InstallStatus.INSTALLED
    assert target.read_text(encoding="utf-8") == "vendor\n"


def test_install_failure_keeps_earlier_files(tmp_path: Path) -> None:
    original = tmp_path / "vendor.conf"
    original.write_text("vendor\n", encoding="utf-8")
    first = tmp_path / "a" / "first.conf"
    blocked = tmp_path / "b" / "blocked.conf"
    # A non-empty directory cannot be replaced by a file.
    (blocked / "child").mkdir(parents=True)

    with _session("true") as session:
        session.add(first, original_path=original)
        session.add(blocked, original_path=original)
        with pytest.raises(InstallError) as excinfo:
            session.run()

    assert excinfo.value.target == blocked
    assert excinfo.value.completed == (
        EditOutcome(first, InstallStatus.INSTALLED),
    )
    assert first.read_text(encoding="utf-8") == "vendor\n"
    assert [p.name for p in (tmp_path / "b").iterdir()] == ["blocked.conf"]


def test_teardown_removes_outstanding_staging_files(tmp_path: Path) -> None:
    original = tmp_path / "vendor.conf"
    original.write_text("vendor\n", encoding="utf-8")
    session = EditSession()
    session.add(tmp_path / "conf.d" / "app.conf", original_path=original)
    session.stage()
    staging = session.requests[0].staging_path

    assert staging is not None and staging.exists()
    assert staging.parent == tmp_path / "conf.d"

    session.teardown()
    session.teardown()

    assert not staging.exists()
    assert len(session) == 0


def test_teardown_removes_empty_parent_only(tmp_path: Path) -> None:
    empty_parent = tmp_path / "empty.d"
    busy_parent = tmp_path / "busy.d"
    busy_parent.mkdir()
    (busy_parent / "other.conf").write_text("x\n", encoding="utf-8")

    session = EditSession(remove_empty_parent=True)
    session.add(empty_parent / "app.conf", original_path=tmp_path / "missing")
    session.add(busy_parent / "app.conf", original_path=tmp_path / "missing")
    session.stage()
    session.teardown()

    assert not empty_parent.exists()
    assert busy_parent.exists()


def test_editor_killed_by_signal_installs_nothing(tmp_path: Path) -> None:
    editor = _write_editor(tmp_path, "printf 'partial\\n' > \"$f\"; kill -9 $$")
    target = tmp_path / "app.conf"
    target.write_text("keep\n", encoding="utf-8")

    with _session(editor) as session:
        session.add(target, original_path=target)
        with pytest.raises(EditorTerminatedError):
            session.run()

    assert target.read_text(encoding="utf-8") == "keep\n"
    assert sorted(p.name for p in tmp_path.iterdir()) == ["app.conf", "fake-editor"]


def test_untouched_crlf_file_keeps_its_bytes(tmp_path: Path) -> None:
    target = tmp_path / "app.conf"
    target.write_bytes(b"a=1\r\nb=2\r\n")

    with _session("true", marker_start=START, marker_end=END) as session:
        session.add(target, reference_paths=[])
        session.run()

    assert target.read_bytes() == b"a=1\r\nb=2\r\n"


def test_non_utf8_file_is_edited_byte_for_byte(tmp_path: Path) -> None:
    editor = _write_editor(tmp_path, "sed -i 's/^port=1$/port=2/' \"$f\"")
    target = tmp_path / "app.conf"
    target.write_bytes(b"name=caf\xe9\nport=1\n")

    with _session(editor, marker_start=START, marker_end=END) as session:
        session.add(target, reference_paths=[target])
        session.run()

    assert target.read_bytes() == b"name=caf\xe9\nport=2\n"


def test_from_config_applies_settings_and_overrides() -> None:
    config = StageditConfig(
        editor_variable="MY_EDITOR",
        fallback_editors=("ed",),
        remove_empty_parent=True,
    )

    session = EditSession.from_config(config, markers=False)
    overridden = EditSession.from_config(config, remove_empty_parent=False)

    assert session.marker_start is None and session.marker_end is None
    assert session.editor_variable == "MY_EDITOR"
    assert session.fallback_editors == ("ed",)
    assert session.remove_empty_parent is True
    assert overridden.marker_start == config.marker_start
    assert overridden.remove_empty_parent is False
