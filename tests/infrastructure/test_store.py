"""Tests for UserStore — subject and note lifecycle on disk."""

from __future__ import annotations

import json
import shutil
from pathlib import Path

import pytest

from tinynotes.config.settings import NotesSettings
from tinynotes.domain.errors import (
    AlreadyExistsError,
    InvalidPathError,
    IOFailureError,
    NotFoundError,
)
from tinynotes.domain.types import SubjectMeta
from tinynotes.infrastructure.store import UserStore


def _paths(store: UserStore, subject: str | None = None) -> list[str]:
    return [entry.path for entry in store.list_notes(subject)]


class TestConstruction:
    def test_root_is_under_storage_root(self, settings: NotesSettings) -> None:
        store = UserStore(settings, "bob")
        assert store.root == settings.storage_root / "bob"
        assert store.user_id == "bob"

    @pytest.mark.parametrize("bad", ["", ".", "..", "a/b", "..\\x", "/etc"])
    def test_rejects_unsafe_user_id(self, settings: NotesSettings, bad: str) -> None:
        with pytest.raises(InvalidPathError):
            UserStore(settings, bad)

    def test_init_user_is_idempotent(self, settings: NotesSettings) -> None:
        store = UserStore(settings, "bob")
        root = store.init_user()
        store.init_user()
        assert root.is_dir()
        assert json.loads(store.registry.path.read_text()) == {}

    def test_users_are_isolated(self, settings: NotesSettings, store: UserStore) -> None:
        store.create_note(title="secret")
        other = UserStore(settings, "bob")
        other.init_user()
        assert _paths(other) == []
        with pytest.raises(NotFoundError):
            other.get_note("secret.md")


class TestSubjects:
    def test_create_registers_and_makes_directory(self, store: UserStore) -> None:
        assert store.create_subject("Math") == "Math"
        assert store.list_subjects() == {"Math": SubjectMeta()}
        assert (store.root / "Math").is_dir()

    def test_create_sanitizes(self, store: UserStore) -> None:
        assert store.create_subject("../Linear Algebra") == "-Linear-Algebra"
        assert (store.root / "-Linear-Algebra").is_dir()

    def test_create_duplicate(self, store: UserStore) -> None:
        store.create_subject("Math")
        with pytest.raises(AlreadyExistsError):
            store.create_subject("Math")

    def test_create_adopts_existing_directory(self, store: UserStore) -> None:
        (store.root / "Math").mkdir()
        (store.root / "Math" / "old.md").write_text("kept")
        store.create_subject("Math")
        assert _paths(store, "Math") == ["Math/old.md"]

    def test_rename_moves_directory_and_registry(self, store: UserStore) -> None:
        store.create_subject("Math")
        store.create_note(subject="Math", title="a")
        store.create_note(subject="Math", title="b")
        before = [e.name for e in store.list_notes("Math")]

        assert store.rename_subject("Math", "Maths") == "Maths"

        assert list(store.list_subjects()) == ["Maths"]
        assert not (store.root / "Math").exists()
        assert [e.name for e in store.list_notes("Maths")] == before

    def test_rename_preserves_order_and_metadata(self, store: UserStore) -> None:
        store.registry.save(
            {"a": SubjectMeta(), "b": SubjectMeta(icon="📘"), "c": SubjectMeta()}
        )
        store.rename_subject("b", "bee")
        subjects = store.list_subjects()
        assert list(subjects) == ["a", "bee", "c"]
        assert subjects["bee"].icon == "📘"

    def test_rename_sanitizes_target(self, store: UserStore) -> None:
        store.create_subject("Math")
        assert store.rename_subject("Math", "  Pure   Math ") == "Pure-Math"

    def test_rename_missing(self, store: UserStore) -> None:
        with pytest.raises(NotFoundError):
            store.rename_subject("Nope", "Other")

    def test_rename_onto_registered(self, store: UserStore) -> None:
        store.create_subject("Math")
        store.create_subject("Physics")
        with pytest.raises(AlreadyExistsError):
            store.rename_subject("Math", "Physics")
        assert (store.root / "Math").is_dir()

    def test_rename_to_same_name(self, store: UserStore) -> None:
        store.create_subject("Math")
        with pytest.raises(AlreadyExistsError):
            store.rename_subject("Math", "Math")

    def test_rename_onto_unregistered_directory(self, store: UserStore) -> None:
        store.create_subject("Math")
        (store.root / "Stray").mkdir()
        with pytest.raises(AlreadyExistsError):
            store.rename_subject("Math", "Stray")
        assert list(store.list_subjects()) == ["Math"]

    def test_rename_without_directory_creates_target(self, store: UserStore) -> None:
        store.create_subject("Math")
        (store.root / "Math").rmdir()
        store.rename_subject("Math", "Maths")
        assert (store.root / "Maths").is_dir()

    def test_rename_rejects_traversal_in_old_name(self, store: UserStore) -> None:
        store.registry.save({"..": SubjectMeta()})
        with pytest.raises(InvalidPathError):
            store.rename_subject("..", "ok")

    def test_delete_orphans_files(self, store: UserStore) -> None:
        store.create_subject("Math")
        path = store.create_note(subject="Math", title="Limits", content="lim")

        assert store.delete_subject("Math") == []

        assert store.list_subjects() == {}
        assert path not in _paths(store)
        assert store.get_note(path) == "lim"

    def test_delete_with_files(self, store: UserStore) -> None:
        store.create_subject("Math")
        store.create_note(subject="Math", title="Limits")
        store.delete_subject("Math", delete_files=True)
        assert not (store.root / "Math").exists()

    def test_delete_with_files_missing_directory(self, store: UserStore) -> None:
        store.create_subject("Math")
        (store.root / "Math").rmdir()
        assert store.delete_subject("Math", delete_files=True) == []

    def test_delete_cascade_failure_is_a_warning(
        self, store: UserStore, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        store.create_subject("Math")

        def _fail(path: Path) -> None:
            raise PermissionError(13, "denied")

        monkeypatch.setattr(shutil, "rmtree", _fail)
        warnings = store.delete_subject("Math", delete_files=True)
        assert len(warnings) == 1
        assert "Math" in warnings[0]
        assert store.list_subjects() == {}

    def test_delete_missing(self, store: UserStore) -> None:
        with pytest.raises(NotFoundError):
            store.delete_subject("Nope")


class TestListNotes:
    def test_aggregate_covers_root_and_registered_subjects(self, store: UserStore) -> None:
        store.create_subject("Math")
        store.create_note(title="root")
        store.create_note(subject="Math", title="inner")
        entries = store.list_notes()
        assert [(e.path, e.subject) for e in entries] == [
            ("root.md", None),
            ("Math/inner.md", "Math"),
        ]
        assert entries[0].name == "root.md"
        assert entries[0].mtime.endswith("+00:00")

    def test_unregistered_directory_is_invisible(self, store: UserStore) -> None:
        (store.root / "Stray").mkdir()
        (store.root / "Stray" / "x.md").write_text("")
        assert _paths(store) == []
        assert _paths(store, "Stray") == ["Stray/x.md"]

    def test_vanished_subject_contributes_nothing(self, store: UserStore) -> None:
        store.create_subject("Math")
        (store.root / "Math").rmdir()
        assert _paths(store) == []
        assert _paths(store, "Math") == []
        assert "Math" in store.list_subjects()

    def test_invalid_registry_key_is_skipped(self, store: UserStore) -> None:
        store.registry.save({"..": SubjectMeta()})
        store.create_note(title="a")
        assert _paths(store) == ["a.md"]

    def test_registry_file_is_not_listed(self, store: UserStore) -> None:
        assert _paths(store) == []

    def test_uppercase_extension_is_listed(self, store: UserStore) -> None:
        store.create_subject("Math")
        store.save_note("Upper.MD", "x")
        store.save_note("Math/Shout.MD", "y")
        assert _paths(store) == ["Upper.MD", "Math/Shout.MD"]
        assert store.get_note("Upper.MD") == "x"

    def test_subject_traversal_rejected(self, store: UserStore) -> None:
        with pytest.raises(InvalidPathError):
            store.list_notes("..")


class TestNoteReadWrite:
    def test_get_missing(self, store: UserStore) -> None:
        with pytest.raises(NotFoundError):
            store.get_note("nope.md")

    def test_save_then_get(self, store: UserStore) -> None:
        saved_at = store.save_note("Math/new.md", "# Hi")
        assert saved_at.endswith("+00:00")
        assert store.get_note("Math/new.md") == "# Hi"

    def test_line_endings_survive_roundtrip(self, store: UserStore) -> None:
        content = "crlf\r\nlone cr\rlf\n"
        store.save_note("Math/eol.md", content)
        assert store.get_note("Math/eol.md") == content
        assert (store.root / "Math" / "eol.md").read_bytes() == content.encode()

    def test_save_overwrites(self, store: UserStore) -> None:
        path = store.create_note(title="a", content="first")
        store.save_note(path, "second")
        assert store.get_note(path) == "second"

    @pytest.mark.parametrize(
        "bad", ["../escape.md", "/etc/passwd.md", "a/b/c.md", "subjects.json", "Math/.."]
    )
    def test_traversal_rejected_before_touching_disk(self, store: UserStore, bad: str) -> None:
        before = sorted(p.name for p in store.root.parent.rglob("*"))
        with pytest.raises(InvalidPathError):
            store.save_note(bad, "x")
        assert sorted(p.name for p in store.root.parent.rglob("*")) == before

    def test_symlinked_subject_escape(self, store: UserStore, tmp_path: Path) -> None:
        outside = tmp_path / "outside"
        outside.mkdir()
        (store.root / "Link").symlink_to(outside, target_is_directory=True)
        with pytest.raises(InvalidPathError):
            store.save_note("Link/a.md", "x")
        assert not (outside / "a.md").exists()

    def test_io_failure(self, store: UserStore) -> None:
        (store.root / "Blocked").write_text("a file, not a directory")
        with pytest.raises(IOFailureError) as info:
            store.save_note("Blocked/a.md", "x")
        assert info.value.detail["path"] == "Blocked/a.md"

    def test_undecodable_content_is_io_failure(self, store: UserStore) -> None:
        (store.root / "bin.md").write_bytes(b"\xff\xfe\x00")
        with pytest.raises(IOFailureError):
            store.get_note("bin.md")

    def test_delete(self, store: UserStore) -> None:
        path = store.create_note(title="gone")
        store.delete_note(path)
        with pytest.raises(NotFoundError):
            store.get_note(path)

    def test_delete_missing(self, store: UserStore) -> None:
        with pytest.raises(NotFoundError):
            store.delete_note("nope.md")


class TestCreateNote:
    def test_same_title_is_suffixed(self, store: UserStore) -> None:
        first = store.create_note(subject="Math", title="Derivatives")
        second = store.create_note(subject="Math", title="Derivatives")
        third = store.create_note(subject="Math", title="Derivatives")
        assert (first, second, third) == (
            "Math/Derivatives.md",
            "Math/Derivatives-1.md",
            "Math/Derivatives-2.md",
        )

    def test_title_is_sanitized(self, store: UserStore) -> None:
        assert store.create_note(title="../../etc/passwd") == "-etc-passwd.md"

    def test_title_dots_are_dropped(self, store: UserStore) -> None:
        assert store.create_note(title="v1.2 notes.md") == "v12-notesmd.md"

    def test_untitled_uses_timestamp(self, store: UserStore) -> None:
        path = store.create_note()
        assert path.startswith("note-")
        assert path.endswith(".md")
        assert store.get_note(path) == ""

    def test_untitled_prefix_from_settings(self, tmp_path: Path, data_dir: Path) -> None:
        settings = NotesSettings.from_cli(
            start=tmp_path, data_dir=data_dir, notes={"untitled_prefix": "memo"}
        )
        store = UserStore(settings, "carol")
        store.init_user()
        assert store.create_note().startswith("memo-")

    def test_content(self, store: UserStore) -> None:
        path = store.create_note(title="t", content="body")
        assert store.get_note(path) == "body"

    def test_subject_traversal_rejected(self, store: UserStore) -> None:
        with pytest.raises(InvalidPathError):
            store.create_note(subject="..", title="x")


class TestRenameNote:
    def test_same_directory(self, store: UserStore) -> None:
        path = store.create_note(subject="Math", title="old", content="c")
        assert store.rename_note(path, "New Name") == "Math/New-Name.md"
        assert store.get_note("Math/New-Name.md") == "c"

    def test_collision_is_an_error(self, store: UserStore) -> None:
        a = store.create_note(title="a", content="A")
        store.create_note(title="b", content="B")
        with pytest.raises(AlreadyExistsError):
            store.rename_note(a, "b")
        assert store.get_note("b.md") == "B"
        assert store.get_note(a) == "A"

    def test_rename_to_itself_is_a_collision(self, store: UserStore) -> None:
        path = store.create_note(title="a")
        with pytest.raises(AlreadyExistsError):
            store.rename_note(path, "a")

    def test_new_title_cannot_escape(self, store: UserStore) -> None:
        path = store.create_note(subject="Math", title="a")
        assert store.rename_note(path, "../../x") == "Math/-x.md"

    def test_missing(self, store: UserStore) -> None:
        with pytest.raises(NotFoundError):
            store.rename_note("nope.md", "x")


class TestMoveNote:
    def test_scenario(self, store: UserStore) -> None:
        store.create_subject("Math")
        assert store.create_note(subject="Math", title="Derivatives") == "Math/Derivatives.md"
        assert store.create_note(subject="Math", title="Derivatives") == "Math/Derivatives-1.md"

        assert store.move_note("Math/Derivatives.md", None) == "Derivatives.md"

        assert "Math/Derivatives.md" not in _paths(store, "Math")
        assert "Derivatives.md" in _paths(store)

    def test_clash_is_suffixed(self, store: UserStore) -> None:
        store.create_note(subject="Math", title="a", content="root")
        store.create_note(subject="Physics", title="a", content="moved")
        assert store.move_note("Physics/a.md", "Math") == "Math/a-1.md"
        assert store.get_note("Math/a.md") == "root"
        assert store.get_note("Math/a-1.md") == "moved"

    def test_creates_target_directory(self, store: UserStore) -> None:
        path = store.create_note(title="a")
        assert store.move_note(path, "Fresh") == "Fresh/a.md"

    def test_same_directory_is_noop(self, store: UserStore) -> None:
        path = store.create_note(subject="Math", title="a")
        assert store.move_note(path, "Math") == path
        assert _paths(store, "Math") == [path]

    def test_missing(self, store: UserStore) -> None:
        with pytest.raises(NotFoundError):
            store.move_note("nope.md", "Math")

    def test_target_traversal_rejected(self, store: UserStore) -> None:
        path = store.create_note(title="a")
        with pytest.raises(InvalidPathError):
            store.move_note(path, "..")
        assert store.get_note(path) == ""

    def test_name_taken_during_move_is_not_overwritten(
        self, store: UserStore, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        import tinynotes.infrastructure.filesystem as fs

        path = store.create_note(subject="Physics", title="a", content="moved")
        real_unique_path = fs.unique_path

        def taken_meanwhile(directory: Path, filename: str) -> Path:
            candidate = real_unique_path(directory, filename)
            if candidate.name == "a.md":
                candidate.write_text("written concurrently")
            return candidate

        monkeypatch.setattr(fs, "unique_path", taken_meanwhile)
        assert store.move_note(path, "Math") == "Math/a-1.md"
        assert store.get_note("Math/a.md") == "written concurrently"
        assert store.get_note("Math/a-1.md") == "moved"
        assert not (store.root / "Physics" / "a.md").exists()
