"""Operation dispatcher with explicit, validated parameter structs.

Each operation name maps to a frozen parameter model and a handler. A
payload is validated in full before the store is touched, so malformed
requests never reach the filesystem. Field aliases accept the camelCase
wire names clients already send (``subjectName``, ``oldPath``, ...)
alongside the snake_case field names.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import TYPE_CHECKING, Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from tinynotes.services.notes import NoteService
from tinynotes.services.result import ServiceError, ServiceResult
from tinynotes.services.subjects import SubjectService
from tinynotes.services.users import UserService

if TYPE_CHECKING:
    from tinynotes.infrastructure.store import UserStore


class _Params(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid", populate_by_name=True)


class EmptyParams(_Params):
    pass


class CreateSubjectParams(_Params):
    name: str = Field(min_length=1, alias="subjectName")


class RenameSubjectParams(_Params):
    old_name: str = Field(min_length=1, alias="oldName")
    new_name: str = Field(min_length=1, alias="newName")


class DeleteSubjectParams(_Params):
    name: str = Field(min_length=1, alias="subjectName")
    delete_files: bool = Field(default=False, alias="deleteFiles")


class ListNotesParams(_Params):
    subject: str | None = None


class NotePathParams(_Params):
    path: str = Field(min_length=1)


class SaveNoteParams(_Params):
    path: str = Field(min_length=1)
    content: str


class CreateNoteParams(_Params):
    subject: str | None = None
    title: str | None = None
    content: str | None = None


class RenameNoteParams(_Params):
    old_path: str = Field(min_length=1, alias="oldPath")
    new_title: str = Field(min_length=1, alias="newName")


class MoveNoteParams(_Params):
    old_path: str = Field(min_length=1, alias="oldPath")
    target_subject: str | None = Field(default=None, alias="targetSubject")


_Handler = Callable[["UserStore", Any], ServiceResult]

OPERATIONS: dict[str, tuple[type[_Params], _Handler]] = {
    "init_user": (EmptyParams, lambda s, p: UserService(s).init_user()),
    "list_subjects": (EmptyParams, lambda s, p: SubjectService(s).list_subjects()),
    "create_subject": (
        CreateSubjectParams,
        lambda s, p: SubjectService(s).create_subject(p.name),
    ),
    "rename_subject": (
        RenameSubjectParams,
        lambda s, p: SubjectService(s).rename_subject(p.old_name, p.new_name),
    ),
    "delete_subject": (
        DeleteSubjectParams,
        lambda s, p: SubjectService(s).delete_subject(p.name, delete_files=p.delete_files),
    ),
    "list_notes": (ListNotesParams, lambda s, p: NoteService(s).list_notes(p.subject)),
    "get_note": (NotePathParams, lambda s, p: NoteService(s).get_note(p.path)),
    "save_note": (SaveNoteParams, lambda s, p: NoteService(s).save_note(p.path, p.content)),
    "create_note": (
        CreateNoteParams,
        lambda s, p: NoteService(s).create_note(
            subject=p.subject, title=p.title, content=p.content
        ),
    ),
    "delete_note": (NotePathParams, lambda s, p: NoteService(s).delete_note(p.path)),
    "rename_note": (
        RenameNoteParams,
        lambda s, p: NoteService(s).rename_note(p.old_path, p.new_title),
    ),
    "move_note": (
        MoveNoteParams,
        lambda s, p: NoteService(s).move_note(p.old_path, p.target_subject),
    ),
}


def _validation_detail(exc: ValidationError) -> list[dict[str, str]]:
    return [
        {"loc": ".".join(str(part) for part in err["loc"]), "msg": err["msg"]}
        for err in exc.errors()
    ]


def dispatch(store: UserStore, op: str, payload: dict[str, Any] | None = None) -> ServiceResult:
    """Validate *payload* for *op* and run it against *store*."""
    entry = OPERATIONS.get(op)
    if entry is None:
        return ServiceResult(
            ok=False,
            op=op,
            error=ServiceError(
                code="UNKNOWN_OP",
                message=f"Unknown operation: {op}",
                detail={"known": sorted(OPERATIONS)},
            ),
        )

    params_cls, handler = entry
    try:
        params = params_cls.model_validate(payload or {})
    except ValidationError as exc:
        detail = _validation_detail(exc)
        return ServiceResult(
            ok=False,
            op=op,
            error=ServiceError(
                code="INVALID_PARAMS",
                message="; ".join(f"{d['loc']}: {d['msg']}" for d in detail),
                detail={"errors": detail},
            ),
        )
    return handler(store, params)
