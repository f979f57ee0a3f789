"""UserService — storage provisioning for a newly authenticated user."""

from __future__ import annotations

from tinynotes.domain.errors import StoreError
from tinynotes.services.base import BaseService
from tinynotes.services.contracts import UserInitData, dump_validated
from tinynotes.services.result import ServiceResult
from tinynotes.services.telemetry import traced


class UserService(BaseService):
    @traced
    def init_user(self) -> ServiceResult:
        """Create the user's root directory and empty subject registry."""
        op = "init_user"
        try:
            root = self._store.init_user()
        except StoreError as exc:
            return self._failure(op, exc)
        data = {"user": self._store.user_id, "root": str(root)}
        return self._success(op, dump_validated(UserInitData, data))
