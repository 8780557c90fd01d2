"""Interfaces of the remote-side collaborators consumed by the engine."""

from __future__ import annotations

from typing import Optional, Protocol

from gdrivesync.models import RemoteObject


class RemoteTransport(Protocol):
    """
    Single-object operations on the remote store.

    GoogleDriveController is the production implementation. Failures surface
    as gdrivesync errors (NotFoundError for 404, PermissionError for 403, ...).
    """

    def list_children(self, folder_id: str) -> list[RemoteObject]: ...

    def get_metadata(self, file_id: str) -> RemoteObject: ...

    def find_child_folder(self, parent_id: str, name: str) -> Optional[str]: ...

    def create_folder(self, parent_id: str, name: str) -> str: ...

    def create_file(self, parent_id: str, name: str, mime_type: str, content: bytes) -> str: ...

    def update_file(self, file_id: str, content: bytes, mime_type: str) -> None: ...

    def download_file(self, file_id: str) -> bytes: ...

    def delete_file(self, file_id: str) -> None: ...


class CredentialProvider(Protocol):
    """Source of bearer tokens; OAuthClient is the production implementation."""

    def get_access_token(self) -> str: ...

    def begin_authorization(self) -> str: ...

    def exchange_code(self, code: str) -> str: ...
