"""Multipart form payloads."""

from __future__ import annotations

from dataclasses import dataclass
from typing import IO, Any, Iterator, Union

FieldValue = Union[str, bytes, IO[bytes]]


@dataclass(frozen=True)
class FormField:
    name: str
    value: FieldValue
    filename: str | None = None
    content_type: str | None = None

    @property
    def is_file(self) -> bool:
        return self.filename is not None or not isinstance(self.value, str)


class FormData:
    """Ordered multipart form fields.

    Passed as a request payload it is never JSON-encoded: the negotiator
    forwards it untouched and the transport encodes it as
    ``multipart/form-data`` (or as a urlencoded form when it holds no files).
    """

    def __init__(self) -> None:
        self._fields: list[FormField] = []

    def append(
        self,
        name: str,
        value: FieldValue,
        filename: str | None = None,
        content_type: str | None = None,
    ) -> None:
        if not isinstance(value, (str, bytes)) and not hasattr(value, "read"):
            value = str(value)
        self._fields.append(FormField(name, value, filename, content_type))

    def get(self, name: str) -> FieldValue | None:
        for field in self._fields:
            if field.name == name:
                return field.value
        return None

    def getall(self, name: str) -> list[FieldValue]:
        return [field.value for field in self._fields if field.name == name]

    def __iter__(self) -> Iterator[FormField]:
        return iter(self._fields)

    def __len__(self) -> int:
        return len(self._fields)

    def __repr__(self) -> str:
        return f"FormData({[field.name for field in self._fields]!r})"

    @property
    def has_files(self) -> bool:
        return any(field.is_file for field in self._fields)

    def to_httpx(self) -> dict[str, Any]:
        """Keyword arguments for ``httpx.AsyncClient.build_request``."""
        data: dict[str, list[str]] = {}
        files: list[tuple[str, Any]] = []
        for field in self._fields:
            if field.is_file:
                filename = field.filename or field.name
                if field.content_type:
                    files.append((field.name, (filename, field.value, field.content_type)))
                else:
                    files.append((field.name, (filename, field.value)))
            else:
                data.setdefault(field.name, []).append(str(field.value))
        kwargs: dict[str, Any] = {}
        if data:
            kwargs["data"] = data
        if files:
            kwargs["files"] = files
        return kwargs
