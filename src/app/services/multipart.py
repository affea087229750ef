"""Service layer – streaming multipart parsing with a hard per-file cap."""

from __future__ import annotations

from collections.abc import AsyncIterator
from dataclasses import dataclass
from tempfile import SpooledTemporaryFile

from python_multipart.exceptions import FormParserError
from python_multipart.multipart import MultipartParser, parse_options_header
from starlette.datastructures import Headers, UploadFile

SPOOL_MAX_SIZE = 1024 * 1024  # 1 MB in memory, then a temp file


class MultipartError(Exception):
    """Raised when the request body is not valid multipart/form-data."""

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


@dataclass
class FilePart:
    file: UploadFile
    truncated: bool = False


def _decode(value: bytes) -> str:
    try:
        return value.decode("utf-8")
    except UnicodeDecodeError:
        return value.decode("latin-1")


class FirstFilePartReader:
    """
    Parse a multipart body as it arrives and keep only its first file part.

    At most *limit* bytes of that part are kept. Bytes past the cap, plain
    fields and any later parts are parsed and dropped on arrival, so the body
    is always consumed in full but never buffered beyond the cap.
    """

    def __init__(self, headers: Headers, stream: AsyncIterator[bytes], limit: int) -> None:
        self.headers = headers
        self.stream = stream
        self.limit = limit
        self.part: FilePart | None = None
        self._capturing = False
        self._kept = 0
        self._header_name = b""
        self._header_value = b""
        self._item_headers: list[tuple[bytes, bytes]] = []
        self._pending: list[bytes] = []

    def on_part_begin(self) -> None:
        self._item_headers = []
        self._capturing = False

    def on_header_field(self, data: bytes, start: int, end: int) -> None:
        self._header_name += data[start:end]

    def on_header_value(self, data: bytes, start: int, end: int) -> None:
        self._header_value += data[start:end]

    def on_header_end(self) -> None:
        self._item_headers.append((self._header_name.lower(), self._header_value))
        self._header_name = b""
        self._header_value = b""

    def on_headers_finished(self) -> None:
        if self.part is not None:
            return

        disposition = dict(self._item_headers).get(b"content-disposition")
        _, options = parse_options_header(disposition)
        if b"filename" not in options:
            return

        self.part = FilePart(
            file=UploadFile(
                file=SpooledTemporaryFile(max_size=SPOOL_MAX_SIZE),  # type: ignore[arg-type]
                size=0,
                filename=_decode(options[b"filename"]),
                headers=Headers(raw=self._item_headers),
            )
        )
        self._capturing = True

    def on_part_data(self, data: bytes, start: int, end: int) -> None:
        if not self._capturing:
            return

        room = self.limit - self._kept
        if end - start > room:
            self.part.truncated = True
            end = start + room

        if end > start:
            self._pending.append(data[start:end])
            self._kept += end - start

    def on_part_end(self) -> None:
        self._capturing = False

    async def parse(self) -> FilePart | None:
        _, params = parse_options_header(self.headers.get("content-type"))
        try:
            boundary = params[b"boundary"]
        except KeyError:
            raise MultipartError("Missing boundary in multipart.")

        callbacks = {
            "on_part_begin": self.on_part_begin,
            "on_part_data": self.on_part_data,
            "on_part_end": self.on_part_end,
            "on_header_field": self.on_header_field,
            "on_header_value": self.on_header_value,
            "on_header_end": self.on_header_end,
            "on_headers_finished": self.on_headers_finished,
        }

        try:
            parser = MultipartParser(boundary, callbacks)
            async for chunk in self.stream:
                parser.write(chunk)
                # file writes go through the threadpool, outside the sync callbacks
                if self._pending:
                    for data in self._pending:
                        await self.part.file.write(data)
                    self._pending.clear()
            parser.finalize()
        except BaseException as exc:
            if self.part is not None:
                self.part.file.file.close()
            if isinstance(exc, FormParserError):
                raise MultipartError("Invalid multipart data.") from exc
            raise

        if self.part is not None:
            await self.part.file.seek(0)
        return self.part


async def read_first_file_part(
    headers: Headers, stream: AsyncIterator[bytes], limit: int
) -> FilePart | None:
    """Return the first file part of a multipart body, or ``None`` if there is none."""
    content_type, _ = parse_options_header(headers.get("content-type"))
    if content_type != b"multipart/form-data":
        return None
    return await FirstFilePartReader(headers, stream, limit).parse()
