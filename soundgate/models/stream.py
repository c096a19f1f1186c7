"""Open media stream returned by stream delivery."""
from dataclasses import dataclass
from typing import BinaryIO, Dict, Iterator


@dataclass
class MediaStream:
    """Open handle on a track binary plus the byte window to serve.

    ``start`` and ``end`` are inclusive. ``partial`` is True when a single
    valid range was requested and the response is partial content.
    """
    track_id: str
    handle: BinaryIO
    mime_type: str
    total_size: int
    start: int
    end: int
    partial: bool
    chunk_size: int = 65536

    @property
    def content_length(self) -> int:
        if self.total_size == 0:
            return 0
        return self.end - self.start + 1

    @property
    def status_code(self) -> int:
        return 206 if self.partial else 200

    def headers(self) -> Dict[str, str]:
        h = {
            "Accept-Ranges": "bytes",
            "Content-Length": str(self.content_length),
            "Content-Type": self.mime_type,
        }
        if self.partial:
            h["Content-Range"] = f"bytes {self.start}-{self.end}/{self.total_size}"
        return h

    def iter_bytes(self) -> Iterator[bytes]:
        """Yield the window in chunks; the handle is closed when iteration stops."""
        try:
            self.handle.seek(self.start)
            remaining = self.content_length
            while remaining > 0:
                chunk = self.handle.read(min(self.chunk_size, remaining))
                if not chunk:
                    break
                remaining -= len(chunk)
                yield chunk
        finally:
            self.handle.close()

    def read_all(self) -> bytes:
        return b"".join(self.iter_bytes())

    def close(self) -> None:
        self.handle.close()
