"""In-memory document files passed between discovery, intake and storage"""
import mimetypes
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Union

DEFAULT_CONTENT_TYPE = 'application/octet-stream'


@dataclass
class DocumentFile:
    """A named blob with its MIME type (a browser File, in Python)."""
    name: str
    content_type: str
    content: bytes

    @property
    def size(self) -> int:
        return len(self.content)

    @property
    def mime_type(self) -> str:
        """Content type without parameters ("text/html; charset=utf-8" -> "text/html")."""
        return self.content_type.split(';', 1)[0].strip().lower() or DEFAULT_CONTENT_TYPE

    @classmethod
    def from_path(cls, path: Union[str, Path]) -> 'DocumentFile':
        path = Path(path)
        content_type = mimetypes.guess_type(path.name)[0] or DEFAULT_CONTENT_TYPE
        return cls(name=path.name, content_type=content_type, content=path.read_bytes())

    def save(self, target_dir: Union[str, Path]) -> Path:
        """Write to target_dir, returning the local path."""
        os.makedirs(target_dir, exist_ok=True)
        local_path = Path(target_dir) / self.name
        local_path.write_bytes(self.content)
        return local_path

    def __repr__(self) -> str:
        return f"DocumentFile(name={self.name!r}, content_type={self.content_type!r}, size={self.size})"
