from __future__ import annotations

import os
from contextlib import suppress

try:
    import mmap as _mmap_mod  # type: ignore
except Exception:  # pragma: no cover - platform-specific
    _mmap_mod = None  # type: ignore

from bytefind.core.buffer import Buffer, Encoding


class MappedFile:
    """Read-only haystack backed by a file.

    Prefers `mmap` so the search sees a zero-copy view; falls back to reading the
    file into memory when mapping is unavailable or fails. Views returned by
    `buffer()` are only valid while the file is open.
    """

    def __init__(self, path: str, *, use_mmap: bool = True) -> None:
        self._path = path
        try:
            st = os.stat(path)
        except FileNotFoundError:
            raise FileNotFoundError(f"File not found: {path}") from None

        self._size = int(st.st_size)
        self._fh = open(path, "rb", buffering=0)  # noqa: SIM115
        self._mmap = None
        self._data: bytes | None = None
        self._views: list[memoryview] = []
        if use_mmap and _mmap_mod is not None and self._size > 0:
            try:
                self._mmap = _mmap_mod.mmap(
                    self._fh.fileno(),
                    length=0,
                    access=_mmap_mod.ACCESS_READ,
                )
            except Exception:
                # Fall back to a plain read if mmap fails.
                self._mmap = None

    def close(self) -> None:
        for view in self._views:
            with suppress(Exception):
                view.release()
        self._views.clear()
        if getattr(self, "_mmap", None) is not None:
            with suppress(Exception):
                self._mmap.close()  # type: ignore[union-attr]
            self._mmap = None
        self._data = None
        with suppress(Exception):
            self._fh.close()

    def __enter__(self) -> MappedFile:
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    @property
    def size(self) -> int:
        """File size in bytes."""
        return self._size

    @property
    def path(self) -> str:
        return self._path

    @property
    def mapped(self) -> bool:
        return self._mmap is not None

    def view(self) -> memoryview | bytes:
        """Whole-file contents, as a memoryview over the mapping when possible."""
        if self._mmap is not None:
            view = memoryview(self._mmap)
            self._views.append(view)
            return view
        if self._data is None:
            self._fh.seek(0)
            self._data = self._fh.read()
        return self._data

    def buffer(self, encoding: Encoding = Encoding.RAW) -> Buffer:
        """Whole file as a search haystack in the given storage encoding."""
        return Buffer(self.view(), encoding)
