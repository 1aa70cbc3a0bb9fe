"""Split raw byte chunks into complete text lines."""

from __future__ import annotations

import logging

logger = logging.getLogger(__name__)

DEFAULT_ENCODING = "iso-8859-1"
DEFAULT_FALLBACK_ENCODING = "utf-8"
LINE_TERMINATOR = "\r\n"


class LineSplitter:
    """Turns arbitrarily chunked bytes into complete lines.

    A trailing fragment without a terminator is carried over to the next
    call to :meth:`feed`, so the emitted lines do not depend on how the
    input was chunked.
    """

    def __init__(
        self,
        encoding: str = DEFAULT_ENCODING,
        fallback_encoding: str = DEFAULT_FALLBACK_ENCODING,
        *,
        trim: bool = True,
        terminator: str = LINE_TERMINATOR,
    ) -> None:
        if not terminator:
            msg = "Line terminator must not be empty"
            raise ValueError(msg)
        self.encoding = encoding
        self.fallback_encoding = fallback_encoding
        self.trim = trim
        self.terminator = terminator
        self._unfinished: str | None = None

    @property
    def pending(self) -> str | None:
        """The carried-over fragment, if any."""
        return self._unfinished

    def decode(self, data: bytes) -> str:
        """Decode a chunk, falling back to a lenient decode on failure."""
        try:
            return data.decode(self.encoding)
        except (UnicodeDecodeError, LookupError) as e:
            logger.warning("Decoding with %s failed (%s), falling back to %s", self.encoding, e, self.fallback_encoding)
        try:
            return data.decode(self.fallback_encoding, errors="replace")
        except LookupError:
            return data.decode(DEFAULT_FALLBACK_ENCODING, errors="replace")

    def feed(self, data: bytes) -> list[str]:
        """Consume a chunk and return the lines it completed."""
        text = self.decode(data)
        if self._unfinished is not None:
            text = self._unfinished + text
            self._unfinished = None

        lines: list[str] = []
        start = 0
        step = len(self.terminator)
        while True:
            index = text.find(self.terminator, start)
            if index == -1:
                if start < len(text):
                    self._unfinished = text[start:]
                break
            lines.append(self._finish(text[start:index]))
            start = index + step
        return lines

    def flush(self) -> list[str]:
        """Emit the carried fragment as a final line, once the source has ended."""
        fragment = self._unfinished
        self._unfinished = None
        if not fragment:
            return []
        return [self._finish(fragment)]

    def _finish(self, line: str) -> str:
        return line.strip() if self.trim else line
