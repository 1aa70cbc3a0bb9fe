"""Pydantic models for logsieve."""

from __future__ import annotations

from enum import IntEnum, IntFlag

from pydantic import BaseModel, ConfigDict, Field, computed_field


class LogLevel(IntEnum):
    """Device log severity, ordered by priority."""

    VERBOSE = 2
    DEBUG = 3
    INFO = 4
    WARN = 5
    ERROR = 6

    @property
    def letter(self) -> str:
        """Single-letter form used in header lines (V, D, I, W, E)."""
        return self.name[0]

    @classmethod
    def from_letter(cls, letter: str) -> LogLevel:
        """Map a level letter to a LogLevel. Only the first character is considered."""
        if letter:
            key = letter[0].upper()
            for level in cls:
                if level.letter == key:
                    return level
        msg = f"Unknown log level letter: {letter!r}"
        raise ValueError(msg)

    @classmethod
    def parse(cls, value: str | int | LogLevel) -> LogLevel:
        """Parse a level given as a LogLevel, priority, name or letter."""
        if isinstance(value, LogLevel):
            return value
        if isinstance(value, int):
            return cls(value)
        text = value.strip()
        if text.isdigit():
            return cls(int(text))
        upper = text.upper()
        if upper in _LEVEL_ALIASES:
            return _LEVEL_ALIASES[upper]
        return cls.from_letter(text)


_LEVEL_ALIASES: dict[str, LogLevel] = {
    "VERBOSE": LogLevel.VERBOSE,
    "DEBUG": LogLevel.DEBUG,
    "INFO": LogLevel.INFO,
    "WARN": LogLevel.WARN,
    "WARNING": LogLevel.WARN,
    "ERROR": LogLevel.ERROR,
}


class RecordHeader(BaseModel):
    """Metadata shared by all body lines following one header line."""

    model_config = ConfigDict(frozen=True)

    time: str
    pid: int
    pid_string: str
    level: LogLevel
    tag: str

    @classmethod
    def unknown(cls) -> RecordHeader:
        """Placeholder header for body lines seen before any header line."""
        return cls(
            time="??-?? ??:??:??.???",
            pid=0,
            pid_string="<unknown>",
            level=LogLevel.INFO,
            tag="<unknown>",
        )


class Record(BaseModel):
    """One retained log message: a header reference plus a single body line.

    Filters locate records by identity, so two records with equal content
    are still distinct entries.
    """

    model_config = ConfigDict(frozen=True)

    header: RecordHeader
    message: str

    def __str__(self) -> str:
        h = self.header
        return f"{h.time}: {h.level.letter}/{h.tag}({h.pid_string}): {self.message}"


class Color(BaseModel):
    """RGB color passed through to presentation."""

    model_config = ConfigDict(frozen=True)

    r: int = Field(ge=0, le=255)
    g: int = Field(ge=0, le=255)
    b: int = Field(ge=0, le=255)

    @property
    def hex(self) -> str:
        return f"#{self.r:02x}{self.g:02x}{self.b:02x}"


class LogColors(BaseModel):
    """Per-level display colors. Filtering never looks at these."""

    model_config = ConfigDict(frozen=True)

    info: Color
    debug: Color
    error: Color
    warning: Color
    verbose: Color

    def for_level(self, level: LogLevel) -> Color:
        """Return the color used for records of the given level."""
        if level == LogLevel.INFO:
            return self.info
        if level == LogLevel.DEBUG:
            return self.debug
        if level == LogLevel.ERROR:
            return self.error
        if level == LogLevel.WARN:
            return self.warning
        return self.verbose


DEFAULT_COLORS = LogColors(
    info=Color(r=0, g=127, b=0),
    debug=Color(r=0, g=0, b=127),
    error=Color(r=255, g=0, b=0),
    warning=Color(r=255, g=127, b=0),
    verbose=Color(r=0, g=0, b=0),
)


class FilterMode(IntFlag):
    """Active persistent predicate kinds of a filter."""

    NONE = 0
    PID = 0x01
    TAG = 0x02
    LEVEL = 0x04


class TemporaryFilter(BaseModel):
    """Overlay constraints applied on top of a filter's persistent predicates."""

    pid: int | None = None
    tag: str | None = None
    keywords: list[str] | None = None
    min_level: LogLevel | None = None

    @property
    def is_empty(self) -> bool:
        return self.pid is None and self.tag is None and self.keywords is None and self.min_level is None


class FilterSpec(BaseModel):
    """Named persistent filter configuration."""

    name: str
    pid: int | None = None
    tag: str | None = None
    min_level: LogLevel | None = None
    colors: LogColors | None = None

    @computed_field  # type: ignore[prop-decorator]
    @property
    def mode(self) -> FilterMode:
        """Bitmask of active persistent predicates."""
        mode = FilterMode.NONE
        if self.pid is not None:
            mode |= FilterMode.PID
        if self.tag:
            mode |= FilterMode.TAG
        if self.min_level is not None:
            mode |= FilterMode.LEVEL
        return mode

    @classmethod
    def build(
        cls,
        name: str,
        tag: str | None = None,
        pid: int | str | None = None,
        min_level: LogLevel | str | int | None = None,
        colors: LogColors | None = None,
    ) -> FilterSpec:
        """Build a FilterSpec from loosely typed input; empty values leave a predicate off."""
        if ":" in name:
            msg = f"Filter name must not contain ':': {name!r}"
            raise ValueError(msg)
        parsed_pid: int | None = None
        if isinstance(pid, int):
            parsed_pid = pid
        elif pid is not None and pid.strip():
            parsed_pid = int(pid)
        level: LogLevel | None = None
        if min_level is not None and min_level != "":
            level = LogLevel.parse(min_level)
        return cls(name=name, pid=parsed_pid, tag=tag or None, min_level=level, colors=colors)

    def encode(self) -> str:
        """Serialize as ``name:mode[:pid][:level][:tag]``."""
        mode = self.mode
        parts = [self.name, str(int(mode))]
        if mode & FilterMode.PID:
            parts.append(str(self.pid))
        if mode & FilterMode.LEVEL:
            parts.append(str(int(self.min_level)))  # type: ignore[arg-type]
        if mode & FilterMode.TAG:
            parts.append(self.tag or "")
        return ":".join(parts)

    @classmethod
    def decode(cls, value: str, colors: LogColors | None = None) -> FilterSpec:
        """Parse the ``name:mode[:pid][:level][:tag]`` encoding.

        The tag is the last field, so everything after the preceding fields
        is taken as the tag, colons included.
        """
        segments = value.split(":")
        if len(segments) < 2:  # noqa: PLR2004
            msg = f"Malformed filter string: {value!r}"
            raise ValueError(msg)
        name = segments[0]
        try:
            mode = FilterMode(int(segments[1]))
        except ValueError:
            msg = f"Malformed filter mode in {value!r}"
            raise ValueError(msg) from None

        index = 2
        pid: int | None = None
        level: LogLevel | None = None
        tag: str | None = None
        try:
            if mode & FilterMode.PID:
                pid = int(segments[index])
                index += 1
            if mode & FilterMode.LEVEL:
                level = LogLevel(int(segments[index]))
                index += 1
            if mode & FilterMode.TAG:
                if index >= len(segments):
                    raise IndexError(index)
                tag = ":".join(segments[index:])
        except (IndexError, ValueError):
            msg = f"Malformed filter string: {value!r}"
            raise ValueError(msg) from None
        return cls(name=name, pid=pid, tag=tag, min_level=level, colors=colors)


class AppConfig(BaseModel):
    """Application configuration persisted to disk."""

    capacity: int = Field(default=10000, ge=1)
    encoding: str = "iso-8859-1"
    fallback_encoding: str = "utf-8"
    trim_lines: bool = True
    default_filter_name: str = "Log"
    chunk_size: int = Field(default=4096, ge=1)
    filters: list[str] = []
