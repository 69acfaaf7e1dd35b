import os
import sys
import time
from enum import Enum
from typing import Any, NamedTuple, TypeAlias

ORIGIN: str = "servedir"

# SEE: https://no-color.org/
COLOR: bool = "FORCE_COLOR" in os.environ or "NO_COLOR" not in os.environ
BOLD: str = "\033[1m" if COLOR else ""
RESET: str = "\033[0m" if COLOR else ""

TValue: TypeAlias = bool | int | float | str | bytes | None


class LogLevel(Enum):
	Debug = 0
	Info = 10
	Warning = 30
	Error = 40  # A managed error
	Exception = 50  # An un-managed error

	@property
	def color(self) -> str:
		code: int = {0: 31, 10: 75, 30: 202, 40: 160}.get(self.value, 124)
		return f"\033[0;38;5;{code}m" if COLOR else ""

	@staticmethod
	def Parse(name: str | None, default: "LogLevel") -> "LogLevel":
		key = (name or "").strip().capitalize()
		return LogLevel.__members__.get(key, default)


# Entries below this level are not sent, see `logged()`
LOG_LEVEL: LogLevel = LogLevel.Parse(
	os.environ.get("SERVEDIR_LOG_LEVEL"), LogLevel.Info
)


def formatValue(value: Any) -> str:
	if value is None or value == "":
		return "◌"
	elif isinstance(value, bool):
		return "✓" if value else "✗"
	elif isinstance(value, float):
		return f"{value:0.2f}"
	elif isinstance(value, str) and " " in value:
		return repr(value)
	else:
		return str(value)


class LogEntry(NamedTuple):
	level: LogLevel
	message: str
	context: dict[str, TValue]
	time: float
	value: Any = None
	isEvent: bool = False

	def format(self) -> str:
		head: str = (
			f"[{ORIGIN}] {self.message}{RESET} {formatValue(self.value)}"
			if self.isEvent
			else f"[{ORIGIN}]{RESET} {self.message}"
		)
		context: str = " ".join(
			f"{BOLD}{k}{RESET}={formatValue(v)}" for k, v in self.context.items()
		)
		return f"{self.level.color}{BOLD}{head} {context}{RESET}\n"


def logged(level: LogLevel) -> bool:
	"""Tells if entries of the given level are currently sent. This is
	used to guard against building entries when not necessary."""
	return level.value >= LOG_LEVEL.value


def log(
	level: LogLevel,
	message: str,
	context: dict[str, TValue],
	*,
	value: Any = None,
	isEvent: bool = False,
) -> LogEntry:
	entry = LogEntry(level, message, context, time.time(), value, isEvent)
	if logged(level):
		# Looked up on each call, as `sys.stderr` may be swapped
		stream = sys.stderr
		stream.write(entry.format())
		stream.flush()
	return entry


def debug(message: str, **context: TValue) -> LogEntry:
	return log(LogLevel.Debug, message, context)


def info(message: str, **context: TValue) -> LogEntry:
	return log(LogLevel.Info, message, context)


def warning(message: str, **context: TValue) -> LogEntry:
	return log(LogLevel.Warning, message, context)


def error(message: str, code: int | str | None, **context: TValue) -> LogEntry:
	return log(LogLevel.Error, message, context, value=code)


def event(name: str, value: Any = None, **context: TValue) -> LogEntry:
	return log(LogLevel.Info, name, context, value=value, isEvent=True)


def exception(exception: BaseException, message: str | None = None) -> BaseException:
	"""Writes the exception and its traceback, returning the exception so
	that it can be used as `raise exception(e)`."""
	lines: list[str] = [
		f"!!! EXCP {f'{message}: ' if message else ''}[{exception.__class__.__name__}] {exception}\n"
	]
	tb = exception.__traceback__
	while tb:
		code = tb.tb_frame.f_code
		lines.append(
			f"... in {code.co_name:15s} at {tb.tb_lineno:4d} in {code.co_filename}\n"
		)
		tb = tb.tb_next
	try:
		stream = sys.stderr
		stream.write("".join(lines))
		stream.flush()
	except OSError:  # nosec: B110
		# Logging from an exception handler must not raise
		pass
	return exception


# EOF
