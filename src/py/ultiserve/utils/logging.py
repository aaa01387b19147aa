import sys
import time
from enum import Enum
from typing import NamedTuple, Any
from contextvars import ContextVar
from ..config import LOG_LEVEL
from .primitives import TPrimitive
from .term import Term

ERR = sys.stderr


LogOrigin: ContextVar[str] = ContextVar("LogOrigin", default="ultiserve")


class LogType(Enum):
	Message = 0  # A general information message
	Event = 20  # An event, like a processed request


class LogLevel(Enum):
	Debug = 0
	Info = 10
	Warning = 30
	Error = 40  # A managed error
	Exception = 50  # An un-managed error


LOG_LEVEL_COLOR = {
	LogLevel.Debug: 31,
	LogLevel.Info: 75,
	LogLevel.Warning: 202,
	LogLevel.Error: 160,
	LogLevel.Exception: 124,
}

LOG_LEVELS: dict[str, LogLevel] = {
	"debug": LogLevel.Debug,
	"info": LogLevel.Info,
	"warning": LogLevel.Warning,
	"warn": LogLevel.Warning,
	"error": LogLevel.Error,
}


class LogEntry(NamedTuple):
	origin: str
	time: float
	type: LogType = LogType.Message
	level: LogLevel = LogLevel.Info
	message: str | None = None
	name: str | None = None
	value: TPrimitive | None = None
	context: dict[str, TPrimitive] | None = None
	icon: str | None = None


class LogThreshold:
	"""Holds the minimum level below which entries are dropped."""

	Level: LogLevel = LOG_LEVELS.get(LOG_LEVEL.lower(), LogLevel.Info)

	@classmethod
	def Set(cls, level: str | LogLevel) -> LogLevel:
		if isinstance(level, str):
			if level.lower() not in LOG_LEVELS:
				raise ValueError(
					f"Unknown log level '{level}', pick one of: {', '.join(LOG_LEVELS)}"
				)
			level = LOG_LEVELS[level.lower()]
		cls.Level = level
		return level


def formatData(value: Any) -> str:
	if value is None or value == () or value == [] or value == {}:
		return "◌"
	elif isinstance(value, dict):
		return " ".join(
			f"{Term.BOLD}{k}{Term.RESET}={formatData(v)}" for k, v in value.items()
		)
	elif isinstance(value, list) or isinstance(value, tuple):
		return ",".join(formatData(v) for v in value)
	elif isinstance(value, str):
		return repr(value) if " " in value else value
	elif isinstance(value, bool):
		return "✓" if value else "✗"
	elif isinstance(value, float):
		return f"{value:0.2f}"
	else:
		return str(value)


def send(entry: LogEntry) -> LogEntry:
	if entry.level.value < LogThreshold.Level.value:
		return entry
	icon: str = f" {entry.icon}" if entry.icon else ""
	clr: str = Term.Color(LOG_LEVEL_COLOR[entry.level])
	if entry.type == LogType.Event:
		ERR.write(
			f"{clr}{Term.BOLD}[{entry.origin}] {entry.name}{Term.RESET} {formatData(entry.value)} {formatData(entry.context)}{Term.RESET}\n"
		)
	else:
		ERR.write(
			f"{clr}{Term.BOLD}[{entry.origin}]{Term.RESET}{icon} {entry.message} {formatData(entry.context)}{Term.RESET}\n"
		)
	ERR.flush()
	return entry


def entry(
	*,
	type: LogType = LogType.Message,
	level: LogLevel = LogLevel.Info,
	message: str | None = None,
	name: str | None = None,
	value: TPrimitive | None = None,
	context: dict[str, TPrimitive],
	icon: str | None = None,
) -> LogEntry:
	return LogEntry(
		origin=LogOrigin.get(),
		time=time.time(),
		type=type,
		level=level,
		message=message,
		name=name,
		value=value,
		context=context,
		icon=icon,
	)


def debug(message: str, *, icon: str | None = None, **context: TPrimitive) -> LogEntry:
	return send(entry(message=message, level=LogLevel.Debug, context=context, icon=icon))


def info(message: str, *, icon: str | None = None, **context: TPrimitive) -> LogEntry:
	return send(entry(message=message, context=context, icon=icon))


def warning(
	message: str, *, icon: str | None = None, **context: TPrimitive
) -> LogEntry:
	return send(
		entry(message=message, level=LogLevel.Warning, context=context, icon=icon)
	)


def error(
	message: str,
	code: int | str | None,
	*,
	icon: str | None = None,
	**context: TPrimitive,
) -> LogEntry:
	return send(
		entry(
			message=message,
			value=code,
			level=LogLevel.Error,
			context=context | {"Code": code} if code is not None else context,
			icon=icon,
		)
	)


def event(event: str, value: Any = None, **context: TPrimitive) -> LogEntry:
	return send(entry(name=event, value=value, type=LogType.Event, context=context))


def exception(exception: Exception, message: str | None = None) -> Exception:
	try:
		stream = ERR
		stream.write(
			f"!!! EXCP {f'{message}: [{exception.__class__.__name__}] {exception}' if message else f'[{exception.__class__.__name__}] {exception}'}\n"
		)
		tb = exception.__traceback__
		while tb:
			code = tb.tb_frame.f_code
			stream.write(
				f"... in {code.co_name:15s} at {tb.tb_lineno:4d} in {code.co_filename}\n",
			)
			tb = tb.tb_next
		stream.flush()
	except Exception:  # nosec: B110
		# Must be callable from within an exception handler, so nothing
		# escapes from here.
		pass
	# Returned so that it can be used as `raise exception(e)`
	return exception


def logged(level: LogLevel) -> bool:
	"""Tells if entries at the given level are currently output, which is
	used to guard against building entries when not necessary."""
	return level.value >= LogThreshold.Level.value


# EOF
