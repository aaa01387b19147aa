from abc import ABC, abstractmethod
from typing import Any, Generic, Iterable, TypeVar

from ..utils.json import json
from .status import HTTP_STATUS

T = TypeVar("T")

# -----------------------------------------------------------------------------
#
# API
#
# -----------------------------------------------------------------------------

# --
# == HTTP Request Response API
#
# Defines the high level API functions (orthogonal to the underlying model)
# to create responses from a request.


class ResponseFactory(ABC, Generic[T]):
	@abstractmethod
	def respond(
		self,
		content: Any = None,
		contentType: str | None = None,
		status: int = 200,
		headers: dict[str, str] | None = None,
		message: str | None = None,
	) -> T: ...

	def error(
		self,
		status: int,
		content: str | None = None,
		contentType: str = "text/plain; charset=utf-8",
		headers: dict[str, str] | None = None,
	) -> T:
		message = HTTP_STATUS.get(status, "Server Error")
		return self.respond(
			content=message if content is None else content,
			contentType=contentType,
			status=status,
			message=message,
			headers=headers,
		)

	def notAuthorized(self, content: str = "Forbidden", *, status: int = 403) -> T:
		return self.error(status, content=content)

	def notFound(self, content: str = "Not Found", *, status: int = 404) -> T:
		return self.error(status, content=content)

	def notAllowed(
		self, allowed: Iterable[str], content: str = "Method Not Allowed"
	) -> T:
		return self.error(405, content=content, headers={"Allow": ", ".join(allowed)})

	def fail(self, content: str | None = None, *, status: int = 500) -> T:
		return self.error(status, content=content)

	def returns(
		self,
		value: Any,
		headers: dict[str, str] | None = None,
		*,
		status: int = 200,
		contentType: str = "application/json",
	) -> T:
		return self.respond(
			json(value),
			contentType=contentType,
			headers=headers,
			status=status,
		)

	def respondHTML(self, html: str | bytes | Iterable[str], status: int = 200) -> T:
		return self.respond(
			content=html if isinstance(html, (str, bytes)) else "".join(html),
			contentType="text/html; charset=utf-8",
			status=status,
		)


# EOF
