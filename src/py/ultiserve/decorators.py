from typing import ClassVar, Union, Callable, TypeVar, Any, cast

T = TypeVar("T")


class Extra:
	"""Defines the attributes used by decorators to annotate handlers"""

	ON: ClassVar[str] = "_ultiserve_on"
	ON_PRIORITY: ClassVar[str] = "_ultiserve_on_priority"

	@staticmethod
	def Meta(scope: Any) -> dict[str, Any]:
		"""Returns the dictionary of meta attributes for the given value."""
		if isinstance(scope, type):
			if not hasattr(scope, "__ultiserve__"):
				setattr(scope, "__ultiserve__", {})
			return cast(dict[str, Any], getattr(scope, "__ultiserve__"))
		elif hasattr(scope, "__dict__"):
			return cast(dict[str, Any], scope.__dict__)
		else:
			raise RuntimeError(f"Metadata cannot be attached to object: {scope}")


def on(
	priority: int = 0, **methods: Union[str, list[str], tuple[str, ...]]
) -> Callable[[T], T]:
	"""The @on decorator wraps an existing method and indicates that it
	processes HTTP requests.

	It takes HTTP method names as keyword arguments, each with a string or a
	list of strings describing URI patterns (see `Route`) that trigger the
	method when matched. Methods can be combined with an underscore, as in
	`GET_HEAD`.

	For instance:

	>    @on(GET='/{path:any}')

	implies that the wrapped method is like

	>    def read(self, request, path):
	>        ....

	and it must return a response created from the request:

	>        return request.respond(...)
	"""

	def decorator(function: T) -> T:
		meta = Extra.Meta(function)
		v = meta.setdefault(Extra.ON, [])
		meta.setdefault(Extra.ON_PRIORITY, priority)
		for http_methods, url in list(methods.items()):
			urls = (url,) if isinstance(url, str) else url
			for http_method in http_methods.upper().split("_"):
				for _ in urls:
					v.append((http_method, _))
		return function

	return decorator


# EOF
