from os import getenv

# Only the local machine can browse the served files, unless told otherwise
HOST: str = getenv("HOST", "127.0.0.1")

PORT: int = int(getenv("PORT", 8080))

ROOT: str = getenv("ULTISERVE_ROOT", ".")

# Query parameter that asks for the unmodified bytes of a file
RAW_PARAM: str = getenv("ULTISERVE_RAW_PARAM", "raw")

# Any Pygments style name, see `pygmentize -L styles`
STYLE: str = getenv("ULTISERVE_STYLE", "dracula")

LOG_LEVEL: str = getenv("ULTISERVE_LOG_LEVEL", "info")

TRUTHY: set[str] = {"1", "true", "yes", "on"}


def isTruthy(value: str | None) -> bool:
	return value is not None and value.strip().lower() in TRUTHY


LOG_REQUESTS: bool = isTruthy(getenv("ULTISERVE_LOG_REQUESTS", "1"))

# EOF
