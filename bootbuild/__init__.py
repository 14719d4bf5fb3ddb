
__version__ = "0.1.0"

from .main import cli  # noqa: F401,E402
