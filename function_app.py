"""Azure Functions entry point: the host discovers functions on `app`."""
from providers.azure.handler import app  # noqa: F401
