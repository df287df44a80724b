from urllib.parse import parse_qs

OVERRIDABLE = frozenset({"PUT", "PATCH", "DELETE"})


class MethodOverrideMiddleware:
    """Let HTML forms send ``POST /path?_method=DELETE``."""

    def __init__(self, app):
        self.app = app

    def __call__(self, environ, start_response):
        if environ.get("REQUEST_METHOD", "").upper() == "POST":
            query = parse_qs(environ.get("QUERY_STRING", ""))
            method = (query.get("_method") or [""])[0].upper()
            if method in OVERRIDABLE:
                environ["REQUEST_METHOD"] = method
        return self.app(environ, start_response)
