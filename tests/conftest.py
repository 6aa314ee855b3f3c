import json
from types import SimpleNamespace

import pytest
import requests
from requests.structures import CaseInsensitiveDict
from selenium.common.exceptions import WebDriverException

from percy_selenium.config import Settings
from percy_selenium.net.cli import PercyCLIClient

CLI_API = "http://localhost:5338"


def make_settings(**overrides) -> Settings:
    values = dict(
        CLI_API=CLI_API,
        DEBUG=False,
        RESPONSIVE_CAPTURE_SLEEP_TIME=None,
        RESIZE_TIMEOUT=0.2,
        HEALTHCHECK_TIMEOUT=30.0,
        DOM_TIMEOUT=30.0,
        POST_TIMEOUT=600.0,
        LOG_TIMEOUT=5.0,
    )
    values.update(overrides)
    return Settings(**values)


def make_response(status=200, body=None, headers=None, text=None) -> requests.Response:
    r = requests.Response()
    r.status_code = status
    r.reason = "OK" if status == 200 else "ERROR"
    r.url = CLI_API
    r.encoding = "utf-8"
    r.headers = CaseInsensitiveDict(headers or {})
    if text is None:
        text = json.dumps(body if body is not None else {})
    r._content = text.encode("utf-8")
    r._content_consumed = True
    return r


def healthcheck_response(version="1.5.2", session_type="web", widths=None, config=None):
    headers = {"x-percy-core-version": version} if version else {}
    body = {
        "success": True,
        "type": session_type,
        "widths": widths or {"mobile": [375, 414], "config": [1280]},
        "config": config or {},
    }
    return make_response(200, body, headers)


class FakeHTTP:
    """Sesión de requests falsa: respuestas por (método, path) y registro de llamadas."""

    def __init__(self):
        self.routes = {}
        self.calls = []

    def on(self, method, path, response=None, exc=None):
        self.routes[(method, path)] = (response, exc)
        return self

    def _handle(self, method, url, **kwargs):
        path = url[len(CLI_API):] if url.startswith(CLI_API) else url
        self.calls.append((method, path, kwargs))
        response, exc = self.routes.get((method, path), (None, requests.ConnectionError("sin ruta")))
        if exc is not None:
            raise exc
        return response

    def get(self, url, **kwargs):
        return self._handle("GET", url, **kwargs)

    def post(self, url, **kwargs):
        return self._handle("POST", url, **kwargs)

    def paths(self, method=None):
        return [p for m, p, _ in self.calls if method is None or m == method]

    def bodies(self, path):
        return [kw.get("json") for m, p, kw in self.calls if m == "POST" and p == path]


class FakeDriver:
    """WebDriver mínimo: ejecuta 'scripts' conocidos y simula el resize."""

    def __init__(self, session_id="123", capabilities=None, width=1024, height=768,
                 resize_confirms=True):
        self.session_id = session_id
        self.capabilities = capabilities if capabilities is not None else {"browserName": "firefox"}
        self.command_executor = SimpleNamespace(_url="https://hub.example.com/wd/hub")
        self.current_url = "http://localhost:8000/"
        self.window = {"width": width, "height": height}
        self.resize_count = 0
        self.resize_confirms = resize_confirms
        self.cookies = [{"name": "session", "value": "abc"}]
        self.fail_serialize_widths = set()
        self.scripts = []
        self.resizes = []
        self.capability_reads = 0

    def execute_script(self, script, *args):
        self.scripts.append(script)
        if script.startswith("return PercyDOM.serialize"):
            if self.window["width"] in self.fail_serialize_widths:
                raise WebDriverException("stale element reference")
            return {"html": "<html><body>ok</body></html>", "seen_width": self.window["width"]}
        if script == "return window.resizeCount":
            return self.resize_count
        return None

    def get_window_size(self):
        return dict(self.window)

    def set_window_size(self, width, height):
        self.resizes.append((width, height))
        self.window = {"width": width, "height": height}
        if self.resize_confirms:
            self.resize_count += 1

    def get_cookies(self):
        return list(self.cookies)


@pytest.fixture
def http():
    return FakeHTTP()


@pytest.fixture
def settings():
    return make_settings()


@pytest.fixture
def client(http, settings):
    return PercyCLIClient(settings=settings, session=http)


@pytest.fixture
def driver():
    return FakeDriver()
