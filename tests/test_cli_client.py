import requests

from percy_selenium.common.state import EligibleWidths
from percy_selenium.net.cli import PercyCLIClient

from conftest import healthcheck_response, make_response, make_settings


def test_healthcheck_supported_version_enables(client, http):
    http.on("GET", "/percy/healthcheck", healthcheck_response(
        version="1.5.2", session_type="web",
        widths={"mobile": [375, 414], "config": [1280]},
        config={"snapshot": {"responsiveSnapshotCapture": True}},
    ))
    state = client.state

    assert state.enabled
    assert state.session_type == "web"
    assert state.eligible_widths == EligibleWidths(mobile=[375, 414], config=[1280])
    assert state.cli_config == {"snapshot": {"responsiveSnapshotCapture": True}}


def test_healthcheck_unsupported_major_disables(client, http, capsys):
    http.on("GET", "/percy/healthcheck", healthcheck_response(version="2.0.0"))
    assert not client.enabled
    assert "2.0.0" in capsys.readouterr().out


def test_healthcheck_without_version_header_disables(client, http, capsys):
    http.on("GET", "/percy/healthcheck", healthcheck_response(version=None))
    assert not client.enabled
    assert "@percy/cli" in capsys.readouterr().out


def test_healthcheck_bad_status_disables(client, http):
    http.on("GET", "/percy/healthcheck", make_response(500, {"success": False}))
    assert not client.enabled


def test_healthcheck_success_false_disables(client, http):
    http.on("GET", "/percy/healthcheck", make_response(
        200, {"success": False, "error": "boom"}, {"x-percy-core-version": "1.0.0"}))
    assert not client.enabled


def test_healthcheck_unreachable_disables(client, http, capsys):
    http.on("GET", "/percy/healthcheck", exc=requests.ConnectionError("refused"))
    assert not client.enabled
    assert "desactivados" in capsys.readouterr().out


def test_healthcheck_runs_once(client, http):
    http.on("GET", "/percy/healthcheck", healthcheck_response())
    client.state
    client.state
    assert client.enabled
    assert http.paths("GET") == ["/percy/healthcheck"]


def test_disabled_state_is_sticky_until_reprobe(client, http):
    http.on("GET", "/percy/healthcheck", exc=requests.ConnectionError("refused"))
    assert not client.enabled

    http.on("GET", "/percy/healthcheck", healthcheck_response())
    assert not client.enabled
    assert client.reprobe().enabled
    assert http.paths("GET") == ["/percy/healthcheck", "/percy/healthcheck"]


def test_healthcheck_uses_timeout(client, http):
    http.on("GET", "/percy/healthcheck", healthcheck_response())
    client.state
    _, _, kwargs = http.calls[0]
    assert kwargs["timeout"] == 30.0


def test_fetch_dom_script_is_memoized(client, http):
    http.on("GET", "/percy/healthcheck", healthcheck_response())
    http.on("GET", "/percy/dom.js", make_response(200, text="window.PercyDOM = {};"))

    assert client.fetch_dom_script() == "window.PercyDOM = {};"
    assert client.fetch_dom_script() == "window.PercyDOM = {};"
    assert http.paths("GET").count("/percy/dom.js") == 1


def test_fetch_dom_script_failure_disables(client, http):
    http.on("GET", "/percy/healthcheck", healthcheck_response())
    http.on("GET", "/percy/dom.js", make_response(404, text="not found"))

    assert client.enabled
    assert client.fetch_dom_script() == ""
    assert not client.enabled


def test_post_payload_transport_failure_returns_none(client, http, capsys):
    http.on("POST", "/percy/snapshot", exc=requests.Timeout("slow"))
    assert client.post_payload("/percy/snapshot", {"name": "x"}) is None
    assert "/percy/snapshot" in capsys.readouterr().out


def test_post_payload_uses_long_timeout(client, http):
    http.on("POST", "/percy/snapshot", make_response(200, {"success": True}))
    r = client.post_payload("/percy/snapshot", {"name": "x"})
    assert r.json() == {"success": True}
    _, _, kwargs = http.calls[0]
    assert kwargs["timeout"] == 600.0
    assert kwargs["json"] == {"name": "x"}


def test_log_posts_and_prints(client, http, capsys):
    http.on("POST", "/percy/log", make_response(200, {"success": True}))
    client.log("hola")

    assert http.bodies("/percy/log") == [{"message": "[percy] hola", "level": "info"}]
    assert capsys.readouterr().out == "[percy] hola\n"


def test_log_failure_is_swallowed(client, http, capsys):
    http.on("POST", "/percy/log", exc=requests.ConnectionError("down"))
    client.log("sigue")
    assert "[percy] sigue" in capsys.readouterr().out


def test_debug_log_hidden_unless_debug(http, capsys):
    http.on("POST", "/percy/log", make_response(200, {}))
    quiet = PercyCLIClient(settings=make_settings(DEBUG=False), session=http)
    quiet.log("detalle", "debug")
    assert capsys.readouterr().out == ""

    loud = PercyCLIClient(settings=make_settings(DEBUG=True), session=http)
    loud.log("detalle", "debug")
    assert capsys.readouterr().out == "[percy:python] detalle\n"


def test_healthcheck_malformed_widths_disables(client, http, capsys):
    http.on("GET", "/percy/healthcheck", healthcheck_response(widths={"mobile": 375}))
    assert not client.enabled
    assert "no válida" in capsys.readouterr().out


def test_healthcheck_widths_not_a_mapping_disables(client, http):
    http.on("GET", "/percy/healthcheck", healthcheck_response(widths=[375, 414]))
    assert not client.enabled


def test_healthcheck_config_not_a_mapping_disables(client, http):
    http.on("GET", "/percy/healthcheck", healthcheck_response(config="responsive"))
    assert not client.enabled
