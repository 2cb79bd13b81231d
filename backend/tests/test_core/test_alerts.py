from starlette.responses import Response

from sprig.core.alerts import Alerts


def _cookie_value(response: Response, name: str) -> str:
    header = next(h for h in response.headers.getlist("set-cookie") if h.startswith(f"{name}="))
    return header.split(";", 1)[0].split("=", 1)[1]


def test_alerts_carry_to_next_request():
    alerts = Alerts("alerts")
    alerts.set("error", "Your Session has Expired")
    response = Response()
    alerts.write_cookie(response)

    following = Alerts("alerts", {"alerts": _cookie_value(response, "alerts")})
    assert following.get() == [{"type": "error", "message": "Your Session has Expired"}]


def test_consumed_alerts_are_expired():
    alerts = Alerts("alerts", {"alerts": "%5B%7B%22type%22%3A%22info%22%2C%22message%22%3A%22hi%22%7D%5D"})
    assert alerts.get() == [{"type": "info", "message": "hi"}]
    response = Response()
    alerts.write_cookie(response)
    assert "max-age=0" in response.headers["set-cookie"].lower()


def test_unread_alerts_are_left_alone():
    alerts = Alerts("alerts", {"alerts": "%5B%5D"})
    response = Response()
    alerts.write_cookie(response)
    assert "set-cookie" not in response.headers


def test_malformed_cookie_is_ignored():
    assert Alerts("alerts", {"alerts": "not-json"}).get() == []
