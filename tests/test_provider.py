"""Scratch facade: sessions, cookie persistence and the CLI."""

from __future__ import annotations

import json

import pytest

from conftest import FakeHttp, FakeResponse
from scratchauth import cli
from scratchauth.config import ScratchConfig
from scratchauth.core.exceptions import CredentialRejected
from scratchauth.core.types import AcquisitionState, LoginCookies, SessionState
from scratchauth.providers.scratch import Scratch
from scratchauth.storage.json_file import JsonFileCookieStorage


@pytest.fixture
def scratch(http, config, tmp_path) -> Scratch:
    storage = JsonFileCookieStorage(tmp_path / "cookies.json")
    return Scratch(config, http=http, storage=storage)


def test_new_sessions_are_independent(scratch) -> None:
    first = scratch.new_session()
    second = scratch.new_session()

    assert first is not second
    assert first.state == SessionState.UNAUTHENTICATED


@pytest.mark.asyncio
async def test_login_remember_then_resume(scratch, http, config) -> None:
    session = await scratch.login("griffpatch", "hunter2", remember=True)
    assert session.is_authenticated

    resumed = await scratch.resume("griffpatch")

    assert resumed is not session
    assert resumed.is_authenticated
    assert resumed.session_cookie == session.session_cookie
    assert len(http.calls_to(config.login_url)) == 1


@pytest.mark.asyncio
async def test_resume_without_stored_cookie(scratch) -> None:
    with pytest.raises(CredentialRejected):
        await scratch.resume("griffpatch")


@pytest.mark.asyncio
async def test_resume_with_expired_cookie_is_degraded(ok_routes, config, tmp_path) -> None:
    routes = dict(ok_routes)
    routes[("POST", config.session_url)] = FakeResponse(200, {})
    storage = JsonFileCookieStorage(tmp_path / "cookies.json")
    await storage.save("griffpatch", LoginCookies('"old"', "a"))
    scratch = Scratch(config, http=FakeHttp(routes), storage=storage)

    session = await scratch.resume("griffpatch")

    assert session.acquisition_state == AcquisitionState.FAILED
    assert session.state == SessionState.DEGRADED


@pytest.mark.asyncio
async def test_logout_forgets_stored_cookie(scratch) -> None:
    session = await scratch.login("griffpatch", "hunter2", remember=True)

    assert await scratch.logout(session) is True
    assert await scratch.storage.load("griffpatch") is None


@pytest.mark.asyncio
async def test_cli_login_and_logout(monkeypatch, http, tmp_path, capsys) -> None:
    credentials = tmp_path / "credentials.json"
    credentials.write_text(json.dumps({"username": "griffpatch", "password": "pw"}))
    storage = JsonFileCookieStorage(tmp_path / "cookies.json")

    def fake_scratch(config: ScratchConfig) -> Scratch:
        return Scratch(config, http=http, storage=storage)

    monkeypatch.setattr(cli, "Scratch", fake_scratch)
    monkeypatch.setattr(cli, "setup_logging", lambda *a, **k: None)

    code = await cli.main(["login", "--credentials", str(credentials), "--logout"])

    assert code == 0
    out = capsys.readouterr().out
    assert "1882674" in out
    assert "confirmed by server: True" in out


@pytest.mark.asyncio
async def test_cli_reports_errors(monkeypatch, config, tmp_path, capsys) -> None:
    credentials = tmp_path / "credentials.json"
    credentials.write_text(json.dumps({"username": "griffpatch", "password": "bad"}))
    http = FakeHttp({("POST", config.login_url): FakeResponse(403, [{"msg": "Nope"}])})

    monkeypatch.setattr(cli, "Scratch", lambda cfg: Scratch(cfg, http=http))
    monkeypatch.setattr(cli, "setup_logging", lambda *a, **k: None)

    code = await cli.main(["login", "--credentials", str(credentials)])

    assert code == 1
    assert "Nope" in capsys.readouterr().out


def test_default_transport_is_curl(config, tmp_path) -> None:
    from scratchauth.client.curl import CurlTransport

    scratch = Scratch(config, storage=JsonFileCookieStorage(tmp_path / "c.json"))

    assert isinstance(scratch._http, CurlTransport)


@pytest.mark.asyncio
async def test_cli_lists_stored_sessions(monkeypatch, http, tmp_path, capsys) -> None:
    storage = JsonFileCookieStorage(tmp_path / "cookies.json")
    await storage.save("griffpatch", LoginCookies('"sess.abcdefgh"', "a"))
    await storage.save("another_user", LoginCookies('"other.cookie"', "a"))

    monkeypatch.setattr(cli, "Scratch", lambda cfg: Scratch(cfg, http=http, storage=storage))
    monkeypatch.setattr(cli, "setup_logging", lambda *a, **k: None)

    code = await cli.main(["sessions"])

    assert code == 0
    out = capsys.readouterr().out
    assert "griffpatch" in out
    assert "another_user" in out
    assert "sess.abcdefgh" not in out
    assert http.calls == []
