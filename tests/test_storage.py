"""JSON file cookie storage."""

from __future__ import annotations

import json

import pytest

from scratchauth.core.types import LoginCookies
from scratchauth.storage.json_file import JsonFileCookieStorage


@pytest.mark.asyncio
async def test_save_and_load_roundtrip_is_case_insensitive(tmp_path) -> None:
    storage = JsonFileCookieStorage(tmp_path / "nested" / "cookies.json")

    await storage.save("Griffpatch", LoginCookies('"sess"', "csrf"))

    assert await storage.load("griffpatch") == LoginCookies('"sess"', "csrf")
    assert await storage.load("someone_else") is None


@pytest.mark.asyncio
async def test_delete_and_load_all(tmp_path) -> None:
    storage = JsonFileCookieStorage(tmp_path / "cookies.json")
    await storage.save("a", LoginCookies('"1"', "x"))
    await storage.save("b", LoginCookies('"2"', "y"))

    await storage.delete("a")
    await storage.delete("missing")

    assert await storage.load_all() == {"b": LoginCookies('"2"', "y")}


@pytest.mark.asyncio
async def test_empty_cookie_is_not_saved(tmp_path) -> None:
    path = tmp_path / "cookies.json"
    storage = JsonFileCookieStorage(path)

    await storage.save("a", LoginCookies("", "x"))

    assert not path.exists()


@pytest.mark.asyncio
async def test_corrupt_file_reads_as_empty(tmp_path) -> None:
    path = tmp_path / "cookies.json"
    path.write_text("{not json", encoding="utf-8")
    storage = JsonFileCookieStorage(path)

    assert await storage.load_all() == {}

    await storage.save("a", LoginCookies('"1"', "x"))
    assert json.loads(path.read_text(encoding="utf-8"))["a"]["csrf_token"] == "x"
