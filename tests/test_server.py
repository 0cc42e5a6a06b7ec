"""Bringing the service up and down against a given store."""

import asyncio
import socket

import httpx
import pytest

from blog_posts_api.app import server as server_module
from blog_posts_api.app.server import bound_port, close_server, run_server
from tests.factories import generate_blog_post_data


def test_run_and_close_server(tmp_path):
    database_url = str(tmp_path / "served.db")

    async def scenario():
        server = await run_server(database_url, host="127.0.0.1", port=0)
        try:
            base_url = f"http://127.0.0.1:{bound_port(server)}"
            async with httpx.AsyncClient(base_url=base_url, trust_env=False) as http:
                created = await http.post("/posts", json=generate_blog_post_data())
                listed = await http.get("/posts")
        finally:
            await close_server()
        return created, listed

    created, listed = asyncio.run(scenario())

    assert created.status_code == 201
    assert listed.status_code == 200
    assert [post["id"] for post in listed.json()] == [created.json()["id"]]
    assert server_module._server is None


def test_second_server_is_refused(tmp_path):
    database_url = str(tmp_path / "served.db")

    async def scenario():
        await run_server(database_url, host="127.0.0.1", port=0)
        try:
            with pytest.raises(RuntimeError):
                await run_server(database_url, host="127.0.0.1", port=0)
        finally:
            await close_server()

    asyncio.run(scenario())


def test_close_without_server_is_a_noop():
    asyncio.run(close_server())


def test_port_in_use_raises_runtime_error(tmp_path):
    database_url = str(tmp_path / "served.db")
    occupied = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
    occupied.bind(("127.0.0.1", 0))
    occupied.listen(1)
    port = occupied.getsockname()[1]

    async def scenario():
        with pytest.raises(RuntimeError):
            await run_server(database_url, host="127.0.0.1", port=port)
        # The event loop survives and the slot is free for another attempt.
        assert server_module._server is None
        return "still running"

    try:
        assert asyncio.run(scenario()) == "still running"
    finally:
        occupied.close()
