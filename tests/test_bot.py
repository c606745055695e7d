"""Tests for bot commands and the bot health server."""
from datetime import datetime, timedelta, timezone
from unittest.mock import AsyncMock, MagicMock

import discord
import pytest
from aiohttp.test_utils import TestClient, TestServer
from discord import app_commands

from bot.commands.general import (
    INFO_TITLE,
    build_info_embed,
    build_ping_embed,
    elapsed_ms,
    heartbeat_ms,
    info,
    ping,
)
from bot.http_server import create_app
from bot.main import ERROR_REPLY, on_app_command_error


def _interaction(latency: float = 0.042) -> MagicMock:
    interaction = MagicMock()
    interaction.created_at = datetime(2026, 10, 19, 12, 0, 0, tzinfo=timezone.utc)
    interaction.client.latency = latency
    interaction.response.send_message = AsyncMock()
    interaction.edit_original_response = AsyncMock()
    return interaction


def test_elapsed_ms_never_negative():
    t = datetime(2026, 1, 1, tzinfo=timezone.utc)
    assert elapsed_ms(t, t + timedelta(milliseconds=250)) == 250
    assert elapsed_ms(t, t - timedelta(milliseconds=5)) == 0


def test_heartbeat_before_first_ack():
    """discord.py reports inf/nan latency until the first heartbeat."""
    assert heartbeat_ms(float("inf")) == 0
    assert heartbeat_ms(float("nan")) == 0
    assert heartbeat_ms(0.0426) == 43


def test_ping_embed_fields():
    embed = build_ping_embed(120, 43)
    assert embed.title == "🏓 Pong!"
    assert [(f.name, f.value) for f in embed.fields] == [
        ("Roundtrip Latency", "120ms"),
        ("WebSocket Heartbeat", "43ms"),
    ]


def test_info_embed_is_static():
    embed = build_info_embed("https://cdn.example/avatar.png")
    assert embed.title == INFO_TITLE
    assert embed.footer.text == "KrakenGaming Discord Bot"
    assert embed.footer.icon_url == "https://cdn.example/avatar.png"
    assert [f.name for f in embed.fields] == ["🌐 Website", "🤖 Bot Version", "🚀 Status"]
    assert embed.fields[0].value == "[krakengaming.org](https://krakengaming.org)"


@pytest.mark.asyncio
async def test_ping_replies_then_edits_with_latency():
    interaction = _interaction(latency=0.0381)
    sent = MagicMock(created_at=interaction.created_at + timedelta(milliseconds=180))
    interaction.original_response = AsyncMock(return_value=sent)

    await ping.callback(interaction)

    interaction.response.send_message.assert_awaited_once_with("Pinging...")
    interaction.edit_original_response.assert_awaited_once()
    kwargs = interaction.edit_original_response.await_args.kwargs
    assert kwargs["content"] is None
    values = [f.value for f in kwargs["embed"].fields]
    assert values == ["180ms", "38ms"]


@pytest.mark.asyncio
async def test_ping_clock_skew_clamps_to_zero():
    interaction = _interaction(latency=float("inf"))
    sent = MagicMock(created_at=interaction.created_at - timedelta(milliseconds=30))
    interaction.original_response = AsyncMock(return_value=sent)

    await ping.callback(interaction)

    embed = interaction.edit_original_response.await_args.kwargs["embed"]
    assert [f.value for f in embed.fields] == ["0ms", "0ms"]


@pytest.mark.asyncio
async def test_info_replies_once_with_embed():
    interaction = _interaction()
    interaction.client.user.display_avatar.url = "https://cdn.example/bot.png"

    await info.callback(interaction)

    interaction.response.send_message.assert_awaited_once()
    embed = interaction.response.send_message.await_args.kwargs["embed"]
    assert isinstance(embed, discord.Embed)
    assert embed.title == INFO_TITLE
    assert embed.footer.icon_url == "https://cdn.example/bot.png"


@pytest.mark.asyncio
async def test_error_handler_replies_ephemeral():
    interaction = _interaction()
    interaction.response.is_done = MagicMock(return_value=False)
    await on_app_command_error(interaction, app_commands.AppCommandError("boom"))
    interaction.response.send_message.assert_awaited_once_with(ERROR_REPLY, ephemeral=True)


@pytest.mark.asyncio
async def test_error_handler_uses_followup_after_reply():
    interaction = _interaction()
    interaction.response.is_done = MagicMock(return_value=True)
    interaction.followup.send = AsyncMock()
    await on_app_command_error(interaction, app_commands.AppCommandError("boom"))
    interaction.followup.send.assert_awaited_once_with(ERROR_REPLY, ephemeral=True)
    interaction.response.send_message.assert_not_awaited()


@pytest.mark.asyncio
async def test_health_server():
    bot = MagicMock()
    bot.is_ready = MagicMock(return_value=True)
    async with TestClient(TestServer(create_app(bot))) as client:
        for path in ("/health", "/"):
            resp = await client.get(path)
            assert resp.status == 200
            data = await resp.json()
            assert data["status"] == "healthy"
            assert data["botReady"] is True
            assert data["uptime"] >= 0

        resp = await client.get("/nope")
        assert resp.status == 404
        assert await resp.json() == {"error": "Not found"}
