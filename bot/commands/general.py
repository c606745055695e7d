"""General commands - /ping, /info."""
from __future__ import annotations

import math
from datetime import datetime

import discord
from discord import app_commands

import config

PING_COLOR = discord.Color(0x0099FF)
INFO_COLOR = discord.Color(0x7B2CBF)
INFO_TITLE = "🐙 KrakenGaming"


def elapsed_ms(start: datetime, end: datetime) -> int:
    """Whole milliseconds from start to end, never negative."""
    return max(0, round((end - start).total_seconds() * 1000))


def heartbeat_ms(latency: float) -> int:
    """Gateway heartbeat latency (seconds) as ms. Before the first heartbeat discord.py reports inf/nan."""
    if latency is None or not math.isfinite(latency):
        return 0
    return max(0, round(latency * 1000))


def build_ping_embed(roundtrip: int, heartbeat: int) -> discord.Embed:
    embed = discord.Embed(title="🏓 Pong!", color=PING_COLOR)
    embed.add_field(name="Roundtrip Latency", value=f"{roundtrip}ms", inline=True)
    embed.add_field(name="WebSocket Heartbeat", value=f"{heartbeat}ms", inline=True)
    embed.timestamp = discord.utils.utcnow()
    return embed


def build_info_embed(icon_url: str | None = None) -> discord.Embed:
    site = config.SITE_URL.rstrip("/")
    site_label = site.split("://", 1)[-1]
    embed = discord.Embed(
        title=INFO_TITLE,
        description="Welcome to the KrakenGaming community!",
        color=INFO_COLOR,
    )
    embed.add_field(name="🌐 Website", value=f"[{site_label}]({site})", inline=True)
    embed.add_field(name="🤖 Bot Version", value=config.BOT_VERSION, inline=True)
    embed.add_field(name="🚀 Status", value="Online", inline=True)
    embed.set_footer(text="KrakenGaming Discord Bot", icon_url=icon_url)
    embed.timestamp = discord.utils.utcnow()
    return embed


@app_commands.command(description="Replies with Pong! and shows bot latency")
async def ping(interaction: discord.Interaction) -> None:
    """Reply, then edit the reply with roundtrip and heartbeat latency."""
    await interaction.response.send_message("Pinging...")
    sent = await interaction.original_response()
    embed = build_ping_embed(
        elapsed_ms(interaction.created_at, sent.created_at),
        heartbeat_ms(interaction.client.latency),
    )
    await interaction.edit_original_response(content=None, embed=embed)


@app_commands.command(description="Shows information about KrakenGaming")
async def info(interaction: discord.Interaction) -> None:
    me = interaction.client.user
    icon_url = me.display_avatar.url if me else None
    await interaction.response.send_message(embed=build_info_embed(icon_url))


COMMANDS = (ping, info)
