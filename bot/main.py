"""Main bot entry point."""
import logging

import discord
from discord import app_commands
from discord.ext import commands

import config
from bot.commands.general import COMMANDS
from bot.http_server import start_http_server

logger = logging.getLogger("kraken.bot")

intents = discord.Intents.default()

ERROR_REPLY = "There was an error while executing this command!"


async def on_app_command_error(interaction: discord.Interaction, error: app_commands.AppCommandError) -> None:
    """Always respond so Discord doesn't show "application did not respond"."""
    name = interaction.command.name if interaction.command else "?"
    logger.error("Error executing command %s", name, exc_info=error)
    try:
        if interaction.response.is_done():
            await interaction.followup.send(ERROR_REPLY, ephemeral=True)
        else:
            await interaction.response.send_message(ERROR_REPLY, ephemeral=True)
    except discord.HTTPException:
        logger.warning("Could not send error reply for command %s", name)


class KrakenBot(commands.Bot):
    """KrakenGaming Discord bot."""

    def __init__(self):
        super().__init__(command_prefix="!", intents=intents)
        self.health_runner = None

    async def setup_hook(self) -> None:
        """Register commands and start the health server."""
        for command in COMMANDS:
            self.tree.add_command(command)
        self.tree.on_error = on_app_command_error
        await self.tree.sync()
        logger.info("Synced %d command(s)", len(COMMANDS))
        self.health_runner = await start_http_server(self)

    async def on_ready(self) -> None:
        logger.info("Bot ready: %s (ID: %s)", self.user, self.user.id if self.user else "?")
        logger.info("Serving %d guild(s)", len(self.guilds))
        await self.change_presence(
            activity=discord.Activity(type=discord.ActivityType.watching, name="KrakenGaming.org")
        )

    async def close(self) -> None:
        """Cleanup on shutdown."""
        if self.health_runner:
            await self.health_runner.cleanup()
            logger.info("Health server closed")
        await super().close()


def main() -> None:
    """Run the bot."""
    logging.basicConfig(level=config.LOG_LEVEL)
    if not config.DISCORD_TOKEN:
        raise ValueError("DISCORD_TOKEN is required")
    bot = KrakenBot()
    bot.run(config.DISCORD_TOKEN, log_handler=None)


if __name__ == "__main__":
    main()
