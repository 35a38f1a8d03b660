import sys
import argparse
import logging
import os

# Add project root to python path
sys.path.append(os.path.dirname(os.path.abspath(__file__)))

logger = logging.getLogger("verifybot")


def run_bot(with_web: bool = True):
    from verifybot import config
    from verifybot.behavior import BotBehavior
    from verifybot.core import Bot
    from verifybot.environment import Environment
    from verifybot.logger import setup_logging
    from verifybot.web import start_health_server

    env = Environment()
    setup_logging(env.log_level, env.log_dir)

    if not env.bot_token:
        logger.error("DISCORD_BOT_TOKEN not found.")
        sys.exit(1)

    if with_web:
        start_health_server(config.WEB_HOST, env.port)

    bot = Bot(
        command_prefix=config.COMMAND_PREFIX,
        intents=Bot.default_intents(),
        token=env.bot_token,
        debug_guilds=env.debug_guild_ids,
    )
    behavior = BotBehavior(bot, env)
    behavior.load_cogs()
    bot.run_bot()


def run_web():
    from verifybot import config
    from verifybot.environment import Environment
    from verifybot.logger import setup_logging
    from verifybot.web import create_app

    env = Environment()
    setup_logging(env.log_level, env.log_dir)
    create_app().run(host=config.WEB_HOST, port=env.port)


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Run verify bot components")
    parser.add_argument('component', choices=['bot', 'web'], help="Component to run")
    parser.add_argument('--no-web', action='store_true', help="Do not start the health check server with the bot")

    args = parser.parse_args()

    if args.component == 'bot':
        run_bot(with_web=not args.no_web)
    elif args.component == 'web':
        run_web()
