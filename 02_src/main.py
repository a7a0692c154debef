"""Main entry point for the NightVibe console chat."""

import asyncio
import getpass
import os
import sys
from pathlib import Path

from dotenv import load_dotenv

from nightvibe import Application, NightVibeError, Settings
from nightvibe.errors import user_facing_message
from nightvibe.logging_config import get_logger, setup_logging

logger = get_logger(__name__)


def render(view_model, user_id: str) -> None:
    """Print the transcript with local delivery state."""
    print("\033[2J\033[H", end="")
    title = view_model.chat_id
    if view_model.chat is not None:
        title = view_model.chat.display_name(user_id)
    print(f"== {title} ==")
    for entry in view_model.transcript.entries():
        message = entry.message
        if message.is_deleted:
            continue
        stamp = message.created_at.strftime("%H:%M")
        body = message.content or message.image_url or f"[{message.kind.value}]"
        print(f"[{stamp}] {message.sender.username}: {body}  ({entry.state})")
    if view_model.typing_users:
        print(f"... {len(view_model.typing_users)} typing")
    if view_model.error:
        print(f"! {view_model.error}")
    print("> ", end="", flush=True)


async def ensure_session(app: Application) -> bool:
    if app.session is not None:
        return True

    email = os.getenv("NIGHTVIBE_EMAIL") or await asyncio.to_thread(input, "Email: ")
    password = os.getenv("NIGHTVIBE_PASSWORD") or await asyncio.to_thread(
        getpass.getpass, "Password: "
    )
    try:
        await app.login(email, password)
    except NightVibeError as e:
        print(user_facing_message(e, "Login failed"))
        return False
    return True


async def run_chat(chat_id: str, settings: Settings) -> None:
    app = Application(settings)
    await app.start()
    try:
        if not await ensure_session(app):
            return

        view_model = app.open_chat(chat_id)
        view_model.on_change(lambda: render(view_model, app.current_user.id))
        await view_model.activate()
        render(view_model, app.current_user.id)

        while True:
            line = await asyncio.to_thread(sys.stdin.readline)
            if not line or line.strip() == "/quit":
                break
            if line.strip() == "/retry":
                for entry in view_model.transcript.failed():
                    await view_model.retry(entry.key)
                continue
            if line.strip() == "/more":
                await view_model.load_more()
                continue
            await view_model.send_text(line)

        await view_model.deactivate()
    finally:
        await app.stop()


def main():
    """Run the console chat."""
    project_root = Path(__file__).resolve().parent.parent
    load_dotenv(project_root / ".env")
    settings = Settings.from_env()
    setup_logging(settings.log_level)

    if len(sys.argv) != 2:
        print("usage: python main.py <chat_id>")
        sys.exit(2)

    try:
        asyncio.run(run_chat(sys.argv[1], settings))
    except KeyboardInterrupt:
        logger.info("Interrupted")


if __name__ == "__main__":
    main()
