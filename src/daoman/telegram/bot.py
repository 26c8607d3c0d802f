"""Telegram bot integration for DAOman."""

import logging
from typing import Any

from telegram import Message, Update, User
from telegram.ext import (
    Application,
    ApplicationHandlerStop,
    CommandHandler,
    ContextTypes,
    MessageHandler,
    TypeHandler,
    filters,
)

from ..app import Services, build_services
from ..config import BotConfig, bot_config_from_env
from ..errors import AuthConfigError, DaomanError, EmptyResult, RateLimited, user_message
from ..logging import get_logger
from ..session import Cooldown, SessionConfig, SessionManager

logger = logging.getLogger(__name__)

WELCOME_MESSAGE = (
    "DAOman online.\n"
    "Use /ai <your question> or send a voice note. I reply with text and voice.\n"
    "Reply /voice to a voice note and I'll answer in that voice.\n"
    "/reset clears our conversation."
)
AI_USAGE = "Usage: /ai <your question> or reply to a voice note with /ai"
VOICE_USAGE = "Reply /voice to a voice note or audio file to use it as my voice."
VOICE_SAVED = "🎙 Voice saved. I'll answer in it for the next 30 minutes."
REPLY_READ_FAILED = "Couldn't read the replied voice/audio. Try again or type your question."

MAX_MESSAGE_LENGTH = 4096
DOWNLOAD_TIMEOUT = 45.0


def truncate_message(text: str, max_length: int = MAX_MESSAGE_LENGTH) -> str:
    """Truncate message to fit Telegram limits."""
    if len(text) <= max_length:
        return text
    return text[: max_length - 20] + "\n... [truncated]"


def display_name(user: User | None) -> str:
    """Full name, then username, then a generic greeting."""
    if user is None:
        return "friend"
    name = " ".join(part for part in (user.first_name, user.last_name) if part)
    return name or user.username or "friend"


def format_reply(name: str, answer: str) -> str:
    """Prefix the answer with the persona's greeting."""
    return truncate_message(f"Waka Waka {name}! {answer}")


def audio_attachment(message: Message | None) -> tuple[str, str] | None:
    """Return (file_id, fallback filename) for a voice note or audio file."""
    if message is None:
        return None
    if message.voice is not None:
        return message.voice.file_id, "voice.ogg"
    if message.audio is not None:
        return message.audio.file_id, message.audio.file_name or "audio.mp3"
    return None


class TelegramBot:
    """Telegram bot for DAOman."""

    def __init__(
        self,
        token: str | None = None,
        config: BotConfig | None = None,
        services: Services | None = None,
        session_config: SessionConfig | None = None,
    ) -> None:
        self.config = config or bot_config_from_env()
        self.token = token or self.config.token
        if not self.token:
            raise ValueError("TELEGRAM_TOKEN not set")

        self.json_logger = get_logger()
        self.services = services or build_services(self.json_logger)
        self.sessions = SessionManager(session_config)
        self.cooldown = Cooldown(self.config.cooldown_seconds)
        self._app: Application | None = None

    def _get_chat_id(self, update: Update) -> str:
        """Get chat_id as string from update."""
        assert update.effective_chat is not None
        return str(update.effective_chat.id)

    def _get_user_id(self, update: Update) -> str:
        user = update.effective_user
        return str(user.id) if user is not None else self._get_chat_id(update)

    async def _download(
        self, context: ContextTypes.DEFAULT_TYPE, file_id: str, fallback: str
    ) -> tuple[bytes, str]:
        """Fetch a Telegram file into memory."""
        file = await context.bot.get_file(file_id, read_timeout=DOWNLOAD_TIMEOUT)
        data = bytes(await file.download_as_bytearray(read_timeout=DOWNLOAD_TIMEOUT))
        if not data:
            raise EmptyResult("Downloaded empty file.")
        filename = (file.file_path or "").rsplit("/", 1)[-1] or fallback
        return data, filename

    async def _handle_cooldown(
        self, update: Update, context: ContextTypes.DEFAULT_TYPE
    ) -> None:
        """Drop updates from users who are sending too fast."""
        user = update.effective_user
        if user is None:
            return
        if not self.cooldown.allow(str(user.id)):
            logger.debug(f"Dropping update from {user.id}: cooldown")
            raise ApplicationHandlerStop

    async def _handle_start(
        self, update: Update, context: ContextTypes.DEFAULT_TYPE
    ) -> None:
        """Handle /start command."""
        assert update.message is not None
        self.json_logger.log("telegram_start", chat_id=self._get_chat_id(update))
        await update.message.reply_text(WELCOME_MESSAGE)

    async def _handle_reset(
        self, update: Update, context: ContextTypes.DEFAULT_TYPE
    ) -> None:
        """Handle /reset command."""
        assert update.message is not None
        chat_id = self._get_chat_id(update)

        self.sessions.reset(chat_id)
        self.json_logger.log("telegram_reset", chat_id=chat_id)
        await update.message.reply_text("✨ Conversation cleared.")

    async def _handle_voice_command(
        self, update: Update, context: ContextTypes.DEFAULT_TYPE
    ) -> None:
        """Handle /voice sent as a reply to a voice note or audio file."""
        assert update.message is not None
        attachment = audio_attachment(update.message.reply_to_message)
        if attachment is None:
            await update.message.reply_text(VOICE_USAGE)
            return

        try:
            audio, filename = await self._download(context, *attachment)
        except Exception as e:
            logger.warning(f"Voice reference download failed: {e}")
            await update.message.reply_text(REPLY_READ_FAILED)
            return

        self._capture(update, audio, filename)
        await update.message.reply_text(VOICE_SAVED)

    def _capture(self, update: Update, audio: bytes, filename: str) -> None:
        user_id = self._get_user_id(update)
        reference = self.services.voices.put(user_id, audio, filename)
        self.json_logger.log_voice(
            "voice_capture",
            user_id,
            chat_id=self._get_chat_id(update),
            filename=reference.filename,
            size=len(reference.audio),
        )

    async def _handle_ai(
        self, update: Update, context: ContextTypes.DEFAULT_TYPE
    ) -> None:
        """Handle /ai <question>, or /ai as a reply to a voice note."""
        assert update.message is not None
        query = " ".join(context.args or []).strip()

        if not query:
            attachment = audio_attachment(update.message.reply_to_message)
            if attachment is not None:
                try:
                    audio, filename = await self._download(context, *attachment)
                    query = await self.services.transcriber.transcribe(audio, filename)
                except Exception as e:
                    logger.warning(f"Reply-to transcription failed: {e}")
                    if isinstance(e, (AuthConfigError, RateLimited)):
                        await update.message.reply_text(user_message(e))
                    else:
                        await update.message.reply_text(REPLY_READ_FAILED)
                    return

        if not query:
            await update.message.reply_text(AI_USAGE)
            return

        await self._answer(update, query)

    async def _handle_audio_message(
        self, update: Update, context: ContextTypes.DEFAULT_TYPE
    ) -> None:
        """Voice note or audio file: transcribe it, keep it as the voice reference, answer it."""
        assert update.message is not None
        attachment = audio_attachment(update.message)
        if attachment is None:
            return

        try:
            audio, filename = await self._download(context, *attachment)
            query = await self.services.transcriber.transcribe(audio, filename)
        except Exception as e:
            logger.warning(f"Audio processing failed: {e}")
            self.json_logger.log(
                "telegram_error", chat_id=self._get_chat_id(update), error=str(e)
            )
            await update.message.reply_text(f"Voice processing failed: {user_message(e)}")
            return

        self._capture(update, audio, filename)
        await self._answer(update, query)

    async def _answer(self, update: Update, query: str) -> None:
        """Ask the relay and reply with text, then audio."""
        assert update.message is not None
        chat_id = self._get_chat_id(update)
        user_id = self._get_user_id(update)

        acquired, error = await self.sessions.acquire(chat_id)
        if not acquired:
            await update.message.reply_text(error or "Busy")
            return

        try:
            self.json_logger.log(
                "telegram_message",
                chat_id=chat_id,
                user_id=user_id,
                message_length=len(query),
            )
            await update.message.chat.send_action("typing")

            history = self.sessions.get_messages(chat_id, limit=self.config.history_limit)
            try:
                result = await self.services.relay.ask(query, history, chat_id=chat_id)
            except Exception as e:
                if not isinstance(e, DaomanError):
                    logger.exception("Error processing message")
                self.json_logger.log("telegram_error", chat_id=chat_id, error=str(e))
                await update.message.reply_text(user_message(e))
                return

            self.sessions.add_exchange(chat_id, query, result.answer)
            await self._reply(update, user_id, result.answer)
        finally:
            self.sessions.release(chat_id)

    async def _reply(self, update: Update, user_id: str, answer: str) -> None:
        assert update.message is not None
        text = format_reply(display_name(update.effective_user), answer)
        await update.message.reply_text(text, disable_web_page_preview=True)

        try:
            audio = await self.services.speaker.speak(user_id, text)
        except Exception as e:
            logger.warning(f"TTS failed: {e}")
            self.json_logger.log("tts_error", user_id=user_id, error=str(e))
            await update.message.reply_text(f"TTS error: {e}")
            return

        await update.message.reply_audio(
            audio=audio,
            filename="reply.mp3",
            title=self.config.reply_title,
        )

    async def _handle_error(self, update: Any, context: ContextTypes.DEFAULT_TYPE) -> None:
        """Log errors raised outside the handlers' own error paths."""
        logger.error("Unhandled error in update handler", exc_info=context.error)
        self.json_logger.log("telegram_error", error=str(context.error))

    async def _post_shutdown(self, application: Application) -> None:
        """Called after Application.shutdown()."""
        await self.services.close()

    def build_app(self) -> Application:
        """Build the Telegram application."""
        self._app = (
            Application.builder()
            .token(self.token)
            .post_shutdown(self._post_shutdown)
            .build()
        )

        self._app.add_handler(TypeHandler(Update, self._handle_cooldown), group=-1)
        self._app.add_handler(CommandHandler("start", self._handle_start))
        self._app.add_handler(CommandHandler("ai", self._handle_ai))
        self._app.add_handler(CommandHandler("voice", self._handle_voice_command))
        self._app.add_handler(CommandHandler("reset", self._handle_reset))
        self._app.add_handler(
            MessageHandler(filters.VOICE | filters.AUDIO, self._handle_audio_message)
        )
        self._app.add_error_handler(self._handle_error)

        return self._app

    def run(self) -> None:
        """Run the bot (blocking): webhook when BASE_URL is set, else polling."""
        app = self.build_app()

        if self.config.use_webhook:
            path = f"telegram/{self.token.split(':', 1)[0]}"
            logger.info(f"Starting Telegram bot (webhook on port {self.config.port})...")
            app.run_webhook(
                listen="0.0.0.0",
                port=self.config.port,
                url_path=path,
                webhook_url=f"{self.config.base_url}/{path}",
            )
            return

        logger.info("Starting Telegram bot (polling)...")
        app.run_polling()
