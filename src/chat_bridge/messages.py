"""User-facing text in each supported language."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class Messages:
    not_allowed: str
    unexpected_error: str
    not_supported: str
    done: str
    stats: str
    greeting: str
    support: str
    command_help: str
    command_stats: str
    command_restart: str
    command_export: str
    nothing_to_export: str

    def format_stats(
        self, currency: str, last: float, today: float, month: float, total: float
    ) -> str:
        return self.stats.format(
            currency=currency, last=last, today=today, month=month, total=total
        )


ENGLISH = Messages(
    not_allowed=(
        "Dear user with ID {user_id}, unfortunately, you are not authorized to use this "
        "chatbot. To request access, please contact the administrator {contact} and "
        "provide your user ID."
    ),
    unexpected_error=(
        "An unexpected error occurred while processing your request. To resolve the "
        "issue, please forward this message to the bot administrator {contact}.\n\n"
        "Error message: {error}."
    ),
    not_supported="This type of message is not supported.",
    done="Done.",
    stats=(
        "**Cost statistics**```\n"
        "Last message: {currency}{last:.2f}\n"
        "Today       : {currency}{today:.2f}\n"
        "This month  : {currency}{month:.2f}\n"
        "All-time    : {currency}{total:.2f}```"
    ),
    greeting=(
        "**Welcome to the {name} chatbot!**\n\nSend me a message to start a conversation "
        "or choose one of the available commands:\n\n"
    ),
    support="For support inquiries, please contact {contact}.",
    command_help="Show the help message.",
    command_stats="Get usage statistics.",
    command_restart=(
        "Restart the conversation. Optionally, pass general instructions "
        "(for example, /restart you are a helpful assistant)."
    ),
    command_export="Export the conversation as a markdown file.",
    nothing_to_export="No conversation to export.",
)

RUSSIAN = Messages(
    not_allowed=(
        "Уважаемый пользователь с ID {user_id}, к сожалению, у вас нет доступа к "
        "использованию этого чат-бота. Чтобы запросить доступ, пожалуйста, свяжитесь с "
        "администратором {contact} и предоставьте ваш ID пользователя."
    ),
    unexpected_error=(
        "Произошла неожиданная ошибка при обработке вашего запроса. Для устранения "
        "проблемы, пожалуйста, перешлите это сообщение администратору бота {contact}.\n\n"
        "Сообщение об ошибке: {error}."
    ),
    not_supported="Этот тип сообщения не поддерживается.",
    done="Готово.",
    stats=(
        "**Статистика расходов**```\n"
        "Последнее сообщ.: {currency}{last:.2f}\n"
        "За сегодня      : {currency}{today:.2f}\n"
        "В этом месяце   : {currency}{month:.2f}\n"
        "За все время    : {currency}{total:.2f}```"
    ),
    greeting=(
        "**Вас приветствует {name} чат-бот!**\n\nОтправь мне сообщение для начала беседы "
        "или выбери одну из доступных команд:\n\n"
    ),
    support="По вопросам поддержки, пожалуйста, обращайтесь к {contact}.",
    command_help="Показать справочное сообщение.",
    command_stats="Получить статистику использования.",
    command_restart=(
        "Перезагрузить разговор. По желанию передай общие инструкции "
        "(например, /restart ты полезный помощник)."
    ),
    command_export="Выгрузить беседу в markdown-файл.",
    nothing_to_export="Нечего выгружать.",
)

_CATALOG = {
    "en": ENGLISH,
    "us": ENGLISH,
    "ru": RUSSIAN,
}


def get_messages(language: str) -> Messages:
    """Return the catalogue for ``language`` (e.g. ``ru``, ``en-US``), English if unknown."""
    primary = language.strip().lower().replace("_", "-").split("-", 1)[0]
    return _CATALOG.get(primary, ENGLISH)
