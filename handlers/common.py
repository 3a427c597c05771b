from aiogram.utils.keyboard import InlineKeyboardBuilder, ReplyKeyboardBuilder
from constants.messages import Messages

ANSWER_YES = "answer_yes"
ANSWER_NO = "answer_no"
QUIZ_ACK = "quiz_ack"

def get_main_keyboard(lang: str):
    builder = ReplyKeyboardBuilder()
    builder.button(text=Messages.get("PLAY_BTN", lang))
    builder.button(text=Messages.get("STATS_BTN", lang))
    builder.adjust(2)
    return builder.as_markup(resize_keyboard=True)

def get_answer_keyboard(lang: str):
    builder = InlineKeyboardBuilder()
    builder.button(text=Messages.get("NO_BTN", lang), callback_data=ANSWER_NO)
    builder.button(text=Messages.get("YES_BTN", lang), callback_data=ANSWER_YES)
    builder.adjust(2)
    return builder.as_markup()

def get_ack_keyboard(button_text: str):
    """Single button that dismisses a result or error message."""
    builder = InlineKeyboardBuilder()
    builder.button(text=button_text, callback_data=QUIZ_ACK)
    return builder.as_markup()
