"""Order message thread: commands, handler and the English-only input filter."""

import re
from dataclasses import dataclass

import structlog
from protean import handle
from protean.fields import Identifier, Integer, String, Text
from protean.utils.globals import current_domain

from ordering.domain import ordering
from ordering.order.order import Order
from ordering.order.status import Sender

logger = structlog.get_logger(__name__)

# Hangul, kana and CJK ideographs/punctuation, including halfwidth forms
_CJK_RANGES = (
    (0x1100, 0x11FF),  # Hangul Jamo
    (0x3000, 0x303F),  # CJK symbols and punctuation
    (0x3040, 0x309F),  # Hiragana
    (0x30A0, 0x30FF),  # Katakana
    (0x3130, 0x318F),  # Hangul compatibility Jamo
    (0x3400, 0x4DBF),  # CJK extension A
    (0x4E00, 0x9FFF),  # CJK unified ideographs
    (0xA960, 0xA97F),  # Hangul Jamo extended A
    (0xAC00, 0xD7AF),  # Hangul syllables
    (0xD7B0, 0xD7FF),  # Hangul Jamo extended B
    (0xF900, 0xFAFF),  # CJK compatibility ideographs
    (0xFF65, 0xFFDC),  # halfwidth katakana and Hangul
    (0x20000, 0x2FA1F),  # CJK extensions B and later
)

_CJK_PATTERN = re.compile("[" + "".join(f"{chr(low)}-{chr(high)}" for low, high in _CJK_RANGES) + "]")


@dataclass(frozen=True)
class FilteredText:
    text: str
    stripped: bool


def filter_to_english(text: str | None) -> FilteredText:
    """Strip CJK and Hangul characters from buyer text.

    ``stripped`` tells the caller to warn the buyer that characters were removed.
    """
    if not text:
        return FilteredText(text=text or "", stripped=False)
    cleaned = _CJK_PATTERN.sub("", text)
    return FilteredText(text=cleaned, stripped=cleaned != text)


@dataclass(frozen=True)
class PostedMessage:
    message_id: int
    filtered: bool


@ordering.command(part_of="Order")
class PostMessage:
    order_id = Identifier(required=True)
    sender = String(required=True, max_length=10, choices=Sender)
    text = Text()
    image_url = String(max_length=1000)


@ordering.command(part_of="Order")
class RemoveMessage:
    order_id = Identifier(required=True)
    message_id = Integer(required=True)
    removed_by = String(required=True, max_length=10, choices=Sender)


@ordering.command_handler(part_of=Order)
class MessagingHandler:
    @handle(PostMessage)
    def post_message(self, command):
        text, filtered = command.text, False
        if command.sender == Sender.USER.value:
            result = filter_to_english(command.text)
            text, filtered = result.text, result.stripped

        repo = current_domain.repository_for(Order)
        order = repo.get(command.order_id)
        message = order.post_message(Sender(command.sender), text=text, image_url=command.image_url)
        repo.add(order)

        if filtered:
            logger.info("Removed non-English characters from message", order_id=str(command.order_id))
        return PostedMessage(message_id=message.sequence, filtered=filtered)

    @handle(RemoveMessage)
    def remove_message(self, command):
        repo = current_domain.repository_for(Order)
        order = repo.get(command.order_id)
        order.remove_message(command.message_id, removed_by=Sender(command.removed_by))
        repo.add(order)
