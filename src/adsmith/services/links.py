"""Contact link construction.

Ads link to a messaging contact or a web page. The user picks the kind of
link first, then types the number, handle, or address.
"""

import re
from enum import Enum
from typing import Optional

from adsmith.models.prompt import PromptChoice, PromptRequest, Submitted
from adsmith.services.exceptions import ValidationFailure
from adsmith.services.prompt_queue import PromptQueue
from adsmith.utils.logging import get_logger


logger = get_logger(__name__)

WHATSAPP_BASE = "https://wa.me/"
TELEGRAM_BASE = "https://t.me/"

# "<scheme>://" or one of the schemes that are written without slashes
_SCHEME_RE = re.compile(r"^(?:[a-zA-Z][a-zA-Z0-9+.\-]*://|mailto:|tel:|sms:)", re.IGNORECASE)


class ContactPlatform(str, Enum):
    """Kinds of link the user can attach."""

    WHATSAPP = "1"
    TELEGRAM = "2"
    URL = "3"


PLATFORM_CHOICES = [
    PromptChoice(tag=ContactPlatform.WHATSAPP.value, label="WhatsApp"),
    PromptChoice(tag=ContactPlatform.TELEGRAM.value, label="Telegram"),
    PromptChoice(tag=ContactPlatform.URL.value, label="Web address"),
]

_INPUT_PROMPTS = {
    ContactPlatform.WHATSAPP: (
        "WhatsApp Number",
        "Enter WhatsApp number (with country code, e.g., 911234567890):",
    ),
    ContactPlatform.TELEGRAM: (
        "Telegram Username",
        "Enter Telegram username (without @):",
    ),
    ContactPlatform.URL: (
        "Link Address",
        "Enter the web address to link to:",
    ),
}


def whatsapp_link(number: str) -> Optional[str]:
    """Build a wa.me deep link from a phone number.

    Returns:
        Link, or None for blank input

    Raises:
        ValidationFailure: If the input contains no digits at all
    """
    if not number or not number.strip():
        return None
    digits = re.sub(r"\D", "", number)
    if not digits:
        raise ValidationFailure(f"WhatsApp number must contain digits: {number.strip()!r}")
    return f"{WHATSAPP_BASE}{digits}"


def telegram_link(username: str) -> Optional[str]:
    """Build a t.me profile link from a username (a leading @ is dropped)."""
    if not username or not username.strip():
        return None
    handle = username.strip().lstrip("@").strip()
    if not handle:
        raise ValidationFailure("Telegram username is empty")
    return f"{TELEGRAM_BASE}{handle}"


def web_link(address: str) -> Optional[str]:
    """Use an address verbatim if it has a scheme, else prefix https://."""
    if not address or not address.strip():
        return None
    address = address.strip()
    if _SCHEME_RE.match(address):
        return address
    return f"https://{address}"


def build_link(platform: ContactPlatform, raw: str) -> Optional[str]:
    """Build the link URL for a platform from user input.

    Args:
        platform: Link kind chosen by the user
        raw: Text typed by the user

    Returns:
        URL, or None when the input is blank (the operation is abandoned)

    Raises:
        ValidationFailure: If the input is present but malformed
    """
    platform = ContactPlatform(platform)
    if platform == ContactPlatform.WHATSAPP:
        return whatsapp_link(raw)
    if platform == ContactPlatform.TELEGRAM:
        return telegram_link(raw)
    return web_link(raw)


async def request_link(prompts: PromptQueue) -> Optional[str]:
    """Ask the user for a link: platform choice, then the platform's input.

    Returns:
        URL, or None if the user dismissed, cancelled, or left the input blank

    Raises:
        ValidationFailure: If the typed input is malformed
    """
    choice = await prompts.ask(PromptRequest.choice(
        "Select Contact Platform",
        "Choose platform: (1) WhatsApp, (2) Telegram or (3) Web address",
        PLATFORM_CHOICES,
    ))
    if not isinstance(choice, Submitted):
        return None

    platform = ContactPlatform(choice.value)
    title, message = _INPUT_PROMPTS[platform]
    answer = await prompts.ask(PromptRequest.text(title, message))
    if not isinstance(answer, Submitted):
        return None

    link = build_link(platform, answer.value)
    logger.info("link_built", platform=platform.name.lower(), empty=link is None)
    return link
