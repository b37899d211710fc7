"""Scripted FAQ replies for the support chat widget."""
import re

GREETING = "Hi! I'm your freelance assistant bot. Ask me anything about the site or freelancers."

FALLBACK_REPLY = "Hmm... I'm not sure about that. Could you rephrase or ask something else?"

_GREETING_WORDS = re.compile(r"\b(hello|hi)\b")


def _mentions_freelancer(text: str) -> bool:
    return "freelancer" in text


def _asks_how_to_hire(text: str) -> bool:
    return "how" in text and "hire" in text


def _mentions_payment(text: str) -> bool:
    return "payment" in text


def _asks_for_support(text: str) -> bool:
    return "contact" in text or "support" in text


def _is_greeting(text: str) -> bool:
    return bool(_GREETING_WORDS.search(text))


# First matching rule wins.
RULES = (
    (
        _mentions_freelancer,
        "Freelancers on our platform are verified and skilled. "
        "You can view their profile and reviews before hiring.",
    ),
    (
        _asks_how_to_hire,
        'To hire a freelancer, go to their profile and click "Hire Now" or send them a message.',
    ),
    (
        _mentions_payment,
        "All payments are processed securely through our platform. You pay only when the work is done.",
    ),
    (
        _asks_for_support,
        "You can reach support by typing your issue here or emailing us at support@example.com.",
    ),
    (_is_greeting, "Hey there! How can I help you today?"),
)


def reply_to(message: str) -> str:
    text = (message or "").lower()
    for matches, reply in RULES:
        if matches(text):
            return reply
    return FALLBACK_REPLY
