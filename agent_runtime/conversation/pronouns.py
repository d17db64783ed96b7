"""
First-person to second-person rewriting for persona prompts.

Persona authors write naturally ("I am Coach Max, I love...") while the
model receives instruction text ("You are Coach Max, you love...").
"""

import re

# Order matters: contractions and multi-word forms before the bare pronoun.
FIRST_TO_SECOND_PERSON = [
    (re.compile(r"\bI'm\b"), "you're"),
    (re.compile(r"\bI am\b"), "you are"),
    (re.compile(r"\bI've\b"), "you've"),
    (re.compile(r"\bI'd\b"), "you'd"),
    (re.compile(r"\bI'll\b"), "you'll"),
    (re.compile(r"\bme\b"), "you"),
    (re.compile(r"\bmy\b"), "your"),
    (re.compile(r"\bmine\b"), "yours"),
    (re.compile(r"\bmyself\b"), "yourself"),
    (re.compile(r"\bI\b"), "you"),
]

_FIRST_PERSON = re.compile(
    r"\b(I am|I'm|I've|I'd|I'll|I\b|me\b|my\b|mine\b|myself\b)", re.IGNORECASE
)
_SECOND_PERSON = re.compile(
    r"\b(You are|You're|You've|You'd|You'll|You\b|your\b|yours\b|yourself\b)", re.IGNORECASE
)


def first_to_second_person(text: str) -> str:
    """Rewrite first-person pronouns as second person and repair capitalization."""
    for pattern, replacement in FIRST_TO_SECOND_PERSON:
        text = pattern.sub(replacement, text)

    text = re.sub(r"^you\b", "You", text)
    text = re.sub(r"([.!?]\s+)you\b", r"\1You", text)
    text = re.sub(r"(\n\s*)you\b", r"\1You", text)
    return text


def is_first_person(text: str) -> bool:
    return bool(_FIRST_PERSON.search(text))


def is_second_person(text: str) -> bool:
    return bool(_SECOND_PERSON.search(text))


def to_instruction_voice(persona_prompt: str) -> str:
    """Convert a persona prompt only when it reads as first person."""
    if is_first_person(persona_prompt):
        return first_to_second_person(persona_prompt)
    return persona_prompt
