"""
Response length and tone profiles keyed by a 1-10 verbosity setting.

Lower verbosity gives shorter, punchier replies; higher verbosity gives
longer, more detailed ones. Sentence limits are enforced by truncation,
never by rejecting the reply.
"""

import logging
import math
import re
from dataclasses import dataclass
from typing import Any

logger = logging.getLogger(__name__)

DEFAULT_LEVEL = 4
EMPTY_OUTPUT_FALLBACK = "I'm here and ready to help! What would you like to know?"
SENTENCE_PATTERN = re.compile(r"[^.!?]+[.!?]+")


@dataclass(frozen=True)
class VerbosityProfile:
    level: int
    max_tokens: int
    max_sentences: int
    temperature: float
    description: str
    tone: str


PROFILES = {
    1: VerbosityProfile(1, 200, 2, 0.3, "Extremely brief and to the point",
                        "Keep sentences extremely short and to the point."),
    2: VerbosityProfile(2, 250, 4, 0.3, "Brief and concise",
                        "Keep sentences short and to the point."),
    3: VerbosityProfile(3, 300, 6, 0.3, "Somewhat concise",
                        "Keep sentences somewhat short."),
    4: VerbosityProfile(4, 350, 8, 0.3, "Balanced - clear and concise",
                        "Use clear, concise sentences."),
    5: VerbosityProfile(5, 400, 10, 0.4, "Balanced - moderate detail",
                        "Provide moderate detail with clear sentences."),
    6: VerbosityProfile(6, 500, 12, 0.5, "Moderately detailed",
                        "Provide helpful detail without being excessive."),
    7: VerbosityProfile(7, 600, 14, 0.5, "Detailed and thorough",
                        "Provide thorough explanations with supporting details."),
    8: VerbosityProfile(8, 700, 16, 0.6, "Very detailed",
                        "Provide comprehensive explanations with examples and context."),
    9: VerbosityProfile(9, 800, 18, 0.6, "Extremely detailed",
                        "Provide extensive detail, examples, and thorough explanations."),
    10: VerbosityProfile(10, 1000, 20, 0.7, "Maximum detail and depth",
                         "Provide exhaustive detail with multiple examples, context, "
                         "and complete explanations."),
}


def get_profile(verbosity: Any) -> VerbosityProfile:
    """Profile for a verbosity setting, clamped to 1-10.

    Anything that is not a whole number (4.5, None, "loud") gets the
    balanced level 4 profile.
    """
    if isinstance(verbosity, bool) or not isinstance(verbosity, (int, float)):
        return PROFILES[DEFAULT_LEVEL]
    if isinstance(verbosity, float) and math.isnan(verbosity):
        return PROFILES[DEFAULT_LEVEL]
    level = max(1, min(10, verbosity))
    if isinstance(level, float) and not level.is_integer():
        return PROFILES[DEFAULT_LEVEL]
    return PROFILES[int(level)]


def system_prompt_rule(verbosity: Any) -> str:
    profile = get_profile(verbosity)
    rule = (
        "CRITICAL RESPONSE CONSTRAINT\n"
        f"{profile.tone}\n"
        f"\nYou MUST respond in at most {profile.max_sentences} sentences.\n"
        "Each sentence must be short and self-contained.\n"
        "Do NOT use bullet points or numbered lists.\n"
        "Do NOT combine multiple ideas with semicolons.\n"
        "CRITICAL: Always end your response cleanly. NEVER cut off mid-sentence or mid-word.\n"
    )
    # The follow-up stage asks the question for low-verbosity personas.
    if profile.level <= 4:
        rule += (
            "\nDo NOT ask questions in your response - make statements only. "
            "A follow-up question will be added separately.\n"
        )
    return rule


def structured_output_instructions(verbosity: Any) -> str:
    profile = get_profile(verbosity)
    return (
        "\n\nCRITICAL OUTPUT RULES\n"
        '- You MUST return a JSON object with ONLY the key "sentences"\n'
        "- The value MUST be an array of strings (complete sentences)\n"
        "- Each sentence MUST be complete and standalone\n"
        f"- Maximum {profile.max_sentences} sentences\n"
        "- Use your persona's voice, style, and emojis in the sentences\n"
        "- Do NOT include explanations about the rules\n"
    )


def enforce_sentence_limit(sentences: Any, verbosity: Any) -> list[str]:
    """Truncate to the profile's sentence limit; never return an empty reply."""
    profile = get_profile(verbosity)

    if not isinstance(sentences, list):
        logger.error("Expected a list of sentences, got %s", type(sentences).__name__)
        return [str(sentences)]

    if len(sentences) > profile.max_sentences:
        logger.warning(
            "Model generated %d sentences, truncating to %d",
            len(sentences), profile.max_sentences,
        )
        return sentences[:profile.max_sentences]

    if not sentences or all(not s or not str(s).strip() for s in sentences):
        logger.warning("Empty sentence list, using fallback reply")
        return [EMPTY_OUTPUT_FALLBACK]

    return sentences


def split_sentences(text: str) -> list[str]:
    """Split text into sentences, keeping trailing text without punctuation."""
    found = list(SENTENCE_PATTERN.finditer(text))
    if not found:
        return [text] if text.strip() else []
    sentences = [m.group(0) for m in found]
    remainder = text[found[-1].end():]
    if remainder.strip():
        sentences.append(remainder)
    return sentences


def count_sentences(text: str) -> int:
    matches = SENTENCE_PATTERN.findall(text)
    return len(matches) if matches else 1


def truncate_text(text: str, max_sentences: int) -> str:
    """Keep at most ``max_sentences`` sentences of free text."""
    sentences = split_sentences(text)
    if len(sentences) <= max_sentences:
        return text
    logger.warning("Reply has %d sentences, truncating to %d", len(sentences), max_sentences)
    return "".join(sentences[:max_sentences]).strip()


def get_description(verbosity: Any) -> str:
    return get_profile(verbosity).description
