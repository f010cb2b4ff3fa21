"""Prompt builders for each task kind.

Every builder is a pure function returning the prompt together with the
sampling parameters that suit the task. The raw input always comes last,
fenced with triple quotes.
"""

from __future__ import annotations

from rephrase_ai.llm.provider import GenerationParameters

REWRITE_TEMPERATURE = 0.7
ANALYSIS_TEMPERATURE = 0.2
RESEARCH_TEMPERATURE = 0.4

REWRITE_MAX_TOKENS = 4096
ANALYSIS_MAX_TOKENS = 4096
RESEARCH_MAX_TOKENS = 8192

DEFAULT_TONE = "neutral"
DEFAULT_COMPLEXITY = "general"


def _delimited(label: str, text: str) -> str:
    return f'{label}:\n"""\n{text}\n"""'


def _parse_keywords(freeze_keywords: str | None) -> list[str]:
    if not freeze_keywords:
        return []
    return [k.strip() for k in freeze_keywords.split(",") if k.strip()]


def build_rewrite_prompt(
    text: str,
    tone: str | None = None,
    complexity: str | None = None,
    dialect: str | None = None,
    freeze_keywords: str | None = None,
) -> GenerationParameters:
    """Instruction block for the humanize (rewrite) task."""

    tone = (tone or "").strip() or DEFAULT_TONE
    complexity = (complexity or "").strip() or DEFAULT_COMPLEXITY

    directives = [
        f"TONE: Adopt a {tone} tone throughout the text.",
        f"AUDIENCE: Adjust vocabulary and sentence structure so the reading complexity "
        f"suits a {complexity} audience.",
        "CLARITY: Correct grammar, awkward phrasing and poor flow. Vary sentence length "
        "and structure the way a skilled human writer would.",
    ]

    dialect = (dialect or "").strip()
    if dialect:
        directives.append(
            f"DIALECT (STRICT): Write exclusively in {dialect}. Spelling, vocabulary and "
            "idioms must all follow this dialect."
        )

    keywords = _parse_keywords(freeze_keywords)
    if keywords:
        quoted = ", ".join(f'"{k}"' for k in keywords)
        directives.append(
            f"KEYWORD PRESERVATION (STRICT): The following keywords must appear in the "
            f"rewritten text exactly as written, verbatim and unchanged: {quoted}."
        )

    directives.append(
        "OUTPUT FORMAT: Respond ONLY with the rewritten text. Do not add any preamble, "
        "introduction, explanation or concluding remarks."
    )

    numbered = "\n".join(f"{i}. {d}" for i, d in enumerate(directives, start=1))
    prompt = (
        "You are an expert editor. Rewrite the text below so it reads as natural, "
        "engaging, human-written prose. Follow every directive.\n\n"
        f"DIRECTIVES:\n{numbered}\n\n"
        f"{_delimited('ORIGINAL TEXT', text)}"
    )
    return GenerationParameters(
        prompt=prompt,
        max_output_tokens=REWRITE_MAX_TOKENS,
        temperature=REWRITE_TEMPERATURE,
    )


def build_detection_prompt(text: str) -> GenerationParameters:
    """Forensic AI-likelihood analysis returning the detection JSON shape."""

    prompt = (
        "You are a forensic linguist specialising in identifying machine-generated text. "
        "Analyse the text below and estimate the likelihood that it was written by an AI.\n\n"
        "Weigh these signals:\n"
        "- Lexical diversity: limited or repetitive vocabulary, overuse of stock words.\n"
        "- Syntactic repetition: recurring sentence templates, uniform sentence length.\n"
        "- Content vacuity: generic statements that sound informative but say little.\n"
        "- Unnatural phrasing: formulaic transitions, hedging, over-polished wording.\n"
        "- Tonal uniformity: the absence of personal voice, emotion or variation.\n\n"
        "Respond ONLY with a single minified JSON object, with no markdown and no other "
        "text, matching exactly this shape:\n"
        '{"overall_score":<integer 0-100, 0 = certainly human, 100 = certainly AI>,'
        '"analysis":"<two or three sentence explanation>",'
        '"red_flags":["<specific phrase or pattern found in the text>", ...]}\n'
        'If you find no red flags, return an empty list: "red_flags":[].\n\n'
        f"{_delimited('TEXT TO ANALYSE', text)}"
    )
    return GenerationParameters(
        prompt=prompt,
        max_output_tokens=ANALYSIS_MAX_TOKENS,
        temperature=ANALYSIS_TEMPERATURE,
    )


def build_audit_prompt(text: str) -> GenerationParameters:
    """Similarity audit against the model's training knowledge."""

    prompt = (
        "You are an originality auditor. Compare the text below against the published "
        "material you learned during training and identify passages that are semantically "
        "or verbatim similar to existing works. This is NOT a live web search: rely only "
        "on your training knowledge and describe sources rather than inventing URLs.\n\n"
        "Respond ONLY with a single minified JSON object, with no markdown and no other "
        "text, matching exactly this shape:\n"
        '{"similarity_found":<true|false>,'
        '"overall_confidence":<number 0.0-1.0>,'
        '"matches":[{"snippet":"<passage from the text>",'
        '"source_description":"<work, author or kind of source it resembles>",'
        '"confidence":<number 0.0-1.0>}, ...]}\n'
        'If no similarity is found, set "similarity_found" to false, report a low '
        '"overall_confidence", and return an empty list: "matches":[]. Never omit '
        '"matches".\n\n'
        f"{_delimited('TEXT TO AUDIT', text)}"
    )
    return GenerationParameters(
        prompt=prompt,
        max_output_tokens=ANALYSIS_MAX_TOKENS,
        temperature=ANALYSIS_TEMPERATURE,
    )


def build_research_prompt(topic: str) -> GenerationParameters:
    """Structured briefing on a topic."""

    prompt = (
        "You are a research analyst. Prepare a concise, factual briefing on the topic "
        "below for an informed non-specialist.\n\n"
        "Cover: an executive summary, the historical context, the core concepts, the main "
        "critiques or controversies, and practical applications.\n\n"
        "Respond ONLY with a single minified JSON object, with no markdown and no other "
        "text, matching exactly this shape:\n"
        '{"topic":"<the topic>",'
        '"executive_summary":"<one paragraph>",'
        '"historical_context":"<one paragraph>",'
        '"core_concepts":["<concept and short explanation>", ...],'
        '"critiques":["<critique>", ...],'
        '"applications":["<application>", ...]}\n'
        "Use an empty list for any section with nothing to report.\n\n"
        f"{_delimited('TOPIC', topic)}"
    )
    return GenerationParameters(
        prompt=prompt,
        max_output_tokens=RESEARCH_MAX_TOKENS,
        temperature=RESEARCH_TEMPERATURE,
    )
