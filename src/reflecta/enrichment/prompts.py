"""Prompt templates for theme naming and entry tagging."""

TAG_PROMPT = """You extract short theme tags from journaling snippets.

Rules:
- Return JSON ONLY.
- 1-4 tags, each 1-3 words, lowercase except proper nouns.
- No names, emails, dates, or locations. No advice, no diagnosis.
- Prefer concrete topics over generic words.

EVIDENCE
{evidence}

SCHEMA
{{"tags": ["tag1", "tag2"], "rationales": {{"tag1": "<=10 words", "tag2": "<=10 words"}}}}"""

LABEL_PROMPT = """Please summarize the themes of this journal entry in one to three words:

{evidence}

Please respond with only the one to three words that summarize the themes.
For example, if you were given the text:

I need to wake up early tomorrow to workout and get some homework done.

You would respond with something like:

Morning plans

You must not answer like this:

Themes of this journal entry include Morning Plans.

Instead, you must wrap your response in brackets. And it must be formatted like this without any other words or preamble:

{{Theme: Morning Plans}}"""


def format_evidence(sentences: list[str]) -> str:
    """Render evidence sentences as a quoted bullet list."""
    return "\n".join('- "{}"'.format(str(s).replace('"', '\\"')) for s in sentences)
