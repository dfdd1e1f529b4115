"""Best-effort parsing of model output that should contain JSON or a short label.

``parse_json_response`` tries each strategy in ``JSON_STRATEGIES`` in
order; every strategy returns the parsed value or ``None``, so total
failure is ``None`` rather than an exception.
"""

import json
import logging
import re
from typing import Any, Callable

logger = logging.getLogger(__name__)

_FENCED = re.compile(r"```(?:json)?\s*\n?(.*?)\n?\s*```", re.DOTALL | re.IGNORECASE)
_BRACKET_LABEL = re.compile(r"\{\s*(?:theme|label)\s*:\s*([^{}]+?)\s*\}", re.IGNORECASE)
_SMART_QUOTES = str.maketrans({"“": '"', "”": '"', "‘": "'", "’": "'"})

GENERIC_LABELS = {"", "Label", "Theme", "Them", "General", "Misc"}
MAX_LABEL_CHARS = 32
MAX_TAGS = 4


def _loads(text: str) -> Any | None:
    try:
        return json.loads(text)
    except (json.JSONDecodeError, TypeError):
        return None


def parse_strict(text: str) -> Any | None:
    return _loads(text.strip())


def parse_fenced(text: str) -> Any | None:
    """JSON inside a ```json ... ``` (or bare ```) block."""
    match = _FENCED.search(text)
    if not match:
        return None
    return _loads(match.group(1).strip())


def parse_balanced_braces(text: str) -> Any | None:
    """The first balanced ``{...}`` block, ignoring braces inside strings."""
    start = text.find("{")
    if start < 0:
        return None
    depth, in_string, escaped = 0, False, False
    for i in range(start, len(text)):
        ch = text[i]
        if in_string:
            if escaped:
                escaped = False
            elif ch == "\\":
                escaped = True
            elif ch == '"':
                in_string = False
        elif ch == '"':
            in_string = True
        elif ch == "{":
            depth += 1
        elif ch == "}":
            depth -= 1
            if depth == 0:
                return _loads(text[start:i + 1])
    return None


def repair_json(text: str) -> str:
    """Heuristic fixes for near-JSON emitted by small models."""
    t = text.strip().translate(_SMART_QUOTES)

    start = t.find("{")
    if start < 0:
        start = t.find('"')
    if start > 0:
        t = t[start:]

    if '"' not in t:
        t = t.replace("'", '"')

    # Missing commas between adjacent values and keys
    t = re.sub(r'"\s+"', '", "', t)
    t = re.sub(r'([}\]])\s*(["{\[])', r"\1, \2", t)
    t = re.sub(r'(\d|true|false|null)\s+"', r'\1, "', t)
    # Unquoted keys
    t = re.sub(r'([{,]\s*)([A-Za-z_][\w-]*)\s*:', r'\1"\2":', t)
    t = re.sub(r':\s*"null"', ": null", t)
    t = re.sub(r"\s{2,}", " ", t)

    if not t.startswith("{"):
        t = "{" + t
    t += "]" * max(0, t.count("[") - t.count("]"))
    t += "}" * max(0, t.count("{") - t.count("}"))

    return re.sub(r",\s*([}\]])", r"\1", t)


def parse_repaired(text: str) -> Any | None:
    return _loads(repair_json(text))


JSON_STRATEGIES: tuple[Callable[[str], Any | None], ...] = (
    parse_strict,
    parse_fenced,
    parse_balanced_braces,
    parse_repaired,
)


def parse_json_response(text: str | None) -> Any | None:
    """Parse JSON out of free text; ``None`` when every strategy fails."""
    if not text or not text.strip():
        return None
    for strategy in JSON_STRATEGIES:
        value = strategy(text)
        if value is not None:
            return value
    logger.warning(f"Could not parse JSON from model output: {text[:80]!r}")
    return None


def extract_generated_text(output: Any) -> str:
    """Pull the generated string out of the shapes pipelines return."""
    if output is None:
        return ""
    if isinstance(output, str):
        return output
    if isinstance(output, (list, tuple)):
        if not output:
            return ""
        return extract_generated_text(output[0])
    if isinstance(output, dict):
        for key in ("generated_text", "summary_text", "text"):
            if isinstance(output.get(key), str):
                return output[key]
    return ""


def clean_label(text: str | None) -> str | None:
    """Title-cased short label, or None for empty/generic text."""
    if not text:
        return None
    t = re.sub(r"```.*?```", "", str(text), flags=re.DOTALL)
    t = t.strip().strip("\"' ")
    t = re.sub(r"[^\w'’\- ]|_", " ", t)
    t = re.sub(r"\s+", " ", t).strip()
    t = " ".join(w[0].upper() + w[1:] for w in t.split(" ") if w)
    if t in GENERIC_LABELS or len(t) < 3:
        return None
    return t[:MAX_LABEL_CHARS].strip()


def parse_label(text: str | None) -> dict[str, str | None]:
    """Parse a theme name from generated text.

    Tries a ``{Theme: ...}`` bracket first, then a JSON object with a
    ``label`` key, then the cleaned raw text.
    """
    name = {"label": None, "alias": None, "description": None}
    if not text or not text.strip():
        return name

    match = _BRACKET_LABEL.search(text)
    if match:
        name["label"] = clean_label(match.group(1))
        if name["label"]:
            return name

    parsed = parse_json_response(text) if "{" in text else None
    if isinstance(parsed, dict):
        name["label"] = clean_label(parsed.get("label") or parsed.get("theme"))
        for key in ("alias", "description"):
            if isinstance(parsed.get(key), str) and parsed[key].strip():
                name[key] = parsed[key].strip()
        if name["label"]:
            return name

    name["label"] = clean_label(text)
    return name


def sanitize_tags(obj: Any) -> list[str]:
    """Keep 1-3 word tags without e-mails, URLs or long digit runs."""
    raw = obj.get("tags") if isinstance(obj, dict) else obj
    if not isinstance(raw, list):
        return []

    tags: list[str] = []
    for t in raw:
        if not isinstance(t, str):
            continue
        s = re.sub(r"\s+", " ", t).strip()
        if not s:
            continue
        if re.search(r"@|https?://", s) or re.search(r"\b\d{3,}\b", s):
            continue
        if len(s.split(" ")) > 3:
            continue
        tags.append(s)
        if len(tags) >= MAX_TAGS:
            break
    return tags
