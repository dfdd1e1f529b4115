"""Generation-backed naming and tagging."""

from .enricher import ThemeNamer, infer_label_from_sentences
from .parsing import parse_json_response, parse_label

__all__ = ["ThemeNamer", "infer_label_from_sentences", "parse_json_response", "parse_label"]
