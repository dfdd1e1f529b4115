"""Entry text segmentation."""

from .segmenter import normalize_whitespace, split_sentences, word_tokens

__all__ = ["normalize_whitespace", "split_sentences", "word_tokens"]
