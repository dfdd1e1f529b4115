"""Text generation backends: Claude API and local transformers models."""

from typing import Any

from .base import GenerationBackend

# Options understood by local seq2seq models; others are dropped
_HF_OPTIONS = (
    "max_new_tokens", "min_new_tokens", "num_beams", "do_sample",
    "repetition_penalty", "length_penalty", "temperature",
)


class ClaudeGenerator(GenerationBackend):
    """Generates text with the Anthropic Messages API."""

    def __init__(self, api_key: str | None, model: str = "claude-sonnet-4-20250514"):
        if not api_key:
            raise ValueError("Claude API key required for generation. Set ANTHROPIC_API_KEY or claude_api_key in config.")

        import anthropic
        self.client = anthropic.Anthropic(api_key=api_key)
        self.model = model

    def generate(self, prompt: str, **options: Any) -> str:
        response = self.client.messages.create(
            model=self.model,
            max_tokens=int(options.get("max_new_tokens", 96)),
            temperature=float(options.get("temperature", 0.0)),
            messages=[{"role": "user", "content": prompt}],
        )
        return response.content[0].text


class TransformersGenerator(GenerationBackend):
    """Generates text with a local ``text2text-generation`` pipeline."""

    def __init__(self, model_name: str = "MBZUAI/LaMini-Flan-T5-77M"):
        self.model_name = model_name
        self._pipeline = None

    @property
    def pipeline(self):
        """Lazy-load the generation pipeline."""
        if self._pipeline is None:
            from transformers import pipeline
            self._pipeline = pipeline("text2text-generation", model=self.model_name)
        return self._pipeline

    def generate(self, prompt: str, **options: Any) -> Any:
        kwargs = {k: v for k, v in options.items() if k in _HF_OPTIONS}
        # Greedy decoding unless sampling was asked for explicitly
        if not kwargs.get("do_sample"):
            kwargs.pop("temperature", None)
        return self.pipeline(prompt, **kwargs)
