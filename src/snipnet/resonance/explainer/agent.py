import asyncio
import logging

from pydantic_ai import Agent

from snipnet.resonance.config import AppConfig, Config
from snipnet.resonance.config.models import ModelConfig
from snipnet.resonance.explainer.parsing import (
    Explanation,
    fallback_explanation,
    parse_explanation,
)
from snipnet.resonance.explainer.prompts import (
    EXPLAIN_PROMPT,
    EXPLAINER_SYSTEM_PROMPT,
)
from snipnet.resonance.utils import get_model

logger = logging.getLogger(__name__)


class ResonanceExplainer:
    """Asks a language model why two snips resonate.

    Never raises on provider problems: timeouts, transport errors and
    unparseable output all degrade to deterministic fallback text.
    """

    def __init__(
        self,
        config: AppConfig = Config,
        model_config: ModelConfig | None = None,
    ):
        self._config = config
        self._model_config = model_config or config.explainer.model
        self._agent: Agent[None, str] | None = None

    def _get_agent(self) -> Agent[None, str]:
        # Provider setup can fail (missing API key, unknown provider), so it
        # happens on first use where the failure degrades to fallback text.
        if self._agent is None:
            self._agent = Agent(
                model=get_model(self._model_config, self._config),
                output_type=str,
                instructions=EXPLAINER_SYSTEM_PROMPT,
                retries=1,
            )
        return self._agent

    async def explain(self, text_a: str, text_b: str, score: float) -> Explanation:
        """Explain the resonance between two texts with the given similarity."""
        prompt = EXPLAIN_PROMPT.format(text_a=text_a, text_b=text_b, score=score)

        try:
            result = await asyncio.wait_for(
                self._get_agent().run(prompt), timeout=self._config.explainer.timeout
            )
        except Exception as e:
            logger.warning("Resonance explanation failed, using fallback: %s", e)
            return fallback_explanation(score)

        parsed = parse_explanation(result.output, score)
        if not parsed.ok:
            logger.warning(
                "Could not fully parse resonance explanation, "
                "filling missing fields with defaults"
            )
        return parsed.value
