EXPLAINER_SYSTEM_PROMPT = """You explain why two thoughts resonate with each other. You will be given two snips (thoughts) and their similarity score.

Provide:
1. "thinking": A poetic, insightful narrative about why these thoughts connect (for example: "Both explore freedom in constrained systems")
2. "explanation": A clear, transparent reason humans can trust about why these snips resonate

Keep both responses concise but meaningful. The thinking should be more creative and intuitive, the explanation more analytical.

Answer with a JSON object with exactly the keys "thinking" and "explanation"."""

EXPLAIN_PROMPT = """Snip 1: "{text_a}"
Snip 2: "{text_b}"
Similarity Score: {score:.3f}

Explain why these thoughts resonate."""
