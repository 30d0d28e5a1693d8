"""
Local Text Generator

Oracle backed by a locally loaded Hugging Face causal language model.
Requires the 'local-llm' extra (transformers, torch).
"""

import logging
from typing import Optional
from dataclasses import dataclass

try:
    from transformers import AutoTokenizer, AutoModelForCausalLM
    import torch
except ImportError as e:
    logger = logging.getLogger(__name__)
    logger.error(f"Required ML dependencies not installed: {e}")
    logger.error("Install with: pip install 'code-reviewer-bot[local-llm]'")
    raise

from .oracle import Oracle, OracleError


logger = logging.getLogger(__name__)


@dataclass
class GenerationConfig:
    """Configuration for LLM generation."""
    max_new_tokens: int = 1024
    temperature: float = 0.2
    top_p: float = 0.9
    do_sample: bool = True
    pad_token_id: Optional[int] = None


class TransformersOracle(Oracle):
    """
    Generates review text with an in-process transformers model.

    Model loading happens once at construction; each generate() call
    is a single, unretried inference.
    """

    def __init__(
        self,
        model_name: str,
        device: Optional[str] = None,
        max_new_tokens: int = 1024,
        temperature: float = 0.2
    ):
        """
        Initialize local generator.

        Args:
            model_name: Hugging Face model identifier
            device: Device to run model on ('cpu', 'cuda', etc.)
            max_new_tokens: Maximum number of generated tokens
            temperature: Sampling temperature (0 disables sampling)
        """
        self.model_name = model_name
        self.device = device or ("cuda" if torch.cuda.is_available() else "cpu")

        logger.info(f"Loading LLM model: {model_name}")
        try:
            self.tokenizer = AutoTokenizer.from_pretrained(model_name)
            self.model = AutoModelForCausalLM.from_pretrained(model_name)

            if self.tokenizer.pad_token is None:
                self.tokenizer.pad_token = self.tokenizer.eos_token

            self.model.to(self.device)
            logger.info(f"Model loaded successfully on {self.device}")

        except Exception as e:
            logger.error(f"Failed to load model {model_name}: {e}")
            raise

        self.generation_config = GenerationConfig(
            max_new_tokens=max_new_tokens,
            temperature=temperature,
            do_sample=temperature > 0,
            pad_token_id=self.tokenizer.pad_token_id
        )

    def generate(self, prompt: str) -> str:
        try:
            inputs = self.tokenizer.encode(prompt, return_tensors="pt").to(self.device)

            sampling = {}
            if self.generation_config.do_sample:
                sampling = {
                    'temperature': self.generation_config.temperature,
                    'top_p': self.generation_config.top_p,
                }

            with torch.no_grad():
                outputs = self.model.generate(
                    inputs,
                    max_new_tokens=self.generation_config.max_new_tokens,
                    do_sample=self.generation_config.do_sample,
                    pad_token_id=self.generation_config.pad_token_id,
                    eos_token_id=self.tokenizer.eos_token_id,
                    num_return_sequences=1,
                    **sampling
                )

            # Decode only the generated continuation
            generated = outputs[0][inputs.shape[1]:]
            response = self.tokenizer.decode(generated, skip_special_tokens=True).strip()

        except Exception as e:
            logger.error(f"Text generation failed: {e}")
            raise OracleError(f"Text generation failed: {e}")

        if not response:
            raise OracleError("Model produced an empty response")
        return response
