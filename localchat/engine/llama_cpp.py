import os

from localchat.internal.logging import get_logger

logger = get_logger(__name__)


class LlamaCppModel:
    """
    Binding over llama-cpp-python.

    Constructed without arguments and loaded with `load(model_path)`;
    `generate(prompt)` returns the raw completion dict
    (`{"choices": [{"text": ...}], ...}`).
    """

    def __init__(self):
        self.llm = None

    def load(self, model_path: str):
        from llama_cpp import Llama

        if self.llm is not None:
            self.unload()  # Ensure any previously loaded model is unloaded

        n_ctx = int(os.environ.get("LOCALCHAT_CTX", 4096))
        n_threads = int(os.environ.get("LOCALCHAT_THREADS", max((os.cpu_count() or 2) - 1, 1)))
        verbose = os.environ.get("LOCALCHAT_VERBOSE", "false").lower() == "true"

        logger.info("Loading llama.cpp model", path=str(model_path), n_ctx=n_ctx, n_threads=n_threads)
        try:
            self.llm = Llama(
                model_path=str(model_path),
                n_ctx=n_ctx,
                n_threads=n_threads,
                verbose=verbose,
            )
        except Exception:
            self.llm = None
            raise
        logger.info("llama.cpp model loaded")

    def generate(self, prompt: str) -> dict:
        if self.llm is None:
            raise RuntimeError("Model not loaded. Call load() first.")

        return self.llm(
            prompt,
            max_tokens=int(os.environ.get("LOCALCHAT_MAX_TOKENS", 512)),
            temperature=float(os.environ.get("LOCALCHAT_TEMPERATURE", 0.7)),
        )

    def unload(self):
        if self.llm is not None:
            logger.info("Unloading llama.cpp model")
            del self.llm
            self.llm = None
