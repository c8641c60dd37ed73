import logging

from any_llm import AnyLLM

logger = logging.getLogger(__name__)


class LLMService:
    """Binds an any-llm client to a single model.

    The assistant holds two of these, one for the embedding model and one for
    the generation model. Both may point at the same provider.
    """

    def __init__(self, *, client: AnyLLM, model: str):
        self.client = client
        self.model = model

    def __repr__(self):
        return f"<{self.__class__.__name__} {self.service_id}>"

    @classmethod
    def create(cls, *, provider: str, model: str, **kwargs) -> "LLMService":
        """Build a client for ``provider``. Extra kwargs such as ``api_base``
        are passed to any-llm."""
        client = AnyLLM.create(provider=provider, **kwargs)
        return cls(client=client, model=model)

    @property
    def provider_name(self) -> str:
        return self.client.PROVIDER_NAME

    @property
    def service_id(self) -> str:
        return f"{self.__class__.__name__}:{self.provider_name}:{self.model}"

    def completion(self, messages: list[dict], *, stream: bool = False, **kwargs):
        """Chat completion, or an iterator of completion chunks when ``stream``."""
        if stream:
            kwargs["stream"] = True
        logger.debug(
            "Requesting %s completion from %s",
            "streamed" if stream else "blocking",
            self.service_id,
        )
        return self.client.completion(model=self.model, messages=messages, **kwargs)

    def embedding(self, text: str, **kwargs):
        logger.debug("Requesting embedding from %s", self.service_id)
        return self.client._embedding(model=self.model, inputs=text, **kwargs)
