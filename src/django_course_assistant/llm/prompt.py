from typing import Iterable


class TokenDict(dict):
    """Dict that leaves unknown tokens in place as ``{token}``.

    Templates can therefore be rendered in stages, filling the tokens that
    are known now and keeping the rest for later.
    """

    def __missing__(self, key):
        return f"{{{key}}}"


class Prompt(str):
    """
    A prompt template that renders ``{token}`` placeholders on access.

    Usage:
        Prompt("Question: {question}", question="Is it free?")
        -> str() -> "Question: Is it free?"
    """

    _tokens: dict[str, object]

    def __new__(cls, text: str, /, **tokens):
        obj = super().__new__(cls, text)
        obj._tokens = dict(tokens)
        return obj

    def with_tokens(self, **tokens) -> "Prompt":
        """Return a copy of this template with extra or replaced tokens."""
        return Prompt(super().__str__(), **{**self._tokens, **tokens})

    def render(self, **extra_tokens) -> str:
        tokens = {**self._tokens, **extra_tokens}
        return super().__str__().format_map(TokenDict(tokens))

    def __str__(self) -> str:
        return self.render()

    def __eq__(self, other):
        if isinstance(other, str):
            return str(self) == other

        return super().__eq__(other)

    __hash__ = str.__hash__


def numbered_blocks(blocks: Iterable[str], *, label: str = "Document") -> str:
    """Join text blocks as ``[Label 1]\\n...`` sections separated by blank lines."""
    return "\n\n".join(
        f"[{label} {position}]\n{block}"
        for position, block in enumerate(blocks, start=1)
    )
