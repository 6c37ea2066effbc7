"""Fixed-length tokenization for the SigLIP2 text graph (Gemma tokenizer via `tokenizers`)."""

from dataclasses import dataclass
from pathlib import Path
from typing import Sequence

import numpy as np
from tokenizers import Tokenizer

MAX_LENGTH = 64
PAD_ID = 0


@dataclass(frozen=True)
class TokenBatch:
    """input_ids [1, L] int64 and, when requested, attention_mask [1, L] int64 (1 = token, 0 = padding)."""

    input_ids: np.ndarray
    attention_mask: np.ndarray | None = None

    def as_feed(self) -> dict[str, np.ndarray]:
        feed = {"input_ids": self.input_ids}
        if self.attention_mask is not None:
            feed["attention_mask"] = self.attention_mask
        return feed


def pad_or_truncate(ids: Sequence[int], max_length: int = MAX_LENGTH, pad_id: int = PAD_ID) -> list[int]:
    """Keep the first max_length ids, right-pad with pad_id up to max_length."""
    ids = list(ids[:max_length])
    return ids + [pad_id] * (max_length - len(ids))


class TextTokenizer:
    """Lowercase, encode, then pad/truncate to a fixed length with a batch dimension of 1."""

    def __init__(
        self,
        tokenizer: Tokenizer,
        max_length: int = MAX_LENGTH,
        with_attention_mask: bool = True,
    ) -> None:
        self._tokenizer = tokenizer
        self.max_length = max_length
        self.with_attention_mask = with_attention_mask

    @classmethod
    def from_file(cls, path: str | Path, **kwargs) -> "TextTokenizer":
        return cls(Tokenizer.from_file(str(path)), **kwargs)

    def tokenize(self, text: str) -> TokenBatch:
        # SigLIP2 was trained on lowercased text
        encoding = self._tokenizer.encode(text.lower())
        ids = pad_or_truncate(encoding.ids, self.max_length)
        input_ids = np.array([ids], dtype=np.int64)
        if not self.with_attention_mask:
            return TokenBatch(input_ids=input_ids)
        # tokenizer.json may enable its own padding, so ids alone do not mark real tokens
        mask = np.array([pad_or_truncate(encoding.attention_mask, self.max_length)], dtype=np.int64)
        return TokenBatch(input_ids=input_ids, attention_mask=mask)
