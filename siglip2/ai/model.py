"""SigLIP2 text/image embeddings and similarity on top of onnxruntime sessions."""

import logging
import threading
from pathlib import Path
from typing import Callable, Generic, Mapping, Sequence, TypeVar

import numpy as np
import onnxruntime as ort

from siglip2.ai.fetcher import (
    TEXT_MODEL_FILE,
    TOKENIZER_FILE,
    VISION_MODEL_FILE,
    download_models,
    models_exist,
)
from siglip2.ai.image_preprocessor import ImagePreprocessor
from siglip2.ai.registry import DEFAULT_MODEL, DEFAULT_QUANTIZATION, describe
from siglip2.ai.tokenizer import TextTokenizer
from siglip2.core.config import get_models_dir

_log = logging.getLogger(__name__)

T = TypeVar("T")

# Checked in order; the first output of the graph is used when none match.
OUTPUT_CANDIDATES = ("pooler_output", "last_hidden_state")
DEFAULT_PROVIDERS = ("CPUExecutionProvider",)


class LazyResource(Generic[T]):
    """Build a value on first get() and keep it for the owner's lifetime.

    Construction runs at most once even with concurrent callers. A failing factory
    is not cached: the exception propagates and the next get() tries again.
    """

    def __init__(self, factory: Callable[[], T]) -> None:
        self._factory = factory
        self._value: T | None = None
        self._loaded = False
        self._lock = threading.Lock()

    @property
    def loaded(self) -> bool:
        return self._loaded

    def get(self) -> T:
        if self._loaded:
            return self._value  # type: ignore[return-value]
        with self._lock:
            if not self._loaded:
                self._value = self._factory()
                self._loaded = True
        return self._value  # type: ignore[return-value]


def normalize_embedding(vector: np.ndarray) -> np.ndarray:
    """L2-normalize; a zero vector is returned unchanged."""
    vector = np.asarray(vector, dtype=np.float32)
    norm = np.sqrt(np.sum(vector * vector))
    if norm == 0:
        return vector
    return vector / norm


def dot_product(a: np.ndarray, b: np.ndarray) -> float:
    """Dot product of two equal-length vectors (cosine similarity when both are unit length)."""
    a = np.asarray(a).ravel()
    b = np.asarray(b).ravel()
    if a.shape != b.shape:
        raise ValueError(f"Embedding length mismatch: {a.shape[0]} != {b.shape[0]}")
    return float(np.dot(a, b))


def select_output(outputs: Mapping[str, np.ndarray], candidates: Sequence[str] = OUTPUT_CANDIDATES) -> np.ndarray:
    """Return the first candidate present in outputs, else the first output."""
    for name in candidates:
        if name in outputs:
            return outputs[name]
    if not outputs:
        raise ValueError("Model produced no outputs")
    return next(iter(outputs.values()))


class Siglip2Model:
    """Text and image encoder for one SigLIP2 (model, quantization) pair.

    Missing artifacts are downloaded at construction. The tokenizer and both ONNX
    sessions are created lazily on first use and reused afterwards.
    """

    def __init__(
        self,
        model_name: str = DEFAULT_MODEL,
        quantization: str = DEFAULT_QUANTIZATION,
        models_dir: str | Path | None = None,
        providers: Sequence[str] = DEFAULT_PROVIDERS,
    ) -> None:
        root = Path(models_dir) if models_dir is not None else get_models_dir()
        self.descriptor = describe(model_name, quantization, root)
        self.model_name = model_name
        self.quantization = quantization
        self.model_path = self.descriptor.local_dir
        self.image_size = self.descriptor.image_size
        self.providers = list(providers)

        if not models_exist(model_name, quantization, root):
            download_models(model_name, quantization, root)

        self._image_preprocessor = ImagePreprocessor(size=self.image_size)
        self._tokenizer: LazyResource[TextTokenizer] = LazyResource(
            lambda: TextTokenizer.from_file(self.model_path / TOKENIZER_FILE)
        )
        self._text_session: LazyResource[ort.InferenceSession] = LazyResource(
            lambda: self._load_session(TEXT_MODEL_FILE)
        )
        self._vision_session: LazyResource[ort.InferenceSession] = LazyResource(
            lambda: self._load_session(VISION_MODEL_FILE)
        )

    def __repr__(self) -> str:
        return f"Siglip2Model(model_name={self.model_name!r}, quantization={self.quantization!r})"

    @property
    def tokenizer(self) -> TextTokenizer:
        return self._tokenizer.get()

    @property
    def text_session(self) -> ort.InferenceSession:
        return self._text_session.get()

    @property
    def vision_session(self) -> ort.InferenceSession:
        return self._vision_session.get()

    def _load_session(self, file_name: str) -> ort.InferenceSession:
        path = self.model_path / file_name
        _log.info("Loading ONNX session %s", path)
        return ort.InferenceSession(str(path), providers=self.providers)

    @staticmethod
    def _run(session: ort.InferenceSession, feed: Mapping[str, np.ndarray]) -> dict[str, np.ndarray]:
        """Run session with only the inputs the graph declares; return outputs by name."""
        accepted = {i.name for i in session.get_inputs()}
        inputs = {name: value for name, value in feed.items() if name in accepted}
        names = [o.name for o in session.get_outputs()]
        results = session.run(names, inputs)
        return dict(zip(names, results))

    @staticmethod
    def _embedding_from(outputs: Mapping[str, np.ndarray]) -> np.ndarray:
        return normalize_embedding(np.asarray(select_output(outputs)).ravel())

    def encode_text(self, text: str) -> np.ndarray:
        """Unit-length embedding for text."""
        batch = self.tokenizer.tokenize(text)
        outputs = self._run(self.text_session, batch.as_feed())
        return self._embedding_from(outputs)

    def encode_image(self, image_path: str | Path) -> np.ndarray:
        """Unit-length embedding for the image at image_path."""
        pixel_values = self._image_preprocessor.preprocess(image_path)
        outputs = self._run(self.vision_session, {"pixel_values": pixel_values})
        return self._embedding_from(outputs)

    def similarity(self, text: str, image_path: str | Path) -> float:
        return dot_product(self.encode_text(text), self.encode_image(image_path))

    def batch_similarity(self, texts: Sequence[str], image_paths: Sequence[str | Path]) -> np.ndarray:
        """Score matrix [len(texts), len(image_paths)]; each text and image is encoded once."""
        text_embeddings = [self.encode_text(t) for t in texts]
        image_embeddings = [self.encode_image(p) for p in image_paths]
        scores = np.zeros((len(text_embeddings), len(image_embeddings)), dtype=np.float64)
        for i, te in enumerate(text_embeddings):
            for j, ie in enumerate(image_embeddings):
                scores[i, j] = dot_product(te, ie)
        return scores
