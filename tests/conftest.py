"""Pytest fixtures: isolated config/models_dir, fake HTTP sessions, fake tokenizer and ONNX sessions."""

import logging
from types import SimpleNamespace
from typing import Callable

import numpy as np
import pytest

from siglip2.ai.fetcher import LOCAL_FILES
from siglip2.core import config as config_module


@pytest.fixture(autouse=True)
def isolated_config(monkeypatch, tmp_path):
    """Clear cached settings and point the default config lookup away from the developer's files."""
    monkeypatch.delenv("SIGLIP2_CONFIG", raising=False)
    monkeypatch.delenv("SIGLIP2_MODELS_DIR", raising=False)
    monkeypatch.chdir(tmp_path)
    config_module.reset_config()
    yield
    config_module.reset_config()


@pytest.fixture(autouse=True)
def restore_root_logger():
    """setup_logging() replaces root handlers; put pytest's back afterwards."""
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)


@pytest.fixture
def models_dir(tmp_path):
    """Empty models root installed as the process-wide override."""
    root = tmp_path / "models"
    root.mkdir()
    config_module.set_models_dir(root)
    return root


@pytest.fixture
def installed_model(models_dir):
    """Create placeholder artifacts for base-patch16-224/fp32 so no download is attempted."""
    path = models_dir / "base-patch16-224" / "fp32"
    path.mkdir(parents=True)
    for name in LOCAL_FILES:
        (path / name).write_bytes(b"x")
    return path


class FakeResponse:
    """Minimal stand-in for requests.Response as used by download_file."""

    def __init__(
        self,
        status_code: int = 200,
        body: bytes = b"",
        location: str | None = None,
        reason: str = "OK",
    ) -> None:
        self.status_code = status_code
        self.reason = reason
        self.headers = {"location": location} if location is not None else {}
        self._body = body
        self.closed = False

    @property
    def is_redirect(self) -> bool:
        return "location" in self.headers and self.status_code in (301, 302, 303, 307, 308)

    def iter_content(self, chunk_size: int = 1):
        for i in range(0, len(self._body), 4):
            yield self._body[i : i + 4]

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        self.closed = True
        return False


class FakeHttpSession:
    """Route GET requests through a handler(url) -> FakeResponse and record every URL."""

    def __init__(self, handler: Callable[[str], FakeResponse]) -> None:
        self._handler = handler
        self.requested: list[str] = []
        self.kwargs: list[dict] = []

    def get(self, url: str, **kwargs) -> FakeResponse:
        self.requested.append(url)
        self.kwargs.append(kwargs)
        return self._handler(url)

    def close(self) -> None:
        pass


@pytest.fixture
def fake_response():
    return FakeResponse


@pytest.fixture
def fake_http():
    return FakeHttpSession


class FakeTokenizer:
    """Character-level tokenizer: one id per character, 1..97."""

    def __init__(self) -> None:
        self.seen: list[str] = []

    def encode(self, text: str):
        self.seen.append(text)
        ids = [ord(c) % 97 + 1 for c in text]
        return SimpleNamespace(ids=ids, attention_mask=[1] * len(ids))


class FakeOnnxSession:
    """Stand-in for onnxruntime.InferenceSession with declared inputs and a compute function."""

    def __init__(self, input_names: list[str], compute: Callable[[dict], dict[str, np.ndarray]]) -> None:
        self._input_names = input_names
        self._compute = compute
        self._output_names = list(compute(self._dummy_feed()).keys())
        self.feeds: list[dict] = []

    def _dummy_feed(self) -> dict:
        return {
            "input_ids": np.ones((1, 64), dtype=np.int64),
            "attention_mask": np.ones((1, 64), dtype=np.int64),
            "pixel_values": np.zeros((1, 3, 4, 4), dtype=np.float32),
        }

    def get_inputs(self):
        return [SimpleNamespace(name=n) for n in self._input_names]

    def get_outputs(self):
        return [SimpleNamespace(name=n) for n in self._output_names]

    def run(self, output_names, feed):
        self.feeds.append(feed)
        outputs = self._compute(feed)
        return [outputs[n] for n in output_names]


def text_outputs(feed: dict) -> dict[str, np.ndarray]:
    ids = feed["input_ids"].astype(np.float32)
    pooled = np.array([[ids.sum(), (ids > 0).sum(), ids[0, 0], 1.0]], dtype=np.float32)
    hidden = np.zeros((1, 64, 4), dtype=np.float32)
    return {"last_hidden_state": hidden, "pooler_output": pooled}


def image_outputs(feed: dict) -> dict[str, np.ndarray]:
    pixels = feed["pixel_values"]
    channel_means = pixels.mean(axis=(0, 2, 3))
    pooled = np.concatenate([channel_means, [1.0]]).astype(np.float32)[np.newaxis, :]
    hidden = np.zeros((1, 16, 4), dtype=np.float32)
    return {"last_hidden_state": hidden, "pooler_output": pooled}


@pytest.fixture
def fake_onnx():
    """Factory for ONNX session fakes plus the default text/image compute functions."""
    return SimpleNamespace(session=FakeOnnxSession, text=text_outputs, image=image_outputs)


@pytest.fixture
def fake_tokenizer():
    return FakeTokenizer()


@pytest.fixture
def red_image(tmp_path):
    from PIL import Image

    path = tmp_path / "red.png"
    Image.new("RGB", (40, 20), color=(255, 0, 0)).save(path)
    return path


@pytest.fixture
def blue_image(tmp_path):
    from PIL import Image

    path = tmp_path / "blue.png"
    Image.new("RGB", (20, 40), color=(0, 0, 255)).save(path)
    return path
