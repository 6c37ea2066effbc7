"""SigLIP2 ONNX embeddings: model download, text/image encoding and similarity."""

from siglip2.ai.fetcher import download_models, ensure_downloaded, model_path, models_exist
from siglip2.ai.image_preprocessor import ImagePreprocessor
from siglip2.ai.model import Siglip2Model
from siglip2.ai.registry import (
    AVAILABLE_MODELS,
    DEFAULT_MODEL,
    DEFAULT_QUANTIZATION,
    QUANTIZATION_OPTIONS,
    list_models,
    list_quantizations,
)
from siglip2.core.config import get_models_dir, set_models_dir
from siglip2.errors import DownloadFailed, Siglip2Error, TooManyRedirects, UnknownModel, UnknownQuantization

__version__ = "0.1.0"

__all__ = [
    "AVAILABLE_MODELS",
    "DEFAULT_MODEL",
    "DEFAULT_QUANTIZATION",
    "DownloadFailed",
    "ImagePreprocessor",
    "QUANTIZATION_OPTIONS",
    "Siglip2Error",
    "Siglip2Model",
    "TooManyRedirects",
    "UnknownModel",
    "UnknownQuantization",
    "download_models",
    "ensure_downloaded",
    "get_models_dir",
    "list_models",
    "list_quantizations",
    "model_path",
    "models_exist",
    "set_models_dir",
]
