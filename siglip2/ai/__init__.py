"""AI module: model registry, artifact fetcher, preprocessing and the ONNX embedding model."""

from siglip2.ai.fetcher import download_models, ensure_downloaded, missing_artifacts, model_path, models_exist
from siglip2.ai.image_preprocessor import ImagePreprocessor
from siglip2.ai.model import Siglip2Model, dot_product, normalize_embedding
from siglip2.ai.registry import list_models, list_quantizations
from siglip2.ai.schema import ArtifactFile, ModelDescriptor
from siglip2.ai.tokenizer import TextTokenizer, TokenBatch

__all__ = [
    "ArtifactFile",
    "ImagePreprocessor",
    "ModelDescriptor",
    "Siglip2Model",
    "TextTokenizer",
    "TokenBatch",
    "dot_product",
    "download_models",
    "ensure_downloaded",
    "list_models",
    "list_quantizations",
    "missing_artifacts",
    "model_path",
    "models_exist",
    "normalize_embedding",
]
