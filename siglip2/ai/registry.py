"""Static registry of SigLIP2 ONNX repositories, image sizes and quantization variants."""

from pathlib import Path

from siglip2.ai.schema import ModelDescriptor
from siglip2.errors import UnknownModel, UnknownQuantization

# onnx-community exports on the Hugging Face hub
AVAILABLE_MODELS: dict[str, str] = {
    # Base
    "base-patch16-224": "onnx-community/siglip2-base-patch16-224-ONNX",
    "base-patch16-256": "onnx-community/siglip2-base-patch16-256-ONNX",
    "base-patch16-384": "onnx-community/siglip2-base-patch16-384-ONNX",
    "base-patch16-512": "onnx-community/siglip2-base-patch16-512-ONNX",
    "base-patch32-256": "onnx-community/siglip2-base-patch32-256-ONNX",
    "base-patch16-naflex": "onnx-community/siglip2-base-patch16-naflex-ONNX",
    # Large
    "large-patch16-256": "onnx-community/siglip2-large-patch16-256-ONNX",
    "large-patch16-384": "onnx-community/siglip2-large-patch16-384-ONNX",
    "large-patch16-512": "onnx-community/siglip2-large-patch16-512-ONNX",
    # Giant (optimized)
    "giant-opt-patch16-256": "onnx-community/siglip2-giant-opt-patch16-256-ONNX",
    "giant-opt-patch16-384": "onnx-community/siglip2-giant-opt-patch16-384-ONNX",
    # SO400M
    "so400m-patch14-224": "onnx-community/siglip2-so400m-patch14-224-ONNX",
    "so400m-patch14-384": "onnx-community/siglip2-so400m-patch14-384-ONNX",
    "so400m-patch16-256": "onnx-community/siglip2-so400m-patch16-256-ONNX",
    "so400m-patch16-384": "onnx-community/siglip2-so400m-patch16-384-ONNX",
    "so400m-patch16-512": "onnx-community/siglip2-so400m-patch16-512-ONNX",
}

IMAGE_SIZES: dict[str, int] = {
    "base-patch16-224": 224,
    "base-patch16-256": 256,
    "base-patch16-384": 384,
    "base-patch16-512": 512,
    "base-patch32-256": 256,
    "base-patch16-naflex": 224,
    "large-patch16-256": 256,
    "large-patch16-384": 384,
    "large-patch16-512": 512,
    "giant-opt-patch16-256": 256,
    "giant-opt-patch16-384": 384,
    "so400m-patch14-224": 224,
    "so400m-patch14-384": 384,
    "so400m-patch16-256": 256,
    "so400m-patch16-384": 384,
    "so400m-patch16-512": 512,
}

QUANTIZATION_OPTIONS: tuple[str, ...] = ("fp32", "fp16", "int8", "uint8", "q4", "q4f16", "bnb4")

DEFAULT_MODEL = "base-patch16-224"
DEFAULT_QUANTIZATION = "fp32"
DEFAULT_IMAGE_SIZE = 224


def resolve(model_name: str) -> str:
    """Return the hub repository for model_name. Raises UnknownModel."""
    try:
        return AVAILABLE_MODELS[model_name]
    except KeyError:
        raise UnknownModel(model_name) from None


def validate_quantization(quantization: str) -> str:
    if quantization not in QUANTIZATION_OPTIONS:
        raise UnknownQuantization(quantization)
    return quantization


def default_resolution(model_name: str) -> int:
    """Square input resolution for model_name; 224 for anything unlisted."""
    return IMAGE_SIZES.get(model_name, DEFAULT_IMAGE_SIZE)


def quantization_suffix(quantization: str) -> str:
    """Remote graph file suffix: '' for fp32, '_<quantization>' otherwise."""
    validate_quantization(quantization)
    return "" if quantization == "fp32" else f"_{quantization}"


def list_models() -> list[str]:
    return list(AVAILABLE_MODELS)


def list_quantizations() -> list[str]:
    return list(QUANTIZATION_OPTIONS)


def describe(model_name: str, quantization: str, models_dir: Path) -> ModelDescriptor:
    """Build the immutable descriptor for (model_name, quantization) rooted at models_dir."""
    repository = resolve(model_name)
    validate_quantization(quantization)
    return ModelDescriptor(
        name=model_name,
        repository=repository,
        quantization=quantization,
        local_dir=Path(models_dir) / model_name / quantization,
        image_size=default_resolution(model_name),
    )
