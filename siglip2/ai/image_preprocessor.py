"""Image to pixel_values tensor for the SigLIP2 vision graph."""

from pathlib import Path

import numpy as np
from PIL import Image

from siglip2.ai.registry import DEFAULT_IMAGE_SIZE

# From preprocessor_config.json: mean=[0.5, 0.5, 0.5], std=[0.5, 0.5, 0.5]
MEAN = np.array([0.5, 0.5, 0.5], dtype=np.float32)
STD = np.array([0.5, 0.5, 0.5], dtype=np.float32)


class ImagePreprocessor:
    """Stretch-resize to size x size, rescale to [0, 1], CHW, normalize to [-1, 1], add batch axis.

    Aspect ratio is not preserved and nothing is cropped or padded.
    """

    def __init__(self, size: int = DEFAULT_IMAGE_SIZE, resample: Image.Resampling = Image.Resampling.BILINEAR) -> None:
        self.size = size
        self.resample = resample

    def preprocess(self, image: str | Path | Image.Image) -> np.ndarray:
        """Return float32 pixel_values of shape [1, 3, size, size]."""
        img = self._load_and_resize(image)
        tensor = self._to_tensor(img)
        tensor = self._normalize(tensor)
        return tensor[np.newaxis, ...]

    def _load_and_resize(self, image: str | Path | Image.Image) -> Image.Image:
        if isinstance(image, Image.Image):
            img = image
        else:
            with Image.open(image) as opened:
                img = opened.convert("RGB")
        if img.mode != "RGB":
            img = img.convert("RGB")
        return img.resize((self.size, self.size), resample=self.resample)

    @staticmethod
    def _to_tensor(img: Image.Image) -> np.ndarray:
        # [H, W, 3] uint8 -> [3, H, W] float in [0, 1]
        pixels = np.asarray(img, dtype=np.float32) / 255.0
        return pixels.transpose(2, 0, 1)

    @staticmethod
    def _normalize(tensor: np.ndarray) -> np.ndarray:
        normalized = (tensor - MEAN[:, None, None]) / STD[:, None, None]
        return np.ascontiguousarray(normalized, dtype=np.float32)
