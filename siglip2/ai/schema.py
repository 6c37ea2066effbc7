"""Pydantic data contracts for model identity and artifact files."""

from pathlib import Path

from pydantic import BaseModel, ConfigDict


class ModelDescriptor(BaseModel):
    """Identity and local placement of one (model, quantization) pair."""

    model_config = ConfigDict(frozen=True)

    name: str
    repository: str
    quantization: str
    local_dir: Path
    image_size: int


class ArtifactFile(BaseModel):
    """One required file: name on disk and its path inside the hub repository."""

    model_config = ConfigDict(frozen=True)

    local_name: str
    remote_path: str
