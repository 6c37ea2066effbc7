"""Local artifact layout and HTTP download of SigLIP2 ONNX files from the model hub.

Layout on disk: {models_dir}/{model_name}/{quantization}/{vision_model.onnx,text_model.onnx,tokenizer.json}.
Local graph names never carry the quantization; the remote names do (onnx/text_model_q4.onnx).
Presence on disk is the only validity check: existing files are never re-downloaded.
"""

import logging
from pathlib import Path
from urllib.parse import urljoin

import requests

from siglip2.ai.registry import DEFAULT_QUANTIZATION, quantization_suffix, resolve, validate_quantization
from siglip2.ai.schema import ArtifactFile
from siglip2.core.config import get_config, get_models_dir
from siglip2.core.io_utils import file_present, write_chunks_atomic
from siglip2.errors import DownloadFailed, TooManyRedirects

_log = logging.getLogger(__name__)

VISION_MODEL_FILE = "vision_model.onnx"
TEXT_MODEL_FILE = "text_model.onnx"
TOKENIZER_FILE = "tokenizer.json"
LOCAL_FILES = (VISION_MODEL_FILE, TEXT_MODEL_FILE, TOKENIZER_FILE)

CHUNK_SIZE = 1024 * 1024
CONNECT_TIMEOUT = 30.0


def artifact_files(quantization: str) -> list[ArtifactFile]:
    """The three files every (model, quantization) pair needs, in download order."""
    suffix = quantization_suffix(quantization)
    return [
        ArtifactFile(local_name=VISION_MODEL_FILE, remote_path=f"onnx/vision_model{suffix}.onnx"),
        ArtifactFile(local_name=TEXT_MODEL_FILE, remote_path=f"onnx/text_model{suffix}.onnx"),
        ArtifactFile(local_name=TOKENIZER_FILE, remote_path="tokenizer.json"),
    ]


def artifact_url(repository: str, remote_path: str, hub_url: str | None = None) -> str:
    base = (hub_url or get_config().hub_url).rstrip("/")
    return f"{base}/{repository}/resolve/main/{remote_path}"


def model_path(
    model_name: str,
    quantization: str = DEFAULT_QUANTIZATION,
    models_dir: str | Path | None = None,
) -> Path:
    """Return the local artifact directory. Pure: raises UnknownModel / UnknownQuantization, never touches disk."""
    resolve(model_name)
    validate_quantization(quantization)
    root = Path(models_dir) if models_dir is not None else get_models_dir()
    return root / model_name / quantization


def missing_artifacts(
    model_name: str,
    quantization: str = DEFAULT_QUANTIZATION,
    models_dir: str | Path | None = None,
) -> list[str]:
    """Local file names not yet present for (model_name, quantization)."""
    path = model_path(model_name, quantization, models_dir)
    return [name for name in LOCAL_FILES if not file_present(path / name)]


def models_exist(
    model_name: str,
    quantization: str = DEFAULT_QUANTIZATION,
    models_dir: str | Path | None = None,
) -> bool:
    """True iff vision graph, text graph and tokenizer are all on disk."""
    return not missing_artifacts(model_name, quantization, models_dir)


def _new_session() -> requests.Session:
    session = requests.Session()
    adapter = requests.adapters.HTTPAdapter(pool_connections=4, pool_maxsize=4)
    session.mount("http://", adapter)
    session.mount("https://", adapter)
    return session


def download_file(
    url: str,
    dest: Path,
    *,
    max_redirects: int | None = None,
    timeout: float | None = None,
    session: requests.Session | None = None,
) -> Path:
    """
    GET url and stream the body to dest, following redirects by hand.

    - At most max_redirects requests are issued; a redirect on the last one raises TooManyRedirects.
    - Relative Location headers are resolved against the URL that returned them.
    - Any response that is neither 2xx nor a redirect with Location raises DownloadFailed.
    - The body is written to dest.part and renamed, so dest only ever holds a complete file.
    """
    cfg = get_config()
    if max_redirects is None:
        max_redirects = cfg.max_redirects
    if timeout is None:
        timeout = cfg.download_timeout

    http = session if session is not None else _new_session()
    current = url
    try:
        for _ in range(max_redirects):
            with http.get(
                current,
                stream=True,
                allow_redirects=False,
                timeout=(CONNECT_TIMEOUT, timeout),
            ) as resp:
                if resp.is_redirect:
                    location = urljoin(current, resp.headers["location"])
                    _log.debug("Redirect %s -> %s", resp.status_code, location)
                    current = location
                    continue
                if 200 <= resp.status_code < 300:
                    written = write_chunks_atomic(Path(dest), resp.iter_content(chunk_size=CHUNK_SIZE))
                    _log.debug("Wrote %d bytes to %s", written, dest)
                    return Path(dest)
                raise DownloadFailed(url, resp.status_code, resp.reason or "")
        raise TooManyRedirects(url, max_redirects)
    finally:
        if session is None:
            http.close()


def download_models(
    model_name: str,
    quantization: str = DEFAULT_QUANTIZATION,
    models_dir: str | Path | None = None,
    session: requests.Session | None = None,
) -> list[Path]:
    """
    Download whichever artifacts are missing for (model_name, quantization).

    Files already on disk are skipped without a request. Returns the paths that were downloaded
    (empty when everything was present).
    """
    repository = resolve(model_name)
    path = model_path(model_name, quantization, models_dir)
    path.mkdir(parents=True, exist_ok=True)

    pending = [a for a in artifact_files(quantization) if not file_present(path / a.local_name)]
    if not pending:
        return []

    http = session if session is not None else _new_session()
    downloaded: list[Path] = []
    try:
        for artifact in pending:
            url = artifact_url(repository, artifact.remote_path)
            _log.info("Downloading %s from %s...", artifact.local_name, url)
            downloaded.append(download_file(url, path / artifact.local_name, session=http))
    finally:
        if session is None:
            http.close()
    return downloaded


def ensure_downloaded(
    model_name: str,
    quantization: str = DEFAULT_QUANTIZATION,
    models_dir: str | Path | None = None,
) -> Path:
    """Download missing artifacts if needed and return the local artifact directory."""
    if not models_exist(model_name, quantization, models_dir):
        download_models(model_name, quantization, models_dir)
    return model_path(model_name, quantization, models_dir)
