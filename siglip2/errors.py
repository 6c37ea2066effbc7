"""Exception types raised by model lookup and artifact download."""


class Siglip2Error(Exception):
    """Base class for errors raised by this package."""


class UnknownModel(Siglip2Error, ValueError):
    """Model identifier is not in the registry."""

    def __init__(self, model_name: str) -> None:
        super().__init__(f"Unknown model: {model_name}")
        self.model_name = model_name


class UnknownQuantization(Siglip2Error, ValueError):
    """Quantization variant is not one of QUANTIZATION_OPTIONS."""

    def __init__(self, quantization: str) -> None:
        super().__init__(f"Unknown quantization: {quantization}")
        self.quantization = quantization


class TooManyRedirects(Siglip2Error):
    """Redirect budget exhausted while downloading an artifact."""

    def __init__(self, url: str, max_redirects: int) -> None:
        super().__init__(f"Too many HTTP redirects (> {max_redirects}) for {url}")
        self.url = url
        self.max_redirects = max_redirects


class DownloadFailed(Siglip2Error):
    """Remote answered with a status that is neither success nor redirect."""

    def __init__(self, url: str, status: int, message: str) -> None:
        super().__init__(f"Failed to download {url}: {status} {message}")
        self.url = url
        self.status = status
        self.message = message
