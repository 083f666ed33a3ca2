from __future__ import annotations


class TikgrabError(RuntimeError):
    pass


class InvalidURLError(TikgrabError):
    pass


class ResolveError(TikgrabError):
    pass


class ExtractionError(TikgrabError):
    pass


class DownloadError(TikgrabError):
    pass
