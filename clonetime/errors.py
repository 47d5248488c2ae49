class ClonetimeError(Exception):
    pass


class InvalidRequest(ClonetimeError):
    """Bad or missing url/tier. Reported to the caller as a 400."""


class InvalidURL(InvalidRequest):
    pass


class StoreError(ClonetimeError):
    pass


class CrawlError(ClonetimeError):
    pass


class LLMError(ClonetimeError):
    """Model call failed or returned something we can't use."""
