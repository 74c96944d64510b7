"""Custom exceptions for page scraping."""


class ScrapingError(Exception):
    """Base scraping exception."""

    def __init__(self, message: str, url: str | None = None):
        self.message = message
        self.url = url
        super().__init__(message)


class PageUnavailableError(ScrapingError):
    """Page did not respond in time or could not be reached."""

    pass


class InvalidUrlError(ScrapingError):
    """Document URL is missing or not an absolute http(s) URL."""

    pass
