class MovieQuizError(Exception):
    """Base class for errors that are shown to the player with a retry action."""
    pass


class CatalogLoadError(MovieQuizError):
    """The movie list could not be fetched or parsed."""
    pass


class EmptyCatalogError(CatalogLoadError):
    """The movie list was fetched but holds no movies."""
    pass


class ImageLoadError(MovieQuizError):
    """The poster of the selected movie could not be downloaded."""

    def __init__(self, message: str, url: str = ""):
        super().__init__(message)
        self.url = url
