"""Application services used by the CLI and other adapters."""

from flimfit.services.fit import FitService, ImageFitResult

__all__ = ["FitService", "ImageFitResult"]
