"""
Exception classes for the confidence-routed text classifier.
"""


class ClassifierError(Exception):
    """Base exception for classifier errors."""
    pass


class InvalidInputError(ClassifierError):
    """Raised when input text or parameters are invalid."""
    pass


class ConfigError(ClassifierError):
    """Raised when the category set, thresholds or settings are invalid."""
    pass


class NotReadyError(ClassifierError):
    """Raised when a classifier is used before its index has been built."""
    pass


class ParseError(ClassifierError):
    """Raised when a model reply cannot be turned into a classification."""
    pass


class ProviderError(ClassifierError):
    """Raised when the model or embedding service call fails."""
    pass


class ProviderTimeout(ProviderError):
    """Raised when the model or embedding service does not answer in time."""
    pass


class ShapeError(ClassifierError):
    """Raised when evaluation inputs do not line up."""
    pass


class DatasetLoadingError(ClassifierError):
    """Raised when a taxonomy or training data file cannot be loaded."""
    pass
