# core/errors.py


class DraftError(Exception):
    """Base class for draft tracker failures."""


class LayoutError(DraftError):
    """A region or swatch the layout was asked for does not exist."""


class BanIndexError(DraftError):
    """A ban icon directory could not be scanned."""
