"""dotcat home-screen widget: shared snapshot sync and refresh protocol."""

__version__ = "0.1.0"
