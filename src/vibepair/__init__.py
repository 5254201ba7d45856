"""vibepair: Writer/Reviewer agent pair orchestration."""

__version__ = "1.0.0"
