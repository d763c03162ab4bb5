"""Generation contexts for triple RPC stubs, with cross-file type resolution and import aliasing."""

__version__ = "0.1.0"
