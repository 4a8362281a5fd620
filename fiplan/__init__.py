"""fiplan: household financial-independence projections."""

from fiplan.engines.projection import run_projection, validate_household

__version__ = "0.1.0"

__all__ = ["run_projection", "validate_household"]
