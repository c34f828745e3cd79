"""Analysis of evaluation outputs."""

from .rdf import RDFAccumulator, bin_centers, normalize_rdf

__all__ = ["RDFAccumulator", "bin_centers", "normalize_rdf"]
