"""Pull German article+noun pairs out of text, translate them and export them."""

from wordpairs.extractor import Entry, ExtractorConfig, config_for_variant, extract

__all__ = ["Entry", "ExtractorConfig", "config_for_variant", "extract"]
__version__ = "0.1.0"
