"""Press: blog content-management backend with a post-publishing pipeline."""

__version__ = "1.0.0"
