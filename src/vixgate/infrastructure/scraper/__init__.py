from .subprocess_scraper import SubprocessScraper

__all__ = ["SubprocessScraper"]
