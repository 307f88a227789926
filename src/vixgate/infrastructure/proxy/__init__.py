from .mediaflow import extract_filename, format_proxy_url

__all__ = ["extract_filename", "format_proxy_url"]
