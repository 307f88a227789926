from .stream_request import StreamRequestUseCase

__all__ = ["StreamRequestUseCase"]
