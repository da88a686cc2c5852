"""Transport and script-evaluation capabilities."""

from .base import Downloader
from .http import AiohttpDownloader
from .script import DukpyScriptEvaluator, NodeScriptEvaluator, make_evaluator

__all__ = [
    "Downloader",
    "AiohttpDownloader",
    "DukpyScriptEvaluator",
    "NodeScriptEvaluator",
    "make_evaluator",
]
