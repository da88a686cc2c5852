"""Script evaluators for signature decryption.

The default engine is an embedded duktape interpreter (``dukpy``). A
``node`` subprocess can be selected instead with the ``script_engine``
setting. Both report every failure as an empty result.
"""

import logging
import shutil
import subprocess
from collections.abc import Callable

import dukpy

from ..core.settings import ExtractorSettings

logger = logging.getLogger(__name__)

# Reads the program from stdin, runs it, prints the completion value
_NODE_WRAPPER = (
    "let src='';"
    "process.stdin.setEncoding('utf8');"
    "process.stdin.on('data',d=>src+=d);"
    "process.stdin.on('end',()=>{"
    "const r=require('vm').runInNewContext(src,{});"
    "if(r!==undefined&&r!==null)process.stdout.write(String(r));"
    "});"
)


class DukpyScriptEvaluator:
    """Evaluates scripts in a fresh duktape interpreter per call.

    duktape has no execution deadline, so ``script_timeout`` does not apply.
    """

    def __call__(self, source: str) -> str:
        try:
            result = dukpy.JSInterpreter().evaljs(source)
        except dukpy.JSRuntimeError as e:
            logger.warning(f"Script evaluation failed: {e}")
            return ""
        if result is None:
            return ""
        return result if isinstance(result, str) else str(result)


class NodeScriptEvaluator:
    """Evaluates scripts with the ``node`` executable.

    Every failure (missing executable, timeout, script error) is logged and
    reported as an empty result.
    """

    def __init__(self, settings: ExtractorSettings | None = None) -> None:
        self.settings = settings or ExtractorSettings()
        self._node_path: str | None = None
        self._check_node()

    def _check_node(self) -> None:
        """Check if node is available."""
        self._node_path = shutil.which(self.settings.node_path)
        if not self._node_path:
            logger.warning(
                f"{self.settings.node_path} not found - signature decryption will not work"
            )

    @property
    def available(self) -> bool:
        return self._node_path is not None

    def __call__(self, source: str) -> str:
        if not self._node_path:
            return ""

        try:
            result = subprocess.run(
                [self._node_path, "-e", _NODE_WRAPPER],
                input=source,
                capture_output=True,
                text=True,
                timeout=self.settings.script_timeout,
            )
        except subprocess.TimeoutExpired:
            logger.warning("Script evaluation timed out")
            return ""
        except OSError as e:
            logger.warning(f"Could not run {self._node_path}: {e}")
            return ""

        if result.returncode != 0:
            error = result.stderr.strip().splitlines()
            logger.warning(f"Script evaluation failed: {error[-1] if error else result.returncode}")
            return ""
        return result.stdout


def make_evaluator(settings: ExtractorSettings | None = None) -> Callable[[str], str]:
    """Build the evaluator named by ``settings.script_engine``."""
    settings = settings or ExtractorSettings()
    if settings.script_engine == "node":
        return NodeScriptEvaluator(settings)
    return DukpyScriptEvaluator()
